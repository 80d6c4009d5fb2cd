import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from passlib.context import CryptContext
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import database
import settings
from checkout import compute_totals
from database import (
    ADDRESSES,
    ORDERS,
    PRODUCTS,
    USERS,
    create_document,
    get_db,
    get_documents,
    now,
    parse_object_id,
    serialize_doc,
)
from schemas import (
    ADMIN_ROLES,
    Address,
    AddressInput,
    LoginInput,
    Order,
    OrderInput,
    Product,
    ProductDeleteInput,
    ProductUpdateInput,
    QuoteInput,
    RegisterInput,
    User,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

app = FastAPI(title="Gucci Store API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error responses

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Invalid request body", "errors": errors},
    )


def ok(status_code: int = 200, **data: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder({"success": True, **data}))


# Utilities

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


# Dependency to get current user

def get_current_user(authorization: Optional[str] = Header(default=None), db=Depends(get_db)):
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1]
    payload = decode_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    user = db[USERS].find_one({"_id": parse_object_id(user_id, "user")})
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return serialize_doc(user)


def require_admin(current_user: dict = Depends(get_current_user)):
    if current_user.get("role") not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Admins only")
    return current_user


# Routes
@app.get("/")
def read_root():
    return {"message": "Gucci Store API"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    db = database.db
    try:
        if db is not None:
            response["database"] = "✅ Available"
            response["connection_status"] = "Connected"
            response["database_url"] = "✅ Set"
            response["database_name"] = db.name
            response["collections"] = db.list_collection_names()
        else:
            response["database"] = "❌ Not Available"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# Auth
@app.post("/api/auth/register")
def register(payload: RegisterInput, db=Depends(get_db)):
    try:
        if db[USERS].find_one({"email": payload.email}):
            raise HTTPException(status_code=400, detail="User already exists")
        user_model = User(
            name=payload.name,
            email=payload.email,
            password=hash_password(payload.password),
            # Admin accounts come from the seed only
            role="user",
        )
        user_id = create_document(USERS, user_model)
        user = serialize_doc(db[USERS].find_one({"_id": parse_object_id(user_id, "user")}))
    except PyMongoError:
        logger.exception("Register error")
        raise HTTPException(status_code=500, detail="Server error")
    token = create_access_token({"sub": user_id})
    return ok(201, user=user, token=token)


@app.post("/api/auth/login")
def login(payload: LoginInput, db=Depends(get_db)):
    try:
        user = db[USERS].find_one({"email": payload.email})
    except PyMongoError:
        logger.exception("Login error")
        raise HTTPException(status_code=500, detail="Server error")
    if not user or not verify_password(payload.password, user.get("password", "")):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token({"sub": str(user["_id"])})
    return ok(user=serialize_doc(user), token=token)


@app.get("/api/auth/me")
def me(current_user: dict = Depends(get_current_user)):
    return ok(user=current_user)


# Products
@app.get("/api/products")
def list_products(category: Optional[str] = None, search: Optional[str] = None, db=Depends(get_db)):
    query: Dict[str, Any] = {}
    if category:
        query["category"] = category
    if search:
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    try:
        products = get_documents(PRODUCTS, query)
    except PyMongoError:
        logger.exception("List products error")
        raise HTTPException(status_code=500, detail="Server error")
    return ok(products=products)


@app.get("/api/products/{product_id}")
def get_product(product_id: str, db=Depends(get_db)):
    obj_id = parse_object_id(product_id, "product")
    try:
        product = db[PRODUCTS].find_one({"_id": obj_id})
    except PyMongoError:
        logger.exception("Get product error")
        raise HTTPException(status_code=500, detail="Server error")
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return ok(product=serialize_doc(product))


@app.post("/api/products")
def create_product(data: Product, admin: dict = Depends(require_admin), db=Depends(get_db)):
    try:
        product_id = create_document(PRODUCTS, data)
        created = db[PRODUCTS].find_one({"_id": parse_object_id(product_id, "product")})
    except PyMongoError:
        logger.exception("Create product error")
        raise HTTPException(status_code=500, detail="Server error")
    logger.info("Product %s created by %s", product_id, admin.get("email"))
    return ok(201, product=serialize_doc(created))


@app.put("/api/products")
def update_product(data: ProductUpdateInput, admin: dict = Depends(require_admin), db=Depends(get_db)):
    obj_id = parse_object_id(data.product_id, "product")
    update_dict = data.model_dump(by_alias=True, exclude={"product_id"}, exclude_unset=True, exclude_none=True)
    update_dict["updatedAt"] = now()
    try:
        product = db[PRODUCTS].find_one_and_update(
            {"_id": obj_id},
            {"$set": update_dict},
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError:
        logger.exception("Update error")
        raise HTTPException(status_code=500, detail="Server error")
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return ok(product=serialize_doc(product))


@app.delete("/api/products")
def delete_product(data: ProductDeleteInput, admin: dict = Depends(require_admin), db=Depends(get_db)):
    obj_id = parse_object_id(data.product_id, "product")
    try:
        res = db[PRODUCTS].delete_one({"_id": obj_id})
    except PyMongoError:
        logger.exception("Delete error")
        raise HTTPException(status_code=500, detail="Server error")
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return ok(message="Product deleted")


# Addresses
@app.get("/api/addresses")
def list_addresses(userId: Optional[str] = None, db=Depends(get_db)):
    if not userId:
        raise HTTPException(status_code=400, detail="User ID is required")
    try:
        addresses = get_documents(ADDRESSES, {"userId": userId}, sort=[("createdAt", -1)])
    except PyMongoError:
        logger.exception("Error fetching addresses")
        raise HTTPException(status_code=500, detail="Failed to fetch addresses")
    return ok(addresses=addresses)


@app.post("/api/addresses")
def create_address(data: AddressInput, db=Depends(get_db)):
    if not data.has_required("user_id"):
        raise HTTPException(status_code=400, detail="All fields are required")
    address = Address(user_id=data.user_id, **data.address_fields())
    try:
        # Only one default address per user
        if address.is_default:
            db[ADDRESSES].update_many({"userId": address.user_id}, {"$set": {"isDefault": False}})
        address_id = create_document(ADDRESSES, address)
    except PyMongoError:
        logger.exception("Error saving address")
        raise HTTPException(status_code=500, detail="Failed to save address")
    return ok(201, message="Address saved successfully", addressId=address_id)


@app.put("/api/addresses/{address_id}")
def update_address(address_id: str, data: AddressInput, db=Depends(get_db)):
    if not data.has_required():
        raise HTTPException(status_code=400, detail="All fields are required")
    obj_id = parse_object_id(address_id, "address")
    try:
        address = db[ADDRESSES].find_one({"_id": obj_id})
        if not address:
            raise HTTPException(status_code=404, detail="Address not found")
        if data.is_default:
            db[ADDRESSES].update_many(
                {"userId": address["userId"], "_id": {"$ne": obj_id}},
                {"$set": {"isDefault": False}},
            )
        db[ADDRESSES].update_one(
            {"_id": obj_id},
            {"$set": {**data.address_fields(), "updatedAt": now()}},
        )
    except PyMongoError:
        logger.exception("Error updating address")
        raise HTTPException(status_code=500, detail="Failed to update address")
    return ok(message="Address updated successfully")


@app.delete("/api/addresses/{address_id}")
def delete_address(address_id: str, db=Depends(get_db)):
    obj_id = parse_object_id(address_id, "address")
    try:
        res = db[ADDRESSES].delete_one({"_id": obj_id})
    except PyMongoError:
        logger.exception("Error deleting address")
        raise HTTPException(status_code=500, detail="Failed to delete address")
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Address not found")
    return ok(message="Address deleted successfully")


# Orders
@app.get("/api/orders")
def list_orders(userId: Optional[str] = None, db=Depends(get_db)):
    if not userId:
        raise HTTPException(status_code=400, detail="User ID is required")
    try:
        orders = get_documents(ORDERS, {"userId": userId}, sort=[("createdAt", -1)])
    except PyMongoError:
        logger.exception("Get orders error")
        raise HTTPException(status_code=500, detail="Server error")
    return ok(orders=orders)


@app.post("/api/orders")
def create_order(data: OrderInput, db=Depends(get_db)):
    required = (data.user_id, data.order_id, data.items, data.shipping_address, data.delivery_option, data.payment_method)
    if not all(required) or data.total is None:
        raise HTTPException(status_code=400, detail="Missing required fields")
    order = Order(**data.model_dump())
    try:
        order_id = create_document(ORDERS, order)
        created = db[ORDERS].find_one({"_id": parse_object_id(order_id, "order")})
    except PyMongoError:
        logger.exception("Create order error")
        raise HTTPException(status_code=500, detail="Server error")
    logger.info("Order %s placed by %s", order.order_id, order.user_id)
    return ok(201, order=serialize_doc(created))


# Checkout
@app.post("/api/checkout/quote")
def checkout_quote(data: QuoteInput):
    try:
        quote = compute_totals(data.items, data.delivery_option)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ok(quote=quote)


# Seed data
SUPERADMIN = {
    "name": "Gucci Admin",
    "email": "admin@gucci.com",
    "password": "SuperAdmin@2025",
    "role": "superadmin",
}

SAMPLE_PRODUCTS = [
    {
        "name": "Gucci Marmont Matelassé Shoulder Bag",
        "description": "Crafted from Matelassé leather, this iconic shoulder bag features the signature GG Marmont hardware.",
        "price": 2200,
        "category": "women",
        "image": "/gu.avif",
    },
    {
        "name": "GG Supreme Canvas Tote",
        "description": "A versatile tote bag made from GG Supreme canvas with leather trim. Perfect for everyday use.",
        "price": 1950,
        "category": "women",
        "image": "/gu.avif",
    },
    {
        "name": "Gucci Soho Leather Disco Bag",
        "description": "The iconic Soho Disco bag in premium leather with a chain strap and tassel detail.",
        "price": 1890,
        "category": "women",
        "image": "/gu.avif",
    },
    {
        "name": "Gucci Brixton Loafer",
        "description": "A luxurious loafer crafted from premium leather with the signature Horsebit hardware.",
        "price": 790,
        "category": "men",
        "image": "/mens-bag-gu.avif",
    },
    {
        "name": "GG Marmont Leather Belt",
        "description": "A versatile leather belt featuring the iconic GG Marmont buckle in antique gold.",
        "price": 450,
        "category": "men",
        "image": "/mens-bag-gu.avif",
    },
    {
        "name": "Gucci Dionysus Medium Shoulder Bag",
        "description": "An elegant shoulder bag featuring the distinctive Dionysus hardware in aged gold-toned metal.",
        "price": 2400,
        "category": "women",
        "image": "/gu.avif",
    },
    {
        "name": "Gucci Jackie 1961 Small Shoulder Bag",
        "description": "A tribute to a vintage style, this shoulder bag combines heritage with contemporary design.",
        "price": 2100,
        "category": "women",
        "image": "/men.avif",
    },
    {
        "name": "Gucci Messenger Bag",
        "description": "A practical yet stylish messenger bag crafted from premium GG canvas with leather accents.",
        "price": 1650,
        "category": "men",
        "image": "/mens-bag-gu.avif",
    },
]


@app.post("/api/seed")
def seed_superadmin(db=Depends(get_db)):
    try:
        if db[USERS].find_one({"email": SUPERADMIN["email"]}):
            raise HTTPException(status_code=400, detail="Superadmin already exists")
        admin = User(
            name=SUPERADMIN["name"],
            email=SUPERADMIN["email"],
            password=hash_password(SUPERADMIN["password"]),
            role=SUPERADMIN["role"],
        )
        user_id = create_document(USERS, admin)
    except PyMongoError as e:
        logger.exception("Seed error")
        raise HTTPException(status_code=500, detail=f"Failed to create superadmin: {e}")
    logger.info("Superadmin %s created", SUPERADMIN["email"])
    return ok(
        201,
        message="Superadmin created successfully",
        credentials={k: SUPERADMIN[k] for k in ("email", "password", "role")},
        userId=user_id,
    )


@app.post("/api/seed-products")
def seed_products(db=Depends(get_db)):
    try:
        if db[PRODUCTS].count_documents({}) > 0:
            raise HTTPException(status_code=400, detail="Products already seeded")
        stamp = now()
        docs = [
            {**Product(**p).model_dump(by_alias=True), "createdAt": stamp, "updatedAt": stamp}
            for p in SAMPLE_PRODUCTS
        ]
        result = db[PRODUCTS].insert_many(docs)
    except PyMongoError as e:
        logger.exception("Seed products error")
        raise HTTPException(status_code=500, detail=f"Failed to seed products: {e}")
    inserted = len(result.inserted_ids)
    logger.info("Seeded %d products", inserted)
    return ok(201, message=f"{inserted} products created successfully", insertedCount=inserted)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
