"""
Database Schemas for the Gucci storefront

Each Pydantic model describes the documents of one MongoDB collection
(users, products, addresses, orders). Fields are snake_case in Python and
camelCase on the wire and in storage.
"""
from typing import Any, ClassVar, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

Role = Literal["user", "admin", "superadmin"]
Category = Literal["women", "men"]

ADMIN_ROLES = ("admin", "superadmin")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(CamelModel):
    name: str = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="BCrypt hashed password")
    role: Role = "user"


class Product(CamelModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    category: Category
    image: str = "/gu.avif"


class Address(CamelModel):
    user_id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str = ""
    country_code: str = ""
    is_default: bool = False


class OrderItem(CamelModel):
    id: str
    name: str
    price: float = Field(..., ge=0)
    image: Optional[str] = None
    quantity: int = Field(1, ge=1)


class Order(CamelModel):
    user_id: str
    order_id: str
    items: List[OrderItem]
    shipping_address: Dict[str, Any]
    delivery_option: str
    payment_method: str
    total: float
    # pending, processing, shipped, delivered
    status: str = "Processing"


# Request bodies

class RegisterInput(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginInput(BaseModel):
    email: EmailStr
    password: str


class ProductUpdateInput(CamelModel):
    """Fields left out of the body keep their stored value."""

    product_id: str
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, gt=0)
    category: Optional[Category] = None
    image: Optional[str] = None


class ProductDeleteInput(CamelModel):
    product_id: str


class AddressInput(CamelModel):
    """Every field is optional here so that a missing one is reported as
    "All fields are required" rather than as a schema error."""

    user_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    is_default: Optional[bool] = False

    REQUIRED: ClassVar[Tuple[str, ...]] = ("first_name", "last_name", "email", "phone", "street", "city", "state", "zip_code")

    def has_required(self, *extra: str) -> bool:
        return all((getattr(self, name) or "").strip() for name in (*extra, *self.REQUIRED))

    def address_fields(self) -> Dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "country": self.country or "",
            "countryCode": self.country_code or "",
            "isDefault": bool(self.is_default),
        }


class OrderInput(CamelModel):
    user_id: Optional[str] = None
    order_id: Optional[str] = None
    items: Optional[List[OrderItem]] = None
    shipping_address: Optional[Dict[str, Any]] = None
    delivery_option: Optional[str] = None
    payment_method: Optional[str] = None
    total: Optional[float] = None


class QuoteInput(CamelModel):
    items: List[OrderItem] = Field(default_factory=list)
    delivery_option: str = "standard"
