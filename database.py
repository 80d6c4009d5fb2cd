"""
MongoDB access for the storefront.

`db` is None when no DATABASE_URL is configured; routes depend on `get_db`
so they answer 503 instead of failing on attribute access.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import MongoClient

import settings

logger = logging.getLogger(__name__)

USERS = "users"
PRODUCTS = "products"
ADDRESSES = "addresses"
ORDERS = "orders"

db = None

if settings.DATABASE_URL:
    client = MongoClient(settings.DATABASE_URL)
    db = client[settings.DATABASE_NAME]
    logger.info("Using MongoDB database %r", settings.DATABASE_NAME)
else:
    logger.warning("DATABASE_URL is not set, running without a database")


def get_db():
    if db is None:
        raise HTTPException(status_code=503, detail="Database not configured")
    return db


def now() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: str, what: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {what} id")


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert one document stamped with createdAt/updatedAt and return its id."""
    database = get_db()
    if isinstance(data, BaseModel):
        data_dict = data.model_dump(by_alias=True)
    else:
        data_dict = dict(data)
    data_dict["createdAt"] = now()
    data_dict["updatedAt"] = now()
    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[List[tuple]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = get_db()[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return [serialize_doc(d) for d in cursor]


def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = {k: _serialize_value(v) for k, v in doc.items()}
    # Never send password hash
    doc.pop("password", None)
    return doc
