"""
Database Schemas for the Store Manager

Each collection is a JSON array on disk (see database.py) and is described here
by a Pydantic model. Attributes are snake_case in Python; records on disk and
on the wire use camelCase keys (ownerId, storeId, createdAt...).

We will use these collections:
- users: system users (admin, store_owner, user)
- stores: stores, each owned by one store_owner
- products: products, each belonging to one store

Request payload models for the API routes follow the collection schemas.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(ObjectId())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    ADMIN = "admin"
    STORE_OWNER = "store_owner"
    USER = "user"


class StoreStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


# Upper bounds keep price x stock sums finite
MAX_PRICE = 1_000_000_000
MAX_STOCK = 1_000_000_000


class Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys, as stored on disk"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class User(Document):
    id: str = Field(default_factory=new_id)
    email: EmailStr
    password_hash: str = Field(..., description="BCrypt hash of password")
    name: str = Field(..., min_length=1)
    role: Role = Field(Role.USER)
    created_at: datetime = Field(default_factory=utcnow)

    def public_view(self) -> Dict[str, Any]:
        record = self.to_record()
        record.pop("passwordHash", None)
        return record


class Store(Document):
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    description: str
    category: str
    owner_id: str = Field(..., description="Reference to the owning user id")
    status: StoreStatus = Field(StoreStatus.ACTIVE)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


class Product(Document):
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    description: str
    price: float = Field(..., ge=0, le=MAX_PRICE, allow_inf_nan=False)
    stock: int = Field(..., ge=0, le=MAX_STOCK)
    category: str
    store_id: str = Field(..., description="Reference to the store id")
    image: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


class Caller(BaseModel):
    """Identity of the authenticated caller, resolved from a verified token"""
    id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ============================================================================
# Request models
# ============================================================================


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResourceRequest(RequestModel):
    """Store and product payloads; surrounding whitespace is stripped from text fields"""
    model_config = ConfigDict(str_strip_whitespace=True)


class PartialUpdate(ResourceRequest):
    """Update payload: fields left out, null or blank keep their stored value"""

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class LoginRequest(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: Role = Field(Role.USER)


class CreateUserRequest(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: Role


class CreateStoreRequest(ResourceRequest):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    owner_id: Optional[str] = Field(None, description="Owner assigned by an admin; ignored for store owners")


class UpdateStoreRequest(PartialUpdate):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[StoreStatus] = None


class CreateProductRequest(ResourceRequest):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, le=MAX_PRICE, allow_inf_nan=False)
    stock: int = Field(..., ge=0, le=MAX_STOCK)
    category: str = Field(..., min_length=1)
    store_id: str = Field(..., min_length=1)
    image: Optional[str] = None


class UpdateProductRequest(PartialUpdate):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, le=MAX_PRICE, allow_inf_nan=False)
    stock: Optional[int] = Field(None, ge=0, le=MAX_STOCK)
    category: Optional[str] = None
    image: Optional[str] = None
