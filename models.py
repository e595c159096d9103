from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Serialized with camelCase keys; accepts camelCase or snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CartItem(CamelModel):
    product_id: int
    name: str
    price: float
    quantity: int


# ---------------- USERS ----------------
class User(CamelModel):
    id: int
    username: str
    email: str
    password_hash: str
    cart: List[CartItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    def public(self) -> dict:
        return {"id": self.id, "username": self.username, "email": self.email}


class RegisterRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class EmailCheck(BaseModel):
    email: EmailStr


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


# ---------------- PRODUCTS ----------------
class Product(CamelModel):
    id: int
    name: str
    category: str
    description: str
    price: float
    stock: int


# ---------------- CART ----------------
class AddToCartRequest(CamelModel):
    product_id: Optional[int] = None
    quantity: Optional[int] = None


class UpdateCartRequest(CamelModel):
    quantity: Optional[int] = None


# ---------------- ORDERS ----------------
class Order(CamelModel):
    id: int
    user_id: int
    username: str
    items: List[CartItem]
    total: float
    status: str = "pending"
    created_at: datetime = Field(default_factory=utcnow)


# ---------------- JWT TOKENS ----------------
class TokenData(BaseModel):
    id: int
    email: str

