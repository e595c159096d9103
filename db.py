"""Storage layer.

Handlers and services only talk to the ``Store`` interface; the default
``InMemoryStore`` keeps every table in process memory, so all state is lost
on restart and is not shared between worker processes.
"""

import itertools
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from errors import ConflictError
from models import CartItem, Order, Product, User


class Store(ABC):

    # ---------------- USERS ----------------
    @abstractmethod
    async def add_user(self, username: str, email: str, password_hash: str) -> User:
        """Create a user, raising ConflictError when the email is taken."""

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def find_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def save_cart(self, user_id: int, items: List[CartItem]) -> List[CartItem]:
        ...

    # ---------------- PRODUCTS ----------------
    @abstractmethod
    async def list_products(self, category: Optional[str] = None) -> List[Product]:
        ...

    @abstractmethod
    async def get_product(self, product_id: int) -> Optional[Product]:
        ...

    @abstractmethod
    async def search_products(self, query: str) -> List[Product]:
        ...

    @abstractmethod
    async def list_categories(self) -> List[str]:
        ...

    @abstractmethod
    async def adjust_stock(self, product_id: int, delta: int) -> Optional[Product]:
        ...

    # ---------------- ORDERS ----------------
    @abstractmethod
    async def add_order(self, user_id: int, username: str, items: List[CartItem], total: float) -> Order:
        ...

    @abstractmethod
    async def list_orders(self, user_id: int) -> List[Order]:
        ...

    @abstractmethod
    async def get_order(self, order_id: int) -> Optional[Order]:
        ...


class InMemoryStore(Store):

    def __init__(self, products: Iterable[Product] = ()):
        self.users: List[User] = []
        self.products: List[Product] = [p.model_copy() for p in products]
        self.orders: List[Order] = []
        self._user_ids = itertools.count(1)
        self._order_ids = itertools.count(1)

    async def add_user(self, username, email, password_hash):
        if await self.find_user_by_email(email) is not None:
            raise ConflictError("Email already registered")
        user = User(id=next(self._user_ids), username=username, email=email, password_hash=password_hash)
        self.users.append(user)
        return user

    async def get_user(self, user_id):
        return next((u for u in self.users if u.id == user_id), None)

    async def find_user_by_email(self, email):
        return next((u for u in self.users if u.email == email), None)

    async def save_cart(self, user_id, items):
        user = await self.get_user(user_id)
        if user is None:
            raise KeyError(f"Unknown user {user_id}")
        user.cart = [item.model_copy() for item in items]
        return [item.model_copy() for item in user.cart]

    async def list_products(self, category=None):
        if category:
            wanted = category.lower()
            return [p for p in self.products if p.category.lower() == wanted]
        return list(self.products)

    async def get_product(self, product_id):
        return next((p for p in self.products if p.id == product_id), None)

    async def search_products(self, query):
        needle = query.lower()
        return [
            p for p in self.products
            if needle in p.name.lower()
            or needle in p.category.lower()
            or needle in p.description.lower()
        ]

    async def list_categories(self):
        seen = []
        for product in self.products:
            if product.category not in seen:
                seen.append(product.category)
        return seen

    async def adjust_stock(self, product_id, delta):
        product = await self.get_product(product_id)
        if product is not None:
            product.stock += delta
        return product

    async def add_order(self, user_id, username, items, total):
        order = Order(
            id=next(self._order_ids),
            user_id=user_id,
            username=username,
            items=[item.model_copy() for item in items],
            total=total,
        )
        self.orders.append(order)
        return order

    async def list_orders(self, user_id):
        return [o for o in self.orders if o.user_id == user_id]

    async def get_order(self, order_id):
        return next((o for o in self.orders if o.id == order_id), None)
