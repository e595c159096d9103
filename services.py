"""Shop operations: accounts, catalog, cart and checkout.

Every function works against a ``Store`` and raises the exceptions from
``errors`` on failure, so none of it depends on the HTTP layer.
"""

import logging
from typing import List, Optional

import pydantic
from starlette.concurrency import run_in_threadpool

from auth import PasswordHasher, TokenService
from db import Store
from errors import AuthError, ConflictError, NotFoundError, ValidationError
from models import CartItem, EmailCheck, Order, Product, User
from utils import cart_total, paginate, sort_items, total_pages

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


# ---------------- ACCOUNTS ----------------
async def register(store: Store, hasher: PasswordHasher, username: Optional[str],
                   email: Optional[str], password: Optional[str]) -> User:
    username = (username or "").strip()
    email = (email or "").strip()
    if not username or not email or not password:
        raise ValidationError("Please provide username, email, and password")

    try:
        EmailCheck(email=email)
    except pydantic.ValidationError:
        raise ValidationError("Please provide a valid email address")

    if await store.find_user_by_email(email):
        raise ConflictError("Email already registered")

    hashed = await run_in_threadpool(hasher.hash, password)
    user = await store.add_user(username, email, hashed)
    logger.info("Registered user %s (%s)", user.id, user.email)
    return user


async def login(store: Store, hasher: PasswordHasher, tokens: TokenService,
                email: Optional[str], password: Optional[str]):
    """Return ``(token, user)``; unknown email and wrong password fail alike."""
    if not email or not password:
        raise ValidationError("Please provide email and password")

    user = await store.find_user_by_email(email.strip())
    if user is None:
        logger.warning("Failed login for unknown email")
        raise AuthError(INVALID_CREDENTIALS, status_code=400)

    valid = await run_in_threadpool(hasher.verify, password, user.password_hash)
    if not valid:
        logger.warning("Failed login for user %s", user.id)
        raise AuthError(INVALID_CREDENTIALS, status_code=400)

    return tokens.create_access_token(user.id, user.email), user


async def _require_user(store: Store, user_id: int) -> User:
    user = await store.get_user(user_id)
    if user is None:
        raise AuthError("User no longer exists")
    return user


# ---------------- CATALOG ----------------
async def list_products(store: Store, category: Optional[str] = None, sort: Optional[str] = None,
                        page: int = 1, limit: Optional[int] = None) -> dict:
    products = sort_items(await store.list_products(category), sort)
    total = len(products)
    if limit is None:
        return {"total": total, "data": products}

    return {
        "total": total,
        "page": page,
        "pages": total_pages(total, limit),
        "data": paginate(products, page, limit),
    }


async def get_product(store: Store, product_id: int) -> Product:
    product = await store.get_product(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


async def search_products(store: Store, query: str) -> List[Product]:
    return await store.search_products(query)


async def list_categories(store: Store) -> List[str]:
    return await store.list_categories()


# ---------------- CART ----------------
async def get_cart(store: Store, user_id: int):
    """Return ``(items, total)`` for the user's cart."""
    user = await _require_user(store, user_id)
    items = [item.model_copy() for item in user.cart]
    return items, cart_total(items)


async def add_to_cart(store: Store, user_id: int, product_id: Optional[int], quantity: Optional[int]):
    """Return ``(product, cart)`` after merging ``quantity`` into the cart."""
    if not product_id or not quantity:
        raise ValidationError("Please provide productId and quantity")
    if quantity < 0:
        raise ValidationError("Quantity must be a positive number")

    user = await _require_user(store, user_id)
    product = await store.get_product(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if product.stock < quantity:
        raise ValidationError(f"Only {product.stock} items in stock")

    cart = [item.model_copy() for item in user.cart]
    existing = next((item for item in cart if item.product_id == product_id), None)
    if existing:
        existing.quantity += quantity
    else:
        cart.append(CartItem(product_id=product.id, name=product.name, price=product.price, quantity=quantity))

    return product, await store.save_cart(user.id, cart)


async def update_cart_item(store: Store, user_id: int, product_id: int, quantity: Optional[int]):
    """Return ``(removed, cart)``; a quantity of zero drops the line."""
    if quantity is None:
        raise ValidationError("Please provide quantity")
    if quantity < 0:
        raise ValidationError("Quantity must be zero or a positive number")

    user = await _require_user(store, user_id)
    cart = [item.model_copy() for item in user.cart]
    item = next((i for i in cart if i.product_id == product_id), None)
    if item is None:
        raise NotFoundError("Item not in cart")

    if quantity == 0:
        cart = [i for i in cart if i.product_id != product_id]
        return True, await store.save_cart(user.id, cart)

    # stock is not re-checked here
    item.quantity = quantity
    return False, await store.save_cart(user.id, cart)


async def remove_cart_item(store: Store, user_id: int, product_id: int) -> List[CartItem]:
    user = await _require_user(store, user_id)
    if not any(i.product_id == product_id for i in user.cart):
        raise NotFoundError("Item not in cart")
    return await store.save_cart(user.id, [i for i in user.cart if i.product_id != product_id])


async def clear_cart(store: Store, user_id: int) -> List[CartItem]:
    user = await _require_user(store, user_id)
    return await store.save_cart(user.id, [])


# ---------------- ORDERS ----------------
async def create_order(store: Store, user_id: int, check_stock: bool = False) -> Order:
    """Turn the user's cart into a pending order.

    Stock was checked when each line was added; with ``check_stock`` it is
    validated again for every line before anything is written. Without it,
    stock is decremented unconditionally and may go negative.
    """
    user = await _require_user(store, user_id)
    if not user.cart:
        raise ValidationError("Your cart is empty")

    items = [item.model_copy() for item in user.cart]

    if check_stock:
        for item in items:
            product = await store.get_product(item.product_id)
            available = product.stock if product else 0
            if available < item.quantity:
                raise ValidationError(f"Only {available} {item.name} left in stock")

    order = await store.add_order(user.id, user.username, items, cart_total(items))

    for item in items:
        await store.adjust_stock(item.product_id, -item.quantity)

    await store.save_cart(user.id, [])
    logger.info("Order %s placed by user %s, total %.2f", order.id, user.id, order.total)
    return order


async def list_orders(store: Store, user_id: int) -> List[Order]:
    return await store.list_orders(user_id)


async def get_order(store: Store, user_id: int, order_id: int) -> Order:
    order = await store.get_order(order_id)
    # foreign orders look exactly like missing ones
    if order is None or order.user_id != user_id:
        raise NotFoundError("Order not found")
    return order
