import logging
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request

import services
from auth import PasswordHasher, TokenService, get_current_user
from config import Settings, get_settings
from db import InMemoryStore, Store
from errors import register_error_handlers
from models import AddToCartRequest, LoginRequest, RegisterRequest, TokenData, UpdateCartRequest
from seed import load_products

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "register": "POST /api/auth/register",
    "login": "POST /api/auth/login",
    "products": "GET /api/products",
    "product": "GET /api/products/{id}",
    "search": "GET /api/products/search/{query}",
    "categories": "GET /api/categories",
    "cart": "GET /api/cart",
    "orders": "GET /api/orders",
}


def get_store(request: Request) -> Store:
    return request.app.state.store


def _json(items):
    return [item.to_json() for item in items]


# ---------------- ROOT ----------------
root_router = APIRouter()


@root_router.get("/")
async def welcome():
    return {"message": "Welcome to the E-commerce API!", "endpoints": ENDPOINTS}


# ---------------- AUTH ----------------
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@auth_router.post("/register", status_code=201)
async def register_user(body: RegisterRequest, request: Request, store: Store = Depends(get_store)):
    user = await services.register(store, request.app.state.hasher, body.username, body.email, body.password)
    return {
        "success": True,
        "message": "Registration successful! You can now login",
        "user": user.public(),
    }


@auth_router.post("/login")
async def login_user(body: LoginRequest, request: Request, store: Store = Depends(get_store)):
    state = request.app.state
    token, user = await services.login(store, state.hasher, state.tokens, body.email, body.password)
    return {
        "success": True,
        "message": "Login successful!",
        "token": token,
        "user": user.public(),
    }


# ---------------- PRODUCTS ----------------
products_router = APIRouter(prefix="/api", tags=["products"])


@products_router.get("/products")
async def get_products(
    category: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    store: Store = Depends(get_store),
):
    result = await services.list_products(store, category, sort, page, limit)
    response = {"success": True, "count": len(result["data"]), "data": _json(result["data"])}
    if limit is not None:
        response.update(total=result["total"], page=result["page"], pages=result["pages"])
    return response


@products_router.get("/products/search/{query}")
async def search_products(query: str, store: Store = Depends(get_store)):
    results = await services.search_products(store, query)
    return {"success": True, "count": len(results), "data": _json(results)}


@products_router.get("/products/{product_id}")
async def get_product_by_id(product_id: int, store: Store = Depends(get_store)):
    product = await services.get_product(store, product_id)
    return {"success": True, "data": product.to_json()}


@products_router.get("/categories")
async def get_categories(store: Store = Depends(get_store)):
    categories = await services.list_categories(store)
    return {"success": True, "count": len(categories), "data": categories}


# ---------------- CART ----------------
cart_router = APIRouter(prefix="/api/cart", tags=["cart"])


@cart_router.get("")
async def view_cart(user: TokenData = Depends(get_current_user), store: Store = Depends(get_store)):
    items, total = await services.get_cart(store, user.id)
    return {
        "success": True,
        "itemCount": len(items),
        "total": f"{total:.2f}",
        "items": _json(items),
    }


@cart_router.post("")
async def add_to_cart(body: AddToCartRequest, user: TokenData = Depends(get_current_user),
                      store: Store = Depends(get_store)):
    product, cart = await services.add_to_cart(store, user.id, body.product_id, body.quantity)
    return {"success": True, "message": f"{product.name} added to cart", "cart": _json(cart)}


@cart_router.put("/{product_id}")
async def update_cart_item(product_id: int, body: UpdateCartRequest,
                           user: TokenData = Depends(get_current_user), store: Store = Depends(get_store)):
    removed, cart = await services.update_cart_item(store, user.id, product_id, body.quantity)
    message = "Item removed from cart" if removed else "Cart updated"
    return {"success": True, "message": message, "cart": _json(cart)}


@cart_router.delete("/{product_id}")
async def remove_cart_item(product_id: int, user: TokenData = Depends(get_current_user),
                           store: Store = Depends(get_store)):
    cart = await services.remove_cart_item(store, user.id, product_id)
    return {"success": True, "message": "Item removed from cart", "cart": _json(cart)}


@cart_router.delete("")
async def clear_cart(user: TokenData = Depends(get_current_user), store: Store = Depends(get_store)):
    await services.clear_cart(store, user.id)
    return {"success": True, "message": "Cart cleared"}


# ---------------- ORDERS ----------------
orders_router = APIRouter(prefix="/api/orders", tags=["orders"])


@orders_router.post("", status_code=201)
async def create_order(request: Request, user: TokenData = Depends(get_current_user),
                       store: Store = Depends(get_store)):
    check_stock = request.app.state.settings.check_stock_at_checkout
    order = await services.create_order(store, user.id, check_stock=check_stock)
    return {"success": True, "message": "Order placed successfully!", "order": order.to_json()}


@orders_router.get("")
async def get_orders(user: TokenData = Depends(get_current_user), store: Store = Depends(get_store)):
    orders = await services.list_orders(store, user.id)
    return {"success": True, "count": len(orders), "data": _json(orders)}


@orders_router.get("/{order_id}")
async def get_order(order_id: int, user: TokenData = Depends(get_current_user),
                    store: Store = Depends(get_store)):
    order = await services.get_order(store, user.id, order_id)
    return {"success": True, "data": order.to_json()}


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="E-commerce API")
    app.state.settings = settings
    app.state.store = store if store is not None else InMemoryStore(load_products())
    app.state.hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.tokens = TokenService.from_settings(settings)

    register_error_handlers(app)
    for router in (root_router, auth_router, products_router, cart_router, orders_router):
        app.include_router(router)
    return app


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = get_settings()
setup_logging(settings.log_level)
app = create_app(settings)


if __name__ == "__main__":
    logger.info("Server running on http://%s:%s", settings.host, settings.port)
    for name, route in ENDPOINTS.items():
        logger.info("  %-10s %s", name, route)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
