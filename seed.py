from typing import List

from models import Product

PRODUCTS = [
    {"id": 1, "name": "Wireless Mouse", "category": "Electronics",
     "description": "Ergonomic 2.4GHz mouse with silent clicks", "price": 24.99, "stock": 50},
    {"id": 2, "name": "Mechanical Keyboard", "category": "Electronics",
     "description": "Tenkeyless keyboard with brown switches", "price": 89.99, "stock": 25},
    {"id": 3, "name": "USB-C Hub", "category": "Electronics",
     "description": "7-in-1 hub with HDMI, card reader and power delivery", "price": 39.5, "stock": 40},
    {"id": 4, "name": "Running Shoes", "category": "Sports",
     "description": "Lightweight trainers with breathable mesh", "price": 74.0, "stock": 30},
    {"id": 5, "name": "Yoga Mat", "category": "Sports",
     "description": "Non-slip 6mm mat for home workouts", "price": 19.99, "stock": 60},
    {"id": 6, "name": "Coffee Beans", "category": "Grocery",
     "description": "1kg medium roast whole beans", "price": 15.75, "stock": 100},
    {"id": 7, "name": "Ceramic Mug", "category": "Home",
     "description": "350ml mug, dishwasher safe, perfect for coffee", "price": 9.5, "stock": 80},
    {"id": 8, "name": "Desk Lamp", "category": "Home",
     "description": "LED lamp with adjustable brightness and USB charging port", "price": 32.0, "stock": 5},
]


def load_products() -> List[Product]:
    return [Product(**p) for p in PRODUCTS]
