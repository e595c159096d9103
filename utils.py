from typing import List, Optional

from errors import ValidationError

allowed_sorts = ["id", "name", "price", "stock"]


def paginate(items, page: int = 1, limit: int = 10):
    start = (page - 1) * limit
    end = start + limit
    return items[start:end]


def total_pages(total: int, limit: int) -> int:
    return max((total + limit - 1) // limit, 1)


def sort_items(items: List, sort: Optional[str]):
    """Sort by a product field; a leading ``-`` sorts descending."""
    if not sort:
        return items

    sort = sort.strip()
    reverse = sort.startswith("-")
    field = (sort[1:] if reverse else sort) or "id"
    if field not in allowed_sorts:
        raise ValidationError(f"Invalid sort field '{field}'. Allowed: {allowed_sorts}")

    if field == "name":
        return sorted(items, key=lambda x: x.name.lower(), reverse=reverse)
    return sorted(items, key=lambda x: getattr(x, field), reverse=reverse)


def money(amount: float) -> float:
    return round(amount, 2)


def cart_total(items) -> float:
    return money(sum(item.price * item.quantity for item in items))
