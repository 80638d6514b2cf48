"""Menu service helpers shared by the API and the Streamlit consoles."""

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.menu import MenuItem
from app.services.cart import Cart
from app.services.errors import MenuItemNotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

STARTER_MENU: list[dict[str, Any]] = [
    {"name": "Samosa", "price": Decimal("50"), "is_veg": True},
    {"name": "Masala Dosa", "price": Decimal("80"), "is_veg": True},
    {"name": "Tea", "price": Decimal("60"), "is_veg": True},
    {"name": "Egg Roll", "price": Decimal("70"), "is_veg": False},
]


def validate_price(price: Decimal | int | str) -> Decimal:
    """Enforce the canteen price policy before any write."""
    value = Decimal(str(price))
    if value < settings.menu_price_min or value > settings.menu_price_max:
        raise ValidationError(
            "PriceOutOfRange",
            f"Price must be between {settings.menu_price_min} and {settings.menu_price_max}",
        )
    return value


def list_menu(db: Session, available_only: bool = False) -> list[MenuItem]:
    """Return menu items ordered by name."""
    query = select(MenuItem)
    if available_only:
        query = query.where(MenuItem.is_available.is_(True))
    return list(db.scalars(query.order_by(MenuItem.name.asc())).all())


def get_menu_item(db: Session, item_id: str) -> MenuItem:
    item = db.get(MenuItem, item_id)
    if item is None:
        raise MenuItemNotFoundError(f"Menu item {item_id} not found")
    return item


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("[MENU] %s failed", action)
        raise PersistenceError(f"Could not {action} the menu item. Please try again.") from exc


def create_menu_item(
    db: Session,
    name: str,
    price: Decimal | int | str,
    image_url: str = "",
    is_veg: bool = True,
    is_available: bool = True,
) -> MenuItem:
    """Create and persist a menu item."""
    item = MenuItem(
        name=name.strip(),
        price=validate_price(price),
        image_url=image_url,
        is_veg=is_veg,
        is_available=is_available,
    )
    db.add(item)
    _commit(db, "create")
    db.refresh(item)
    logger.info("[MENU] Added %s at %s", item.name, item.price)
    return item


def update_menu_item(db: Session, item_id: str, **changes: Any) -> MenuItem:
    """Apply a partial update; ``None`` values are ignored."""
    item = get_menu_item(db, item_id)
    updates = {key: value for key, value in changes.items() if value is not None}
    if "price" in updates:
        updates["price"] = validate_price(updates["price"])
    if "name" in updates:
        updates["name"] = str(updates["name"]).strip()
    for key, value in updates.items():
        setattr(item, key, value)
    _commit(db, "update")
    db.refresh(item)
    return item


def toggle_availability(db: Session, item_id: str) -> MenuItem:
    """Flip availability for a dish and persist the change."""
    item = get_menu_item(db, item_id)
    return update_menu_item(db, item_id, is_available=not item.is_available)


def delete_menu_item(db: Session, item_id: str) -> None:
    """Delete permanently; placed orders keep their own snapshot."""
    item = get_menu_item(db, item_id)
    db.delete(item)
    _commit(db, "delete")
    logger.info("[MENU] Deleted %s", item_id)


def build_cart(db: Session, lines: Iterable[tuple[str, int]]) -> Cart:
    """Build a cart from ``(menu_item_id, quantity)`` pairs using current prices."""
    cart = Cart()
    for item_id, quantity in lines:
        if quantity < 1:
            raise ValidationError("InvalidQuantity", "Quantities must be at least 1")
        item = get_menu_item(db, item_id)
        if not item.is_available:
            raise ValidationError("ItemUnavailable", f"{item.name} is not available right now")
        cart.add_menu_item(item, quantity)
    return cart


def seed_starter_menu(db: Session) -> int:
    """Insert the starter menu into an empty table; returns rows created."""
    if db.scalar(select(MenuItem.id).limit(1)) is not None:
        return 0
    for entry in STARTER_MENU:
        db.add(MenuItem(**entry))
    db.commit()
    return len(STARTER_MENU)
