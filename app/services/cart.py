"""Client-side cart kept in memory until checkout."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from app.models.menu import MenuItem


@dataclass
class CartLine:
    """One cart entry; ``price`` is captured when the dish is added."""

    item_id: str
    name: str
    price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart:
    """Ordered set of dishes keyed by menu item id.

    Quantities never drop below one: decrementing to zero removes the line.
    """

    def __init__(self) -> None:
        self._lines: dict[str, CartLine] = {}

    def add(self, item_id: str, name: str, price: Decimal | int | str, quantity: int = 1) -> CartLine:
        line = self._lines.get(item_id)
        if line is None:
            line = CartLine(item_id=item_id, name=name, price=Decimal(str(price)), quantity=0)
            self._lines[item_id] = line
        line.quantity += quantity
        if line.quantity <= 0:
            del self._lines[item_id]
        return line

    def add_menu_item(self, item: MenuItem, quantity: int = 1) -> CartLine:
        return self.add(item.id, item.name, item.price, quantity)

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if item_id not in self._lines:
            return
        if quantity <= 0:
            del self._lines[item_id]
        else:
            self._lines[item_id].quantity = quantity

    def remove(self, item_id: str) -> None:
        self._lines.pop(item_id, None)

    def clear(self) -> None:
        self._lines.clear()

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0"))

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)
