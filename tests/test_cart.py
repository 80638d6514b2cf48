"""Cart behaviour tests."""

from decimal import Decimal

from app.services.cart import Cart


def test_cart_keeps_insertion_order_and_merges_repeat_adds() -> None:
    cart = Cart()
    cart.add("B", "Tea", 60)
    cart.add("A", "Samosa", 50)
    cart.add("B", "Tea", 60, quantity=2)

    assert [(line.item_id, line.quantity) for line in cart.lines] == [("B", 3), ("A", 1)]
    assert cart.total_quantity == 4
    assert cart.total_price == Decimal("230")


def test_decrementing_to_zero_removes_line() -> None:
    cart = Cart()
    cart.add("A", "Samosa", 50, quantity=2)
    cart.add("A", "Samosa", 50, quantity=-1)
    assert cart.lines[0].quantity == 1

    cart.add("A", "Samosa", 50, quantity=-1)
    assert cart.is_empty()

    cart.add("B", "Tea", 60)
    cart.update_quantity("B", 0)
    assert len(cart) == 0


def test_update_quantity_ignores_unknown_items_and_clear_empties() -> None:
    cart = Cart()
    cart.add("A", "Samosa", "50.00")
    cart.update_quantity("missing", 4)
    cart.update_quantity("A", 5)

    assert cart.total_price == Decimal("250.00")

    cart.clear()
    assert cart.is_empty()
    assert cart.total_price == Decimal("0")


def test_remove_drops_line_and_ignores_unknown_items() -> None:
    cart = Cart()
    cart.add("A", "Samosa", 50, quantity=2)
    cart.add("B", "Tea", 60)

    cart.remove("A")
    cart.remove("missing")

    assert [line.item_id for line in cart.lines] == ["B"]
    assert cart.total_price == Decimal("60")
