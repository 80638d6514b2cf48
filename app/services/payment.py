"""Payment choice resolution and UPI deep links."""

from decimal import Decimal
from urllib.parse import urlencode

from app.core.config import settings
from app.services.errors import ValidationError

PAYMENT_CHOICES: dict[str, tuple[str, str]] = {
    "online": ("ONLINE", "PAID"),
    "offline": ("OFFLINE", "PAY_ON_PICKUP"),
}


def resolve_payment(choice: str | None) -> tuple[str, str]:
    """Map the customer's choice to ``(payment_method, payment_status)``."""
    normalized = str(choice or "").strip().lower()
    if normalized not in PAYMENT_CHOICES:
        raise ValidationError("MissingPaymentChoice", "Choose online or offline payment")
    return PAYMENT_CHOICES[normalized]


def build_upi_link(amount: Decimal) -> str:
    """Return the ``upi://pay`` URI encoded into the checkout QR code."""
    query = urlencode(
        {
            "pa": settings.upi_payee_address,
            "pn": settings.upi_payee_name,
            "am": f"{Decimal(amount):.2f}",
            "cu": settings.upi_currency,
        }
    )
    return f"upi://pay?{query}"
