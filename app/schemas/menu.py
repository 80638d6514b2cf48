"""Menu API schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class MenuItemCreate(BaseModel):
    """Payload for adding a dish; the price bound is checked by the menu service."""

    name: str = Field(min_length=1)
    price: Decimal = Field(gt=0)
    image_url: str = ""
    is_veg: bool = True
    is_available: bool = True


class MenuItemUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1)
    price: Decimal | None = Field(default=None, gt=0)
    image_url: str | None = None
    is_veg: bool | None = None
    is_available: bool | None = None


class MenuItemRead(BaseModel):
    """Serialized menu item."""

    id: str
    name: str
    price: Decimal
    image_url: str
    is_veg: bool
    is_available: bool

    model_config = ConfigDict(from_attributes=True)
