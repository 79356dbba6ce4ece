"""Pydantic request schema handed to the order service at checkout.

Replaces the loosely typed dictionaries the clients used to send; every
field of the order request is explicit.
"""

from pydantic import BaseModel, Field


class OrderLine(BaseModel):
    dish_id: str
    name: str
    unit_price_cents: int = Field(ge=0)
    quantity: int = Field(ge=1)


class OrderRequest(BaseModel):
    business_id: str
    items: list[OrderLine] = Field(min_length=1)
    subtotal_cents: int = Field(ge=0)
    discount_cents: int = Field(ge=0)
    total_cents: int = Field(ge=0)
    coupon_code: str | None = None
