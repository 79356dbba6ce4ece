"""Pydantic schemas for the persisted cart.

The storage collaborator keeps exactly this shape; it is opaque to the rest
of the domain.
"""

from pydantic import BaseModel, Field


class CartLineRecord(BaseModel):
    dish_id: str
    name: str
    unit_price_cents: int = Field(ge=0)
    quantity: int = Field(ge=1)


class CartRecord(BaseModel):
    business_id: str | None = None
    items: list[CartLineRecord] = Field(default_factory=list)
    applied_coupon_code: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "business_id": "biz-001",
                    "items": [
                        {
                            "dish_id": "dish-001",
                            "name": "Paneer Tikka",
                            "unit_price_cents": 25000,
                            "quantity": 2,
                        }
                    ],
                    "applied_coupon_code": "FEST15",
                }
            ]
        }
    }
