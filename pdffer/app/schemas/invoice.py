from datetime import date as date_type
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvoicePayload(BaseModel):
    """
    Payload for a monthly invoice.

    ``date`` is kept as the ISO string supplied by the caller; its format is
    checked here, its plausibility (not in the future) by the template hooks.
    """

    # ------------------------------------------------------------------
    # Required fields
    # ------------------------------------------------------------------
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Invoice total. Must be strictly positive.",
    )

    date: str = Field(
        ...,
        description="Invoice date in ISO format (YYYY-MM-DD).",
    )

    # ------------------------------------------------------------------
    # Optional fields
    # ------------------------------------------------------------------
    customer: Optional[str] = Field(
        default=None,
        description="Billed customer, printed under the heading when given.",
    )

    currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
        description="ISO 4217 currency code.",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        date_type.fromisoformat(value)
        return value

    @property
    def issued_on(self) -> date_type:
        return date_type.fromisoformat(self.date)
