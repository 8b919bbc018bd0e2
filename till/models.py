from __future__ import annotations

import time
import uuid
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .validation import ItemName, Money, Percent, PositiveMoney, Quantity, TenderType


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    return int(time.time() * 1000)


_FROZEN = ConfigDict(frozen=True)

# Field names are snake_case in Python and camelCase on the wire. The extra
# validation aliases accept records written by the browser till (price/qty/items/date).


class Item(BaseModel):
    model_config = _FROZEN

    id: str = Field(default_factory=new_id, min_length=1)
    name: ItemName
    unit_price: Money = Field(
        validation_alias=AliasChoices("unit_price", "unitPrice", "price"),
        serialization_alias="unitPrice",
    )
    fee_percent: Percent = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("fee_percent", "feePercent"),
        serialization_alias="feePercent",
    )


class LineItem(BaseModel):
    model_config = _FROZEN

    id: str = Field(min_length=1)
    name: ItemName
    unit_price: Money = Field(
        validation_alias=AliasChoices("unit_price", "unitPrice", "price"),
        serialization_alias="unitPrice",
    )
    fee_percent: Percent = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("fee_percent", "feePercent"),
        serialization_alias="feePercent",
    )
    quantity: Quantity = Field(
        default=1,
        validation_alias=AliasChoices("quantity", "qty"),
    )


class Payment(BaseModel):
    model_config = _FROZEN

    id: str = Field(default_factory=new_id, min_length=1)
    type: TenderType = Field(validation_alias=AliasChoices("type", "method"))
    amount: PositiveMoney
    timestamp: int = Field(
        default_factory=now_ms,
        ge=0,
        validation_alias=AliasChoices("timestamp", "date"),
    )


class Transaction(BaseModel):
    model_config = _FROZEN

    id: str = Field(default_factory=new_id, min_length=1)
    line_items: Tuple[LineItem, ...] = Field(
        default=(),
        validation_alias=AliasChoices("line_items", "lineItems", "items"),
        serialization_alias="lineItems",
    )
    payments: Tuple[Payment, ...] = ()
    completed: bool = False
    created_at: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )

    @model_validator(mode="after")
    def _check_state(self):
        if self.created_at is None and self.completed:
            raise ValueError("an open transaction cannot be marked completed")
        ids = [it.id for it in self.line_items]
        if len(ids) != len(set(ids)):
            raise ValueError("duplicate line item id")
        return self

    @property
    def is_open(self) -> bool:
        return self.created_at is None

    @property
    def status(self) -> str:
        return "open" if self.is_open else "completed"

    def find_line(self, line_id: str) -> Optional[LineItem]:
        return next((it for it in self.line_items if it.id == line_id), None)


class Catalog(BaseModel):
    model_config = _FROZEN

    items: Tuple[Item, ...] = ()


class Register(BaseModel):
    """Everything one till owns: the catalog, the open cart and completed history (newest first)."""

    model_config = _FROZEN

    catalog: Catalog = Field(default_factory=Catalog)
    cart: Transaction = Field(default_factory=Transaction)
    history: Tuple[Transaction, ...] = ()

    @model_validator(mode="after")
    def _check_state(self):
        if not self.cart.is_open:
            raise ValueError("register cart must be open")
        if any(t.is_open for t in self.history):
            raise ValueError("history may only hold completed transactions")
        return self
