from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


def naive_local(value: Optional[datetime]) -> Optional[datetime]:
    # Calendar buckets are local; aware timestamps are shifted and stripped.
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class TransactionRecord(BaseModel):
    """A single income or expense movement, as handed over by the record store."""

    id: str
    amount: float = Field(..., ge=0)
    category_id: str = "other"
    date: datetime
    status: Literal["completed", "pending"] = "completed"
    note: Optional[str] = ""

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value):
        return naive_local(value)


# Incomes and expenses share one shape.
Expense = TransactionRecord
Income = TransactionRecord


class Category(BaseModel):
    id: str
    name: str
    color: str = "#6B7280"
    icon: Optional[str] = None
    is_active: bool = True


class Goal(BaseModel):
    id: str
    name: str
    target_amount: float = Field(..., ge=0)
    current_amount: float = Field(default=0.0, ge=0)
    target_date: Optional[datetime] = None
    status: Literal["active", "completed", "cancelled"] = "active"
    created_at: Optional[datetime] = None

    @field_validator("target_date", "created_at")
    @classmethod
    def normalize_dates(cls, value):
        return naive_local(value)


class MonthSelector(BaseModel):
    year: int = Field(..., ge=1970, le=9999)
    month: int = Field(..., ge=1, le=12)


class RecordBundle(BaseModel):
    """Raw record collections posted to the API in place of a live record store."""

    incomes: List[TransactionRecord] = Field(default_factory=list)
    expenses: List[TransactionRecord] = Field(default_factory=list)
    goals: List[Goal] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)
