from __future__ import annotations

import datetime as dt
import uuid
from typing import Annotated, Any, ClassVar, Literal, Optional

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    confloat,
    field_validator,
    model_validator,
)

from src.finance.periods import normalize_month, strict_iso_date


def canonical_id(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("must be an id string")
    try:
        u = uuid.UUID(value)
    except ValueError as e:
        raise ValueError("must be a canonical UUID") from e
    if str(u) != value.lower():
        raise ValueError("must be a canonical UUID")
    return str(u)


def _cents(v: float) -> float:
    if round(v, 2) != v:
        raise ValueError("must have at most 2 decimal places")
    return v


EntityId = Annotated[str, BeforeValidator(canonical_id)]
IsoDate = Annotated[dt.date, BeforeValidator(strict_iso_date)]
MonthDate = Annotated[dt.date, BeforeValidator(normalize_month)]
Amount = Annotated[confloat(strict=True, allow_inf_nan=False), AfterValidator(_cents)]
PositiveAmount = Annotated[confloat(strict=True, allow_inf_nan=False, gt=0), AfterValidator(_cents)]
NonNegativeAmount = Annotated[confloat(strict=True, allow_inf_nan=False, ge=0), AfterValidator(_cents)]

CategoryKind = Literal["income", "expense"]
DirectionKind = Literal["inflow", "outflow"]


class InputModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PatchModel(InputModel):
    """
    Partial update payload. The declared fields are the resource's mutable-column
    allow-list; anything else is rejected by `extra="forbid"`.
    """

    non_nullable: ClassVar[frozenset[str]] = frozenset()
    not_stored: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_explicit_nulls(self):
        bad = sorted(f for f in self.model_fields_set if f in self.non_nullable and getattr(self, f) is None)
        if bad:
            raise ValueError(f"{', '.join(bad)} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if k not in self.not_stored}


class OutputModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# --- auth / profile -------------------------------------------------------


class RegisterIn(InputModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=1, max_length=200)

    @field_validator("email", mode="before")
    @classmethod
    def _lower_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def _bcrypt_limit(cls, v: str) -> str:
        if len(v.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return v

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name is required")
        return v.strip()


class LoginIn(InputModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def _lower_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class UserOut(OutputModel):
    id: str
    email: str
    name: str
    notification_preferences: dict[str, Any] = Field(default_factory=dict)


class RegisterOut(BaseModel):
    user: UserOut


class LoginOut(BaseModel):
    token: str
    user: UserOut


class ProfileUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "notification_preferences"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    notification_preferences: Optional[dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("notificationPreferences", "notification_preferences"),
    )


# --- accounts -------------------------------------------------------------


class AccountCreate(InputModel):
    institution: str = Field(min_length=1, max_length=200)
    name: str = Field(min_length=1, max_length=200)
    last4: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    type: str = Field(min_length=1, max_length=32)
    balance: Amount = 0.0
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")


class AccountUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"institution", "name", "type", "balance", "currency"})

    institution: Optional[str] = Field(default=None, min_length=1, max_length=200)
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    last4: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    type: Optional[str] = Field(default=None, min_length=1, max_length=32)
    balance: Optional[Amount] = None
    currency: Optional[str] = Field(default=None, pattern=r"^[A-Z]{3}$")


class AccountOut(OutputModel):
    id: str
    user_id: str
    institution: str
    name: str
    last4: Optional[str] = None
    type: str
    balance: float
    currency: str
    created_at: dt.datetime
    updated_at: dt.datetime


# --- categories -----------------------------------------------------------


class CategoryCreate(InputModel):
    name: str = Field(min_length=1, max_length=120)
    type: CategoryKind
    icon: Optional[str] = Field(default=None, max_length=64)


class CategoryUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "type"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    type: Optional[CategoryKind] = None
    icon: Optional[str] = Field(default=None, max_length=64)


class CategoryOut(OutputModel):
    id: str
    user_id: Optional[str] = None
    name: str
    type: str
    icon: Optional[str] = None
    is_default: bool


# --- transactions ---------------------------------------------------------


class TransactionCreate(InputModel):
    user_id: Optional[EntityId] = None
    account_id: Optional[EntityId] = None
    category_id: Optional[EntityId] = None
    amount: Amount
    direction: DirectionKind
    description: Optional[str] = Field(default=None, max_length=2000)
    transaction_date: IsoDate


class TransactionUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"amount", "direction", "transaction_date"})

    account_id: Optional[EntityId] = None
    category_id: Optional[EntityId] = None
    amount: Optional[Amount] = None
    direction: Optional[DirectionKind] = None
    description: Optional[str] = Field(default=None, max_length=2000)
    transaction_date: Optional[IsoDate] = None


class TransactionOut(OutputModel):
    id: str
    user_id: str
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    amount: float
    direction: str
    description: Optional[str] = None
    transaction_date: dt.date
    created_at: dt.datetime
    updated_at: dt.datetime


class SummaryRow(BaseModel):
    period: str
    income: float
    expense: float


# --- budgets --------------------------------------------------------------


class BudgetCreate(InputModel):
    user_id: Optional[EntityId] = None
    category_id: EntityId
    month: MonthDate
    # Accepted for compatibility; only monthly budgets exist.
    period: Optional[Literal["monthly"]] = None
    limit_amount: PositiveAmount


class BudgetUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"category_id", "month", "limit_amount"})
    not_stored: ClassVar[frozenset[str]] = frozenset({"period"})

    category_id: Optional[EntityId] = None
    month: Optional[MonthDate] = None
    period: Optional[Literal["monthly"]] = None
    limit_amount: Optional[PositiveAmount] = None


class BudgetOut(OutputModel):
    id: str
    user_id: str
    category_id: str
    month: dt.date
    limit_amount: float
    spent: float
    overrun: bool
    created_at: dt.datetime
    updated_at: dt.datetime


# --- goals ----------------------------------------------------------------


class GoalCreate(InputModel):
    user_id: Optional[EntityId] = None
    name: str = Field(min_length=1, max_length=160)
    target_amount: PositiveAmount
    current_amount: NonNegativeAmount = 0.0
    target_date: Optional[IsoDate] = None


class GoalUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "target_amount", "current_amount"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=160)
    target_amount: Optional[PositiveAmount] = None
    current_amount: Optional[NonNegativeAmount] = None
    target_date: Optional[IsoDate] = None


class GoalOut(OutputModel):
    id: str
    user_id: str
    name: str
    target_amount: float
    current_amount: float
    target_date: Optional[dt.date] = None
    created_at: dt.datetime
    updated_at: dt.datetime


# --- reports --------------------------------------------------------------


class SpendingByCategoryRow(BaseModel):
    categoryName: str
    total: float
    currency: str


class IncomeVsExpenseRow(BaseModel):
    period: str
    income: float
    expense: float
    net: float


class DeletedOut(BaseModel):
    deleted: int
