from typing import Annotated, Literal, Optional

from flask import request
from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, StrictStr, constr

from .errors import ValidationError

Name = constr(strip_whitespace=True, min_length=1, max_length=100)
Description = constr(strip_whitespace=True, min_length=1, max_length=255)


def _reject_bool(value):
    # JSON true/false would otherwise coerce to 1.0/0.0
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    return value


Amount = Annotated[float, BeforeValidator(_reject_bool)]


class ApiSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def provided(self):
        """Fields the client actually sent, keyed by attribute name. Explicit nulls are dropped."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


def parse_body(schema):
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return schema.model_validate(payload)


# -----------------------------
# Auth Schemas
# -----------------------------
class RegisterIn(ApiSchema):
    email: EmailStr
    password: constr(min_length=6)
    name: constr(strip_whitespace=True, min_length=1, max_length=120)


class LoginIn(ApiSchema):
    email: EmailStr
    password: constr(min_length=1)


# -----------------------------
# Category Schemas
# -----------------------------
class CategoryCreate(ApiSchema):
    name: Name
    color: Optional[StrictStr] = None
    icon: Optional[StrictStr] = None


class CategoryUpdate(ApiSchema):
    name: Optional[Name] = None
    color: Optional[StrictStr] = None
    icon: Optional[StrictStr] = None


# -----------------------------
# Expense Schemas
# -----------------------------
class ExpenseCreate(ApiSchema):
    # amount and date are range/format checked by the expense service
    amount: Amount
    description: Description
    date: StrictStr
    category_id: int = Field(..., alias="categoryId")


class ExpenseUpdate(ApiSchema):
    amount: Optional[Amount] = None
    description: Optional[Description] = None
    date: Optional[StrictStr] = None
    category_id: Optional[int] = Field(None, alias="categoryId")


# -----------------------------
# Budget Schemas
# -----------------------------
Period = Literal["weekly", "monthly", "quarterly", "yearly"]


class BudgetCreate(ApiSchema):
    amount: Amount = Field(..., ge=0)
    period: Period
    start_date: StrictStr = Field(..., alias="startDate")
    end_date: StrictStr = Field(..., alias="endDate")
    category_id: int = Field(..., alias="categoryId")


class BudgetUpdate(ApiSchema):
    amount: Optional[Amount] = Field(None, ge=0)
    period: Optional[Period] = None
    start_date: Optional[StrictStr] = Field(None, alias="startDate")
    end_date: Optional[StrictStr] = Field(None, alias="endDate")
    category_id: Optional[int] = Field(None, alias="categoryId")
