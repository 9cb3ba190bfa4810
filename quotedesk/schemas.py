from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

# Request schemas only check presence and type. Business rules (positive
# price and quantity, no future dates) live in services so they apply no
# matter which layer triggers the operation.


class ProductCreate(BaseModel):
    description: Optional[str] = Field(default=None)
    price: Decimal


class ProductRead(BaseModel):
    id: int
    description: Optional[str] = None
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class BudgetCreate(BaseModel):
    recipient_name: str
    creation_date: date


class BudgetRead(BaseModel):
    id: int
    recipient_name: str
    creation_date: date

    model_config = ConfigDict(from_attributes=True)


class BudgetLineCreate(BaseModel):
    product_id: int
    quantity: int


class BudgetLineRead(BaseModel):
    id: int
    product: ProductRead
    quantity: int


class BudgetDetail(BudgetRead):
    """A budget header with its lines resolved against the catalog."""
    lines: list[BudgetLineRead] = []


class BudgetTotals(BaseModel):
    subtotal: Decimal
    total_with_tax: Decimal
    unit_count: int


class BudgetDetailResponse(BudgetDetail):
    totals: BudgetTotals


class FieldError(BaseModel):
    field: str
    message: str


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class Principal(BaseModel):
    authenticated: bool = False
    username: Optional[str] = None
    display_name: Optional[str] = None
    role: Optional[str] = None


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    role: str = Field(default="Client")
