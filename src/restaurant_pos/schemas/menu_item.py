from datetime import datetime
from typing import Optional

from pydantic import BaseModel, condecimal, constr, field_validator

from .money import Money


class MenuItemCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=128)
    description: Optional[str] = None
    price: condecimal(gt=0, max_digits=10, decimal_places=2)
    category: constr(strip_whitespace=True, min_length=1, max_length=64)
    is_available: bool = True

    class Config:
        extra = "forbid"


class MenuItemUpdate(BaseModel):
    """
    PUT принимает как полный набор полей, так и частичный:
    обновляются только переданные поля.
    """
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=128)] = None
    description: Optional[str] = None
    price: Optional[condecimal(gt=0, max_digits=10, decimal_places=2)] = None
    category: Optional[constr(strip_whitespace=True, min_length=1, max_length=64)] = None
    is_available: Optional[bool] = None

    @field_validator("name", "price", "category", "is_available")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    class Config:
        extra = "ignore"


class MenuItemRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Money
    category: str
    is_available: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
