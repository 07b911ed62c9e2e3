from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
from app.core.constants import FinancialRecordType
from app.schemas.common import UtcDatetime
from app.utils.money import to_minor_units


class FinancialRecordCreate(BaseModel):
    """
    Payload for a new financial record.

    ``amount`` arrives in major units (at least 0.01) and is stored as
    integer minor units. Both the REST API and the assistant's
    create_financial_record action go through ``to_model_values`` so the
    stored shape is identical.
    """
    model_config = ConfigDict(extra='ignore')

    type: FinancialRecordType
    category: str = Field(min_length=1)
    amount: float = Field(ge=0.01)
    description: Optional[str] = None
    date: UtcDatetime

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Category is required")
        return v.strip()

    def to_model_values(self) -> dict:
        values = self.model_dump(mode="python")
        values["amount"] = to_minor_units(self.amount)
        return values


class FinancialRecordUpdate(BaseModel):
    model_config = ConfigDict(extra='ignore')

    type: Optional[FinancialRecordType] = None
    category: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[float] = Field(default=None, ge=0.01)
    description: Optional[str] = None
    date: Optional[UtcDatetime] = None

    def to_model_values(self) -> dict:
        values = self.model_dump(mode="python", exclude_unset=True)
        if values.get("amount") is not None:
            values["amount"] = to_minor_units(values["amount"])
        return values


class FinancialRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    category: str
    amount: int  # minor units
    description: Optional[str] = None
    date: datetime
    created_at: datetime
    updated_at: datetime
