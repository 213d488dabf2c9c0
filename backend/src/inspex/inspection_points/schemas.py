"""Pydantic schemas for inspection point management"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class InspectionPointCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    order_index: Optional[int] = Field(None, ge=0)


class InspectionPointUpdate(BaseModel):
    """Partial update. Omitted fields are unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    order_index: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class PointOrder(BaseModel):
    id: UUID
    order_index: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    points: list[PointOrder] = Field(..., min_length=1)


class InspectionPointResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    order_index: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
