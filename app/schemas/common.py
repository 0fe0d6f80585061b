from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

# Base types for common SQL result patterns
class BaseRecord(BaseModel):
    """Base for SQL query results"""
    model_config = ConfigDict(
        from_attributes=True,
        arbitrary_types_allowed=True,
        json_encoders={
            datetime: lambda v: v.isoformat(),
            date: lambda v: v.isoformat(),
            Decimal: lambda v: float(v)
        }
    )


class ProblemDetails(BaseModel):
    """RFC 7807 error body"""
    type: str = Field(default="about:blank")
    title: str = Field(..., example="Internal Server Error")
    status: int = Field(..., example=500)
    detail: Optional[str] = None
    instance: Optional[str] = None
