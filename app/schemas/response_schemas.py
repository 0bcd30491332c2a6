# app/schemas/response_schemas.py
from datetime import datetime
from typing import Generic, TypeVar, Optional
from pydantic import AfterValidator, BaseModel
from typing_extensions import Annotated

from app.utils.date_utils import as_utc

T = TypeVar("T")

# timestamps read back from SQLite are naive; everything leaves the API as UTC
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class ResponseMessage(BaseModel, Generic[T]):
    message: str
    data: Optional[T] = None


class MessageResponse(BaseModel):
    """Generic message response"""
    message: str
