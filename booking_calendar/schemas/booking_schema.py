"""Booking data models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class BookingRequest(BaseModel):
    """Booking details submitted by a visitor."""

    model_config = ConfigDict(populate_by_name=True)

    service_id: str = Field(alias="serviceId")
    service_name: str = Field(alias="serviceName")
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    client_name: str = Field(alias="clientName")
    client_email: str = Field(alias="clientEmail")
    client_phone: str = Field(alias="clientPhone")
    client_message: Optional[str] = Field(default=None, alias="clientMessage")
    status: BookingStatus = BookingStatus.PENDING


class Booking(BookingRequest):
    """A booking record as stored in the bookings collection."""

    id: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
