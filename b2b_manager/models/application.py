"""Wholesale application models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ApplicationStatus(str, Enum):
    """Review state of a wholesale application."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WholesaleApplication(BaseModel):
    """A storefront request for wholesale access."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    shop: str
    customer_id: str | None = None
    customer_email: str
    business_name: str | None = None
    application_data: dict[str, Any] | None = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class WholesaleApplicationForm(BaseModel):
    """Public wholesale form submission."""

    shop: str
    customer_email: str
    customer_id: str | None = None
    business_name: str | None = None
    company_size: str | None = None
    industry: str | None = None
    expected_volume: str | None = None
    notes: str | None = None
