"""Models describing the result of a single scrape attempt"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from vps_monitor.models.account import CookieStatus


class ScrapeFailure(str, Enum):
    """Why a scrape attempt was classified as invalid"""

    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    MISSING_DATA = "missing_data"
    DATE_FORMAT = "date_format"


class ScrapeOutcome(BaseModel):
    """Outcome of scraping the account page with one cookie"""

    valid_until: datetime | None = Field(default=None, description="Expiry instant (display zone)")
    ip: str | None = Field(default=None, description="IPv6 address from the page")
    location: str | None = Field(default=None, description="Location label from the page")
    creation_date: datetime | None = Field(
        default=None, description="VPS creation instant (display zone)"
    )
    status: CookieStatus = Field(description="NORMAL only if every field was extracted and parsed")
    observed_at: datetime = Field(description="When the attempt completed (display zone)")
    diagnostic: str | None = Field(default=None, description="Why the attempt failed")
    failure: ScrapeFailure | None = Field(default=None, description="Failure category")

    @property
    def is_healthy(self) -> bool:
        return self.status == CookieStatus.NORMAL


class ScrapeSuccessUpdate(BaseModel):
    """Observational fields written to the store after a successful scrape"""

    valid_until: datetime | None
    ip: str | None
    location: str | None
    creation_date: datetime | None
    observed_at: datetime

    @classmethod
    def from_outcome(cls, outcome: ScrapeOutcome) -> "ScrapeSuccessUpdate":
        return cls(
            valid_until=outcome.valid_until,
            ip=outcome.ip,
            location=outcome.location,
            creation_date=outcome.creation_date,
            observed_at=outcome.observed_at,
        )
