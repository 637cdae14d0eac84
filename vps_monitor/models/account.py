"""Pydantic models for monitored VPS accounts"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class CookieStatus(str, Enum):
    """Health of the stored session cookie"""

    NORMAL = "Normal"
    INVALID = "Invalid"


class MonitoredAccount(BaseModel):
    """A VPS account as persisted in the record store"""

    id: int = Field(description="Store-assigned identifier")
    name: str = Field(description="Display name of the VPS")
    ops: str = Field(description="Operator tag")
    cookie: str = Field(description="Raw session cookie sent to the account page")

    valid_until: datetime | None = Field(default=None, description="Last known expiry instant")
    ip: str | None = Field(default=None, description="Last known IPv6 address")
    location: str | None = Field(default=None, description="Last known facility/region")
    creation_date: datetime | None = Field(
        default=None, description="Last known VPS creation instant"
    )
    cookie_status: CookieStatus = Field(
        default=CookieStatus.NORMAL, description="Credential health from the last refresh"
    )
    update_time: datetime | None = Field(
        default=None, description="When the last refresh attempt completed"
    )


class AccountCreate(BaseModel):
    """Input for registering a new VPS account"""

    name: str = Field(min_length=1)
    ops: str = Field(min_length=1)
    cookie: str = Field(min_length=1)


class AccountUpdate(BaseModel):
    """Partial update of the operator-owned fields of an account"""

    name: str | None = Field(default=None, min_length=1)
    ops: str | None = Field(default=None, min_length=1)
    cookie: str | None = Field(default=None, min_length=1)


class SafeAccount(BaseModel):
    """Account representation that may leave the trust boundary"""

    id: int
    name: str
    ops: str
    cookie: str = Field(description="Always a placeholder, never the real cookie")
    valid_until: datetime | None = None
    ip: str | None = Field(default=None, description="Partially redacted IP address")
    location: str | None = None
    creation_date: datetime | None = None
    cookie_status: CookieStatus
    update_time: datetime | None = None
