"""Data models for the VPS monitor"""

from vps_monitor.models.account import (
    AccountCreate,
    AccountUpdate,
    CookieStatus,
    MonitoredAccount,
    SafeAccount,
)
from vps_monitor.models.refresh_result import RefreshResult
from vps_monitor.models.scrape_outcome import ScrapeFailure, ScrapeOutcome, ScrapeSuccessUpdate

__all__ = [
    "AccountCreate",
    "AccountUpdate",
    "CookieStatus",
    "MonitoredAccount",
    "SafeAccount",
    "RefreshResult",
    "ScrapeFailure",
    "ScrapeOutcome",
    "ScrapeSuccessUpdate",
]
