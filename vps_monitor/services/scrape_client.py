"""HTTP client that scrapes the VPS info page with a stored session cookie"""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx

from vps_monitor.config import config
from vps_monitor.models.account import CookieStatus
from vps_monitor.models.scrape_outcome import ScrapeFailure, ScrapeOutcome
from vps_monitor.services.date_normalizer import parse_to_canonical
from vps_monitor.services.label_extractor import extract_values, parse_document

logger = logging.getLogger(__name__)

LABEL_VALID_UNTIL = "Valid until"
LABEL_IPV6 = "IPv6"
LABEL_LOCATION = "Location"
LABEL_CREATION_DATE = "VPS Creation Date"

REQUIRED_LABELS = [LABEL_VALID_UNTIL, LABEL_IPV6, LABEL_LOCATION, LABEL_CREATION_DATE]

DIAGNOSTIC_MISSING_DATA = "required data missing"
DIAGNOSTIC_DATE_FORMAT = "unexpected date format"


def build_headers(cookie: str) -> dict[str, str]:
    """Browser-like navigation headers; the service blocks obvious bots"""
    return {
        "accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "accept-language": "en-US,en;q=0.9",
        "user-agent": config.user_agent,
        "referer": config.target_referer,
        "sec-ch-ua": '"Google Chrome";v="141", "Chromium";v="141", "Not=A?Brand";v="99"',
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "same-origin",
        "sec-fetch-user": "?1",
        "upgrade-insecure-requests": "1",
        "cookie": cookie,
    }


def now_in(zone: str) -> datetime:
    return datetime.now(ZoneInfo(zone))


class ScrapeClient:
    """Fetch the VPS info page once per cookie and classify the result"""

    def __init__(
        self,
        target_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize client

        Args:
            target_url: Page to scrape (defaults to config.target_url)
            timeout: HTTP timeout in seconds (defaults to config.request_timeout)
            transport: Optional httpx transport, mainly for tests
        """
        self.target_url = target_url or config.target_url
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.transport = transport
        self.source_timezone = config.source_timezone
        self.display_timezone = config.display_timezone

    def _invalid(
        self, observed_at: datetime, failure: ScrapeFailure, diagnostic: str, **fields
    ) -> ScrapeOutcome:
        logger.warning(f"Scrape of {self.target_url} classified invalid: {diagnostic}")
        return ScrapeOutcome(
            status=CookieStatus.INVALID,
            observed_at=observed_at,
            failure=failure,
            diagnostic=diagnostic,
            **fields,
        )

    async def _fetch(self, cookie: str) -> httpx.Response:
        # A fresh client per attempt; batches run under different event loops
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            return await client.get(self.target_url, headers=build_headers(cookie))

    async def scrape(self, cookie: str) -> ScrapeOutcome:
        """
        Scrape the account page with one cookie

        Never raises for network, HTTP or parsing problems; those become an
        INVALID outcome. A single attempt is made.

        Args:
            cookie: Raw session cookie header value

        Returns:
            ScrapeOutcome with observed_at always set
        """
        try:
            response = await self._fetch(cookie)
        except httpx.HTTPError as e:
            observed_at = now_in(self.display_timezone)
            return self._invalid(
                observed_at, ScrapeFailure.TRANSPORT, f"request failed: {type(e).__name__}: {e}"
            )

        observed_at = now_in(self.display_timezone)

        if not response.is_success:
            return self._invalid(
                observed_at,
                ScrapeFailure.HTTP_STATUS,
                f"request failed with status {response.status_code}",
            )

        soup = parse_document(response.text)
        values = extract_values(soup, REQUIRED_LABELS)

        missing = [label for label, value in values.items() if not value]
        if missing:
            # An expired cookie yields a 200 login page, indistinguishable from a layout change
            return self._invalid(
                observed_at,
                ScrapeFailure.MISSING_DATA,
                f"{DIAGNOSTIC_MISSING_DATA}: {', '.join(missing)}",
            )

        ip = values[LABEL_IPV6]
        location = values[LABEL_LOCATION]
        valid_until = parse_to_canonical(
            values[LABEL_VALID_UNTIL], self.source_timezone, self.display_timezone
        )
        creation_date = parse_to_canonical(
            values[LABEL_CREATION_DATE], self.source_timezone, self.display_timezone
        )

        if valid_until is None or creation_date is None:
            return self._invalid(
                observed_at,
                ScrapeFailure.DATE_FORMAT,
                DIAGNOSTIC_DATE_FORMAT,
                ip=ip,
                location=location,
            )

        logger.info(f"Scraped {self.target_url}: valid until {valid_until.isoformat()}")
        return ScrapeOutcome(
            valid_until=valid_until,
            ip=ip,
            location=location,
            creation_date=creation_date,
            status=CookieStatus.NORMAL,
            observed_at=observed_at,
        )
