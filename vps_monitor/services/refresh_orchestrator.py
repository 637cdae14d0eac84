"""Orchestrates scraping of VPS accounts and persisting the results"""

import asyncio
import logging
import time
from datetime import datetime

from vps_monitor.models.account import MonitoredAccount
from vps_monitor.models.refresh_result import RefreshResult
from vps_monitor.models.scrape_outcome import ScrapeSuccessUpdate
from vps_monitor.services.account_store import AccountNotFoundError, AccountStore
from vps_monitor.services.scrape_client import ScrapeClient
from vps_monitor.services.telemetry import get_telemetry_service

logger = logging.getLogger(__name__)


class RefreshOrchestrator:
    """Refresh one or all accounts against the remote VPS info page"""

    def __init__(self, store: AccountStore, scrape_client: ScrapeClient | None = None):
        """
        Initialize refresh orchestrator

        Args:
            store: Record store holding the accounts
            scrape_client: Client used to scrape the page (default: ScrapeClient())
        """
        self.store = store
        self.scrape_client = scrape_client or ScrapeClient()

    async def refresh_one(self, account_id: int) -> MonitoredAccount:
        """
        Scrape one account and persist the outcome

        An invalid cookie is not an error: it is recorded as degraded health
        and the refreshed record is returned.

        Raises:
            AccountNotFoundError: If the account does not exist (or vanished)
            StoreError: If the store operation fails
        """
        telemetry = get_telemetry_service()
        start = time.perf_counter()
        outcome = None

        try:
            account = await self.store.get_by_id(account_id)
            if account is None:
                raise AccountNotFoundError(account_id)

            outcome = await self.scrape_client.scrape(account.cookie)

            if outcome.is_healthy:
                await self.store.apply_scrape_success(
                    account_id, ScrapeSuccessUpdate.from_outcome(outcome)
                )
            else:
                logger.warning(
                    f"Scrape returned {outcome.status.value} for VPS {account_id}: "
                    f"{outcome.diagnostic}"
                )
                await self.store.apply_scrape_failure(account_id, outcome.observed_at)

            updated = await self.store.get_by_id(account_id)
            if updated is None:
                raise AccountNotFoundError(account_id)
        except Exception as e:
            telemetry.log_refresh(
                account_id,
                outcome=outcome,
                error=e,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            raise

        telemetry.log_refresh(
            account_id, outcome=outcome, duration_ms=(time.perf_counter() - start) * 1000
        )
        return updated

    async def refresh_all(self) -> list[MonitoredAccount]:
        """
        Refresh every account, one at a time

        Accounts that fail (e.g. deleted mid-run) are logged and left out, so
        the result may be shorter than the account list.
        """
        accounts = await self.store.get_all()
        refreshed: list[MonitoredAccount] = []

        for account in accounts:
            try:
                refreshed.append(await self.refresh_one(account.id))
            except Exception as e:
                logger.error(f"Failed to refresh VPS {account.id}: {e}", exc_info=True)

        logger.info(f"Refreshed {len(refreshed)}/{len(accounts)} VPS accounts")
        return refreshed

    def refresh_once(self) -> RefreshResult:
        """
        Execute a single refresh-all cycle synchronously

        Used from the scheduler thread and the CLI, which have no running
        event loop; asyncio.run() bridges to the async refresh.

        Returns:
            RefreshResult: Result of the batch, never raises
        """
        start_time = datetime.now()

        try:
            logger.info("Starting VPS refresh batch")
            refreshed = asyncio.run(self.refresh_all())
        except Exception as e:
            logger.error(f"VPS refresh batch failed: {e}", exc_info=True)
            end_time = datetime.now()
            return RefreshResult(
                success=False,
                start_time=start_time,
                end_time=end_time,
                duration_seconds=(end_time - start_time).total_seconds(),
                error=str(e),
            )

        end_time = datetime.now()
        duration_seconds = (end_time - start_time).total_seconds()
        logger.info(f"VPS refresh batch completed in {duration_seconds:.2f}s")

        return RefreshResult(
            success=True,
            start_time=start_time,
            end_time=end_time,
            duration_seconds=duration_seconds,
            refreshed_count=len(refreshed),
        )
