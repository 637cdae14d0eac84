"""CLI command for running one refresh-all batch"""

import asyncio
import logging
import sys
from datetime import datetime

from vps_monitor.config import config
from vps_monitor.services.account_store import AccountStore
from vps_monitor.services.refresh_orchestrator import RefreshOrchestrator


def setup_logging() -> None:
    """Configure logging for CLI (stdout for K8s)"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main() -> int:
    """
    Main entry point for refresh CLI command

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    setup_logging()
    logger = logging.getLogger(__name__)

    try:
        logger.info(f"Starting refresh operation at {datetime.now().isoformat()}")

        store = AccountStore(config.db_path)
        asyncio.run(store.initialize())
        orchestrator = RefreshOrchestrator(store)

        result = orchestrator.refresh_once()

        if not result.success:
            logger.error(f"Refresh failed: {result.error}")
            return 1

        logger.info(
            f"Refresh completed: {result.refreshed_count} VPS refreshed "
            f"in {result.duration_seconds:.2f}s"
        )
        return 0
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
