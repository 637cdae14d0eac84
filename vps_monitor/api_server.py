"""REST API for managing and refreshing monitored VPS accounts"""

import asyncio
import logging

import uvicorn
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from vps_monitor.config import config
from vps_monitor.models.account import AccountCreate, AccountUpdate, SafeAccount
from vps_monitor.services.account_store import AccountNotFoundError, AccountStore
from vps_monitor.services.masking import mask_account, mask_accounts
from vps_monitor.services.refresh_orchestrator import RefreshOrchestrator
from vps_monitor.services.refresh_scheduler import RefreshScheduler

logger = logging.getLogger(__name__)

app = FastAPI(title="VPS Monitor", version="1.0.0")

if config.api_cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Initialized lazily on first request
_store: AccountStore | None = None
_orchestrator: RefreshOrchestrator | None = None

# Background refresh
_refresh_scheduler: RefreshScheduler | None = None


async def _get_services() -> tuple[AccountStore, RefreshOrchestrator]:
    """Get or initialize the store and orchestrator"""
    global _store, _orchestrator

    if _store is None:
        _store = AccountStore(config.db_path)
        await _store.initialize()

    if _orchestrator is None:
        _orchestrator = RefreshOrchestrator(_store)

    return _store, _orchestrator


async def _require_account(store: AccountStore, account_id: int) -> None:
    if await store.get_by_id(account_id) is None:
        raise HTTPException(status_code=404, detail="VPS not found")


@app.get("/")
@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/api/vps", response_model=list[SafeAccount])
async def list_vps():
    store, _ = await _get_services()
    return mask_accounts(await store.get_all())


@app.get("/api/vps/{account_id}", response_model=SafeAccount)
async def get_vps(account_id: int):
    store, _ = await _get_services()
    account = await store.get_by_id(account_id)
    if account is None:
        raise HTTPException(status_code=404, detail="VPS not found")
    return mask_account(account)


@app.post("/api/vps", response_model=SafeAccount, status_code=201)
async def create_vps(payload: AccountCreate):
    """Register a VPS and scrape it right away"""
    store, orchestrator = await _get_services()
    account_id = await store.create(payload.name, payload.ops, payload.cookie)

    try:
        return mask_account(await orchestrator.refresh_one(account_id))
    except Exception as e:
        logger.error(f"Failed to scrape VPS {account_id} after creation: {e}")

    created = await store.get_by_id(account_id)
    if created is None:
        raise HTTPException(status_code=500, detail="VPS was created but could not be loaded")
    return mask_account(created)


@app.put("/api/vps/{account_id}", response_model=SafeAccount)
async def update_vps(account_id: int, payload: AccountUpdate):
    """Update operator fields and scrape again; the update survives a failed scrape"""
    store, orchestrator = await _get_services()
    await _require_account(store, account_id)

    await store.update(account_id, payload)

    try:
        return mask_account(await orchestrator.refresh_one(account_id))
    except Exception as e:
        logger.error(f"Failed to scrape VPS {account_id} after update: {e}")

    updated = await store.get_by_id(account_id)
    if updated is None:
        raise HTTPException(status_code=500, detail="Failed to reload VPS after update")
    return mask_account(updated)


@app.delete("/api/vps/{account_id}", status_code=204)
async def delete_vps(account_id: int):
    store, _ = await _get_services()
    await _require_account(store, account_id)
    await store.delete(account_id)
    return Response(status_code=204)


@app.post("/api/vps/refresh-all", response_model=list[SafeAccount])
async def refresh_all_vps():
    _, orchestrator = await _get_services()
    try:
        refreshed = await orchestrator.refresh_all()
    except Exception as e:
        logger.error(f"Failed to refresh all VPS records: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to refresh VPS records") from e
    return mask_accounts(refreshed)


@app.post("/api/vps/{account_id}/refresh", response_model=SafeAccount)
async def refresh_vps(account_id: int):
    _, orchestrator = await _get_services()
    try:
        refreshed = await orchestrator.refresh_one(account_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail="VPS not found") from e
    except Exception as e:
        logger.error(f"Failed to refresh VPS {account_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to refresh VPS") from e
    return mask_account(refreshed)


def _startup_sync() -> None:
    """Start the background refresh scheduler on server startup"""
    global _refresh_scheduler

    if not config.refresh_enabled:
        logger.info("Background refresh is disabled")
        return

    try:
        logger.info("Initializing background refresh scheduler")
        _, orchestrator = asyncio.run(_get_services())
        _refresh_scheduler = RefreshScheduler(orchestrator, cron_expression=config.refresh_cron)
        _refresh_scheduler.start()
        logger.info("Background refresh scheduler started successfully")
    except Exception as e:
        # The API stays usable without the periodic refresh
        logger.error(f"Failed to start background refresh scheduler: {e}")


def _shutdown_sync() -> None:
    """Stop the background refresh scheduler on server shutdown"""
    global _refresh_scheduler

    if _refresh_scheduler:
        try:
            _refresh_scheduler.stop()
        except Exception as e:
            logger.error(f"Error shutting down refresh scheduler: {e}")
        _refresh_scheduler = None


def main() -> None:
    """Entry point for the API server"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Using SQLite database at {config.db_path}")

    _startup_sync()

    try:
        uvicorn.run(app, host=config.api_host, port=config.api_port)
    finally:
        _shutdown_sync()


if __name__ == "__main__":
    main()
