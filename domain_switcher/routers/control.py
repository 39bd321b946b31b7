import asyncio
import json
import logging
from typing import Set

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from domain_switcher.core.dependencies import (
    get_config,
    get_config_store,
    get_failover_service,
    get_notifier,
    resolve_current_domain,
)
from domain_switcher.models.api import (
    CheckDomainResponse,
    ControlMessage,
    ControlMessageType,
    RefreshConfigResponse,
)
from domain_switcher.models.config import AppConfig
from domain_switcher.services.config_store import ConfigStore
from domain_switcher.services.failover_service import FailoverService
from domain_switcher.services.notification_service import ClientSession, SessionNotifier

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/check-domain", response_model=CheckDomainResponse, tags=["Control"])
async def check_domain(
    request: Request,
    config: AppConfig = Depends(get_config),
    failover_service: FailoverService = Depends(get_failover_service),
):
    current_domain = resolve_current_domain(request, config)
    logger.info(f"Domain check requested for {current_domain}")
    outcome = await failover_service.select_working_domain(current_domain)
    return CheckDomainResponse(
        current_domain=current_domain,
        domain=outcome.domain,
        redirect_required=outcome.requires_redirect(current_domain),
    )


@router.post("/refresh-config", response_model=RefreshConfigResponse, tags=["Control"])
async def refresh_config(config_store: ConfigStore = Depends(get_config_store)):
    snapshot = await config_store.refresh()
    if snapshot is None:
        return RefreshConfigResponse(refreshed=False)
    return RefreshConfigResponse(
        refreshed=True,
        candidates=len(snapshot.candidates),
        source=snapshot.provenance.value,
    )


async def _handle_message(
    raw: dict,
    session: ClientSession,
    current_domain: str,
    failover_service: FailoverService,
    config_store: ConfigStore,
) -> None:
    try:
        message = ControlMessage(**raw)
    except (ValidationError, TypeError) as e:
        logger.warning(f"Ignoring invalid control message from session {session.id}: {e}")
        return

    if message.type == ControlMessageType.CHECK_DOMAIN:
        await failover_service.check_domain(session, current_domain)
    elif message.type == ControlMessageType.REFRESH_CONFIG:
        await config_store.refresh()


def _log_handler_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Control message handler failed: {error}", exc_info=error)


@router.websocket("/ws")
async def session_channel(
    websocket: WebSocket,
    config: AppConfig = Depends(get_config),
    failover_service: FailoverService = Depends(get_failover_service),
    config_store: ConfigStore = Depends(get_config_store),
    notifier: SessionNotifier = Depends(get_notifier),
):
    current_domain = resolve_current_domain(websocket, config)
    session = ClientSession(websocket.send_json)
    # connected before accept; queued messages flush once the sender starts
    notifier.connect(session)
    sender = None
    handlers: Set[asyncio.Task] = set()

    try:
        await websocket.accept()
        sender = asyncio.create_task(session.run())
        while True:
            try:
                raw = json.loads(await websocket.receive_text())
            except (ValueError, KeyError):
                logger.warning(f"Ignoring non-JSON message from session {session.id}")
                continue
            if not isinstance(raw, dict):
                logger.warning(f"Ignoring non-object message from session {session.id}")
                continue
            task = asyncio.create_task(
                _handle_message(raw, session, current_domain, failover_service, config_store)
            )
            handlers.add(task)
            task.add_done_callback(handlers.discard)
            task.add_done_callback(_log_handler_failure)
    except WebSocketDisconnect:
        logger.info(f"Session {session.id} closed the channel")
    finally:
        notifier.disconnect(session)
        if handlers:
            await asyncio.gather(*list(handlers), return_exceptions=True)
        session.close()
        if sender is not None:
            await sender
