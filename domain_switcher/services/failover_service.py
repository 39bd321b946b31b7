import logging
from typing import List, Protocol

from domain_switcher.models.api import RedirectRequired
from domain_switcher.models.domain import ProgressEvent, SelectionOutcome
from domain_switcher.services.config_store import ConfigStore
from domain_switcher.services.notification_service import ClientSession
from domain_switcher.services.probe_service import DomainProbe

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def broadcast(self, event: ProgressEvent) -> int: ...


class FailoverService:
    """Picks the domain a client should use.

    The current domain is probed first, then every other candidate in list
    order, one at a time, stopping at the first reachable one.
    """

    def __init__(self, config_store: ConfigStore, probe: DomainProbe, notifier: Notifier):
        self.config_store = config_store
        self.probe = probe
        self.notifier = notifier

    async def _emit(self, events: List[ProgressEvent], event: ProgressEvent) -> None:
        events.append(event)
        await self.notifier.broadcast(event)

    async def _check(self, events: List[ProgressEvent], domain: str) -> bool:
        await self._emit(events, ProgressEvent.checking(domain))
        reachable = await self.probe.probe(domain)
        await self._emit(events, ProgressEvent.checked(domain, reachable))
        return reachable

    async def select_working_domain(self, current_domain: str) -> SelectionOutcome:
        snapshot = await self.config_store.get_fresh_or_cached()
        if snapshot is None:
            logger.warning(f"No candidate list available, staying on {current_domain}")
            return SelectionOutcome()

        events: List[ProgressEvent] = []
        if snapshot.is_cached:
            await self._emit(events, ProgressEvent.using_cached())

        if await self._check(events, current_domain):
            logger.debug(f"Current domain {current_domain} is reachable")
            return SelectionOutcome(current_domain, tuple(events))

        logger.info(f"Current domain {current_domain} unreachable, trying {len(snapshot.candidates)} candidates")
        for domain in snapshot.candidates:
            if domain == current_domain:
                continue
            if await self._check(events, domain):
                await self._emit(events, ProgressEvent.redirect(domain))
                logger.info(f"Switching from {current_domain} to {domain}")
                return SelectionOutcome(domain, tuple(events))

        logger.warning(f"No reachable domain found for {current_domain}")
        return SelectionOutcome(None, tuple(events))

    async def check_domain(self, session: ClientSession, current_domain: str) -> SelectionOutcome:
        outcome = await self.select_working_domain(current_domain)
        if outcome.requires_redirect(current_domain):
            session.post(RedirectRequired(domain=outcome.domain).model_dump())
        return outcome
