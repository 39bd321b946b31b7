from .api import (
    ControlMessage,
    ControlMessageType,
    RedirectRequired,
    CheckDomainResponse,
    RefreshConfigResponse,
    HealthResponse,
)
from .config import AppConfig, load_config
from .domain import (
    ConfigSnapshot,
    EventKind,
    ProgressEvent,
    Provenance,
    SelectionOutcome,
)

__all__ = [
    "ControlMessage",
    "ControlMessageType",
    "RedirectRequired",
    "CheckDomainResponse",
    "RefreshConfigResponse",
    "HealthResponse",
    "AppConfig",
    "load_config",
    "ConfigSnapshot",
    "EventKind",
    "ProgressEvent",
    "Provenance",
    "SelectionOutcome",
]
