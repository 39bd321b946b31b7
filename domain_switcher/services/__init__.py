from .asset_service import AssetService
from .config_store import ConfigStore, MalformedConfigError
from .failover_service import FailoverService
from .notification_service import ClientSession, SessionNotifier
from .probe_service import DomainProbe

__all__ = [
    "AssetService",
    "ConfigStore",
    "MalformedConfigError",
    "FailoverService",
    "ClientSession",
    "SessionNotifier",
    "DomainProbe",
]
