from typing import Optional

from fastapi import Request
from starlette.requests import HTTPConnection

from domain_switcher.models.config import AppConfig
from domain_switcher.services.asset_service import AssetService
from domain_switcher.services.config_store import ConfigStore
from domain_switcher.services.failover_service import FailoverService
from domain_switcher.services.notification_service import SessionNotifier


def get_config(request: HTTPConnection) -> AppConfig:
    return request.app.state.config


def get_config_store(request: HTTPConnection) -> ConfigStore:
    return request.app.state.config_store


def get_failover_service(request: HTTPConnection) -> FailoverService:
    return request.app.state.failover_service


def get_notifier(request: HTTPConnection) -> SessionNotifier:
    return request.app.state.notifier


def get_asset_service(request: Request) -> AssetService:
    return request.app.state.asset_service


def resolve_current_domain(connection: HTTPConnection, config: AppConfig) -> str:
    """Domain the caller is being served from: configured value, else its Host header."""
    if config.current_domain:
        return config.current_domain
    host: Optional[str] = connection.headers.get("host")
    if host:
        return host
    return connection.url.netloc
