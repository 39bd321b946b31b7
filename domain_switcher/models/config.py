from pathlib import Path
from typing import List, Optional
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    config_url: str = Field("http://localhost:8080/domains.json", description="Canonical URL of the candidate domain list")
    current_domain: Optional[str] = Field(None, description="Domain this service is reached on; defaults to the caller's Host header")
    probe_scheme: str = Field("https", description="Scheme used for reachability checks")
    probe_path: str = Field("/health", description="Well-known path served by every participating domain")
    probe_timeout: float = Field(3.0, description="Reachability check timeout in seconds", gt=0)
    cache_dir: str = Field(".cache", description="Directory of the durable blob store")
    cache_name: str = Field("domain-switcher-v1", description="Current cache generation")
    asset_origin: str = Field("http://localhost:8080", description="Upstream origin for static assets")
    static_assets: List[str] = Field(
        default_factory=lambda: ["/", "/index.html", "/manifest.json", "/domains.json"],
        description="Paths precached at startup",
    )

    @property
    def config_path(self) -> str:
        return urlsplit(self.config_url).path or "/"


def load_config(path: str) -> AppConfig:
    if not Path(path).exists():
        return AppConfig()
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return AppConfig(**raw)
