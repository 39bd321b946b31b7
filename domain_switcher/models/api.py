from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ControlMessageType(str, Enum):
    CHECK_DOMAIN = "CHECK_DOMAIN"
    REFRESH_CONFIG = "REFRESH_CONFIG"


class ControlMessage(BaseModel):
    type: ControlMessageType = Field(..., description="Control operation requested by the session")


class RedirectRequired(BaseModel):
    type: Literal["REDIRECT_REQUIRED"] = "REDIRECT_REQUIRED"
    domain: str = Field(..., description="Domain the session should switch to")


class CheckDomainResponse(BaseModel):
    current_domain: str = Field(..., description="Domain the check was run for")
    domain: Optional[str] = Field(None, description="First reachable domain, if any")
    redirect_required: bool = Field(False, description="Whether the caller should switch domains")


class RefreshConfigResponse(BaseModel):
    refreshed: bool = Field(..., description="Whether a usable candidate list was obtained")
    candidates: int = Field(0, description="Number of candidates in the list")
    source: Optional[str] = Field(None, description="fresh or cached")


class HealthResponse(BaseModel):
    status: str = Field("ok", description="Health status")
    message: str = Field("Service is healthy", description="Health message")
