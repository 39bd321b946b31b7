from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class Provenance(Enum):
    FRESH = "fresh"
    CACHED = "cached"


@dataclass(frozen=True)
class ConfigSnapshot:
    candidates: Tuple[str, ...]
    provenance: Provenance

    @property
    def is_cached(self) -> bool:
        return self.provenance == Provenance.CACHED


class EventKind(Enum):
    USING_CACHED = "using_cached"
    CHECKING = "checking"
    CHECK_SUCCEEDED = "success"
    CHECK_FAILED = "failed"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class ProgressEvent:
    kind: EventKind
    domain: Optional[str] = None

    @classmethod
    def using_cached(cls) -> "ProgressEvent":
        return cls(EventKind.USING_CACHED)

    @classmethod
    def checking(cls, domain: str) -> "ProgressEvent":
        return cls(EventKind.CHECKING, domain)

    @classmethod
    def checked(cls, domain: str, reachable: bool) -> "ProgressEvent":
        kind = EventKind.CHECK_SUCCEEDED if reachable else EventKind.CHECK_FAILED
        return cls(kind, domain)

    @classmethod
    def redirect(cls, domain: str) -> "ProgressEvent":
        return cls(EventKind.REDIRECT, domain)

    def to_message(self) -> dict:
        """Wire form sent to foreground sessions."""
        if self.kind == EventKind.USING_CACHED:
            return {"type": "USING_CACHED"}
        if self.kind == EventKind.REDIRECT:
            return {"type": "REDIRECT", "domain": self.domain}
        return {"type": "DOMAIN_CHECK", "status": self.kind.value, "domain": self.domain}


@dataclass(frozen=True)
class SelectionOutcome:
    domain: Optional[str] = None
    events: Tuple[ProgressEvent, ...] = field(default_factory=tuple)

    @property
    def found(self) -> bool:
        return self.domain is not None

    def requires_redirect(self, current_domain: str) -> bool:
        return self.found and self.domain != current_domain
