"""
Explicit outcome type for best-effort external lookups.

A lookup either found data (OK), found nothing (MISS, e.g. a 404), or failed
(ERROR). Callers branch on the status instead of catching exceptions, so a
benign miss is never mistaken for a fault.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

OK = 'ok'
MISS = 'miss'
ERROR = 'error'


@dataclass(frozen=True)
class LookupResult:
    status: str
    data: Optional[Dict[str, Any]] = None
    error: str = ''

    @classmethod
    def ok(cls, data):
        return cls(OK, data=data)

    @classmethod
    def miss(cls):
        return cls(MISS)

    @classmethod
    def failed(cls, error):
        return cls(ERROR, error=str(error))

    @property
    def found(self) -> bool:
        return self.status == OK and self.data is not None
