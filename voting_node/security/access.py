from __future__ import annotations

"""
voting_node/security/access.py
------------------------------

Access-control port used by the election executor.

Authentication happens outside this process. The executor only asks two
questions:
- who is calling right now (current_caller)
- is that principal the administrator (is_administrator)

StaticAccessControl answers both from a fixed administrator id and a
per-thread "acting as" principal, which is enough for the HTTP layer
(which passes the caller explicitly) and for scripted use.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol


class AccessControl(Protocol):
    def current_caller(self) -> Optional[str]:
        ...

    def is_administrator(self, principal: Optional[str]) -> bool:
        ...


class StaticAccessControl:
    def __init__(self, administrator: str) -> None:
        admin = str(administrator or "").strip()
        if not admin:
            raise ValueError("administrator principal must not be empty")
        self.administrator = admin
        self._local = threading.local()

    def current_caller(self) -> Optional[str]:
        return getattr(self._local, "caller", None)

    def is_administrator(self, principal: Optional[str]) -> bool:
        return principal is not None and str(principal) == self.administrator

    @contextmanager
    def acting_as(self, principal: Optional[str]) -> Iterator[None]:
        prev = self.current_caller()
        self._local.caller = principal
        try:
            yield
        finally:
            self._local.caller = prev
