from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status

DEFAULT_CALLER_HEADER = "X-Principal"


def current_caller_from_header_optional(request: Request) -> Optional[str]:
    header = getattr(request.app.state, "caller_header", DEFAULT_CALLER_HEADER)
    raw = request.headers.get(header)
    if raw is None:
        return None
    caller = raw.strip()
    return caller or None


def require_current_caller(
    caller: Optional[str] = Depends(current_caller_from_header_optional),
) -> str:
    if not caller:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="auth_required")
    return caller
