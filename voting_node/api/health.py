# voting_node/api/health.py
from __future__ import annotations

"""
Health API.

Routes
------
- GET /health/ping
    Simple heartbeat endpoint.

- GET /health/summary
    Counts and phase of the election this node administers.
"""

import time
from typing import Any, Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

router = APIRouter(prefix="/health", tags=["health"])


class PingResponse(BaseModel):
    ok: bool = True
    ts: float = Field(..., description="Server timestamp.")
    msg: str = "pong"


class HealthSummaryResponse(BaseModel):
    ok: bool = True
    election: Dict[str, Any]
    notifiers: Dict[str, Any] = Field(default_factory=dict)


@router.get("/ping", response_model=PingResponse)
def ping() -> PingResponse:
    """
    Simple heartbeat endpoint. Useful for external uptime checks.
    """
    return PingResponse(ts=time.time())


@router.get("/summary", response_model=HealthSummaryResponse)
def summary(request: Request) -> HealthSummaryResponse:
    ex = request.app.state.executor
    st = ex.status()

    notifiers: Dict[str, Any] = {}
    event_log = getattr(request.app.state, "event_log", None)
    if event_log is not None:
        notifiers["event_log"] = {"events": len(event_log)}
    webhook = getattr(request.app.state, "webhook", None)
    if webhook is not None:
        notifiers["webhook"] = {"url": webhook.url, "delivered": webhook.delivered, "failed": webhook.failed}

    return HealthSummaryResponse(
        election={
            "name": st.name,
            "phase": st.phase.value,
            "voter_count": st.voter_count,
            "proposal_count": st.proposal_count,
        },
        notifiers=notifiers,
    )
