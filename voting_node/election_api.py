from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voting_node import config as node_config
from voting_node.api import election, health
from voting_node.election_executor import ElectionExecutor
from voting_node.election_runtime.events import EventLog, FanoutNotifier, LoggingNotifier
from voting_node.logging_setup import configure_logging
from voting_node.notify.webhook import WebhookNotifier
from voting_node.security.access import StaticAccessControl

log = logging.getLogger(__name__)


def build_executor(cfg: Dict[str, Any]) -> ElectionExecutor:
    """
    Wire an executor from config: access control for the configured
    administrator, plus the notifiers the config enables. The returned
    executor's notifier is a FanoutNotifier; the EventLog (and webhook, if
    any) are reachable through ``executor.notifier.ports``.
    """
    event_log = EventLog(max_events=int(cfg.get("notify", {}).get("event_log_max", 10000)))
    fanout = FanoutNotifier([event_log])

    if cfg.get("notify", {}).get("log_events", True):
        fanout.add(LoggingNotifier())

    url = node_config.get_webhook_url(cfg)
    if url:
        fanout.add(WebhookNotifier(url, timeout=node_config.get_webhook_timeout(cfg)))

    return ElectionExecutor(
        StaticAccessControl(node_config.get_administrator(cfg)),
        fanout,
        name=node_config.get_election_name(cfg),
    )


def _find_port(executor: ElectionExecutor, kind: type) -> Optional[Any]:
    for port in getattr(executor.notifier, "ports", []):
        if isinstance(port, kind):
            return port
    return None


def create_app(
    executor: Optional[ElectionExecutor] = None,
    cfg: Optional[Dict[str, Any]] = None,
) -> FastAPI:
    cfg = cfg or node_config.load_config(os.getcwd())
    configure_logging(node_config.get_log_level(cfg))

    executor = executor or build_executor(cfg)
    webhook = _find_port(executor, WebhookNotifier)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if webhook is not None:
            webhook.start()
        try:
            yield
        finally:
            if webhook is not None:
                webhook.stop(timeout=5.0)

    app = FastAPI(title="Voting Node API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=node_config.get_cors_origins(cfg),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.executor = executor
    app.state.caller_header = node_config.get_caller_header(cfg)
    app.state.event_log = _find_port(executor, EventLog)
    app.state.webhook = webhook

    app.include_router(election.router)
    app.include_router(health.router)

    @app.get("/health")
    def health_root():
        return {"ok": True, "phase": executor.phase.value}

    log.info(
        "election %r ready (administrator=%s, phase=%s)",
        executor.name,
        getattr(executor.access, "administrator", "?"),
        executor.phase.value,
    )
    return app
