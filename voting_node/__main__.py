# voting_node/__main__.py
"""
Entry point for running the Voting Node as a module:
    python -m voting_node [--host 0.0.0.0] [--port 8000] [--config-dir .]
                          [--admin alice] [--name board-2026]
Env toggles:
  VOTING_ADMIN=...          -> administrator principal
  VOTING_CALLER_HEADER=...  -> request header carrying the caller principal
  VOTING_WEBHOOK_URL=...    -> forward election events to this URL
"""

from __future__ import annotations

import argparse
import os

import uvicorn

from .config import get_bind_host, get_bind_port, get_log_level, load_config
from .election_api import create_app


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="voting-node",
        description="Administer a single election over HTTP",
    )
    p.add_argument(
        "--config-dir",
        default=os.environ.get("VOTING_CONFIG_DIR", os.getcwd()),
        help="Directory holding voting_config.yaml (default: cwd)",
    )
    p.add_argument("--host", default=None, help="Bind address (default: from config)")
    p.add_argument("--port", type=int, default=None, help="HTTP port (default: from config)")
    p.add_argument("--admin", default=None, help="Administrator principal (overrides config)")
    p.add_argument("--name", default=None, help="Election name (overrides config)")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    cfg = load_config(args.config_dir)
    if args.admin:
        cfg["election"]["administrator"] = args.admin
    if args.name:
        cfg["election"]["name"] = args.name

    app = create_app(cfg=cfg)

    host = args.host or get_bind_host(cfg)
    port = args.port or get_bind_port(cfg)
    uvicorn.run(app, host=host, port=port, log_level=get_log_level(cfg).lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
