# voting_node/config.py
import copy
import logging
import os
import yaml
from typing import Any, Dict, List

log = logging.getLogger(__name__)

CONFIG_FILENAME = "voting_config.yaml"

# -------- Defaults --------
_DEFAULT: Dict[str, Any] = {
    "election": {
        "name": "default",
        "administrator": "admin",
    },
    "security": {
        # upstream proxy puts the authenticated principal here
        "caller_header": "X-Principal",
    },
    "notify": {
        "log_events": True,
        "event_log_max": 10000,
        "webhook_url": "",
        "webhook_timeout_sec": 2.5,
    },
    "logging": {"level": "INFO"},
    "server": {
        "host": "0.0.0.0",
        "port": 8000,
    },
    "cors": {
        "origins": ["*"],
    },
}

# -------- ENV overrides --------
_ENV_MAP = {
    ("election", "administrator"): ("VOTING_ADMIN", str),
    ("election", "name"): ("VOTING_ELECTION_NAME", str),
    ("security", "caller_header"): ("VOTING_CALLER_HEADER", str),
    ("notify", "webhook_url"): ("VOTING_WEBHOOK_URL", str),
    ("notify", "webhook_timeout_sec"): ("VOTING_WEBHOOK_TIMEOUT_SEC", float),
    ("logging", "level"): ("VOTING_LOG_LEVEL", str),
    ("server", "host"): ("VOTING_HOST", str),
    ("server", "port"): ("VOTING_PORT", int),
}


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (overlay or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for (section, key), (env_name, cast) in _ENV_MAP.items():
        val = os.getenv(env_name)
        if val is None:
            continue
        try:
            casted = cast(val)
        except ValueError:
            log.warning("ignoring %s=%r: not a valid %s", env_name, val, cast.__name__)
            continue
        cfg.setdefault(section, {})
        cfg[section][key] = casted
    return cfg


def load_config(repo_root: str) -> Dict[str, Any]:
    """
    Loads the YAML config from repo_root/voting_config.yaml.
    Returns defaults if the file doesn't exist or can't be parsed.
    Also applies ENV overrides for the keys in _ENV_MAP.
    """
    path = os.path.join(repo_root, CONFIG_FILENAME)
    cfg = copy.deepcopy(_DEFAULT)

    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("top level of config must be a mapping")
            cfg = _deep_merge(cfg, data)
        except (OSError, ValueError, yaml.YAMLError) as e:
            log.warning("failed to load %s, using defaults: %s", path, e)

    cfg = _apply_env_overrides(cfg)

    origins = cfg.get("cors", {}).get("origins")
    if isinstance(origins, str):
        cfg["cors"]["origins"] = [origins]

    return cfg


# -------- Small helpers used by the app --------
def get_administrator(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("election", {}).get("administrator") or "admin")


def get_election_name(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("election", {}).get("name") or "default")


def get_caller_header(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("security", {}).get("caller_header") or "X-Principal")


def get_webhook_url(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("notify", {}).get("webhook_url") or "").strip()


def get_webhook_timeout(cfg: Dict[str, Any]) -> float:
    return float(cfg.get("notify", {}).get("webhook_timeout_sec", 2.5))


def get_log_level(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("logging", {}).get("level", "INFO")).upper()


def get_bind_host(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("server", {}).get("host", "0.0.0.0"))


def get_bind_port(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("server", {}).get("port", 8000))


def get_cors_origins(cfg: Dict[str, Any]) -> List[str]:
    return list(cfg.get("cors", {}).get("origins", []))
