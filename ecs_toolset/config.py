# ecs_toolset/config.py
from __future__ import annotations
import os
from typing import Optional
from botocore.config import Config #type: ignore

# ---- Env helpers
def _env_str(key: str, default: str) -> str:
    v = os.getenv(key)
    return v if v is not None else default

def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except Exception:
        return default

def _env_opt_int(key: str) -> Optional[int]:
    v = os.getenv(key)
    if not v:
        return None
    try:
        return int(v)
    except ValueError:
        return None

def _env_bool(key: str, default: bool) -> bool:
    v = os.getenv(key)
    return default if v is None else v.strip().lower() in {"1", "true", "yes", "y"}

# ------------------------------------------------------------
# Exporter settings. Every value can be overridden via env vars
# and again by the matching CLI flag.
# ------------------------------------------------------------

REGION = _env_str("ECS_EXPORTER_REGION", os.getenv("AWS_REGION", ""))
LISTEN_ADDRESS = _env_str("ECS_EXPORTER_LISTEN_ADDRESS", ":9677")
TELEMETRY_PATH = _env_str("ECS_EXPORTER_TELEMETRY_PATH", "/metrics")
CONFIG_FILE = _env_str("ECS_EXPORTER_CONFIG_FILE", "")
NAMESPACE = _env_str("ECS_EXPORTER_NAMESPACE", "ecs")
LOG_LEVEL = _env_str("ECS_EXPORTER_LOG_LEVEL", "INFO")
DEBUG = _env_bool("ECS_EXPORTER_DEBUG", False)

# Page bound for list calls; also the describe_services batch size (ECS max is 10).
PAGE_SIZE = _env_int("ECS_EXPORTER_PAGE_SIZE", 10)
# Per-level thread cap for tenant/cluster/batch fan-out; None = one thread per task.
MAX_WORKERS = _env_opt_int("ECS_EXPORTER_MAX_WORKERS")

# describe_clusters accepts at most this many ARNs per request.
DESCRIBE_CLUSTERS_LIMIT = 100

ASSUME_ROLE_SESSION_NAME = _env_str("ECS_EXPORTER_ASSUME_ROLE_SESSION_NAME", "ecs-exporter")
ASSUME_ROLE_DURATION_SECONDS = _env_int("ECS_EXPORTER_ASSUME_ROLE_DURATION_SECONDS", 3600)

# ---- SDK config
SDK_CONFIG = Config(
    retries={"max_attempts": _env_int("ECS_EXPORTER_SDK_MAX_ATTEMPTS", 5), "mode": "standard"},
    connect_timeout=_env_int("ECS_EXPORTER_CONNECT_TIMEOUT", 5),
    read_timeout=_env_int("ECS_EXPORTER_READ_TIMEOUT", 30),
    max_pool_connections=_env_int("ECS_EXPORTER_MAX_POOL_CONNECTIONS", 50),
    user_agent_extra="ecs-exporter/1.0",
)
