from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_HTTP_METHOD = "POST"
DEFAULT_RPC_TIMEOUT = 30.0


def _env(name: str) -> Optional[str]:
    return os.getenv(name) or None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(slots=True)
class RpcEnv:
    """aria2 RPC defaults read from the environment at construction time."""

    rpc_url: str = field(default_factory=lambda: os.getenv("LESTORANT_RPC_URL", ""))
    secret: Optional[str] = field(default_factory=lambda: _env("LESTORANT_RPC_SECRET"))
    method: str = field(default_factory=lambda: os.getenv("LESTORANT_RPC_METHOD") or DEFAULT_HTTP_METHOD)
    timeout: float = field(default_factory=lambda: _env_float("LESTORANT_RPC_TIMEOUT", DEFAULT_RPC_TIMEOUT))
    http_proxy: Optional[str] = field(default_factory=lambda: _env("http_proxy"))
    https_proxy: Optional[str] = field(default_factory=lambda: _env("https_proxy"))
