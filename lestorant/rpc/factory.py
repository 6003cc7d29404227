from __future__ import annotations

from typing import Optional

from ..errors import ConfigError
from ..fetchers.http import pick_proxy
from ..models import AppConfig
from ..utils.rpc_env import DEFAULT_HTTP_METHOD, RpcEnv
from .client import RpcClient


def build_rpc_client(config: AppConfig, *, env: Optional[RpcEnv] = None) -> RpcClient:
    """Create an RPC client from the ``aria2`` config section.

    Values missing from the section fall back to the environment. Proxies
    are picked by the endpoint's scheme: section first, then the top-level
    config, then ``http_proxy``/``https_proxy``.
    """
    section = config.aria2
    if section is None:
        raise ConfigError("no aria2 section found in config")

    env = env or RpcEnv()
    rpc_url = section.rpc_url or env.rpc_url
    if not rpc_url:
        raise ConfigError("no RPC URL found in aria2 config")

    proxy = pick_proxy(
        rpc_url,
        section.http_proxy or config.http_proxy or env.http_proxy,
        section.https_proxy or config.https_proxy or env.https_proxy,
    )
    return RpcClient(
        rpc_url,
        secret=section.secret or env.secret,
        proxy=proxy,
        http_method=section.rpc_method or env.method or DEFAULT_HTTP_METHOD,
        timeout=env.timeout,
    )
