"""aria2 JSON-RPC client."""

from .client import RpcClient, RpcCallback, TOKEN_PREFIX
from .factory import build_rpc_client
from .methods import (
    ChangePosHow,
    ERROR_CODES,
    GlobalOption,
    RpcMethod,
    StatusKey,
    TaskStatus,
    UriOption,
    describe_error_code,
    encode_options,
)

__all__ = [
    "RpcClient",
    "RpcCallback",
    "TOKEN_PREFIX",
    "build_rpc_client",
    "ChangePosHow",
    "ERROR_CODES",
    "GlobalOption",
    "RpcMethod",
    "StatusKey",
    "TaskStatus",
    "UriOption",
    "describe_error_code",
    "encode_options",
]
