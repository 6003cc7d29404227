from __future__ import annotations

import base64
import json
import re
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import requests

from ..errors import (
    LestorantError,
    ProtocolError,
    RemoteError,
    StatusError,
    StorageError,
    TransportError,
)
from ..fetchers.http import pick_proxy
from ..utils.logging import get_logger
from ..utils.rpc_env import DEFAULT_HTTP_METHOD, DEFAULT_RPC_TIMEOUT, RpcEnv
from .methods import ChangePosHow, GlobalOption, RpcMethod, StatusKey, UriOption, encode_options

logger = get_logger("lestorant.rpc.client")

RpcCallback = Callable[[Any, Optional[LestorantError]], None]
Options = Mapping[Union[str, Enum], Any]

TOKEN_PREFIX = "token:"
CONTENT_TYPE = "application/x-www-form-urlencoded"

_URI_RE = re.compile(r"^\S+?://")
_MAGNET_PREFIX = "magnet:"
_TORRENT_SUFFIXES = (".torrent",)
_METALINK_SUFFIXES = (".meta4", ".metalink")


def _wire_name(value: Union[str, Enum]) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _keys(keys: Optional[Iterable[Union[StatusKey, str]]]) -> List[str]:
    return [StatusKey(_wire_name(k)).value for k in keys or ()]


def _trailing(options: Optional[Options], position: Optional[int], *allowed: type) -> List[Any]:
    """Optional ``options`` then ``position`` params; options become ``{}`` if only a position is given."""
    params: List[Any] = []
    if options is not None or position is not None:
        params.append(encode_options(options, *allowed))
    if position is not None:
        params.append(int(position))
    return params


class RpcClient:
    """JSON-RPC 2.0 client bound to one aria2 endpoint.

    Each call gets a fresh string id and its continuation is parked in a
    pending map until the call resolves. Resolution happens exactly once,
    on success, on a protocol/status error or on a transport failure, and
    always removes the id from the map. Calls are never retried.

    With ``on_result`` the continuation receives ``(result, None)`` or
    ``(None, error)`` and nothing is raised; without it errors are raised.
    """

    def __init__(
        self,
        endpoint_url: str,
        *,
        secret: Optional[str] = None,
        proxy: Optional[str] = None,
        http_method: str = DEFAULT_HTTP_METHOD,
        timeout: float = DEFAULT_RPC_TIMEOUT,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.secret = secret
        self.proxy = proxy
        self.http_method = http_method or DEFAULT_HTTP_METHOD
        self.timeout = timeout
        self._id_counter = 0
        self._pending: Dict[str, Optional[RpcCallback]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls, env: Optional[RpcEnv] = None) -> "RpcClient":
        env = env or RpcEnv()
        return cls(
            env.rpc_url,
            secret=env.secret,
            proxy=pick_proxy(env.rpc_url, env.http_proxy, env.https_proxy),
            http_method=env.method,
            timeout=env.timeout,
        )

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    # ---------------- Call plumbing -----------------
    def _register(self, on_result: Optional[RpcCallback]) -> str:
        with self._lock:
            self._id_counter += 1
            request_id = str(self._id_counter)
            self._pending[request_id] = on_result
        return request_id

    def _resolve(self, request_id: str, result: Any, error: Optional[LestorantError]) -> None:
        with self._lock:
            callback = self._pending.pop(request_id, None)
        if callback is not None:
            callback(result, error)

    def _with_token(self, params: Optional[Sequence[Any]]) -> List[Any]:
        out: List[Any] = []
        if self.secret:
            out.append(TOKEN_PREFIX + self.secret)
        out.extend(params or ())
        return out

    def build_request(self, request_id: str, method: Union[RpcMethod, str], params: Optional[Sequence[Any]]) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": _wire_name(method),
            "params": self._with_token(params),
        }

    def _send(self, payload: Dict[str, Any]) -> Any:
        body = json.dumps(payload).encode("utf-8")
        headers = {
            "content-type": CONTENT_TYPE,
            "content-length": str(len(body)),
        }
        proxies = {"http": self.proxy, "https": self.proxy} if self.proxy else None

        logger.debug(
            "Send RPC %s to %s%s",
            payload["method"],
            self.endpoint_url,
            f" with proxy {self.proxy}" if self.proxy else "",
        )
        try:
            resp = requests.request(
                self.http_method,
                self.endpoint_url,
                data=body,
                headers=headers,
                proxies=proxies,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"request failed with: {exc}") from exc

        if resp.status_code != 200:
            raise StatusError(f"request status: {resp.status_code} {resp.reason or ''}".rstrip(), status=resp.status_code)

        try:
            data = json.loads(resp.text)
        except ValueError as exc:
            raise ProtocolError(f"invalid JSON response: {exc}") from exc
        if not isinstance(data, dict):
            raise ProtocolError("invalid JSON response: expected an object")

        error = data.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise RemoteError(f"{code}: {message}", code=code)

        return data.get("result")

    def _invoke(self, build: Callable[[str], Dict[str, Any]], on_result: Optional[RpcCallback]) -> Any:
        request_id = self._register(on_result)
        try:
            result = self._send(build(request_id))
        except LestorantError as exc:
            self._resolve(request_id, None, exc)
            if on_result is None:
                raise
            return None
        except BaseException:
            with self._lock:
                self._pending.pop(request_id, None)
            raise
        self._resolve(request_id, result, None)
        return result

    def call(
        self,
        method: Union[RpcMethod, str],
        params: Optional[Sequence[Any]] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        """Send one JSON-RPC request and resolve it."""
        return self._invoke(lambda request_id: self.build_request(request_id, method, params), on_result)

    @staticmethod
    def _fail(error: LestorantError, on_result: Optional[RpcCallback]) -> None:
        if on_result is None:
            raise error
        on_result(None, error)

    # ---------------- Primitive methods -----------------
    def add_uri(
        self,
        uris: Sequence[str],
        options: Optional[Options] = None,
        position: Optional[int] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        params = [list(uris), *_trailing(options, position, UriOption)]
        return self.call(RpcMethod.ADD_URI, params, on_result)

    def add_torrent(
        self,
        torrent: str,
        uris: Optional[Sequence[str]] = None,
        options: Optional[Options] = None,
        position: Optional[int] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        """``torrent`` is the base64 encoded content of a .torrent file."""
        params: List[Any] = [torrent]
        trailing = _trailing(options, position, UriOption)
        if uris is not None or trailing:
            params.append(list(uris or []))
        params.extend(trailing)
        return self.call(RpcMethod.ADD_TORRENT, params, on_result)

    def add_metalink(
        self,
        metalink: str,
        options: Optional[Options] = None,
        position: Optional[int] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        params = [metalink, *_trailing(options, position, UriOption)]
        return self.call(RpcMethod.ADD_METALINK, params, on_result)

    def remove(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.REMOVE, [gid], on_result)

    def force_remove(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.FORCE_REMOVE, [gid], on_result)

    def pause(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.PAUSE, [gid], on_result)

    def pause_all(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.PAUSE_ALL, None, on_result)

    def force_pause(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.FORCE_PAUSE, [gid], on_result)

    def force_pause_all(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.FORCE_PAUSE_ALL, None, on_result)

    def unpause(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.UNPAUSE, [gid], on_result)

    def unpause_all(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.UNPAUSE_ALL, None, on_result)

    def tell_status(
        self,
        gid: str,
        keys: Optional[Iterable[Union[StatusKey, str]]] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        params: List[Any] = [gid]
        if keys:
            params.append(_keys(keys))
        return self.call(RpcMethod.TELL_STATUS, params, on_result)

    def get_uris(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.GET_URIS, [gid], on_result)

    def get_files(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.GET_FILES, [gid], on_result)

    def get_peers(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.GET_PEERS, [gid], on_result)

    def get_servers(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.GET_SERVERS, [gid], on_result)

    def tell_active(
        self,
        keys: Optional[Iterable[Union[StatusKey, str]]] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        return self.call(RpcMethod.TELL_ACTIVE, [_keys(keys)] if keys else None, on_result)

    def tell_waiting(
        self,
        offset: int,
        num: int,
        keys: Optional[Iterable[Union[StatusKey, str]]] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        """``offset`` may be negative to count from the end of the queue."""
        params: List[Any] = [offset, num]
        if keys:
            params.append(_keys(keys))
        return self.call(RpcMethod.TELL_WAITING, params, on_result)

    def tell_stopped(
        self,
        offset: int,
        num: int,
        keys: Optional[Iterable[Union[StatusKey, str]]] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        params: List[Any] = [offset, num]
        if keys:
            params.append(_keys(keys))
        return self.call(RpcMethod.TELL_STOPPED, params, on_result)

    def change_position(
        self,
        gid: str,
        pos: int,
        how: Union[ChangePosHow, str],
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        return self.call(RpcMethod.CHANGE_POSITION, [gid, int(pos), ChangePosHow(_wire_name(how)).value], on_result)

    def change_uri(
        self,
        gid: str,
        file_index: int,
        del_uris: Sequence[str],
        add_uris: Sequence[str],
        position: Optional[int] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        params: List[Any] = [gid, int(file_index), list(del_uris), list(add_uris)]
        if position is not None:
            params.append(int(position))
        return self.call(RpcMethod.CHANGE_URI, params, on_result)

    def get_option(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.GET_OPTION, [gid], on_result)

    def change_option(self, gid: str, options: Options, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.CHANGE_OPTION, [gid, encode_options(options, UriOption)], on_result)

    def get_global_option(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.GET_GLOBAL_OPTION, None, on_result)

    def change_global_option(self, options: Options, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.CHANGE_GLOBAL_OPTION, [encode_options(options, GlobalOption, UriOption)], on_result)

    def get_global_stat(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.GET_GLOBAL_STAT, None, on_result)

    def purge_download_result(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.PURGE_DOWNLOAD_RESULT, None, on_result)

    def remove_download_result(self, gid: str, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.REMOVE_DOWNLOAD_RESULT, [gid], on_result)

    def get_version(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.GET_VERSION, None, on_result)

    def get_session_info(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.GET_SESSION_INFO, None, on_result)

    def shutdown(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.SHUTDOWN, None, on_result)

    def force_shutdown(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.FORCE_SHUTDOWN, None, on_result)

    def save_session(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.SAVE_SESSION, None, on_result)

    def multicall(
        self,
        calls: Iterable[Tuple[Union[RpcMethod, str], Optional[Sequence[Any]]]],
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        """Batch ``(method, params)`` pairs into one system.multicall request."""
        methods = [
            {"methodName": _wire_name(method), "params": self._with_token(params)}
            for method, params in calls
        ]
        # multicall itself takes no token; each sub-call carries its own
        return self._invoke(
            lambda request_id: {
                "jsonrpc": "2.0",
                "id": request_id,
                "method": RpcMethod.MULTICALL.value,
                "params": [methods],
            },
            on_result,
        )

    def list_methods(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.LIST_METHODS, None, on_result)

    def list_notifications(self, on_result: Optional[RpcCallback] = None) -> Any:
        return self.call(RpcMethod.LIST_NOTIFICATIONS, None, on_result)

    # ---------------- Secondary methods -----------------
    @staticmethod
    def _read_base64(path: Union[str, Path]) -> str:
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise StorageError(f"failed to read {path}: {exc}") from exc
        return base64.b64encode(data).decode("ascii")

    def add_torrent_file(
        self,
        path: Union[str, Path],
        uris: Optional[Sequence[str]] = None,
        options: Optional[Options] = None,
        position: Optional[int] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        try:
            encoded = self._read_base64(path)
        except StorageError as exc:
            self._fail(exc, on_result)
            return None
        return self.add_torrent(encoded, uris, options, position, on_result)

    def add_metalink_file(
        self,
        path: Union[str, Path],
        options: Optional[Options] = None,
        position: Optional[int] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        try:
            encoded = self._read_base64(path)
        except StorageError as exc:
            self._fail(exc, on_result)
            return None
        return self.add_metalink(encoded, options, position, on_result)

    def add_task(
        self,
        target: str,
        options: Optional[Options] = None,
        position: Optional[int] = None,
        on_result: Optional[RpcCallback] = None,
    ) -> Any:
        """Add a URI, magnet link, .torrent file or metalink file as a download.

        A target of any other shape is ignored: nothing is sent and
        ``on_result`` is not invoked.
        """
        if _URI_RE.match(target) or target.startswith(_MAGNET_PREFIX):
            return self.add_uri([target], options, position, on_result)
        if target.endswith(_TORRENT_SUFFIXES):
            return self.add_torrent_file(target, [], options, position, on_result)
        if target.endswith(_METALINK_SUFFIXES):
            return self.add_metalink_file(target, options, position, on_result)
        logger.debug("Unrecognized task target ignored: %s", target)
        return None
