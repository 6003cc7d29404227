"""Closed vocabularies of the aria2 JSON-RPC interface.

Method names, option keys and status fields are all plain strings on the
wire; the enumerations below are ``str`` subclasses so they serialize as
their values.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union


class RpcMethod(str, Enum):
    ADD_URI = "aria2.addUri"
    ADD_TORRENT = "aria2.addTorrent"
    ADD_METALINK = "aria2.addMetalink"
    REMOVE = "aria2.remove"
    FORCE_REMOVE = "aria2.forceRemove"
    PAUSE = "aria2.pause"
    PAUSE_ALL = "aria2.pauseAll"
    FORCE_PAUSE = "aria2.forcePause"
    FORCE_PAUSE_ALL = "aria2.forcePauseAll"
    UNPAUSE = "aria2.unpause"
    UNPAUSE_ALL = "aria2.unpauseAll"
    TELL_STATUS = "aria2.tellStatus"
    GET_URIS = "aria2.getUris"
    GET_FILES = "aria2.getFiles"
    GET_PEERS = "aria2.getPeers"
    GET_SERVERS = "aria2.getServers"
    TELL_ACTIVE = "aria2.tellActive"
    TELL_WAITING = "aria2.tellWaiting"
    TELL_STOPPED = "aria2.tellStopped"
    CHANGE_POSITION = "aria2.changePosition"
    CHANGE_URI = "aria2.changeUri"
    GET_OPTION = "aria2.getOption"
    CHANGE_OPTION = "aria2.changeOption"
    GET_GLOBAL_OPTION = "aria2.getGlobalOption"
    CHANGE_GLOBAL_OPTION = "aria2.changeGlobalOption"
    GET_GLOBAL_STAT = "aria2.getGlobalStat"
    PURGE_DOWNLOAD_RESULT = "aria2.purgeDownloadResult"
    REMOVE_DOWNLOAD_RESULT = "aria2.removeDownloadResult"
    GET_VERSION = "aria2.getVersion"
    GET_SESSION_INFO = "aria2.getSessionInfo"
    SHUTDOWN = "aria2.shutdown"
    FORCE_SHUTDOWN = "aria2.forceShutdown"
    SAVE_SESSION = "aria2.saveSession"
    MULTICALL = "system.multicall"
    LIST_METHODS = "system.listMethods"
    LIST_NOTIFICATIONS = "system.listNotifications"


class UriOption(str, Enum):
    """Per-download options accepted by addUri/addTorrent/changeOption."""

    ALL_PROXY = "all-proxy"
    ALL_PROXY_PASSWD = "all-proxy-passwd"
    ALL_PROXY_USER = "all-proxy-user"
    ALLOW_OVERWRITE = "allow-overwrite"
    ALLOW_PIECE_LENGTH_CHANGE = "allow-piece-length-change"
    ALWAYS_RESUME = "always-resume"
    ASYNC_DNS = "async-dns"
    AUTO_FILE_RENAMING = "auto-file-renaming"
    BT_ENABLE_HOOK_AFTER_HASH_CHECK = "bt-enable-hook-after-hash-check"
    BT_ENABLE_LPD = "bt-enable-lpd"
    BT_EXCLUDE_TRACKER = "bt-exclude-tracker"
    BT_EXTERNAL_IP = "bt-external-ip"
    BT_FORCE_ENCRYPTION = "bt-force-encryption"
    BT_HASH_CHECK_SEED = "bt-hash-check-seed"
    BT_LOAD_SAVED_METADATA = "bt-load-saved-metadata"
    BT_MAX_PEERS = "bt-max-peers"
    BT_METADATA_ONLY = "bt-metadata-only"
    BT_MIN_CRYPTO_LEVEL = "bt-min-crypto-level"
    BT_PRIORITIZE_PIECE = "bt-prioritize-piece"
    BT_REMOVE_UNSELECTED_FILE = "bt-remove-unselected-file"
    BT_REQUEST_PEER_SPEED_LIMIT = "bt-request-peer-speed-limit"
    BT_REQUIRE_CRYPTO = "bt-require-crypto"
    BT_SAVE_METADATA = "bt-save-metadata"
    BT_SEED_UNVERIFIED = "bt-seed-unverified"
    BT_STOP_TIMEOUT = "bt-stop-timeout"
    BT_TRACKER = "bt-tracker"
    BT_TRACKER_CONNECT_TIMEOUT = "bt-tracker-connect-timeout"
    BT_TRACKER_INTERVAL = "bt-tracker-interval"
    BT_TRACKER_TIMEOUT = "bt-tracker-timeout"
    CHECK_INTEGRITY = "check-integrity"
    CHECKSUM = "checksum"
    CONDITIONAL_GET = "conditional-get"
    CONNECT_TIMEOUT = "connect-timeout"
    CONTENT_DISPOSITION_DEFAULT_UTF8 = "content-disposition-default-utf8"
    CONTINUE = "continue"
    DIR = "dir"
    DRY_RUN = "dry-run"
    ENABLE_HTTP_KEEP_ALIVE = "enable-http-keep-alive"
    ENABLE_HTTP_PIPELINING = "enable-http-pipelining"
    ENABLE_MMAP = "enable-mmap"
    ENABLE_PEER_EXCHANGE = "enable-peer-exchange"
    FILE_ALLOCATION = "file-allocation"
    FOLLOW_METALINK = "follow-metalink"
    FOLLOW_TORRENT = "follow-torrent"
    FORCE_SAVE = "force-save"
    FTP_PASSWD = "ftp-passwd"
    FTP_PASV = "ftp-pasv"
    FTP_PROXY = "ftp-proxy"
    FTP_PROXY_PASSWD = "ftp-proxy-passwd"
    FTP_PROXY_USER = "ftp-proxy-user"
    FTP_REUSE_CONNECTION = "ftp-reuse-connection"
    FTP_TYPE = "ftp-type"
    FTP_USER = "ftp-user"
    GID = "gid"
    HASH_CHECK_ONLY = "hash-check-only"
    HEADER = "header"
    HTTP_ACCEPT_GZIP = "http-accept-gzip"
    HTTP_AUTH_CHALLENGE = "http-auth-challenge"
    HTTP_NO_CACHE = "http-no-cache"
    HTTP_PASSWD = "http-passwd"
    HTTP_PROXY = "http-proxy"
    HTTP_PROXY_PASSWD = "http-proxy-passwd"
    HTTP_PROXY_USER = "http-proxy-user"
    HTTP_USER = "http-user"
    HTTPS_PROXY = "https-proxy"
    HTTPS_PROXY_PASSWD = "https-proxy-passwd"
    HTTPS_PROXY_USER = "https-proxy-user"
    INDEX_OUT = "index-out"
    LOWEST_SPEED_LIMIT = "lowest-speed-limit"
    MAX_CONNECTION_PER_SERVER = "max-connection-per-server"
    MAX_DOWNLOAD_LIMIT = "max-download-limit"
    MAX_FILE_NOT_FOUND = "max-file-not-found"
    MAX_MMAP_LIMIT = "max-mmap-limit"
    MAX_RESUME_FAILURE_TRIES = "max-resume-failure-tries"
    MAX_TRIES = "max-tries"
    MAX_UPLOAD_LIMIT = "max-upload-limit"
    METALINK_BASE_URI = "metalink-base-uri"
    METALINK_ENABLE_UNIQUE_PROTOCOL = "metalink-enable-unique-protocol"
    METALINK_LANGUAGE = "metalink-language"
    METALINK_LOCATION = "metalink-location"
    METALINK_OS = "metalink-os"
    METALINK_PREFERRED_PROTOCOL = "metalink-preferred-protocol"
    METALINK_VERSION = "metalink-version"
    MIN_SPLIT_SIZE = "min-split-size"
    NO_FILE_ALLOCATION_LIMIT = "no-file-allocation-limit"
    NO_NETRC = "no-netrc"
    NO_PROXY = "no-proxy"
    OUT = "out"
    PARAMETERIZED_URI = "parameterized-uri"
    PAUSE = "pause"
    PAUSE_METADATA = "pause-metadata"
    PIECE_LENGTH = "piece-length"
    PROXY_METHOD = "proxy-method"
    REALTIME_CHUNK_CHECKSUM = "realtime-chunk-checksum"
    REFERER = "referer"
    REMOTE_TIME = "remote-time"
    REMOVE_CONTROL_FILE = "remove-control-file"
    RETRY_WAIT = "retry-wait"
    REUSE_URI = "reuse-uri"
    RPC_SAVE_UPLOAD_METADATA = "rpc-save-upload-metadata"
    SEED_RATIO = "seed-ratio"
    SEED_TIME = "seed-time"
    SELECT_FILE = "select-file"
    SPLIT = "split"
    SSH_HOST_KEY_MD = "ssh-host-key-md"
    STREAM_PIECE_SELECTOR = "stream-piece-selector"
    TIMEOUT = "timeout"
    URI_SELECTOR = "uri-selector"
    USE_HEAD = "use-head"
    USER_AGENT = "user-agent"


class GlobalOption(str, Enum):
    """Options accepted by changeGlobalOption besides the per-download ones."""

    BT_MAX_OPEN_FILES = "bt-max-open-files"
    DOWNLOAD_RESULT = "download-result"
    KEEP_UNFINISHED_DOWNLOAD_RESULT = "keep-unfinished-download-result"
    LOG = "log"
    LOG_LEVEL = "log-level"
    MAX_CONCURRENT_DOWNLOADS = "max-concurrent-downloads"
    MAX_DOWNLOAD_RESULT = "max-download-result"
    MAX_OVERALL_DOWNLOAD_LIMIT = "max-overall-download-limit"
    MAX_OVERALL_UPLOAD_LIMIT = "max-overall-upload-limit"
    OPTIMIZE_CONCURRENT_DOWNLOADS = "optimize-concurrent-downloads"
    SAVE_COOKIES = "save-cookies"
    SAVE_SESSION = "save-session"
    SERVER_STAT_OF = "server-stat-of"


class StatusKey(str, Enum):
    GID = "gid"
    STATUS = "status"
    TOTAL_LENGTH = "totalLength"
    COMPLETED_LENGTH = "completedLength"
    UPLOAD_LENGTH = "uploadLength"
    BITFIELD = "bitfield"
    DOWNLOAD_SPEED = "downloadSpeed"
    UPLOAD_SPEED = "uploadSpeed"
    INFO_HASH = "infoHash"
    NUM_SEEDERS = "numSeeders"
    SEEDER = "seeder"
    PIECE_LENGTH = "pieceLength"
    NUM_PIECES = "numPieces"
    CONNECTIONS = "connections"
    ERROR_CODE = "errorCode"
    ERROR_MESSAGE = "errorMessage"
    FOLLOWED_BY = "followedBy"
    FOLLOWING = "following"
    BELONGS_TO = "belongsTo"
    DIR = "dir"
    FILES = "files"
    BITTORRENT = "bittorrent"
    VERIFIED_LENGTH = "verifiedLength"
    VERIFY_INTEGRITY_PENDING = "verifyIntegrityPending"


class TaskStatus(str, Enum):
    ACTIVE = "active"
    WAITING = "waiting"
    PAUSED = "paused"
    ERROR = "error"
    COMPLETE = "complete"
    REMOVED = "removed"


class ChangePosHow(str, Enum):
    POS_SET = "POS_SET"
    POS_CUR = "POS_CUR"
    POS_END = "POS_END"


# aria2 exit status codes, as reported in a task's errorCode.
ERROR_CODES: Dict[int, str] = {
    1: "unknown",
    2: "timeout",
    3: "resource not found",
    4: "resources not found",
    5: "download speed too slow",
    6: "network problem",
    7: "unfinished downloads",
    8: "resume not supported",
    9: "not enough disk space",
    10: "piece length differ",
    11: "was downloading the same file",
    12: "was downloading the same info hash",
    13: "file already existed",
    14: "renaming failed",
    15: "could not open existing file",
    16: "could not create new or truncate existing",
    17: "file I/O",
    18: "could not create directory",
    19: "name resolution failed",
    20: "could not parse metalink",
    21: "FTP command failed",
    22: "HTTP response header was bad or unexpected",
    23: "too many redirections",
    24: "HTTP authorization failed",
    25: "could not parse bencoded file",
    26: "torrent was corrupted or missing informations",
    27: "bad magnet URI",
    28: "bad/unrecognized option or unexpected option argument",
    29: "the remote server was unable to handle the request",
    30: "could not parse JSON-RPC request",
}


def describe_error_code(code: Union[int, str, None]) -> str:
    try:
        return ERROR_CODES.get(int(code), "unknown")  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return "unknown"


E = TypeVar("E", bound=Enum)


def encode_options(
    options: Optional[Mapping[Union[str, Enum], Any]],
    *allowed: Type[E],
) -> Dict[str, Any]:
    """Validate option keys against ``allowed`` enumerations.

    Returns a plain ``dict`` keyed by wire names, which always encodes as a
    JSON object, even when empty.
    """
    known = {member.value for enum_type in allowed for member in enum_type}
    encoded: Dict[str, Any] = {}
    for key, value in (options or {}).items():
        name = key.value if isinstance(key, Enum) else str(key)
        if name not in known:
            raise ValueError(f"unknown option: {name}")
        encoded[name] = value
    return encoded
