"""Default machine tag: truncated SHA-256 of the host name."""

import hashlib
import socket
import threading

from internal.logging import get_logger

_host_digest = None
_host_lock = threading.Lock()


def _compute_digest():
    host = socket.gethostname()
    digest = hashlib.sha256(host.encode("utf-8")).digest()
    get_logger().debug("machine tag resolved", host=host, tag=digest[:4].hex())
    return digest


def host_digest():
    """SHA-256 of the host name, computed once per process."""
    global _host_digest
    if _host_digest is None:
        with _host_lock:
            if _host_digest is None:
                _host_digest = _compute_digest()
    return _host_digest


def default_machine(length):
    return host_digest()[:length]


def reset_machine_cache():
    global _host_digest
    with _host_lock:
        _host_digest = None
