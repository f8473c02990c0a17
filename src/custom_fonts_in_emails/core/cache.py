import hashlib
import json
import logging
import threading
from typing import Optional

from custom_fonts_in_emails.core.options import RenderRequest

logger = logging.getLogger(__name__)


def canonical(request: RenderRequest) -> str:
    """Deterministic JSON text of a request."""
    return json.dumps(request.to_dict(), sort_keys=True, separators=(",", ":"))


class RenderCache:
    """Content-addressable store of rendered output.

    Entries are keyed by the render kind and a hash of the normalized request.
    Entries are never evicted. Concurrent misses on the same key may both
    render and store; the stored values are identical.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(kind: str, request: RenderRequest) -> str:
        digest = hashlib.sha256(f"{kind}:{canonical(request)}".encode("utf-8"))
        return f"{kind}:{digest.hexdigest()}"

    def get(self, kind: str, request: RenderRequest) -> Optional[str]:
        key = self.key(kind, request)
        value = self._entries.get(key)
        if value is not None:
            logger.debug(f"Cache hit for {key}")
        return value

    def put(self, kind: str, request: RenderRequest, value: str) -> None:
        key = self.key(kind, request)
        with self._lock:
            self._entries[key] = value
        logger.debug(f"Cached result for {key}")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
