"""
Machine Identity
================
Process-wide identifier of the host, used as the 'guid' report attribute.

Computed once on first use under a lock (double-checked), then shared
read-only by every report in the process.

Sources, in order:
    1. First non-empty file in FAULTLINE_MACHINE_ID_PATHS (systemd / dbus ids)
    2. Hash of the hardware (MAC) address from uuid.getnode()
"""
import logging
import threading
import uuid
from typing import Optional

from faultline.core.config import MACHINE_ID_PATHS
from faultline.utils.identifiers import content_uuid, format_uuid

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_machine_id: Optional[str] = None


def _read_machine_id_file(path: str) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            value = f.read().strip()
    except OSError:
        return None
    return value or None


def compute_machine_id(paths: Optional[list[str]] = None) -> str:
    """Derive the machine id without touching the cache."""
    for path in MACHINE_ID_PATHS if paths is None else paths:
        raw = _read_machine_id_file(path)
        if not raw:
            continue
        try:
            return format_uuid(bytes.fromhex(raw))
        except ValueError:
            return content_uuid(raw.encode("utf-8"))

    logger.debug("No machine id file found, falling back to hardware address")
    return content_uuid(str(uuid.getnode()).encode("utf-8"))


def machine_id() -> str:
    """Return the cached machine id, computing it on first call."""
    global _machine_id
    if _machine_id is None:
        with _lock:
            if _machine_id is None:
                _machine_id = compute_machine_id()
    return _machine_id
