"""
Process Telemetry
=================
Flat scalar snapshots of OS and process state attached to every report.

Sources:
    read_memory_information() — system and process memory (psutil)
    read_process_status()     — /proc/self/status counters (Linux/procfs only)
    read_system_attributes()  — host, uname, cpu, runtime and process descriptors

Contract:
    - Never raises. Unsupported platforms and unreadable sources yield {}
      (or omit the affected keys).
    - Synchronous on purpose: the values describe the moment of collection,
      and procfs reads never block on disk.
"""
import logging
import os
import platform
import re
import socket
import sys
import time
from typing import Any, Callable

import psutil

from faultline.services.machine_id import machine_id

logger = logging.getLogger(__name__)

_STATUS_FILE = "/proc/self/status"


def _parse_kb(value: str) -> int:
    return int(value) * 1024


# ---------------------------------------------------------------------------
# /proc/self/status fields: (pattern, parser, attribute)
# ---------------------------------------------------------------------------
_PROC_STATUS_FIELDS: list[tuple[re.Pattern, Callable[[str], int], str]] = [
    (re.compile(r"^nonvoluntary_ctxt_switches:\s+(\d+)$", re.M), int,       "sched.cs.involuntary"),
    (re.compile(r"^voluntary_ctxt_switches:\s+(\d+)$", re.M),    int,       "sched.cs.voluntary"),
    (re.compile(r"^FDSize:\s+(\d+)$", re.M),                     int,       "descriptor.count"),
    (re.compile(r"^VmData:\s+(\d+)\s+kB$", re.M),                _parse_kb, "vm.data.size"),
    (re.compile(r"^VmLck:\s+(\d+)\s+kB$", re.M),                 _parse_kb, "vm.locked.size"),
    (re.compile(r"^VmPTE:\s+(\d+)\s+kB$", re.M),                 _parse_kb, "vm.pte.size"),
    (re.compile(r"^VmHWM:\s+(\d+)\s+kB$", re.M),                 _parse_kb, "vm.rss.peak"),
    (re.compile(r"^VmRSS:\s+(\d+)\s+kB$", re.M),                 _parse_kb, "vm.rss.size"),
    (re.compile(r"^VmLib:\s+(\d+)\s+kB$", re.M),                 _parse_kb, "vm.shared.size"),
    (re.compile(r"^VmStk:\s+(\d+)\s+kB$", re.M),                 _parse_kb, "vm.stack.size"),
    (re.compile(r"^VmSwap:\s+(\d+)\s+kB$", re.M),                _parse_kb, "vm.swap.size"),
    (re.compile(r"^VmPeak:\s+(\d+)\s+kB$", re.M),                _parse_kb, "vm.vma.peak"),
    (re.compile(r"^VmSize:\s+(\d+)\s+kB$", re.M),                _parse_kb, "vm.vma.size"),
]


def parse_process_status(contents: str) -> dict[str, int]:
    """Extract the known counters from /proc/self/status text."""
    result: dict[str, int] = {}
    for pattern, parse, attr in _PROC_STATUS_FIELDS:
        match = pattern.search(contents)
        if not match:
            continue
        result[attr] = parse(match.group(1))
    return result


def read_process_status() -> dict[str, int]:
    """
    Read scheduler, descriptor and virtual memory counters of this process.

    Returns
    -------
    dict[str, int]
        Counters keyed by attribute name (sizes in bytes). Empty on Windows
        or when /proc/self/status cannot be read.
    """
    if sys.platform.startswith("win"):
        return {}
    try:
        with open(_STATUS_FILE, "r", encoding="utf-8") as f:
            contents = f.read()
    except OSError as e:
        logger.debug("Process status unavailable: %s", e)
        return {}
    return parse_process_status(contents)


def read_memory_information() -> dict[str, int]:
    """System memory totals and this process's resident/virtual size."""
    try:
        vm = psutil.virtual_memory()
        mem = psutil.Process().memory_info()
    except (psutil.Error, OSError) as e:
        logger.debug("Memory information unavailable: %s", e)
        return {}
    return {
        "system.memory.total": vm.total,
        "system.memory.free": vm.free,
        "system.memory.available": vm.available,
        "vm.rss.size": mem.rss,
        "vm.vma.size": mem.vms,
    }


def read_system_attributes() -> dict[str, Any]:
    """
    Describe the host, the interpreter and the current process.

    Keys whose value cannot be determined are omitted.
    """
    now = time.time()
    uname = platform.uname()
    result: dict[str, Any] = {
        "guid": machine_id(),
        "hostname": socket.gethostname(),
        "process.id": os.getpid(),
        "cpu.count": os.cpu_count(),
        "cpu.arch": platform.architecture()[0],
        "uname.sysname": uname.system,
        "uname.release": uname.release,
        "uname.version": uname.version,
        "uname.machine": uname.machine,
        "runtime.name": platform.python_implementation(),
        "runtime.version": platform.python_version(),
    }

    try:
        result["process.cwd"] = os.getcwd()
    except OSError as e:
        logger.debug("Working directory unavailable: %s", e)

    try:
        proc = psutil.Process()
        with proc.oneshot():
            result["process.thread.count"] = proc.num_threads()
            result["process.age"] = int(now - proc.create_time())
        result["uname.uptime"] = int(now - psutil.boot_time())
    except (psutil.Error, OSError) as e:
        logger.debug("Process details unavailable: %s", e)

    return {k: v for k, v in result.items() if v is not None and v != ""}
