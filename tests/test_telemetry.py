"""
Unit Tests — Process Telemetry
===============================
/proc/self/status parsing, platform fallbacks, psutil-backed snapshots.
"""
import os
import sys
import textwrap
from unittest.mock import patch

import psutil
import pytest

from faultline.services import telemetry
from faultline.services.telemetry import (
    parse_process_status,
    read_memory_information,
    read_process_status,
    read_system_attributes,
)

_STATUS_SAMPLE = textwrap.dedent("""\
    Name:\tpython3
    FDSize:\t64
    VmPeak:\t  20000 kB
    VmSize:\t  18000 kB
    VmLck:\t       0 kB
    VmHWM:\t   9000 kB
    VmRSS:\t   8000 kB
    VmData:\t   5000 kB
    VmStk:\t    132 kB
    VmLib:\t   4000 kB
    VmPTE:\t     60 kB
    VmSwap:\t      0 kB
    Threads:\t1
    voluntary_ctxt_switches:\t12
    nonvoluntary_ctxt_switches:\t3
""")

_STATUS_KEYS = {
    "sched.cs.involuntary", "sched.cs.voluntary", "descriptor.count",
    "vm.data.size", "vm.locked.size", "vm.pte.size", "vm.rss.peak",
    "vm.rss.size", "vm.shared.size", "vm.stack.size", "vm.swap.size",
    "vm.vma.peak", "vm.vma.size",
}


# ===========================================================================
# 1. Process status
# ===========================================================================
class TestProcessStatus:

    def test_parses_full_key_set(self):
        result = parse_process_status(_STATUS_SAMPLE)
        assert set(result) == _STATUS_KEYS

    def test_kb_values_become_bytes(self):
        result = parse_process_status(_STATUS_SAMPLE)
        assert result["vm.rss.size"] == 8000 * 1024
        assert result["vm.vma.peak"] == 20000 * 1024

    def test_counts_are_not_scaled(self):
        result = parse_process_status(_STATUS_SAMPLE)
        assert result["descriptor.count"] == 64
        assert result["sched.cs.voluntary"] == 12
        assert result["sched.cs.involuntary"] == 3

    def test_missing_fields_skipped(self):
        assert parse_process_status("Name:\tpython3\n") == {}

    def test_unsupported_platform_returns_empty(self):
        with patch.object(sys, "platform", "win32"):
            assert read_process_status() == {}

    def test_unreadable_status_file_returns_empty(self, tmp_path):
        with patch.object(telemetry, "_STATUS_FILE", str(tmp_path / "missing")):
            assert read_process_status() == {}

    def test_reads_status_file(self, tmp_path):
        status = tmp_path / "status"
        status.write_text(_STATUS_SAMPLE, encoding="utf-8")
        with patch.object(sys, "platform", "linux"), \
             patch.object(telemetry, "_STATUS_FILE", str(status)):
            assert read_process_status()["vm.stack.size"] == 132 * 1024


# ===========================================================================
# 2. Memory information
# ===========================================================================
class TestMemoryInformation:

    def test_keys(self):
        result = read_memory_information()
        assert set(result) == {
            "system.memory.total", "system.memory.free", "system.memory.available",
            "vm.rss.size", "vm.vma.size",
        }
        assert all(isinstance(v, int) for v in result.values())

    def test_psutil_failure_returns_empty(self):
        with patch.object(telemetry.psutil, "virtual_memory", side_effect=psutil.AccessDenied()):
            assert read_memory_information() == {}


# ===========================================================================
# 3. System attributes
# ===========================================================================
class TestSystemAttributes:

    def test_descriptors(self):
        result = read_system_attributes()
        assert result["process.id"] == os.getpid()
        assert result["runtime.name"]
        assert result["guid"]
        assert "application" not in result

    def test_values_are_scalar(self):
        for key, value in read_system_attributes().items():
            assert isinstance(value, (str, int, float, bool)), key

    def test_psutil_failure_omits_process_details(self):
        with patch.object(telemetry.psutil, "Process", side_effect=psutil.NoSuchProcess(1)):
            result = read_system_attributes()
        assert "process.thread.count" not in result
        assert "hostname" in result
