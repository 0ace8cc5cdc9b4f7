"""
Unit Tests — Identifiers
=========================
Report uuid format and uniqueness, content-derived ids.
"""
import re

import pytest

from faultline.utils.identifiers import content_uuid, format_uuid, generate_report_uuid

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


def test_report_uuid_format():
    assert _UUID_RE.match(generate_report_uuid())


def test_no_collisions():
    ids = {generate_report_uuid() for _ in range(10_000)}
    assert len(ids) == 10_000
    assert all(_UUID_RE.match(i) for i in ids)


def test_format_groups_bytes():
    assert format_uuid(bytes(range(16))) == "00010203-0405-0607-0809-0a0b0c0d0e0f"


def test_format_ignores_extra_bytes():
    assert format_uuid(bytes(range(20))) == format_uuid(bytes(range(16)))


def test_format_rejects_short_input():
    with pytest.raises(ValueError):
        format_uuid(b"short")


def test_content_uuid_deterministic():
    assert content_uuid(b"print('hi')") == content_uuid(b"print('hi')")
    assert content_uuid(b"a") != content_uuid(b"b")
    assert _UUID_RE.match(content_uuid(b"a"))
