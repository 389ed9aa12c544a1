"""Tests for service-layer helpers."""

import re

from appctl.services._helpers import now_stamp


def test_now_stamp_format() -> None:
    assert re.fullmatch(r"\d{8}T\d{6}Z", now_stamp())
