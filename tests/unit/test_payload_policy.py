from __future__ import annotations

import base64

import pytest

from chat_client.application.exceptions import PayloadTooLargeError
from chat_client.application.policies.payload import (
    assert_image_size,
    estimate_image_bytes,
    format_limit,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (b"", 0),
        (b"a", 1),
        (b"ab", 2),
        (b"abc", 3),
        (b"x" * 1000, 1000),
    ],
)
def test_estimate_matches_decoded_length(raw, expected):
    encoded = base64.b64encode(raw).decode()

    assert estimate_image_bytes(encoded) == expected
    assert estimate_image_bytes("data:image/png;base64," + encoded) == expected


def test_estimate_counts_bytes_directly():
    assert estimate_image_bytes(b"\x00" * 42) == 42


def test_assert_image_size_at_limit_passes():
    assert_image_size(base64.b64encode(b"x" * 1024).decode(), 1024)


def test_assert_image_size_over_limit_raises():
    with pytest.raises(PayloadTooLargeError) as exc_info:
        assert_image_size(b"x" * (5 * 1024 * 1024 + 1), 5 * 1024 * 1024)

    assert exc_info.value.detail == "Image exceeds 5MB limit"


@pytest.mark.parametrize(
    ("limit", "expected"),
    [(0, "0B"), (512, "512B"), (1024, "1KB"), (5 * 1024 * 1024, "5MB")],
)
def test_format_limit(limit, expected):
    assert format_limit(limit) == expected
