import random

import pytest

from agbkit.gbagfx.rl import rl_compress, rl_decompress
from agbkit.gbagfx.util import GfxError

SAMPLES = [
    b"a",
    b"abc",
    b"aabbccdd",
    b"\x00" * 300,
    bytes(range(200)),
    b"xyz" + b"q" * 131 + b"xyz" + b"r" * 3,
    random.Random(7).randbytes(500),
]


def test_compress_literals_only():
    assert rl_compress(b"abc") == b"\x30\x03\x00\x00\x02abc"


def test_compress_single_run():
    assert rl_compress(b"\x00" * 5) == b"\x30\x05\x00\x00\x82\x00\x00\x00"


@pytest.mark.parametrize("data", SAMPLES)
def test_round_trip(data):
    assert rl_decompress(rl_compress(data)) == data


@pytest.mark.parametrize("data", SAMPLES)
def test_header_and_padding(data):
    compressed = rl_compress(data)
    assert compressed[0] == 0x30
    assert int.from_bytes(compressed[1:4], "little") == len(data)
    assert len(compressed) % 4 == 0


def test_long_run_is_shorter_than_input():
    assert len(rl_compress(b"z" * 1000)) < 1000


def test_compress_empty_raises():
    with pytest.raises(GfxError):
        rl_compress(b"")


def test_decompress_too_short_raises():
    with pytest.raises(GfxError):
        rl_decompress(b"\x30\x01")


def test_decompress_truncated_raises():
    compressed = rl_compress(bytes(range(200)))
    with pytest.raises(GfxError):
        rl_decompress(compressed[:50])


def test_decompress_run_past_size_raises():
    with pytest.raises(GfxError):
        rl_decompress(b"\x30\x02\x00\x00\x80\x00")