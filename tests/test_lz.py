import random

import pytest

from agbkit.gbagfx.lz import lz_compress, lz_decompress
from agbkit.gbagfx.util import GfxError

SAMPLES = [
    b"a",
    b"abc",
    b"hello hello hello world",
    bytes(range(256)) * 3,
    b"\x00" * 5000,
    random.Random(1).randbytes(600),
    b"abababababababababababababababababab",
]


def test_compress_literals_only():
    assert lz_compress(b"abc") == b"\x10\x03\x00\x00\x00abc"


def test_compress_run_uses_back_reference():
    expected = bytes.fromhex("100a0000206161500100" "0000")
    assert lz_compress(b"a" * 10) == expected


@pytest.mark.parametrize("data", SAMPLES)
@pytest.mark.parametrize("min_distance", [1, 2, 5])
def test_round_trip(data, min_distance):
    assert lz_decompress(lz_compress(data, min_distance)) == data


@pytest.mark.parametrize("data", SAMPLES)
def test_header_and_padding(data):
    compressed = lz_compress(data)
    assert compressed[0] == 0x10
    assert int.from_bytes(compressed[1:4], "little") == len(data)
    assert len(compressed) % 4 == 0


def test_min_distance_one_compresses_runs_better():
    assert len(lz_compress(b"a" * 10, 1)) < len(lz_compress(b"a" * 10, 2))


def test_compress_empty_raises():
    with pytest.raises(GfxError):
        lz_compress(b"")


def test_compress_rejects_zero_min_distance():
    with pytest.raises(GfxError):
        lz_compress(b"abc", 0)


def test_decompress_too_short_raises():
    with pytest.raises(GfxError):
        lz_decompress(b"\x10\x01\x00")


def test_decompress_truncated_raises():
    compressed = lz_compress(b"hello hello hello world")
    with pytest.raises(GfxError):
        lz_decompress(compressed[:6])


def test_decompress_reference_before_start_raises():
    with pytest.raises(GfxError):
        lz_decompress(b"\x10\x04\x00\x00\x80\x00\x00")


def test_decompress_overflowing_block_is_cut_short():
    data = b"\x10\x04\x00\x00\x40a\x20\x00"
    with pytest.warns(RuntimeWarning):
        result = lz_decompress(data)
    assert result == b"a" * 4