import numpy as np
import pytest

from linecodec import (
    EncodingScheme,
    InvalidBitString,
    ScrambleMode,
    Waveform,
    bits_to_string,
    encode,
    parse_binary,
)
from linecodec.utils import as_bits, format_bits


def test_parse_binary():
    assert parse_binary("1001") == (1, 0, 0, 1)
    assert parse_binary("  01\n") == (0, 1)


@pytest.mark.parametrize("text", ["", "   ", "10 01", "012", "abc"])
def test_parse_binary_invalid(text):
    with pytest.raises(InvalidBitString):
        parse_binary(text)


def test_as_bits_normalizes():
    assert as_bits([True, False, 1, "0", np.int64(1)]) == (1, 0, 1, 0, 1)


def test_bits_to_string():
    assert bits_to_string((1, 0, 1)) == "101"
    assert bits_to_string([]) == ""


def test_format_bits_shortens_long_strings():
    assert format_bits("0101") == "0101"
    s = format_bits([1] * 100, max_len=20)
    assert len(s) <= 20
    assert "..." in s


@pytest.mark.parametrize("name,expected", [
    ("NRZ-L", EncodingScheme.NRZ_L),
    ("nrzl", EncodingScheme.NRZ_L),
    ("NRZI", EncodingScheme.NRZ_I),
    ("differential manchester", EncodingScheme.DIFF_MANCHESTER),
    ("Bipolar-AMI", EncodingScheme.AMI),
    (EncodingScheme.MANCHESTER, EncodingScheme.MANCHESTER),
])
def test_scheme_parse(name, expected):
    assert EncodingScheme.parse(name) is expected


@pytest.mark.parametrize("name,expected", [
    (None, ScrambleMode.NONE),
    ("none", ScrambleMode.NONE),
    ("b8zs", ScrambleMode.B8ZS),
    ("HDB3", ScrambleMode.HDB3),
])
def test_scramble_parse(name, expected):
    assert ScrambleMode.parse(name) is expected


def test_unknown_names_raise():
    with pytest.raises(ValueError):
        EncodingScheme.parse("4B5B")
    with pytest.raises(ValueError):
        ScrambleMode.parse("scrambled")


def test_waveform_rejects_bad_shapes():
    with pytest.raises(ValueError):
        Waveform(t=[0.0, 1.0], levels=[1.0], scheme=EncodingScheme.NRZ_L)
    with pytest.raises(ValueError):
        Waveform(t=[1.0, 0.0], levels=[1.0, 1.0], scheme=EncodingScheme.NRZ_L)


def test_waveform_normalizes_scheme_names():
    wave = Waveform(t=[0.0, 1.0], levels=[1.0, 1.0], scheme="nrzl", scramble=None)
    assert wave.scheme is EncodingScheme.NRZ_L
    assert wave.scramble is ScrambleMode.NONE
    wave = Waveform(t=[0.0, 1.0], levels=[1.0, 1.0], scheme="AMI", scramble="hdb3")
    assert wave.scramble is ScrambleMode.HDB3


def test_waveform_rejects_unknown_names():
    with pytest.raises(ValueError):
        Waveform(t=[0.0, 1.0], levels=[1.0, 1.0], scheme="4B5B")
    with pytest.raises(ValueError):
        Waveform(t=[0.0, 1.0], levels=[1.0, 1.0], scheme="AMI", scramble="scrambled")


def test_level_at_first_point_at_or_after_query():
    wave = encode([1, 0], "NRZ-L")
    assert wave.level_at(0.5) == 1.0
    assert wave.level_at(1.0) == 1.0    # end point of the first segment
    assert wave.level_at(1.5) == -1.0
    assert wave.level_at(7.0) == -1.0   # past the end
    assert wave.n_intervals == 2


def test_level_at_empty_raises():
    with pytest.raises(ValueError):
        encode([], "AMI").level_at(0.5)
