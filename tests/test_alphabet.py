"""Signed character encoding."""

from __future__ import annotations

import numpy as np
import pytest

from pottsmsa.alphabet import CodeTable, DecodeCode, EncodeSequence, ReadCode
from pottsmsa.config import CODES_AA


@pytest.mark.parametrize(
    "char, expected",
    [
        ("-", 0),
        ("A", 1),
        ("C", 2),
        ("a", -2),
        ("c", -1),
        ("X", 3),
        ("x", 3),
        (".", 3),
    ],
)
def test_read_code_custom_alphabet(char: str, expected: int) -> None:
    assert ReadCode(char, "-AC") == expected


def test_reference_alphabet_round_trips_every_symbol() -> None:
    nbrcodes = len(CODES_AA)
    for k, symbol in enumerate(CODES_AA):
        assert ReadCode(symbol, CODES_AA) == k
        if k > 0:
            assert ReadCode(symbol.lower(), CODES_AA) == k - nbrcodes
    assert ReadCode("B", CODES_AA) == nbrcodes
    assert ReadCode("z", CODES_AA) == nbrcodes


def test_dot_is_a_gap_only_for_reference_alphabet() -> None:
    assert ReadCode(".", CODES_AA) == 0
    assert ReadCode(".", "-ACGT") == 5


def test_encode_sequence_matches_read_code() -> None:
    lut = CodeTable("-AC")
    codes = EncodeSequence("AcX-a", lut)
    assert codes.tolist() == [1, -1, 3, 0, -2]
    assert codes.dtype == np.int16


def test_encode_sequence_non_ascii_is_out_of_alphabet() -> None:
    lut = CodeTable("-AC")
    assert EncodeSequence("Aé€", lut).tolist() == [1, 3, 3]


def test_decode_code() -> None:
    assert DecodeCode(1, "-AC") == "A"
    assert DecodeCode(-1, "-AC") == "c"
    assert DecodeCode(3, "-AC") == "_"
