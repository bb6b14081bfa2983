"""Tests for the utf-8 character boundary scanner."""

import pytest

from suflem.codepoints import (DecodeError, lead_byte_length, scan_codepoints,
                               common_prefix_size, encode, decode)


# ---------------------------------------------------------------------------
# Lead byte classifier


@pytest.mark.parametrize('byte,length', [
    (0x41, 1), (0x7F, 1),
    (0xC3, 2), (0xDF, 2),
    (0xE2, 3), (0xEF, 3),
    (0xF0, 4), (0xF7, 4),
    (0xF8, 5), (0xFB, 5),
    (0xFC, 6), (0xFD, 6),
])
def test_lead_byte_length(byte, length):
    assert lead_byte_length(byte) == length


@pytest.mark.parametrize('byte', [0x80, 0xBF, 0xFE, 0xFF])
def test_non_lead_bytes(byte):
    assert lead_byte_length(byte) == 0


# ---------------------------------------------------------------------------
# Scanning


def test_scan_ascii():
    assert scan_codepoints(b'abc') == [0, 1, 2]


def test_scan_empty():
    assert scan_codepoints(b'') == []


def test_scan_multibyte_characters():
    assert scan_codepoints('$käsi'.encode('utf-8')) == [0, 1, 2, 4, 5]
    assert scan_codepoints('a€b'.encode('utf-8')) == [0, 1, 4]
    assert scan_codepoints('x\U0001F600'.encode('utf-8')) == [0, 1]


def test_scan_accepts_legacy_five_and_six_byte_forms():
    assert scan_codepoints(b'\xf8\x80\x80\x80\x80a') == [0, 5]
    assert scan_codepoints(b'\xfc\x80\x80\x80\x80\x80') == [0]


def test_scan_rejects_leading_continuation_byte():
    with pytest.raises(DecodeError):
        scan_codepoints(b'\x80abc')


@pytest.mark.parametrize('data', [b'a\xfe', b'\xff', b'ab\xffc'])
def test_scan_rejects_invalid_bytes(data):
    with pytest.raises(DecodeError):
        scan_codepoints(data)


def test_decode_error_is_value_error():
    with pytest.raises(ValueError, match='offset 0'):
        scan_codepoints(b'\xbf')


# ---------------------------------------------------------------------------
# Common prefix


def _prefix(a, b):
    a, b = a.encode('utf-8'), b.encode('utf-8')
    return common_prefix_size(a, b, scan_codepoints(a), scan_codepoints(b))


def test_common_prefix_of_prefix_word():
    assert _prefix('$cats', '$cat') == 4
    assert _prefix('$cat', '$cats') == 4


def test_common_prefix_stops_at_mismatch():
    assert _prefix('$ran', '$run') == 2


def test_common_prefix_compares_whole_characters():
    assert _prefix('$é', '$e') == 1
    assert _prefix('$äiti', '$äidin') == 3


def test_common_prefix_of_identical_words():
    assert _prefix('$sama', '$sama') == 5


def test_common_prefix_of_empty():
    assert _prefix('', 'abc') == 0


# ---------------------------------------------------------------------------
# Text conversion


def test_invalid_bytes_survive_decode_encode():
    data = b'ab\xfe\xc3'
    assert encode(decode(data)) == data


def test_encode_rejects_unpaired_surrogates():
    with pytest.raises(DecodeError):
        encode('a\ud800')
