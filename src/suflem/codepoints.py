# -*- coding: utf8 -*-
"""Detecting character boundaries in utf-8 encoded byte strings."""


ENCODING = 'utf-8'
ENCODING_ERRORS = 'surrogateescape'

# (mask, value, sequence length) for lead bytes of 1 to 6 byte sequences
LEAD_BYTE_PATTERNS = (
    (0x80, 0x00, 1),    # 0xxxxxxx
    (0xE0, 0xC0, 2),    # 110xxxxx
    (0xF0, 0xE0, 3),    # 1110xxxx
    (0xF8, 0xF0, 4),    # 11110xxx
    (0xFC, 0xF8, 5),    # 111110xx
    (0xFE, 0xFC, 6),    # 1111110x
)
CONTINUATION_MASK = 0xC0
CONTINUATION_VALUE = 0x80


class DecodeError(ValueError):
    """Malformed multi-byte character sequence."""


def lead_byte_length(byte):
    """Classify a byte as the lead byte of a character.

    Args:
        byte (int): Byte value between 0 and 255.

    Returns:
        Length of the sequence the byte starts (1-6), or 0 if the byte
        does not start a character.
    """
    for mask, value, length in LEAD_BYTE_PATTERNS:
        if byte & mask == value:
            return length
    return 0


def is_continuation_byte(byte):
    """Check whether byte has the form 10xxxxxx."""
    return byte & CONTINUATION_MASK == CONTINUATION_VALUE


def scan_codepoints(data):
    """Find the byte offsets where each character begins.

    Args:
        data (bytes): Encoded string.

    Returns:
        Ascending list of start offsets, one per character.

    Raises:
        DecodeError: If a byte is neither a lead byte nor a continuation
            byte, or if the string starts with a continuation byte.

    Example:
        >>> scan_codepoints('$käsi'.encode('utf8'))
        [0, 1, 2, 4, 5]
    """
    offsets = []
    for i, byte in enumerate(data):
        if lead_byte_length(byte) > 0:
            offsets.append(i)
        elif not is_continuation_byte(byte) or i == 0:
            raise DecodeError("Invalid byte 0x%02X at offset %d" % (byte, i))
    return offsets


def common_prefix_size(a, b, a_offsets, b_offsets):
    """Count the leading characters that are identical in two strings.

    Args:
        a (bytes): First encoded string.
        b (bytes): Second encoded string.
        a_offsets (list): Character start offsets of a, from
            scan_codepoints.
        b_offsets (list): Character start offsets of b.

    Returns:
        Number of common leading characters.
    """
    n = min(len(a_offsets), len(b_offsets))
    for j in range(n):
        a_start, b_start = a_offsets[j], b_offsets[j]
        a_end = a_offsets[j+1] if j+1 < len(a_offsets) else len(a)
        b_end = b_offsets[j+1] if j+1 < len(b_offsets) else len(b)
        if a[a_start:a_end] != b[b_start:b_end]:
            return j
    return n


def encode(text):
    """Encode text for scanning.

    Raises:
        DecodeError: If the text holds characters that cannot be encoded.
    """
    try:
        return text.encode(ENCODING, ENCODING_ERRORS)
    except UnicodeEncodeError as e:
        raise DecodeError("Could not encode %r: %s" % (text, e)) from e


def decode(data):
    """Decode a slice of scanned bytes back into text, losslessly."""
    return data.decode(ENCODING, ENCODING_ERRORS)
