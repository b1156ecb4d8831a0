#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# packing.py
#
# Claim record <=> compact binary payload, which is what gets signed.
#
# Payload is a small MessagePack map, always three entries in this order:
#
#   83              map, 3 entries
#   a1 6e  <uint>   'n' => serial number
#   a1 63  <str>    'c' => color
#   a1 74  <str>    't' => product type
#
# Integers 0..127 are a single byte, bigger values get a marker (cc/cd/ce/cf)
# and then 1/2/4/8 bytes big-endian. Text is a0+len (up to 31 bytes) or
# d9/da with a length prefix, then UTF-8.
#
# Encoder always picks the smallest form, so a record has exactly one
# encoding and issuer and verifier agree on the signed bytes.
#
import struct
from collections import namedtuple
from .constants import *
from .exceptions import MissingField, MalformedField


class ClaimRecord(namedtuple('ClaimRecord', 'serial_number color product_type')):
    #
    # What a claim token authorizes: one physical item, by serial number.
    #
    __slots__ = ()

    @property
    def product_id(self):
        # label for humans, like: HUGMUG-Black-000042
        return f'{self.product_type}-{self.color}-{self.serial_number:06d}'

    @property
    def image_path(self):
        return f'/products/{self.product_type}.png'

    def is_valid(self):
        # all three fields required; zero is a fine serial number
        n = self.serial_number
        if not isinstance(n, int) or isinstance(n, bool):
            return False
        if not (0 <= n <= MAX_SERIAL):
            return False

        return all(isinstance(s, str) and s for s in (self.color, self.product_type))

    def validate(self):
        if not self.is_valid():
            raise MalformedField("Claim record incomplete or out of range")
        return self


def pack_uint(n):
    if n < 0:
        raise ValueError("Negative integer")
    if n <= FIXINT_MAX:
        return bytes([n])
    elif n <= 0xff:
        return struct.pack('>BB', UINT8, n)
    elif n <= 0xffff:
        return struct.pack('>BH', UINT16, n)
    elif n <= 0xffff_ffff:
        return struct.pack('>BI', UINT32, n)
    elif n <= MAX_SERIAL:
        return struct.pack('>BQ', UINT64, n)

    raise ValueError("Integer too big: %d" % n)

def pack_str(s):
    raw = s.encode('utf-8')
    ln = len(raw)

    if ln <= FIXSTR_MAX_LEN:
        hdr = bytes([FIXSTR_BASE | ln])
    elif ln <= 0xff:
        hdr = struct.pack('>BB', STR8, ln)
    elif ln <= 0xffff:
        hdr = struct.pack('>BH', STR16, ln)
    else:
        raise ValueError("Text too long: %d bytes" % ln)

    return hdr + raw

def encode(record):
    # Serialize a ClaimRecord. Refuses to make payloads for incomplete records.
    if not isinstance(record, ClaimRecord) or not record.is_valid():
        raise ValueError("Incomplete claim record: %r" % (record,))

    rv = bytes([FIXMAP_BASE | len(FIELD_ORDER)])
    for tag, value in zip(FIELD_ORDER, record):
        rv += pack_str(tag)
        rv += pack_uint(value) if tag == TAG_SERIAL else pack_str(value)

    return rv


class PayloadScanner:
    #
    # Forward-only reader over a payload. Every read is bounds checked and
    # consumes at least one byte, so any input is done in len(buf) steps.
    #
    def __init__(self, buf):
        self.buf = bytes(buf)
        self.pos = 0

    def remaining(self):
        return len(self.buf) - self.pos

    def take(self, count, what):
        if count > self.remaining():
            raise MalformedField(f"Truncated {what}")
        rv = self.buf[self.pos:self.pos+count]
        self.pos += count
        return rv

    def byte(self, what):
        return self.take(1, what)[0]

    def value(self, what):
        # read one integer or text item; returns (raw bytes, value)
        start = self.pos
        m = self.byte(what)

        if m <= FIXINT_MAX:
            val = m
        elif m in UINT_WIDTHS:
            val = int.from_bytes(self.take(UINT_WIDTHS[m], what), 'big')
        else:
            if FIXSTR_BASE <= m <= FIXSTR_MAX:
                ln = m & FIXSTR_MAX_LEN
            elif m == STR8:
                ln = self.byte(what)
            elif m == STR16:
                ln = int.from_bytes(self.take(2, what), 'big')
            else:
                raise MalformedField(f"Unexpected marker 0x{m:02x} in {what}")

            try:
                val = self.take(ln, what).decode('utf-8')
            except UnicodeDecodeError:
                raise MalformedField(f"Bad UTF-8 in {what}")

        return self.buf[start:self.pos], val


def dump_fields(payload):
    # Structural walk of the map: list of (key, raw value bytes, value).
    # - no semantic checks, no signature: don't trust what comes back
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise MalformedField("Payload must be bytes")

    sc = PayloadScanner(payload)
    hdr = sc.byte('map header')
    if not (FIXMAP_BASE <= hdr <= FIXMAP_MAX):
        raise MalformedField("Payload is not a map")

    rv = []
    for _ in range(hdr & 0x0f):
        _, key = sc.value('key')
        if not isinstance(key, str):
            raise MalformedField("Map key must be text")

        raw, val = sc.value(f"value for '{key}'")
        rv.append((key, raw, val))

    if sc.remaining():
        raise MalformedField("Trailing bytes after map")

    return rv

def decode(payload):
    # Parse payload into a ClaimRecord. Structural only: a zero serial number
    # or empty text is returned as-is, see ClaimRecord.validate()
    # - unknown keys are skipped, if their values are well formed
    found = {}
    for key, _, val in dump_fields(payload):
        if key in found:
            raise MalformedField(f"Duplicate key '{key}'")
        found[key] = val

    missing = [tag for tag in FIELD_ORDER if tag not in found]
    if missing:
        raise MissingField("Missing field: " + ', '.join(missing))

    n, c, t = (found[tag] for tag in FIELD_ORDER)

    if not isinstance(n, int):
        raise MalformedField("Serial number must be an integer")
    if not isinstance(c, str) or not isinstance(t, str):
        raise MalformedField("Color and product type must be text")

    return ClaimRecord(n, c, t)

# EOF
