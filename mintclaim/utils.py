#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
import re
from base64 import urlsafe_b64encode, urlsafe_b64decode
from binascii import b2a_hex

# show bytes as hex in a string
B2A = lambda x: b2a_hex(x).decode('ascii')

# padding optional, nothing else allowed (not even newlines)
_B64URL_TEXT = re.compile(r'[A-Za-z0-9_-]*={0,2}')

def force_bytes(foo):
    # convert strings to bytes where needed
    return foo.encode('utf-8') if isinstance(foo, str) else foo

def b64url_encode(raw):
    # URL-safe base64, without the padding
    return urlsafe_b64encode(raw).decode('ascii').rstrip('=')

def b64url_decode(text):
    # Undo b64url_encode. Works with or without padding, since some
    # transports strip it. Raises ValueError on anything else.
    if not isinstance(text, str) or not _B64URL_TEXT.fullmatch(text):
        raise ValueError("Not base64url text")

    text = text.rstrip('=')
    if len(text) % 4 == 1:
        # no number of bytes encodes to this length
        raise ValueError("Impossible base64 length")

    return urlsafe_b64decode(text + '=' * (-len(text) % 4))

def hex_groups(raw, size=4):
    # hex in groups, easier to compare by eye: "83a16e2a a163a542 ..."
    h = B2A(raw)
    return ' '.join(h[pos:pos+size*2] for pos in range(0, len(h), size*2))

# EOF
