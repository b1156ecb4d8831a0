#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Signing of claim payloads.
#
# My standards:
# - signature: HMAC-SHA256 over exact payload bytes, first 16 bytes only
# - key: bytes, or text which is UTF-8 encoded (same as web app did)
# - key is always an argument, never read from environment here
# - verify returns bool, doesn't raise exception
#
import hmac
from hashlib import sha256
from .constants import SIGNATURE_LENGTH, KEY_IDENT_MSG, KEY_IDENT_SIZE
from .utils import force_bytes, b64url_decode, B2A

__all__ = [ 'sign', 'verify', 'key_ident' ]

def hmac_sha256(key, msg):
    # full 32-byte MAC
    return hmac.new(force_bytes(key), msg, sha256).digest()

def sign(payload, key):
    # returns 16-byte signature
    if not key:
        raise ValueError("Secret key required")

    return hmac_sha256(key, bytes(payload))[0:SIGNATURE_LENGTH]

def verify(payload, signature, key):
    # returns True or False
    # - signature may be bytes, or base64url text straight from a token
    if not key or not isinstance(key, (str, bytes, bytearray)):
        return False
    if not isinstance(payload, (bytes, bytearray)):
        return False

    if isinstance(signature, str):
        try:
            signature = b64url_decode(signature)
        except ValueError:
            return False

    if not isinstance(signature, (bytes, bytearray)):
        return False

    # length mismatch is just another way to be wrong
    expect = sign(payload, key)
    return hmac.compare_digest(expect, bytes(signature))

def key_ident(key):
    # short label for a key, safe to show or store (not the key itself)
    if not key:
        raise ValueError("Secret key required")

    return B2A(hmac_sha256(key, KEY_IDENT_MSG)[0:KEY_IDENT_SIZE])

# EOF
