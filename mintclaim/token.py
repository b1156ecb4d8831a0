#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# token.py
#
# Claim tokens as they travel in URLs:
#
#       base64url(payload) + "." + base64url(signature)
#
# Layers: from_token() only splits and decodes; check_token() adds the
# signature check and then parses; decode_and_verify() is the same but
# will not say which check failed.
#
from .constants import TOKEN_SEPARATOR
from .exceptions import InvalidToken, MalformedToken, InvalidSignature
from .packing import encode, decode
from .signing import sign, verify
from .utils import b64url_encode, b64url_decode

# Change this to see why tokens are rejected
VERBOSE = False

def to_token(payload, signature):
    return b64url_encode(payload) + TOKEN_SEPARATOR + b64url_encode(signature)

def from_token(token):
    # split into (payload, signature) bytes; no crypto here
    if not isinstance(token, str):
        raise MalformedToken("Token must be text")

    parts = token.split(TOKEN_SEPARATOR)
    if len(parts) != 2:
        raise MalformedToken("Need exactly one separator")

    enc_payload, enc_sig = parts
    if not enc_sig:
        # empty payload is fine here (decode will refuse it), no sig is not
        raise MalformedToken("Empty signature segment")

    try:
        return b64url_decode(enc_payload), b64url_decode(enc_sig)
    except ValueError as exc:
        raise MalformedToken(str(exc))

def issue(record, key):
    # make the token for a record (issuance side)
    payload = encode(record)
    return to_token(payload, sign(payload, key))

def check_token(token, key):
    # Verify and decode, raising the specific failure. Internal use and
    # tests; anything facing the public should use decode_and_verify()
    if not key:
        raise ValueError("Secret key required")

    payload, sig = from_token(token)

    if not verify(payload, sig, key):
        raise InvalidSignature()

    # only now is it safe to look inside
    return decode(payload).validate()

def decode_and_verify(token, key):
    # Return ClaimRecord for a token we issued, or raise InvalidToken.
    # - all failures look the same to caller, so forgers learn nothing
    try:
        record = check_token(token, key)
    except InvalidToken as exc:
        if VERBOSE:
            print(f"!! rejected: {exc.__class__.__name__}: {exc}")
        raise InvalidToken(code=401) from None

    if VERBOSE:
        print(f"<< claim ok: {record.product_id}")

    return record

# EOF
