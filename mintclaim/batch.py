#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Batch manifests: tokens for a whole print run, for the sticker printer.
#
# File contents:
# CBOR array of 2 items:
#   (MANIFEST_VERSION, body_cbor)
# - body_cbor is serialized CBOR, a mapping with:
#     - key_ident: which secret was used, see signing.key_ident()
#     - base_url: where the claim links point
#     - created_at: datetime in UTC
#     - claims: list of [serial_number, color, product_type, token]
#
# The secret itself is never written. To check a manifest you need the same
# secret again, and each token must decode to exactly the fields on its row.
#
import datetime, cbor2
from .constants import MANIFEST_VERSION, DEFAULT_BASE_URL
from .exceptions import InvalidToken
from .packing import ClaimRecord
from .signing import key_ident
from .token import issue, check_token

BODY_FIELDS = { 'key_ident', 'base_url', 'created_at', 'claims' }

def make_records(color, product_type, first=1, count=1):
    # sequential serial numbers, same color and product
    if count < 0 or first < 0:
        raise ValueError("Bad range")

    for n in range(first, first+count):
        yield ClaimRecord(n, color, product_type)

def build_manifest(records, key, base_url=DEFAULT_BASE_URL):
    # returns the bytes for a manifest file
    claims = [[r.serial_number, r.color, r.product_type, issue(r, key)] for r in records]

    body = dict(key_ident=key_ident(key),
                base_url=base_url,
                created_at=datetime.datetime.now(datetime.timezone.utc),
                claims=claims)

    body_cbor = cbor2.dumps(body, timezone=datetime.timezone.utc)

    return cbor2.dumps( (MANIFEST_VERSION, body_cbor) )

def read_manifest(raw):
    # parse file contents, check shape only; no crypto
    try:
        seq = cbor2.loads(raw)
    except cbor2.CBORDecodeError:
        raise ValueError("Not a manifest file")

    if not isinstance(seq, list) or len(seq) != 2 or seq[0] != MANIFEST_VERSION:
        raise ValueError("Unknown manifest version")

    try:
        body = cbor2.loads(seq[1])
    except (cbor2.CBORDecodeError, TypeError):
        raise ValueError("Corrupt manifest body")

    if not isinstance(body, dict) or set(body.keys()) != BODY_FIELDS:
        raise ValueError("Manifest body has wrong fields")

    if not isinstance(body['key_ident'], str) or not isinstance(body['base_url'], str):
        raise ValueError("Manifest body has wrong field types")
    if not isinstance(body['created_at'], datetime.datetime):
        raise ValueError("Manifest body has wrong field types")
    if not isinstance(body['claims'], list):
        raise ValueError("Manifest body has wrong field types")

    for row in body['claims']:
        if not isinstance(row, list) or len(row) != 4:
            raise ValueError("Bad claim row in manifest")
        if not isinstance(row[0], int) or not all(isinstance(i, str) for i in row[1:]):
            raise ValueError("Bad claim row in manifest")

    return body

def check_manifest(manifest, key):
    # generate (row, ok) for each claim row
    if manifest['key_ident'] != key_ident(key):
        raise ValueError("Manifest was made with a different key (%s)" % manifest['key_ident'])

    for row in manifest['claims']:
        serial, color, product_type, token = row
        try:
            ok = (check_token(token, key) == ClaimRecord(serial, color, product_type))
        except InvalidToken:
            ok = False

        yield row, ok

# EOF
