#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# System constants.
#

# Signature is HMAC-SHA256 truncated to this many bytes. Part of the token
# format; changing it invalidates every token already printed on a product.
SIGNATURE_LENGTH = 16

# between base64url(payload) and base64url(signature)
TOKEN_SEPARATOR = '.'

# single-letter map keys, in the order they are encoded
TAG_SERIAL = 'n'
TAG_COLOR = 'c'
TAG_PRODUCT = 't'
FIELD_ORDER = (TAG_SERIAL, TAG_COLOR, TAG_PRODUCT)

# Payload markers (MessagePack compatible subset)
# - fixmap/fixstr carry their count/length in the low bits
FIXMAP_BASE = 0x80
FIXMAP_MAX = 0x8f
FIXSTR_BASE = 0xa0
FIXSTR_MAX = 0xbf
FIXSTR_MAX_LEN = 31
FIXINT_MAX = 0x7f

STR8 = 0xd9
STR16 = 0xda

UINT8 = 0xcc
UINT16 = 0xcd
UINT32 = 0xce
UINT64 = 0xcf

# extended integer marker => width in bytes (big-endian follows)
UINT_WIDTHS = { UINT8: 1, UINT16: 2, UINT32: 4, UINT64: 8 }

MAX_SERIAL = (1 << 64) - 1

# where claim links point; path is /mint/<token>
DEFAULT_BASE_URL = 'http://localhost:3000'
CLAIM_PATH = '/mint/'

# The web app kept its secret under this name, keep using it.
SECRET_ENV_VAR = 'JWT_SECRET'

# for key_ident(): short label that can be shown without revealing the key
KEY_IDENT_MSG = b'mintclaim key ident'
KEY_IDENT_SIZE = 4

# batch manifest files (see batch.py)
MANIFEST_VERSION = 'MINTCLAIM_MANIFEST_v1'

# EOF
