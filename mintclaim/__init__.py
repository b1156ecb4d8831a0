#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#

__version__ = '1.0.0'

__all__ = [ 'packing', 'signing', 'token', 'exceptions', 'constants', 'utils', 'verify_link', 'batch' ]

# the record, and its binary form
from mintclaim.packing import ClaimRecord, encode, decode

# signatures, always with explicit key
from mintclaim.signing import sign, verify

# tokens: issue on one side, decode_and_verify on the other
from mintclaim.token import to_token, from_token, issue, decode_and_verify
from mintclaim.exceptions import InvalidToken
