#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Token framing, and the full issue => redeem path.
#
import pytest, os

import mintclaim.token as tt
from mintclaim.token import to_token, from_token, issue, check_token, decode_and_verify
from mintclaim.packing import ClaimRecord, encode
from mintclaim.signing import sign
from mintclaim.exceptions import (InvalidToken, MalformedToken, InvalidSignature,
                                    MissingField, MalformedField)

def test_example_scenario(record, secret, example_token):
    token = issue(record, secret)
    assert token == example_token
    assert decode_and_verify(token, secret) == record

    with pytest.raises(InvalidToken):
        decode_and_verify(token, 'another-secret')

    payload_part, sig_part = token.split('.')
    with pytest.raises(InvalidToken):
        decode_and_verify(payload_part + 'A.' + sig_part, secret)

def test_framing(example_payload, example_sig, example_token):
    assert to_token(example_payload, example_sig) == example_token
    assert from_token(example_token) == (example_payload, example_sig)

def test_transport_roundtrip():
    for ln in range(0, 40):
        p, s = os.urandom(ln), os.urandom(16)
        assert from_token(to_token(p, s)) == (p, s)

def test_empty_payload(secret):
    # framing carries any bytes, even none; decoding is what refuses it
    s = os.urandom(16)
    assert to_token(b'', s).startswith('.')
    assert from_token(to_token(b'', s)) == (b'', s)
    assert from_token('.abcd') == (b'', bytes.fromhex('69b71d'))

    with pytest.raises(MalformedField):
        check_token(to_token(b'', sign(b'', secret)), secret)

def test_padding_optional(example_token, example_payload, example_sig):
    # signature part needs '==' when padded
    assert from_token(example_token + '==') == (example_payload, example_sig)

@pytest.mark.parametrize('bad', [
    '', '.', 'abcd', 'abcd.', 'ab.cd.ef', 'abcd..efgh',
    'ab$d.efgh', 'abcd.ef gh', 'abcde.efgh', None, b'abcd.efgh',
])
def test_from_token_malformed(bad):
    with pytest.raises(MalformedToken):
        from_token(bad)

def test_specific_errors(record, secret):
    token = issue(record, secret)

    with pytest.raises(InvalidSignature) as err:
        check_token(token, 'wrong')
    assert err.value.code == 401

    with pytest.raises(MalformedToken) as err:
        check_token(token.replace('.', ''), secret)
    assert err.value.code == 400

    # correctly signed, but not a complete record
    p = bytes.fromhex('82 a16e 05 a163 a3') + b'Red'
    with pytest.raises(MissingField):
        check_token(to_token(p, sign(p, secret)), secret)

    p = bytes.fromhex('83 a16e 05 a163 a3') + b'Red'
    with pytest.raises(MalformedField):
        check_token(to_token(p, sign(p, secret)), secret)

    # well formed but empty product type: fails closed
    p = bytes.fromhex('83 a16e 05 a163 a3') + b'Red' + bytes.fromhex('a174 a0')
    with pytest.raises(MalformedField):
        check_token(to_token(p, sign(p, secret)), secret)

def test_generic_error(record, secret):
    # outsiders can't tell which check failed
    token = issue(record, secret)
    p = bytes.fromhex('80')
    cases = [
        token.replace('.', ''),
        token[:-2] + 'AA',
        to_token(p, sign(p, secret)),
    ]

    seen = set()
    for c in cases:
        with pytest.raises(InvalidToken) as err:
            decode_and_verify(c, secret)
        assert type(err.value) is InvalidToken
        assert err.value.__cause__ is None
        seen.add((str(err.value), err.value.code))

    assert seen == { ('Invalid token', 401) }

def test_tamper_payload(record, secret):
    token = issue(record, secret)
    payload, sig = from_token(token)

    for pos in range(len(payload)):
        p = bytearray(payload)
        p[pos] ^= 0x01
        with pytest.raises(InvalidToken):
            decode_and_verify(to_token(bytes(p), sig), secret)

def test_swapped_signature(secret):
    # a good signature from another token doesn't help
    t1 = issue(ClaimRecord(1, 'Red', 'MUG'), secret)
    t2 = issue(ClaimRecord(2, 'Red', 'MUG'), secret)
    forged = t1.split('.')[0] + '.' + t2.split('.')[1]

    with pytest.raises(InvalidToken):
        decode_and_verify(forged, secret)

def test_no_key(example_token):
    with pytest.raises(ValueError):
        decode_and_verify(example_token, '')

def test_verbose(record, secret, capsys, monkeypatch):
    monkeypatch.setattr(tt, 'VERBOSE', True)

    token = issue(record, secret)
    decode_and_verify(token, secret)
    with pytest.raises(InvalidToken):
        decode_and_verify(token, 'nope')

    out = capsys.readouterr().out
    assert 'HUGMUG-Black-000042' in out
    assert 'InvalidSignature' in out
    assert secret not in out
    assert 'nope' not in out

@pytest.mark.parametrize('rec', [
    ClaimRecord(0, 'a', 'b'),
    ClaimRecord(127, 'Black', 'HUGMUG'),
    ClaimRecord(128, 'Black', 'HUGMUG'),
    ClaimRecord(65536, 'Forest Green', 'TOTE'),
    ClaimRecord(0xffff_ffff, 'x' * 40, 'y' * 300),
])
def test_roundtrip(rec, secret):
    assert decode_and_verify(issue(rec, secret), secret) == rec

# EOF
