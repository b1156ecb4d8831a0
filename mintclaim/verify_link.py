#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Claim links: the URL printed (as QR) on each product.
#
#   https://example.com/mint/<token>
#
# The API side takes the same token as ?token=<token> so accept that too.
#
from urllib.parse import urlsplit, parse_qs, unquote
from .constants import DEFAULT_BASE_URL, CLAIM_PATH
from .exceptions import InvalidToken, MalformedToken
from .token import decode_and_verify

def claim_url(token, base_url=DEFAULT_BASE_URL):
    return base_url.rstrip('/') + CLAIM_PATH + token

def token_from_url(url):
    # Find the token inside a claim link, or take a bare token as-is.
    if not isinstance(url, str):
        raise MalformedToken("URL must be text")

    url = url.strip()
    parts = urlsplit(url)

    qs = parse_qs(parts.query)
    if qs.get('token'):
        return qs['token'][0]

    pos = parts.path.find(CLAIM_PATH)
    if pos >= 0:
        # first path component after /mint/, rest is ignored
        slug = parts.path[pos+len(CLAIM_PATH):].split('/')[0]
        if slug:
            return unquote(slug)

    if url and not (parts.scheme or parts.netloc or parts.query) and '/' not in url:
        return url

    raise MalformedToken("No claim token in URL")

def url_decoder(url, key):
    # Takes the claim URL and verifies it. Returns dict of useful values
    # or raises InvalidToken (with no detail) on errors/frauds
    try:
        token = token_from_url(url)
    except MalformedToken:
        raise InvalidToken(code=401) from None

    rec = decode_and_verify(token, key)

    return dict(serial_number=rec.serial_number,
                color=rec.color,
                product_type=rec.product_type,
                product_id=rec.product_id,
                image_path=rec.image_path,
                token=token)

# EOF
