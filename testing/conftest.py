import pytest

# Worked example, values checked with openssl:
#   printf '\x83\xa1n*\xa1c\xa5Black\xa1t\xa6HUGMUG' | openssl dgst -sha256 -hmac test-secret
EXAMPLE_PAYLOAD = bytes.fromhex('83a16e2aa163a5426c61636ba174a64855474d5547')
EXAMPLE_SIG = bytes.fromhex('c93f66aa6486d67c2e076faabba32f21')
EXAMPLE_TOKEN = 'g6FuKqFjpUJsYWNroXSmSFVHTVVH.yT9mqmSG1nwuB2-qu6MvIQ'

@pytest.fixture
def secret():
    return 'test-secret'

@pytest.fixture
def record():
    from mintclaim.packing import ClaimRecord
    return ClaimRecord(42, 'Black', 'HUGMUG')

@pytest.fixture
def example_token():
    return EXAMPLE_TOKEN


@pytest.fixture
def example_payload():
    return EXAMPLE_PAYLOAD

@pytest.fixture
def example_sig():
    return EXAMPLE_SIG

# EOF
