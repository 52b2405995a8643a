from datetime import datetime, timezone

import pytest

from formtoken.store.memory import InMemoryNonceStore
from formtoken.token.issuer import TokenIssuer
from formtoken.token.signing import SigningSecret
from formtoken.token.verifier import TokenVerifier
from formtoken.utils.time import ManualClock

START = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(name="secret")
def secret_fixture() -> SigningSecret:
    return SigningSecret.from_string("unit-test-secret-0123456789")


@pytest.fixture(name="clock")
def clock_fixture() -> ManualClock:
    return ManualClock(START)


@pytest.fixture(name="issuer")
def issuer_fixture(secret: SigningSecret, clock: ManualClock) -> TokenIssuer:
    return TokenIssuer(secret, clock=clock)


@pytest.fixture(name="verifier")
def verifier_fixture(secret: SigningSecret, clock: ManualClock) -> TokenVerifier:
    return TokenVerifier(secret, clock=clock, store=InMemoryNonceStore(clock=clock))
