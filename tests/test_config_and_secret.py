import pytest

from formtoken import protect
from formtoken.config import FormTokenConfig
from formtoken.errors import SecretUnavailableError
from formtoken.token.issuer import TokenIssuer
from formtoken.token.signing import SigningSecret
from formtoken.token.types import TokenPayload


def test_defaults() -> None:
    config = FormTokenConfig()
    assert config.ttl_seconds == 3600
    assert config.single_use is True
    assert config.field_name == "formToken"
    assert config.header_name == "X-Form-Token"


@pytest.mark.parametrize("overrides", [{"ttl_seconds": 0}, {"store_timeout_seconds": -1}, {"field_name": ""}])
def test_invalid_config_rejected(overrides: dict) -> None:
    with pytest.raises(ValueError):
        FormTokenConfig(**overrides)


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORMTOKEN_SECRET", "env-secret-0123456789abcdef")
    monkeypatch.setenv("FORMTOKEN_TTL_SECONDS", "120")
    monkeypatch.setenv("FORMTOKEN_SINGLE_USE", "false")
    monkeypatch.setenv("FORMTOKEN_FIELD_NAME", "_token")
    monkeypatch.setenv("FORMTOKEN_EXEMPT_PATHS", "/webhooks/, /health")

    config = FormTokenConfig.from_env()

    assert config.secret == "env-secret-0123456789abcdef"
    assert config.ttl_seconds == 120
    assert config.single_use is False
    assert config.field_name == "_token"
    assert config.exempt_paths == ("/webhooks/", "/health")


def test_secret_resolution_order(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = TokenPayload(form_name="f", issued_at=1, nonce="n", expires_at=2)
    monkeypatch.setenv("FORMTOKEN_SECRET", "from-environment-0123456789")

    explicit = SigningSecret.from_config(FormTokenConfig(secret="explicit-secret-0123456789"))
    from_env = SigningSecret.from_config(FormTokenConfig())

    assert explicit.sign(payload) == SigningSecret.from_string("explicit-secret-0123456789").sign(payload)
    assert from_env.sign(payload) == SigningSecret.from_string("from-environment-0123456789").sign(payload)


def test_generated_secret_when_none_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FORMTOKEN_SECRET", raising=False)
    payload = TokenPayload(form_name="f", issued_at=1, nonce="n", expires_at=2)
    first = SigningSecret.from_config()
    second = SigningSecret.from_config()
    assert first.sign(payload) != second.sign(payload)


def test_required_secret_missing_is_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FORMTOKEN_SECRET", raising=False)
    with pytest.raises(SecretUnavailableError):
        SigningSecret.from_config(FormTokenConfig(require_secret=True))
    with pytest.raises(SecretUnavailableError):
        protect(require_secret=True)


def test_short_secret_is_fatal() -> None:
    with pytest.raises(SecretUnavailableError):
        SigningSecret.from_string("short")


def test_secret_is_not_printed() -> None:
    secret = SigningSecret.from_string("super-secret-value-0123456789")
    assert "super-secret" not in repr(secret)


def test_protect_issue_returns_encoded_string(secret: SigningSecret) -> None:
    protection = protect(secret=secret, ttl_seconds=90)
    token = protection.issue("capture")
    assert isinstance(token, str)
    assert protection.issuer.default_ttl_ms == 90_000
    assert protection.hidden_field(token) == f'<input type="hidden" name="formToken" value="{token}">'


def test_issuer_accepts_numeric_default_ttl(secret: SigningSecret) -> None:
    assert TokenIssuer(secret, default_ttl=2.5).default_ttl_ms == 2500
