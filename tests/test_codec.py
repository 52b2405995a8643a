import base64
import json
import random
import string

import pytest

from formtoken.errors import DecodeError
from formtoken.token import codec
from formtoken.token.types import TokenPayload

SIG = bytes(range(32))


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _raw_token(payload_json: str, signature: bytes = SIG) -> str:
    return f"{_b64(payload_json.encode('utf-8'))}.{_b64(signature)}"


def test_round_trip_preserves_fields() -> None:
    payloads = [
        TokenPayload(form_name="capture", issued_at=1_767_268_800_000, nonce="abc", expires_at=1_767_272_400_000),
        TokenPayload(form_name="Kontakt-Formular ü", issued_at=0, nonce="n" * 22, expires_at=1),
    ]
    for payload in payloads:
        decoded = codec.decode(codec.encode(payload, SIG))
        assert decoded.payload == payload
        assert decoded.signature == SIG


def test_encoded_token_is_url_and_attribute_safe() -> None:
    payload = TokenPayload(form_name='a "quoted" <form>&', issued_at=1, nonce="x", expires_at=2)
    encoded = codec.encode(payload, SIG)
    assert set(encoded) <= set(string.ascii_letters + string.digits + "-_.")


def test_encode_rejects_wrong_signature_size() -> None:
    payload = TokenPayload(form_name="a", issued_at=1, nonce="x", expires_at=2)
    with pytest.raises(ValueError):
        codec.encode(payload, b"short")


@pytest.mark.parametrize(
    "value",
    [
        "",
        "abc",
        "a.b.c",
        "abc+def.ghi",
        "abc def.ghi",
        ".abc",
        "abc.",
        "x" * 5000 + ".y",
    ],
)
def test_decode_rejects_bad_shapes(value: str) -> None:
    with pytest.raises(DecodeError):
        codec.decode(value)


@pytest.mark.parametrize("value", [None, b"abc.def", 42])
def test_decode_rejects_non_strings(value) -> None:
    with pytest.raises(DecodeError):
        codec.decode(value)


def test_decode_rejects_truncated_token() -> None:
    payload = TokenPayload(form_name="capture", issued_at=1, nonce="x", expires_at=2)
    encoded = codec.encode(payload, SIG)
    for cut in range(1, 4):
        with pytest.raises(DecodeError):
            codec.decode(encoded[:-cut])


def test_decode_rejects_non_canonical_payload() -> None:
    spaced = '{"expires_at": 2, "form_name": "a", "issued_at": 1, "nonce": "x"}'
    unsorted = '{"nonce":"x","form_name":"a","issued_at":1,"expires_at":2}'
    duplicated = '{"expires_at":2,"form_name":"a","form_name":"a","issued_at":1,"nonce":"x"}'
    for text in (spaced, unsorted, duplicated):
        with pytest.raises(DecodeError):
            codec.decode(_raw_token(text))


@pytest.mark.parametrize(
    "payload",
    [
        {"expires_at": 2, "form_name": "a", "issued_at": 1},
        {"expires_at": 2, "extra": 1, "form_name": "a", "issued_at": 1, "nonce": "x"},
        {"expires_at": 2, "form_name": "", "issued_at": 1, "nonce": "x"},
        {"expires_at": 2, "form_name": "a", "issued_at": True, "nonce": "x"},
        {"expires_at": 2.5, "form_name": "a", "issued_at": 1, "nonce": "x"},
        {"expires_at": 2, "form_name": "a", "issued_at": 1, "nonce": 7},
        ["a", 1, "x", 2],
    ],
)
def test_decode_rejects_bad_field_layout(payload) -> None:
    text = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    with pytest.raises(DecodeError):
        codec.decode(_raw_token(text))


def test_decode_rejects_wrong_signature_length() -> None:
    text = '{"expires_at":2,"form_name":"a","issued_at":1,"nonce":"x"}'
    with pytest.raises(DecodeError):
        codec.decode(_raw_token(text, signature=b"\x00" * 31))


def test_decode_rejects_non_canonical_base64() -> None:
    payload = TokenPayload(form_name="a", issued_at=1, nonce="x", expires_at=2)
    head, sig = codec.encode(payload, SIG).split(".")
    # 32 bytes encode to 43 chars; the last char carries 2 unused bits.
    last = sig[-1]
    alphabet = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"
    sibling = alphabet[alphabet.index(last) ^ 1]
    with pytest.raises(DecodeError):
        codec.decode(f"{head}.{sig[:-1]}{sibling}")


def test_decode_rejects_deeply_nested_json() -> None:
    with pytest.raises(DecodeError):
        codec.decode(_raw_token("[" * 1500 + "]" * 1500))


def test_decode_only_raises_decode_error_on_random_input() -> None:
    rng = random.Random(1234)
    alphabet = string.printable + "ü€\x00"
    for _ in range(2000):
        value = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 80)))
        try:
            codec.decode(value)
        except DecodeError:
            pass


def test_decode_only_raises_decode_error_on_random_base64() -> None:
    rng = random.Random(99)
    for _ in range(500):
        head = _b64(bytes(rng.getrandbits(8) for _ in range(rng.randint(1, 60))))
        tail = _b64(bytes(rng.getrandbits(8) for _ in range(rng.choice([31, 32, 33]))))
        try:
            codec.decode(f"{head}.{tail}")
        except DecodeError:
            pass
