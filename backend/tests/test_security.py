import base64
import re
import uuid

import pytest

from moviebooking.core.errors import MalformedCredentials
from moviebooking.core.security import (
    get_password_hash,
    new_access_token,
    new_session_id,
    parse_basic_auth,
    parse_bearer_token,
    verify_password,
)


def encode(raw: str) -> str:
    return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


def test_hash_is_salted():
    first = get_password_hash("secret")
    second = get_password_hash("secret")
    assert first != second
    assert first != "secret"
    assert verify_password("secret", first)
    assert verify_password("secret", second)


def test_verify_rejects_other_password():
    hashed = get_password_hash("secret")
    assert not verify_password("Secret", hashed)
    assert not verify_password("", hashed)


@pytest.mark.parametrize("stored", ["", "plaintext", "$2b$10$short", None])
def test_verify_malformed_hash_is_false(stored):
    assert verify_password("secret", stored) is False


def test_session_id_is_uuid4():
    value = new_session_id()
    assert uuid.UUID(value).version == 4
    assert new_session_id() != value


def test_access_token_is_url_safe_and_long():
    token = new_access_token()
    # 32 random bytes -> 43 base64url characters
    assert len(token) >= 43
    assert re.fullmatch(r"[A-Za-z0-9_-]+", token)
    assert len({new_access_token() for _ in range(50)}) == 50


def test_parse_basic_auth():
    assert parse_basic_auth(encode("ab:p")) == ("ab", "p")


def test_parse_basic_auth_keeps_colons_in_password():
    assert parse_basic_auth(encode("ab:p:q")) == ("ab", "p:q")


@pytest.mark.parametrize("header", [
    None,
    "",
    "Bearer abc",
    "basic " + base64.b64encode(b"ab:p").decode(),
    "Basic not*base64",
    encode("nocolon"),
    encode(":p"),
    encode("ab:"),
])
def test_parse_basic_auth_malformed(header):
    with pytest.raises(MalformedCredentials):
        parse_basic_auth(header)


def test_parse_bearer_token():
    assert parse_bearer_token("Bearer abc") == "abc"
    assert parse_bearer_token("Token   xyz") == "xyz"
    assert parse_bearer_token("Bearer") is None
    assert parse_bearer_token(None) is None
