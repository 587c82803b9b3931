import string

from keyrelay.core.security import generate_token, verify_api_key


def test_token_is_32_hex_chars():
    token = generate_token()
    assert len(token) == 32
    assert set(token) <= set(string.hexdigits.lower())


def test_tokens_are_distinct():
    tokens = {generate_token() for _ in range(1000)}
    assert len(tokens) == 1000


def test_verify_api_key_exact_match_only():
    token = generate_token()
    assert verify_api_key(token, token)
    assert not verify_api_key(token.upper(), token)
    assert not verify_api_key(token[:-1], token)
    assert not verify_api_key(token + "0", token)
    assert not verify_api_key("x", token)


def test_verify_api_key_rejects_missing_key():
    token = generate_token()
    assert not verify_api_key(None, token)
    assert not verify_api_key("", token)
    assert not verify_api_key("", "")
