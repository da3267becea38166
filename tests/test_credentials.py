import asyncio

import pytest

from ccbff.credentials import CredentialStore
from ccbff.crypto import CredentialCipher
from ccbff.errors import BFFError
from ccbff.store import MemoryDocumentStore


run = asyncio.run


@pytest.fixture
def cipher():
    return CredentialCipher("pw", "salt")


@pytest.mark.parametrize("text", ["", "hello", "naïve café", "日本語テキスト", "emoji 🚀 mix", '{"a": [1, 2]}'])
def test_decrypt_inverts_encrypt(cipher, text):
    assert cipher.decrypt(cipher.encrypt(text)) == text


def test_fresh_iv_per_encryption(cipher):
    a = cipher.encrypt("same secret")
    b = cipher.encrypt("same secret")
    assert a != b
    assert a[32:] != b[32:]


def test_other_key_cannot_read(cipher):
    ct = cipher.encrypt("secret")
    other = CredentialCipher("pw2", "salt")
    try:
        assert other.decrypt(ct) != "secret"
    except UnicodeDecodeError:
        pass


@pytest.mark.parametrize("bad", ["zz", "00" * 8])
def test_rejects_malformed_ciphertext(cipher, bad):
    with pytest.raises(ValueError):
        cipher.decrypt(bad)


def test_set_then_get_credentials(cipher):
    store = CredentialStore(MemoryDocumentStore(), cipher)
    run(store.set_credentials("123", {"slack": {"token": "abc"}}))
    assert run(store.get_credentials("123")) == {"account_id": "123", "slack": {"token": "abc"}}


def test_values_are_encrypted_at_rest(cipher):
    docs = MemoryDocumentStore()
    store = CredentialStore(docs, cipher)
    run(store.set_credentials("123", {"slack": {"token": "abc"}}))
    raw = run(docs.get("credentials", "123"))
    assert raw["account_id"] == "123"
    assert "abc" not in raw["slack"]


def test_set_merges_and_drops_account_keys(cipher):
    store = CredentialStore(MemoryDocumentStore(), cipher)
    run(store.set_credentials("123", {"slack": {"token": "abc"}}))
    out = run(store.set_credentials("123", {"accountId": "999", "proactive": {"client_id": "c", "client_secret": "s"}}))
    assert out == {
        "account_id": "123",
        "slack": {"token": "abc"},
        "proactive": {"client_id": "c", "client_secret": "s"},
    }


def test_non_json_plaintext_returned_raw(cipher):
    docs = MemoryDocumentStore()
    run(docs.set("credentials", "123", {"account_id": "123", "legacy": cipher.encrypt("plain-key")}))
    store = CredentialStore(docs, cipher)
    assert run(store.get_credentials("123"))["legacy"] == "plain-key"
    assert run(store.get_integration("123", "legacy")) == "plain-key"
    assert run(store.get_integration("123", "missing")) is None


def test_undecryptable_field_is_config_error(cipher):
    docs = MemoryDocumentStore()
    run(docs.set("credentials", "123", {"account_id": "123", "broken": "not-hex"}))
    with pytest.raises(BFFError):
        run(CredentialStore(docs, cipher).get_credentials("123"))


def test_unknown_account_has_only_id(cipher):
    store = CredentialStore(MemoryDocumentStore(), cipher)
    assert run(store.get_credentials("nobody")) == {"account_id": "nobody"}
