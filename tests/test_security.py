"""Tests for password hashing."""

from security import hash_password, verify_password


def test_hash_has_salt_and_digest():
    hashed = hash_password("secret")

    salt_hex, digest_hex = hashed.split("$")
    assert len(bytes.fromhex(salt_hex)) == 16
    assert len(bytes.fromhex(digest_hex)) == 32
    assert "secret" not in hashed


def test_same_password_gets_different_salts():
    assert hash_password("secret") != hash_password("secret")


def test_verify_password():
    hashed = hash_password("secret")

    assert verify_password("secret", hashed)
    assert not verify_password("Secret", hashed)


def test_verify_rejects_malformed_hash():
    assert not verify_password("secret", "not-a-hash")
    assert not verify_password("secret", "zz$zz")
