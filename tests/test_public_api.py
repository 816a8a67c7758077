import pytest

from paillier_cli import (
    EncryptedValue,
    FormatError,
    LibraryError,
    PrivateKeyMaterial,
    PublicKeyMaterial,
    add_encrypted,
    add_plaintext,
    b64url_to_int,
    decrypt_value,
    encrypt_value,
    generate_keypair,
    int_to_b64url,
)


def test_generate_keypair_carries_library_components():
    key = generate_keypair(256, comment="unit")
    assert key.comment == "unit"
    assert set(key.private_fields) == {"p", "q"}
    p = b64url_to_int(key.private_fields["p"])
    q = b64url_to_int(key.private_fields["q"])
    assert p * q == key.public_key.n


def test_encrypt_then_decrypt_within_precision(private_material):
    encrypted = encrypt_value(private_material.public_key, 3.14)
    assert isinstance(encrypted, EncryptedValue)
    assert encrypted.ciphertext >= 0
    assert encrypted.exponent < 0
    assert decrypt_value(private_material, encrypted) == pytest.approx(3.14, abs=16.0 ** encrypted.exponent)


def test_encrypt_with_unusable_modulus_is_a_library_error():
    assert isinstance(encrypt_value(PublicKeyMaterial(n=0), 1.0), LibraryError)


def test_add_plaintext(private_material):
    encrypted = encrypt_value(private_material.public_key, 1.5)
    total = add_plaintext(private_material.public_key, encrypted, 2.25)
    assert decrypt_value(private_material, total) == pytest.approx(3.75)


def test_add_encrypted(private_material):
    first = encrypt_value(private_material.public_key, 1.5)
    second = encrypt_value(private_material.public_key, -4.0)
    total = add_encrypted(private_material.public_key, first, second)
    assert decrypt_value(private_material, total) == pytest.approx(-2.5)


def test_private_key_from_totient(keypair, private_material):
    _, private_key = keypair
    totient = (private_key.p - 1) * (private_key.q - 1)
    key = PrivateKeyMaterial(private_material.public_key, {"lambda": int_to_b64url(totient)})
    encrypted = encrypt_value(key.public_key, 42.0)
    assert decrypt_value(key, encrypted) == pytest.approx(42.0)


def test_private_key_without_components_is_a_format_error(private_material):
    key = PrivateKeyMaterial(private_material.public_key, {"kid": "nothing useful"})
    encrypted = encrypt_value(key.public_key, 1.0)
    assert isinstance(decrypt_value(key, encrypted), FormatError)


def test_private_key_with_wrong_factors_is_a_library_error(private_material):
    key = PrivateKeyMaterial(private_material.public_key, {"p": int_to_b64url(3), "q": int_to_b64url(5)})
    assert isinstance(decrypt_value(key, EncryptedValue(ciphertext=1, exponent=0)), LibraryError)
