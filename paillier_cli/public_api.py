# Adapter between the codec's key/ciphertext material and the phe library.
# Every library failure comes back as a LibraryError value.
from phe import paillier
from .errors import CliError, FormatError, LibraryError
from .params import ENCRYPTION_PRECISION, PublicKeyMaterial, PrivateKeyMaterial, EncryptedValue
from .utils import int_to_b64url, b64url_to_int

def library_call(what: str, fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except Exception as e:
        return LibraryError(f"{what}: {str(e) or type(e).__name__}")

# -----------------------------
# Conversions
# -----------------------------
def to_library_public_key(key: PublicKeyMaterial):
    return library_call("Invalid public key", paillier.PaillierPublicKey, key.n)

def to_library_private_key(key: PrivateKeyMaterial):
    public_key = to_library_public_key(key.public_key)
    if isinstance(public_key, CliError):
        return public_key
    fields = key.private_fields
    try:
        if "p" in fields and "q" in fields:
            p, q = b64url_to_int(fields["p"]), b64url_to_int(fields["q"])
            return library_call("Invalid private key", paillier.PaillierPrivateKey, public_key, p, q)
        if "lambda" in fields:
            totient = b64url_to_int(fields["lambda"])
            return library_call("Invalid private key", paillier.PaillierPrivateKey.from_totient, public_key, totient)
    except FormatError as e:
        return FormatError(f"Private key component: {e}")
    return FormatError("Private key has no usable private components (expected 'p' and 'q', or 'lambda')")

def private_fields_from_library(private_key) -> dict:
    return {"p": int_to_b64url(private_key.p), "q": int_to_b64url(private_key.q)}

def to_library_encrypted(public_key, value: EncryptedValue):
    return library_call("Invalid ciphertext", paillier.EncryptedNumber, public_key, value.ciphertext, value.exponent)

def from_library_encrypted(encrypted) -> EncryptedValue:
    return EncryptedValue(ciphertext=encrypted.ciphertext(), exponent=encrypted.exponent)

# -----------------------------
# Operations
# -----------------------------
def generate_keypair(bits: int, comment: str = "") -> PrivateKeyMaterial | LibraryError:
    keypair = library_call("Key generation failed", paillier.generate_paillier_keypair, n_length=bits)
    if isinstance(keypair, CliError):
        return keypair
    public_key, private_key = keypair
    return PrivateKeyMaterial(
        public_key=PublicKeyMaterial(n=public_key.n),
        private_fields=private_fields_from_library(private_key),
        comment=comment,
    )

def encrypt_value(key: PublicKeyMaterial, plaintext: float) -> EncryptedValue | LibraryError:
    public_key = to_library_public_key(key)
    if isinstance(public_key, CliError):
        return public_key
    encrypted = library_call("Encryption failed", public_key.encrypt, plaintext, precision=ENCRYPTION_PRECISION)
    if isinstance(encrypted, CliError):
        return encrypted
    return library_call("Encryption failed", from_library_encrypted, encrypted)

def decrypt_value(key: PrivateKeyMaterial, value: EncryptedValue):
    private_key = to_library_private_key(key)
    if isinstance(private_key, CliError):
        return private_key
    encrypted = to_library_encrypted(private_key.public_key, value)
    if isinstance(encrypted, CliError):
        return encrypted
    return library_call("Decryption failed", private_key.decrypt, encrypted)
