import os
import json
import secrets
from base64 import b64encode, b64decode, urlsafe_b64encode
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives import hashes
from .errors import CliError, FileError, KeystoreError
from .params import KDF_ITERATIONS, KDF_SALT_BYTES

# -----------------------------
# Key Management
# -----------------------------
def _fernet(passphrase: str, salt: bytes) -> Fernet:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return Fernet(urlsafe_b64encode(kdf.derive(passphrase.encode())))

def _write_keystore(keystore: dict, keystore_file: str) -> FileError | None:
    try:
        with open(keystore_file, "w", encoding="utf-8") as kf:
            json.dump(keystore, kf)
    except OSError as e:
        return FileError(f"Keystore not writable: {keystore_file} ({e})")
    return None

def create_keystore(passphrase: str, keystore_file: str) -> FileError | None:
    salt = secrets.token_bytes(KDF_SALT_BYTES)
    _fernet(passphrase, salt)  # materialized to ensure validity
    keystore = {"salt": b64encode(salt).decode(), "keys": {}}
    return _write_keystore(keystore, keystore_file)

def load_keystore(passphrase: str, keystore_file: str):
    """Returns (keystore, fernet) or an error value."""
    try:
        with open(keystore_file, "r", encoding="utf-8") as kf:
            keystore = json.load(kf)
    except FileNotFoundError:
        return FileError(f"Keystore not found: {keystore_file}")
    except (OSError, UnicodeDecodeError) as e:
        return FileError(f"Keystore not readable: {keystore_file} ({e})")
    except json.JSONDecodeError as e:
        return KeystoreError(f"Keystore {keystore_file} is corrupt: {e}")
    if not isinstance(keystore, dict) or not isinstance(keystore.get("keys"), dict) or "salt" not in keystore:
        return KeystoreError(f"Keystore {keystore_file} is corrupt: missing salt or keys")
    try:
        salt = b64decode(keystore["salt"], validate=True)
    except (TypeError, ValueError) as e:
        return KeystoreError(f"Keystore {keystore_file} is corrupt: bad salt ({e})")
    return keystore, _fernet(passphrase, salt)

def store_key_in_keystore(passphrase: str, key_name: str, key_text: str, keystore_file: str) -> CliError | None:
    if not os.path.exists(keystore_file):
        err = create_keystore(passphrase, keystore_file)
        if err is not None:
            return err
    loaded = load_keystore(passphrase, keystore_file)
    if isinstance(loaded, CliError):
        return loaded
    keystore, fernet = loaded
    # Reject a passphrase that does not open the existing entries.
    existing = next(iter(keystore["keys"].values()), None)
    if existing is not None:
        try:
            fernet.decrypt(existing.encode())
        except (InvalidToken, AttributeError):
            return KeystoreError(f"Passphrase does not match keystore {keystore_file}")
    keystore["keys"][key_name] = fernet.encrypt(key_text.encode()).decode()
    return _write_keystore(keystore, keystore_file)

def retrieve_key_from_keystore(passphrase: str, key_name: str, keystore_file: str) -> str | CliError:
    loaded = load_keystore(passphrase, keystore_file)
    if isinstance(loaded, CliError):
        return loaded
    keystore, fernet = loaded
    if key_name not in keystore["keys"]:
        return KeystoreError(f"Key {key_name} not found in keystore {keystore_file}")
    encrypted_key = keystore["keys"][key_name]
    try:
        return fernet.decrypt(encrypted_key.encode()).decode()
    except (InvalidToken, AttributeError, UnicodeDecodeError):
        return KeystoreError("Failed to decrypt key. Wrong passphrase?")
