# paillier_cli/__init__.py

from .params import (
    PublicKeyMaterial, PrivateKeyMaterial, EncryptedValue,
    Stdout, FileTarget, resolve_output,
)
from .errors import CliError, ParseError, FileError, FormatError, LibraryError, KeystoreError
from .utils import int_to_bytes_be, bytes_be_to_int, int_to_b64url, b64url_to_int
from .serialization import (
    dumps, loads,
    encode_public_key, decode_public_key,
    encode_private_key, decode_private_key,
    encode_encrypted, decode_encrypted,
)
from .public_api import generate_keypair, encrypt_value, decrypt_value
from .homomorphic import add_plaintext, add_encrypted
from .keystore import create_keystore, load_keystore, store_key_in_keystore, retrieve_key_from_keystore
from .commands import COMMANDS
from .cli import main
