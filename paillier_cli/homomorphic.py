from phe.encoding import EncodedNumber
from .errors import CliError
from .params import ENCRYPTION_PRECISION, PublicKeyMaterial, EncryptedValue
from .public_api import library_call, to_library_public_key, to_library_encrypted, from_library_encrypted

def _add(what: str, left, right) -> EncryptedValue | CliError:
    total = library_call(what, lambda: left + right)
    if isinstance(total, CliError):
        return total
    return library_call(what, from_library_encrypted, total)

def add_plaintext(key: PublicKeyMaterial, value: EncryptedValue, plaintext: float) -> EncryptedValue | CliError:
    public_key = to_library_public_key(key)
    if isinstance(public_key, CliError):
        return public_key
    encrypted = to_library_encrypted(public_key, value)
    if isinstance(encrypted, CliError):
        return encrypted
    encoded = library_call("Encoding failed", EncodedNumber.encode, public_key, plaintext, precision=ENCRYPTION_PRECISION)
    if isinstance(encoded, CliError):
        return encoded
    return _add("Homomorphic addition failed", encrypted, encoded)

def add_encrypted(key: PublicKeyMaterial, first: EncryptedValue, second: EncryptedValue) -> EncryptedValue | CliError:
    public_key = to_library_public_key(key)
    if isinstance(public_key, CliError):
        return public_key
    operands = []
    for value in (first, second):
        encrypted = to_library_encrypted(public_key, value)
        if isinstance(encrypted, CliError):
            return encrypted
        operands.append(encrypted)
    return _add("Homomorphic addition failed", *operands)
