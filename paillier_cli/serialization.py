import json
from .errors import FormatError
from .params import (
    KEY_TYPE, PRIVATE_KEY_OPS,
    PublicKeyMaterial, PrivateKeyMaterial, EncryptedValue,
)
from .utils import int_to_b64url, b64url_to_int

# Fields the codec understands on a private key; everything else is opaque.
_PRIVATE_KEY_RESERVED = ("kty", "key_ops", "pub", "comment")

# -----------------------------
# Canonical JSON Text
# -----------------------------
def dumps(doc) -> str:
    return json.dumps(doc, separators=(",", ":"), ensure_ascii=False)

def loads(text: str):
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as e:
        raise FormatError(f"Not a JSON document: {e}") from e

def _require_object(doc, what: str) -> dict:
    if not isinstance(doc, dict):
        raise FormatError(f"{what} must be a JSON object")
    return doc

def _require_field(doc: dict, name: str, what: str):
    if name not in doc:
        raise FormatError(f"{what} is missing field {name!r}")
    return doc[name]

# -----------------------------
# Public Key
# -----------------------------
def encode_public_key(key: PublicKeyMaterial) -> dict:
    return {"n": int_to_b64url(key.n)}

def decode_public_key(doc) -> PublicKeyMaterial:
    # Extra JWK members (kty, alg, kid, ...) are tolerated and dropped.
    doc = _require_object(doc, "Public key")
    return PublicKeyMaterial(n=b64url_to_int(_require_field(doc, "n", "Public key")))

# -----------------------------
# Private Key
# -----------------------------
def encode_private_key(key: PrivateKeyMaterial) -> dict:
    out = {
        "kty": KEY_TYPE,
        "key_ops": list(PRIVATE_KEY_OPS),
        "pub": encode_public_key(key.public_key),
    }
    for name, value in key.private_fields.items():
        if name in _PRIVATE_KEY_RESERVED:
            raise ValueError(f"Private field {name!r} clashes with a reserved field")
        out[name] = value
    out["comment"] = key.comment
    return out

def decode_private_key(doc) -> PrivateKeyMaterial:
    doc = _require_object(doc, "Private key")
    kty = doc.get("kty", KEY_TYPE)
    if kty != KEY_TYPE:
        raise FormatError(f"Unsupported key type {kty!r}, expected {KEY_TYPE!r}")
    public_key = decode_public_key(_require_field(doc, "pub", "Private key"))
    comment = doc.get("comment", "")
    if comment is None:
        comment = ""
    if not isinstance(comment, str):
        raise FormatError("Private key comment must be a string")
    private_fields = {k: v for k, v in doc.items() if k not in _PRIVATE_KEY_RESERVED}
    return PrivateKeyMaterial(public_key=public_key, private_fields=private_fields, comment=comment)

# -----------------------------
# Encrypted Value
# -----------------------------
def encode_encrypted(value: EncryptedValue) -> dict:
    return {"v": int_to_b64url(value.ciphertext), "e": int(value.exponent)}

def decode_encrypted(doc) -> EncryptedValue:
    doc = _require_object(doc, "Encrypted value")
    ciphertext = b64url_to_int(_require_field(doc, "v", "Encrypted value"))
    exponent = _require_field(doc, "e", "Encrypted value")
    if isinstance(exponent, bool) or not isinstance(exponent, int):
        raise FormatError(f"Encrypted value exponent must be an integer, got {exponent!r}")
    return EncryptedValue(ciphertext=ciphertext, exponent=exponent)
