from dataclasses import dataclass, field

# -----------------------------
# CLI Colors
# -----------------------------
class bcolors:
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    GREY = '\033[90m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'

PROG = "paillier-cli"
DEFAULT_KEYSIZE = 2048
MIN_KEYSIZE = 128
ENCRYPTION_PRECISION = 2 ** -32  # fixed-point scale handed to the library
KEY_TYPE = "DAJ"
PRIVATE_KEY_OPS = ["decrypt"]
KDF_ITERATIONS = 100000
KDF_SALT_BYTES = 16

# -----------------------------
# Key & Ciphertext Material
# -----------------------------
@dataclass(frozen=True)
class PublicKeyMaterial:
    n: int

@dataclass(frozen=True)
class PrivateKeyMaterial:
    public_key: PublicKeyMaterial
    # library-specific components, kept in their serialized form
    private_fields: dict = field(default_factory=dict)
    comment: str = ""

@dataclass(frozen=True)
class EncryptedValue:
    ciphertext: int
    exponent: int

# -----------------------------
# Output Targets
# -----------------------------
@dataclass(frozen=True)
class Stdout:
    def __str__(self) -> str:
        return "<stdout>"

@dataclass(frozen=True)
class FileTarget:
    path: str

    def __str__(self) -> str:
        return self.path

OutputTarget = Stdout | FileTarget

def resolve_output(token: str | None) -> OutputTarget:
    if token is None or token == "-":
        return Stdout()
    return FileTarget(token)
