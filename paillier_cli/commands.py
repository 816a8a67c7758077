import math
import getpass
from dataclasses import dataclass
from typing import Callable
from .context import RunContext
from .errors import CliError, FormatError, ParseError
from .fileio import read_json, write_document
from .homomorphic import add_plaintext, add_encrypted
from .keystore import store_key_in_keystore, retrieve_key_from_keystore
from .params import PROG, DEFAULT_KEYSIZE, MIN_KEYSIZE, OutputTarget, resolve_output
from .public_api import generate_keypair, encrypt_value, decrypt_value
from .serialization import (
    dumps, loads,
    encode_public_key, decode_public_key,
    encode_private_key, decode_private_key,
    encode_encrypted, decode_encrypted,
)

# -----------------------------
# Command Descriptors
# -----------------------------
@dataclass(frozen=True)
class Option:
    flags: tuple
    dest: str
    help: str
    metavar: str | None = None
    type: Callable = str
    takes_value: bool = True

    def add_to(self, parser):
        if self.takes_value:
            parser.add_argument(*self.flags, dest=self.dest, metavar=self.metavar,
                                type=self.type, default=None, help=self.help)
        else:
            parser.add_argument(*self.flags, dest=self.dest, action="store_true", help=self.help)

@dataclass(frozen=True)
class Command:
    name: str
    blurb: str
    description: str
    usage: str
    action: Callable
    process_options: Callable
    options: tuple = ()

@dataclass(frozen=True)
class GenKeyOptions:
    keysize: int
    comment: str
    keystore: str | None = None
    key_name: str | None = None
    passphrase: str | None = None

@dataclass(frozen=True)
class IOOptions:
    output: OutputTarget
    keystore: str | None = None
    passphrase: str | None = None

OUTPUT_OPTION = Option(("-o", "--output"), "output", "Output to given file instead of stdout", metavar="FILE")
KEYSTORE_OPTION = Option(("--keystore",), "keystore", "Read the private key from this keystore; PRIVATEKEY is then the key name", metavar="FILE")
PASSPHRASE_OPTION = Option(("--passphrase",), "passphrase", "Keystore passphrase (prompted for when omitted)", metavar="TEXT")

# -----------------------------
# Option Processing
# -----------------------------
def process_genpkey_options(ctx: RunContext, ns) -> GenKeyOptions | ParseError:
    if ns.keysize is None:
        keysize = DEFAULT_KEYSIZE
        ctx.log.info("Using default key size of %d", keysize)
    else:
        keysize = ns.keysize
        ctx.log.info("Using provided key size of %d", keysize)
    if keysize < MIN_KEYSIZE or keysize % 2:
        return ParseError(f"Key size must be an even number of bits, at least {MIN_KEYSIZE} (got {keysize})")
    comment = ns.message if ns.message is not None else ""
    ctx.log.info("Comment: %s", comment)
    if ns.keystore and not ns.key_name:
        return ParseError("--keystore requires --key-name")
    if ns.key_name and not ns.keystore:
        return ParseError("--key-name requires --keystore")
    return GenKeyOptions(keysize=keysize, comment=comment, keystore=ns.keystore,
                         key_name=ns.key_name, passphrase=ns.passphrase)

def process_io_options(ctx: RunContext, ns) -> IOOptions:
    output = resolve_output(getattr(ns, "output", None))
    ctx.log.info("Output destination: %s", output)
    return IOOptions(output=output, keystore=getattr(ns, "keystore", None),
                     passphrase=getattr(ns, "passphrase", None))

# -----------------------------
# Action Helpers
# -----------------------------
def _positionals(ctx: RunContext, command: str, args: list, *names: str):
    if len(args) < len(names):
        missing = " ".join(names[len(args):])
        return ParseError(f"Missing argument(s): {missing}. Try {PROG} {command} --help")
    if len(args) > len(names):
        ctx.log.info("Ignoring extra arguments: %s", args[len(names):])
    ctx.log.info("Args: %s", args[:len(names)])
    return args[:len(names)]

def _parse_plaintext(token: str) -> float | ParseError:
    try:
        value = float(token)
    except ValueError:
        return ParseError(f"PLAINTEXT must be a number, got {token!r}")
    if not math.isfinite(value):
        return ParseError(f"PLAINTEXT must be finite, got {token!r}")
    return value

def _decode(decoder, doc, what: str, source: str):
    try:
        return decoder(doc)
    except FormatError as e:
        return FormatError(f"{what} {source}: {e}")

def _passphrase(opts) -> str:
    if opts.passphrase is not None:
        return opts.passphrase
    return getpass.getpass("Keystore passphrase: ")

def _load_private_key(ctx: RunContext, opts: IOOptions, source: str):
    """Returns (PrivateKeyMaterial, raw document) or an error value."""
    if opts.keystore:
        ctx.log.info("Looking up %s in keystore %s", source, opts.keystore)
        text = retrieve_key_from_keystore(_passphrase(opts), source, opts.keystore)
        if isinstance(text, CliError):
            return text
        try:
            doc = loads(text)
        except FormatError as e:
            return FormatError(f"Private key {source}: {e}")
    else:
        doc = read_json(ctx, source, "Private key")
        if isinstance(doc, CliError):
            return doc
    key = _decode(decode_private_key, doc, "Private key", source)
    if isinstance(key, CliError):
        return key
    return key, doc

def _load(ctx: RunContext, decoder, source: str, what: str):
    doc = read_json(ctx, source, what)
    if isinstance(doc, CliError):
        return doc
    return _decode(decoder, doc, what, source)

def _finish(ctx: RunContext, target: OutputTarget, text: str) -> int:
    err = write_document(ctx, target, text)
    if err is not None:
        return ctx.report(err)
    return 0

# -----------------------------
# Actions
# -----------------------------
def run_genpkey(ctx: RunContext, opts: GenKeyOptions, args: list) -> int:
    if len(args) > 1:
        ctx.log.info("Ignoring extra arguments: %s", args[1:])
    output = resolve_output(args[0] if args else None)
    ctx.log.info("Generating a %d bit keypair", opts.keysize)
    key = generate_keypair(opts.keysize, opts.comment)
    if isinstance(key, CliError):
        return ctx.report(key)
    ctx.log.info("Keypair generated")
    private_doc = dumps(encode_private_key(key))
    if opts.keystore:
        err = store_key_in_keystore(_passphrase(opts), opts.key_name, private_doc, opts.keystore)
        if err is not None:
            return ctx.report(err)
        ctx.log.info("Private key stored in %s as %s", opts.keystore, opts.key_name)
        return _finish(ctx, output, dumps(encode_public_key(key.public_key)))
    return _finish(ctx, output, private_doc)

def run_extract(ctx: RunContext, opts: IOOptions, args: list) -> int:
    names = _positionals(ctx, "extract", args, "PRIVATEKEY", "OUTPUT")
    if isinstance(names, CliError):
        return ctx.report(names)
    private_source, destination = names
    loaded = _load_private_key(ctx, opts, private_source)
    if isinstance(loaded, CliError):
        return ctx.report(loaded)
    _, doc = loaded
    return _finish(ctx, resolve_output(destination), dumps(doc["pub"]))

def run_encrypt(ctx: RunContext, opts: IOOptions, args: list) -> int:
    names = _positionals(ctx, "encrypt", args, "PUBLICKEY", "PLAINTEXT")
    if isinstance(names, CliError):
        return ctx.report(names)
    public_source, plaintext = names
    public_key = _load(ctx, decode_public_key, public_source, "Public key")
    if isinstance(public_key, CliError):
        return ctx.report(public_key)
    value = _parse_plaintext(plaintext)
    if isinstance(value, CliError):
        return ctx.report(value)
    ctx.log.info("Encrypting %s", value)
    encrypted = encrypt_value(public_key, value)
    if isinstance(encrypted, CliError):
        return ctx.report(encrypted)
    ctx.log.info("Encrypted with exponent %d", encrypted.exponent)
    return _finish(ctx, opts.output, dumps(encode_encrypted(encrypted)))

def run_decrypt(ctx: RunContext, opts: IOOptions, args: list) -> int:
    names = _positionals(ctx, "decrypt", args, "PRIVATEKEY", "ENCRYPTED")
    if isinstance(names, CliError):
        return ctx.report(names)
    private_source, encrypted_source = names
    loaded = _load_private_key(ctx, opts, private_source)
    if isinstance(loaded, CliError):
        return ctx.report(loaded)
    private_key, _ = loaded
    encrypted = _load(ctx, decode_encrypted, encrypted_source, "Encrypted file")
    if isinstance(encrypted, CliError):
        return ctx.report(encrypted)
    value = decrypt_value(private_key, encrypted)
    if isinstance(value, CliError):
        return ctx.report(value)
    ctx.log.info("Decrypted")
    return _finish(ctx, opts.output, repr(value))

def run_add(ctx: RunContext, opts: IOOptions, args: list) -> int:
    names = _positionals(ctx, "add", args, "PUBLICKEY", "ENCRYPTED", "PLAINTEXT")
    if isinstance(names, CliError):
        return ctx.report(names)
    public_source, encrypted_source, plaintext = names
    public_key = _load(ctx, decode_public_key, public_source, "Public key")
    if isinstance(public_key, CliError):
        return ctx.report(public_key)
    encrypted = _load(ctx, decode_encrypted, encrypted_source, "Encrypted file")
    if isinstance(encrypted, CliError):
        return ctx.report(encrypted)
    value = _parse_plaintext(plaintext)
    if isinstance(value, CliError):
        return ctx.report(value)
    total = add_plaintext(public_key, encrypted, value)
    if isinstance(total, CliError):
        return ctx.report(total)
    return _finish(ctx, opts.output, dumps(encode_encrypted(total)))

def run_addenc(ctx: RunContext, opts: IOOptions, args: list) -> int:
    names = _positionals(ctx, "addenc", args, "PUBLICKEY", "ENCRYPTED1", "ENCRYPTED2")
    if isinstance(names, CliError):
        return ctx.report(names)
    public_source, first_source, second_source = names
    public_key = _load(ctx, decode_public_key, public_source, "Public key")
    if isinstance(public_key, CliError):
        return ctx.report(public_key)
    operands = []
    for source in (first_source, second_source):
        encrypted = _load(ctx, decode_encrypted, source, "Encrypted file")
        if isinstance(encrypted, CliError):
            return ctx.report(encrypted)
        operands.append(encrypted)
    total = add_encrypted(public_key, *operands)
    if isinstance(total, CliError):
        return ctx.report(total)
    return _finish(ctx, opts.output, dumps(encode_encrypted(total)))

# -----------------------------
# Registry
# -----------------------------
GENPKEY = Command(
    name="genpkey",
    blurb="Create a new paillier keypair",
    description=(
        "Generate a new public/private keypair for use in paillier operations.\n"
        "The private key is written as a JSON Web Key style document with the\n"
        "public key embedded under \"pub\"."
    ),
    usage="[--keysize=KEYSIZE] [OUTPUT]",
    action=run_genpkey,
    process_options=process_genpkey_options,
    options=(
        Option(("-s", "--keysize"), "keysize", f"The keysize in bits. Defaults to {DEFAULT_KEYSIZE}", metavar="N", type=int),
        Option(("-m", "--message"), "message", "Add an identifying comment to the key", metavar="TEXT"),
        Option(("--keystore",), "keystore", "Store the private key in this keystore and output only the public key", metavar="FILE"),
        Option(("--key-name",), "key_name", "Name of the private key inside the keystore", metavar="NAME"),
        PASSPHRASE_OPTION,
    ),
)

EXTRACT = Command(
    name="extract",
    blurb="Extract the public key from a PRIVATE key",
    description="Extract the public key from a private key.\nOUTPUT may be - for stdout.",
    usage="PRIVATEKEY OUTPUT",
    action=run_extract,
    process_options=process_io_options,
    options=(KEYSTORE_OPTION, PASSPHRASE_OPTION),
)

ENCRYPT = Command(
    name="encrypt",
    blurb="Encrypt a value with the given public key",
    description=(
        "Encrypt a value with the given public key.\n\n"
        "The PLAINTEXT will be interpreted as a floating point number.\n\n"
        "Output will be a JSON object with a \"v\" attribute containing the\n"
        "ciphertext as a string, and \"e\" the exponent as an integer."
    ),
    usage="PUBLICKEY PLAINTEXT",
    action=run_encrypt,
    process_options=process_io_options,
    options=(OUTPUT_OPTION,),
)

DECRYPT = Command(
    name="decrypt",
    blurb="Decrypt ENCRYPTED using PRIVATEKEY",
    description="Decrypt ENCRYPTED using PRIVATEKEY.\nThe decrypted value could be an integer or a float.",
    usage="PRIVATEKEY ENCRYPTED",
    action=run_decrypt,
    process_options=process_io_options,
    options=(OUTPUT_OPTION, KEYSTORE_OPTION, PASSPHRASE_OPTION),
)

ADD = Command(
    name="add",
    blurb="Add ENCRYPTED to PLAINTEXT",
    description="Add the ENCRYPTED and PLAINTEXT numbers together,\nproducing a new encrypted number.",
    usage="PUBLICKEY ENCRYPTED PLAINTEXT",
    action=run_add,
    process_options=process_io_options,
    options=(OUTPUT_OPTION,),
)

ADDENC = Command(
    name="addenc",
    blurb="Add ENCRYPTED1 to ENCRYPTED2",
    description="Add two encrypted numbers together,\nproducing a new encrypted number.",
    usage="PUBLICKEY ENCRYPTED1 ENCRYPTED2",
    action=run_addenc,
    process_options=process_io_options,
    options=(OUTPUT_OPTION,),
)

COMMANDS = {c.name: c for c in (GENPKEY, EXTRACT, ENCRYPT, DECRYPT, ADD, ADDENC)}
