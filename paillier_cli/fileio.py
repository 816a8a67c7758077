from .context import RunContext
from .errors import CliError, FileError, FormatError
from .params import OutputTarget, Stdout, FileTarget
from .serialization import loads

STDIN_TOKEN = "-"

# -----------------------------
# Reading
# -----------------------------
def read_text(ctx: RunContext, path: str, what: str = "Input file") -> str | FileError:
    if path == STDIN_TOKEN:
        ctx.log.info("Reading %s from stdin", what.lower())
        return ctx.stdin.read()
    ctx.log.info("Reading %s from %s", what.lower(), path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return FileError(f"{what} not found: {path}")
    except (OSError, UnicodeDecodeError) as e:
        return FileError(f"{what} not readable: {path} ({e})")

def read_json(ctx: RunContext, path: str, what: str = "Input file"):
    text = read_text(ctx, path, what)
    if isinstance(text, CliError):
        return text
    try:
        return loads(text)
    except FormatError as e:
        return FormatError(f"{what} {path}: {e}")

# -----------------------------
# Writing
# -----------------------------
def write_document(ctx: RunContext, target: OutputTarget, text: str) -> FileError | None:
    """Write one newline-terminated document. The text is fully built before any file is opened."""
    match target:
        case Stdout():
            ctx.log.info("Writing output to stdout")
            ctx.stdout.write(text + "\n")
            ctx.stdout.flush()
        case FileTarget(path=path):
            ctx.log.info("Using destination of %s", path)
            try:
                with open(path, "w", encoding="utf-8") as f:
                    f.write(text + "\n")
            except OSError as e:
                ctx.log.warning("Couldn't write to %s: %s", path, e)
                return FileError(f"Output file not writable: {path} ({e})")
    return None
