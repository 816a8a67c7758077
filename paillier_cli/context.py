import sys
import logging
from dataclasses import dataclass
from typing import TextIO
from .params import bcolors
from .errors import CliError, LibraryError

LOGGER_NAME = "paillier_cli"

# -----------------------------
# Logging
# -----------------------------
class ColorFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: bcolors.GREY,
        logging.INFO: bcolors.OKCYAN,
        logging.WARNING: bcolors.WARNING,
        logging.ERROR: bcolors.FAIL,
        logging.CRITICAL: bcolors.FAIL,
    }

    def __init__(self, color: bool):
        super().__init__("%(levelname)s: %(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self.color:
            return text
        return f"{self.LEVEL_COLORS.get(record.levelno, '')}{text}{bcolors.ENDC}"

def _is_tty(stream) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())

def configure_logging(verbose: bool, stream: TextIO) -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    for handler in list(log.handlers):
        log.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(ColorFormatter(color=_is_tty(stream)))
    log.addHandler(handler)
    log.setLevel(logging.INFO if verbose else logging.WARNING)
    log.propagate = False
    return log

# -----------------------------
# Per-invocation Context
# -----------------------------
@dataclass
class RunContext:
    log: logging.Logger
    stdin: TextIO
    stdout: TextIO
    stderr: TextIO

    def report(self, err: CliError) -> int:
        """Surface an error value to the user and return its exit status."""
        if isinstance(err, LibraryError):
            self.log.warning("Cryptosystem operation failed: %s", err)
            return err.exit_code
        label = "ERROR:"
        if _is_tty(self.stderr):
            label = f"{bcolors.FAIL}ERROR:{bcolors.ENDC}"
        print(label, err, file=self.stderr)
        return err.exit_code

def make_context(verbose: bool = False, stdin: TextIO | None = None,
                 stdout: TextIO | None = None, stderr: TextIO | None = None) -> RunContext:
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr
    return RunContext(log=configure_logging(verbose, stderr), stdin=stdin, stdout=stdout, stderr=stderr)
