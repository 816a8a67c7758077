# Error values. I/O helpers and library adapters return these; the codec
# raises FormatError and the calling action turns it back into a value.

class CliError(Exception):
    kind = "error"
    exit_code = 1

class ParseError(CliError):
    kind = "parse"
    exit_code = 2

class FileError(CliError):
    kind = "file"

class FormatError(CliError, ValueError):
    kind = "format"

class LibraryError(CliError):
    kind = "library"

class KeystoreError(CliError):
    kind = "keystore"
