import sys
import argparse
from .commands import COMMANDS, Command, Option
from .context import make_context
from .errors import CliError, ParseError
from .params import PROG

BANNER = "Paillier CLI - key and ciphertext interoperability tool"

GLOBAL_OPTIONS = (
    Option(("-h", "--help"), "help", "Show this message and exit.", takes_value=False),
    Option(("-v", "--verbose"), "verbose", "Enable logging", takes_value=False),
)

class ArgumentParser(argparse.ArgumentParser):
    """argparse that reports problems as ParseError instead of exiting."""

    def error(self, message):
        raise ParseError(message)

# -----------------------------
# Parsers & Help
# -----------------------------
def build_parser(command: Command | None = None) -> ArgumentParser:
    if command is None:
        lines = [BANNER, "Commands:"]
        lines += [f"    {c.name}: {c.blurb}" for c in COMMANDS.values()]
        lines.append(f"Try {PROG} COMMAND --help for command usage.")
        parser = ArgumentParser(prog=PROG, usage=f"{PROG} COMMAND [OPTIONS]", description="\n".join(lines),
                                add_help=False, allow_abbrev=False,
                                formatter_class=argparse.RawDescriptionHelpFormatter)
        options = GLOBAL_OPTIONS
    else:
        parser = ArgumentParser(prog=f"{PROG} {command.name}", usage=f"%(prog)s [OPTIONS] {command.usage}",
                                description=f"{BANNER}\n{command.description}",
                                add_help=False, allow_abbrev=False,
                                formatter_class=argparse.RawDescriptionHelpFormatter)
        options = GLOBAL_OPTIONS + command.options
    for option in options:
        option.add_to(parser)
    parser.add_argument("args", nargs="*", help=argparse.SUPPRESS)
    return parser

def program_help() -> str:
    return build_parser().format_help()

# -----------------------------
# Dispatcher
# -----------------------------
def main(argv=None, stdin=None, stdout=None, stderr=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr

    command = COMMANDS.get(argv[0]) if argv else None
    if command is None:
        stdout.write(program_help())
        return 0

    parser = build_parser(command)
    try:
        ns = parser.parse_intermixed_args(argv[1:])
    except ParseError as e:
        print(f"Parsing failed.  Reason: {e}", file=stderr)
        stdout.write(program_help())
        return e.exit_code

    ctx = make_context(ns.verbose, stdin, stdout, stderr)
    if ns.help:
        stdout.write(parser.format_help())
        return 0

    opts = command.process_options(ctx, ns)
    if isinstance(opts, CliError):
        code = ctx.report(opts)
        stderr.write(parser.format_usage())
        return code

    ctx.log.info("Running the %s command", command.name)
    try:
        return command.action(ctx, opts, list(ns.args))
    except Exception as e:
        ctx.log.warning("Failed to run command. Reason: %s", e)
        ctx.log.info("Details", exc_info=True)
        return 0

def run():
    sys.exit(main())

if __name__ == "__main__":
    run()
