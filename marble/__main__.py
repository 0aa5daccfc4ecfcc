from argparse import ArgumentParser
from pathlib import Path
from types import ModuleType
from typing import Optional
import code
import logging
import os
import sys

from .environment import Environment
from .evaluator import evaluate, evaluate_source
from .lexer import Lexer
from .objects import Error
from .parser import ParseFailure, Parser

readline: Optional[ModuleType]
try:
    # REPL readline support.
    import readline
except ImportError:
    readline = None

logger = logging.getLogger(__name__)

HISTFILE_NAME = ".marble-history"
HISTFILE_SIZE = 4096
# Every marble call nests several evaluator frames.
RECURSION_LIMIT = 10000


class Repl(code.InteractiveConsole):
    def __init__(self, env: Optional[Environment] = None):
        super().__init__()
        self.env = env if env is not None else Environment()

    def runsource(self, source, filename="<input>", symbol="single"):
        parser = Parser(Lexer(source))
        program = parser.parse_program()
        errors = parser.errors()
        if len(errors) != 0:
            if not source.endswith("\n"):
                # Assume the user has not finished entering their program, and
                # wait for an additional newline before producing an error.
                return True
            for error in errors:
                print(f"error: {error}")
            return False
        # A valid program that did not end in a semicolon or an additional
        # newline may still be continued, e.g. by the else block of an if.
        if not (source.endswith("\n") or source.rstrip().endswith(";")):
            return True
        result = evaluate(program, self.env)
        if isinstance(result, Error):
            print(f"error: {result}")
        elif result is not None:
            print(result)
        return False


def run_file(path: str) -> int:
    logger.debug("running %s", path)
    try:
        source = Path(path).read_bytes()
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    try:
        result = evaluate_source(source)
    except ParseFailure as e:
        for error in e.errors:
            print(f"error: {error}", file=sys.stderr)
        return 1
    if isinstance(result, Error):
        print(f"error: {result}", file=sys.stderr)
        return 1
    print(result if result is not None else "")
    return 0


def run_repl() -> None:
    home = os.environ.get("MARBLE_HOME", Path.home())
    histfile = Path(home) / HISTFILE_NAME
    if readline and os.path.exists(histfile):
        readline.read_history_file(histfile)
    repl = Repl()
    repl.interact(banner="", exitmsg="")
    if readline:
        readline.set_history_length(HISTFILE_SIZE)
        readline.write_history_file(histfile)


def main() -> None:
    description = "The Marble Programming Language"
    parser = ArgumentParser(description=description)
    parser.add_argument("file", type=str, nargs="?", default=None)
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable debug logging"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s:%(name)s: %(message)s",
    )
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    if args.file is not None:
        sys.exit(run_file(args.file))
    run_repl()


if __name__ == "__main__":
    main()
