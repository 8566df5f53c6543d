"""
clido CLI — Command Line Interface to DO
=========================================
Entry point for managing the TODO list from a shell.

Usage:
    clido add Do the cooking today
    clido add Read a book
    clido show
    clido done 0 1
    clido show-done
    clido todo-path ./TODOS.bin show
    clido --todo-path ./TODOS.bin show

    python -m clido help
    python -m clido version
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from clido import __version__
from clido.paths import TODO_PATH_ENV, open_todo_file, resolve_todo_path
from clido.record import MalformedRecordError, RecordError, TodoRecord
from clido.store import TodoStore

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """A command was given missing or unusable arguments."""
    pass


# ─────────────────────────────────────────────────────────────
#  Helpers
# ─────────────────────────────────────────────────────────────

def join_todo_text(parts: list[str]) -> str:
    """Every argument followed by a single space: ["a", "b"] -> "a b "."""
    return "".join(f"{part} " for part in parts)


def parse_indices(raw: list[str]) -> list[int]:
    indices = []
    for value in raw:
        try:
            indices.append(int(value))
        except ValueError:
            raise UsageError(f"\"{value}\" is not a TODO index!") from None
    return indices


def _print_records(pairs, empty_message: str) -> None:
    if not pairs:
        print(empty_message)
        return
    for index, record in pairs:
        print(f"[{index}] {record.label}")


def _os_error_message(e: OSError) -> str:
    message = e.strerror or str(e)
    if e.filename:
        return f"{message} ({e.filename})"
    return message


# ─────────────────────────────────────────────────────────────
#  Commands
# ─────────────────────────────────────────────────────────────

def cmd_add(args) -> int:
    """Append a new TODO."""
    if not args.text:
        raise UsageError("No TODO text was given!")
    record = TodoRecord.from_text(join_todo_text(args.text))

    with open_todo_file(resolve_todo_path(args.todo_path)) as stream:
        try:
            TodoStore(stream).append_one(record)
        except OSError as e:
            print(f"[ERR] Failed to write a new todo: {_os_error_message(e)}", file=sys.stderr)
            return 1

    print("Added!")
    return 0


def cmd_show(args) -> int:
    """List TODOs that are not done."""
    with open_todo_file(resolve_todo_path(args.todo_path)) as stream:
        store = TodoStore(stream)
        store.load_all()

    if not len(store):
        print("No TODOs yet!")
        return 0
    _print_records(store.pending(), "All is done!")
    return 0


def cmd_show_done(args) -> int:
    """List TODOs that were done."""
    with open_todo_file(resolve_todo_path(args.todo_path)) as stream:
        store = TodoStore(stream)
        store.load_all()

    if not len(store):
        print("No TODOs yet!")
        return 0
    _print_records(store.completed(), "No TODOs were done yet!")
    return 0


def cmd_done(args) -> int:
    """Mark TODOs as done by index; unknown indices are ignored."""
    if not args.indices:
        raise UsageError("Not one index was specified!")
    indices = parse_indices(args.indices)

    with open_todo_file(resolve_todo_path(args.todo_path)) as stream:
        store = TodoStore(stream)
        store.load_all()
        if not len(store):
            print("No TODOs yet!")
            return 0

        marked = store.mark_done(indices)
        records = store.records
        for index in marked:
            print(f"Marked \"{records[index].label}\" as done!")
        if not marked:
            logger.debug("Nothing to mark among indices %s", indices)
            return 0

        try:
            store.rewrite_all()
        except OSError as e:
            print(f"[ERR] Failed to write updated todos to a todo file: {_os_error_message(e)}",
                  file=sys.stderr)
            return 1
    return 0


def cmd_help(args) -> int:
    """Print usage."""
    args.parser.print_help()
    return 0


def cmd_version(args) -> int:
    """Print version information."""
    print(f"clido v{__version__} - Command Line Interface to DO program")
    return 0


# ─────────────────────────────────────────────────────────────
#  Main
# ─────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clido",
        description="clido — Command Line Interface to DO",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  clido add Do the cooking today\n"
            "  clido add Read a book\n"
            "  clido show\n"
            "  clido done 0 1\n"
            "  clido show-done\n"
            "  clido todo-path ./TODOS.bin show\n"
            "\n"
            f"The TODO file can also be set with the {TODO_PATH_ENV} environment variable.\n"
        ),
    )
    parser.add_argument("--todo-path", default=None,
                        help="Path to the TODO file (overrides the default location)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # add
    p_add = subparsers.add_parser("add", help="Write a new TODO to the TODO file")
    p_add.add_argument("text", nargs="*", help="TODO text")

    # show / show-done
    subparsers.add_parser("show", help="Output current TODOs")
    subparsers.add_parser("show-done", help="Output TODOs which were done previously")

    # done
    p_done = subparsers.add_parser("done", help="Mark specified TODO(s) as done")
    p_done.add_argument("indices", nargs="*", help="Indices as printed by show")

    # help / version
    subparsers.add_parser("help", help="Print this message and exit")
    subparsers.add_parser("version", help="Print version information and exit")

    return parser


def _split_legacy_todo_path(argv: list[str]) -> tuple[Optional[str], list[str]]:
    """Pull a leading `todo-path <path>` off the argument list."""
    if argv and argv[0] == "todo-path":
        if len(argv) < 2:
            raise UsageError("No path was provided!")
        return argv[1], argv[2:]
    return None, argv


def _split_add_text(argv: list[str]) -> tuple[list[str], Optional[list[str]]]:
    """Cut everything after an `add` command off before argparse sees it.

    Item text may contain words like `-j` that argparse would take for
    options. Returns (arguments for the parser, text words or None).
    """
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--todo-path":
            i += 2
            continue
        if arg.startswith("-"):
            i += 1
            continue
        if arg == "add":
            return argv[:i + 1], argv[i + 1:]
        break
    return argv, None


def main(argv: Optional[list[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()

    try:
        legacy_path, argv = _split_legacy_todo_path(argv)
    except UsageError as e:
        print(e, file=sys.stderr)
        return 1

    argv, add_text = _split_add_text(argv)
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse has already printed usage or the error
        return e.code if isinstance(e.code, int) else 1
    if add_text is not None:
        args.text = add_text
    args.parser = parser
    if legacy_path and not args.todo_path:
        args.todo_path = legacy_path

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "add": cmd_add,
        "show": cmd_show,
        "show-done": cmd_show_done,
        "done": cmd_done,
        "help": cmd_help,
        "version": cmd_version,
    }

    if args.command not in commands:
        print("No valid sequence of commands was specified!\n"
              "Run clido help to look at usage overview")
        return 1

    try:
        return commands[args.command](args)
    except UsageError as e:
        print(e, file=sys.stderr)
        return 1
    except MalformedRecordError as e:
        print(f"[ERR] Failed to read TODO file: {e}", file=sys.stderr)
        return 1
    except RecordError as e:
        print(f"[ERR] {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"[ERR] Failed to access TODO file: {_os_error_message(e)}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
