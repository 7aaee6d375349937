# graphson_sdk/cli.py
# SPDX-License-Identifier: Apache-2.0
"""
GraphSON SDK CLI

Translate GraphSON 1.0 documents from a file or stdin, or run the SDK test
suite with one command.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import List, Optional

try:
    import pytest
except ImportError:  # pragma: no cover
    pytest = None  # type: ignore[assignment]

from graphson_sdk.graphson.fixups import available_fixups
from graphson_sdk.graphson.graphson_base import (
    ExtensionPolicy,
    FloatWidth,
    GraphSONError,
    IntegerWidth,
    TranslationError,
)
from graphson_sdk.graphson.translation import TranslationAdapter, TranslationOptions

TEST_PATH = "tests/graphson"

# Configuration from environment
PYTEST_JOBS = os.environ.get("PYTEST_JOBS", "1")
COV_FAIL_UNDER = os.environ.get("COV_FAIL_UNDER", "80")
PYTEST_EXTRA_ARGS = os.environ.get("PYTEST_ARGS", "").split()


# --------------------------------------------------------------------------- #
# translate
# --------------------------------------------------------------------------- #

def _options_from_args(args: argparse.Namespace) -> TranslationOptions:
    """Environment supplies defaults; explicit flags win."""
    base = TranslationOptions.from_env().to_dict()
    overrides = {
        "int_width": args.int_width,
        "float_width": args.float_width,
        "extensions": args.extensions,
        "default_label": args.default_label,
        "fixups": args.fixup,
    }
    base.update({k: v for k, v in overrides.items() if v is not None})
    return TranslationOptions.from_dict(base)


def _read_input(path: Optional[str]) -> bytes:
    """Raw bytes; JSON parsing detects the encoding."""
    if path in (None, "-"):
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def _run_translate(args: argparse.Namespace) -> int:
    try:
        options = _options_from_args(args)
        text = _read_input(args.input)
        out = TranslationAdapter(options).translate_text(text, indent=args.indent)
    except TranslationError as e:
        path = e.details.get("path", "$")
        print(f"error: {e.code} at {path}: {e.cause.message}", file=sys.stderr)
        return 1
    except GraphSONError as e:
        print(f"error: {e.code}: {e.message}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"error: cannot read input: {e}", file=sys.stderr)
        return 2
    sys.stdout.write(out)
    sys.stdout.write("\n")
    return 0


# --------------------------------------------------------------------------- #
# test
# --------------------------------------------------------------------------- #

def _ensure_pytest() -> None:
    if pytest is None:  # pragma: no cover
        print(
            "error: pytest is required to run the test suite.\n"
            "Install test dependencies via:\n"
            "    pip install .[test]",
            file=sys.stderr,
        )
        raise SystemExit(1)


def _repo_root() -> str:
    """Best-effort guess of repo root."""
    here = os.path.abspath(os.path.dirname(__file__))
    return os.path.dirname(here)


def _build_pytest_args(
    fast_mode: bool = False,
    quiet_mode: bool = False,
    verbose_mode: bool = False,
    passthrough_args: Optional[List[str]] = None,
) -> List[str]:
    """Build standardized pytest arguments with consistent configuration."""
    args = [TEST_PATH, *PYTEST_EXTRA_ARGS, *(passthrough_args or [])]

    if quiet_mode:
        args.append("-q")
    elif verbose_mode:
        args.append("-vv")
    else:
        args.append("-v")

    if PYTEST_JOBS != "1":
        args.extend(["-n", PYTEST_JOBS])

    if not fast_mode:
        args.extend([
            "--cov=graphson_sdk",
            f"--cov-fail-under={COV_FAIL_UNDER}",
            "--cov-report=term",
        ])

    return args


def _run_tests(args: argparse.Namespace, passthrough_args: List[str]) -> int:
    _ensure_pytest()
    os.chdir(_repo_root())
    if not os.path.isdir(TEST_PATH):
        print(f"error: test path does not exist: {TEST_PATH}", file=sys.stderr)
        return 2

    pytest_args = _build_pytest_args(
        fast_mode=args.fast,
        quiet_mode=args.quiet,
        verbose_mode=args.verbose,
        passthrough_args=passthrough_args,
    )
    if not args.quiet:
        print(f"Running GraphSON SDK tests (jobs={PYTEST_JOBS}, cov_threshold={COV_FAIL_UNDER}%)")

    start_time = time.time()
    rc = pytest.main(pytest_args)
    if not args.quiet:
        status = "passed" if rc == 0 else "FAILED"
        print(f"Tests {status} in {time.time() - start_time:.1f}s")
    return int(rc)


# --------------------------------------------------------------------------- #
# main
# --------------------------------------------------------------------------- #

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graphson-sdk",
        description="GraphSON SDK CLI - GraphSON 1.0 to 3.0 translation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  graphson-sdk translate response.json
  cat response.json | graphson-sdk translate --int-width PreferInt32
  graphson-sdk translate rows.json --fixup collapse_singleton_lists --indent 2
  graphson-sdk test --fast -- -x

Configuration (environment variables):
  GRAPHSON_INT_WIDTH, GRAPHSON_FLOAT_WIDTH, GRAPHSON_EXTENSIONS,
  GRAPHSON_DEFAULT_LABEL, GRAPHSON_FIXUPS   translation defaults
  PYTEST_JOBS=4          Parallel test jobs (default: 1)
  COV_FAIL_UNDER=90      Coverage threshold (default: 80)
  PYTEST_ARGS="-x -s"    Additional pytest arguments
        """.strip(),
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-q", "--quiet", action="store_true", help="Minimal output")
    common.add_argument("-v", "--verbose", action="store_true", help="Detailed output (debug logging)")

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="command to execute",
        metavar="COMMAND",
    )

    tr = subparsers.add_parser("translate", parents=[common], help="Translate a GraphSON 1.0 document to GraphSON 3.0")
    tr.add_argument("input", nargs="?", help="Input JSON file (default: stdin)")
    tr.add_argument("--int-width", choices=[m.value for m in IntegerWidth])
    tr.add_argument("--float-width", choices=[m.value for m in FloatWidth])
    tr.add_argument("--extensions", choices=[m.value for m in ExtensionPolicy])
    tr.add_argument("--default-label", help="Label for vertices / edges without one")
    tr.add_argument(
        "--fixup",
        action="append",
        choices=available_fixups(),
        help="Apply a fixup (can be used multiple times, applied in order)",
    )
    tr.add_argument("--indent", type=int, default=None, help="Pretty-print with N spaces")

    test_parser = subparsers.add_parser("test", parents=[common], help="Run the SDK test suite")
    test_parser.add_argument("--fast", action="store_true", help="Skip coverage")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    cli_args = list(sys.argv[1:] if argv is None else argv)
    passthrough_args: List[str] = []
    if "--" in cli_args:
        split_index = cli_args.index("--")
        passthrough_args = cli_args[split_index + 1:]
        cli_args = cli_args[:split_index]

    parser = _build_parser()
    try:
        args = parser.parse_args(cli_args)
    except SystemExit as e:
        return int(e.code or 0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING if not args.quiet else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "translate":
        return _run_translate(args)
    if args.command == "test":
        return _run_tests(args, passthrough_args)

    print(f"error: unknown command '{args.command}'\n", file=sys.stderr)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
