"""Command-line interface for pseudolex."""

from __future__ import annotations

import argparse
import json
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pseudolex.errors import LexError
from pseudolex.lexer import LexerOptions


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    lexer: LexerOptions
    indent: int | None
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="pseudolex",
        description="Tokenize pseudocode source into JSON",
    )
    p.add_argument("input", help="Input source file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover pseudolex.toml)",
    )
    p.add_argument(
        "--do-until",
        action="store_true",
        default=None,
        help="Accept do ... until loops",
    )
    p.add_argument(
        "--argument-modifiers",
        action="store_true",
        default=None,
        help="Accept :byRef / :byVal on function parameters",
    )
    p.add_argument(
        "--indent",
        type=int,
        default=None,
        metavar="N",
        help="Indent JSON output by N spaces (default: compact)",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-lex")
    p.add_argument("--debug", action="store_true", help="Dump tokens to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "pseudolex.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _config_flag(section: Any, key: str) -> bool:
    if not isinstance(section, dict):
        return False
    value = section.get(key, False)
    if not isinstance(value, bool):
        raise argparse.ArgumentTypeError(f"config key '{key}' must be true or false")
    return value


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    try:
        config = load_config(config_path, input_dir)
    except tomllib.TOMLDecodeError as exc:
        raise argparse.ArgumentTypeError(f"invalid config file: {exc}") from exc

    # Lexer options: config < CLI
    cfg_lexer = config.get("lexer")
    do_until = _config_flag(cfg_lexer, "do_until")
    argument_modifiers = _config_flag(cfg_lexer, "argument_modifiers")
    if args.do_until is not None:
        do_until = args.do_until
    if args.argument_modifiers is not None:
        argument_modifiers = args.argument_modifiers

    # JSON indentation: config < CLI
    indent: int | None = None
    cfg_output = config.get("output")
    if isinstance(cfg_output, dict):
        cfg_indent = cfg_output.get("indent")
        if isinstance(cfg_indent, int) and not isinstance(cfg_indent, bool):
            indent = cfg_indent
    if args.indent is not None:
        indent = args.indent

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        lexer=LexerOptions(do_until=do_until, argument_modifiers=argument_modifiers),
        indent=indent,
        watch=args.watch,
        debug=args.debug,
    )


def lex_file(options: CliOptions) -> str:
    """Read and tokenize a source file, returning the tokens as JSON."""
    from pseudolex.debug import dump_tokens, token_to_dict
    from pseudolex.lexer import tokenize

    source = options.input_file.read_text(encoding="utf-8")
    tokens = tokenize(source, options.lexer)

    if options.debug:
        dump_tokens(tokens, file=sys.stderr)

    return json.dumps([token_to_dict(t) for t in tokens], indent=options.indent) + "\n"


def _write_output(options: CliOptions, text: str) -> None:
    if options.output_file:
        options.output_file.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, re-lex on each modification."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    _write_output(options, lex_file(options))
                    sys.stdout.flush()
                    print(f"Lexed {options.input_file}", file=sys.stderr)
                except LexError as exc:
                    print(exc.format(str(options.input_file)), file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.watch:
        watch_loop(options)
        return 0

    try:
        output = lex_file(options)
    except LexError as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    _write_output(options, output)
    return 0
