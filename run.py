"""cryptgen CLI entry point.

Provides subcommands for generating seeded dungeons, validating dungeon JSON
files, importing legacy token grids, rendering dungeons as ASCII and
rebuilding fallback layouts from legacy identifiers. Accepts configuration via
flags and ``CRYPTGEN_*`` environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

from cryptgen import __version__
from cryptgen.config import GenerationConfig
from cryptgen.dungeon.generator import generation_summary, try_generate
from cryptgen.dungeon.layouts import generate_room_corridor, layout_for_ref, layout_to_dungeon
from cryptgen.dungeon.legacy import check_endpoints, from_legacy
from cryptgen.dungeon.render import render_dungeon
from cryptgen.dungeon.rng import GenerationPrecondition
from cryptgen.dungeon.schema import load_dungeon_json
from cryptgen.logging_utils import configure_logging, log

_color_init()
# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()

DEFAULT_OUT = os.path.join("out", "dungeon.json")


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    cryptgen dungeon toolkit

    Generate deterministic dungeon grids from a seed, validate dungeon JSON
    against the schema, convert legacy formats and render dungeons as text.
    Configuration can be provided via CLI flags or environment variables. If
    both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          CRYPTGEN_WIDTH / CRYPTGEN_HEIGHT   Grid size (default: 25 x 17)
          CRYPTGEN_SEED                      Seed used when --seed is omitted (default: current ms)
          CRYPTGEN_LEVEL                     Dungeon level (default: 1)
          CRYPTGEN_TTL_SECONDS               Dungeon ttlSeconds (default: 900)
          CRYPTGEN_DOOR_CHANCE               Door probability per chokepoint wall (default: 0.03)
          CRYPTGEN_STEP_FACTOR               Random-walk steps per cell (default: 4)
          CRYPTGEN_MIN_WALKABLE              Playability threshold (default: 20)
          CRYPTGEN_PLAYER_ABILITIES          Comma list of movement abilities (default: fly)
          CRYPTGEN_LOG_LEVEL                 debug|info|warn|error (default: info)
          CRYPTGEN_LOG_JSON                  Emit log lines as JSON when truthy
          (log lines are written to stderr so stdout stays parseable)

        Examples:
          # Generate a dungeon with a fixed seed
          python run.py generate --seed abc

          # Generate the fixed room/corridor layout
          python run.py generate --layout rooms --seed 5 --width 20 --height 15

          # Validate a dungeon file
          python run.py validate out/dungeon.json

          # Load variables from .env then render a fresh dungeon
          python run.py --env-file .env render --seed abc
        """
    )

    parser = argparse.ArgumentParser(
        prog="cryptgen",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        choices=["debug", "info", "warn", "error"],
        help="Logging threshold (default: env CRYPTGEN_LOG_LEVEL or info)",
    )
    parser.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write stdlib logging output to this rotating file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cryptgen {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a dungeon and write it as JSON",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate a seeded dungeon (random walk or fixed room/corridor layout).",
    )
    _add_generation_flags(gen_parser)
    gen_parser.add_argument(
        "--out",
        default=DEFAULT_OUT,
        help=f"Output path (default: {DEFAULT_OUT})",
    )
    gen_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not echo the JSON to stdout",
    )
    gen_parser.set_defaults(command="generate")

    # validate subcommand
    val_parser = subparsers.add_parser(
        "validate",
        help="Validate a dungeon JSON file against the schema",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    val_parser.add_argument("path", help="Path to dungeon JSON file")
    val_parser.set_defaults(command="validate")

    # import-legacy subcommand
    imp_parser = subparsers.add_parser(
        "import-legacy",
        help="Convert a legacy token grid (JSON array of rows) into a dungeon",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    imp_parser.add_argument("path", help="Path to legacy token grid JSON")
    imp_parser.add_argument("--seed", default="legacy", help="Seed recorded on the dungeon (default: legacy)")
    imp_parser.add_argument("--out", default=None, help="Output path (default: stdout only)")
    imp_parser.set_defaults(command="import-legacy")

    # render subcommand
    render_parser = subparsers.add_parser(
        "render",
        help="Render a dungeon JSON file (or a freshly generated one) as ASCII",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    render_parser.add_argument("path", nargs="?", default=None, help="Dungeon JSON file (omit to generate)")
    _add_generation_flags(render_parser)
    render_parser.set_defaults(command="render")

    # lookup-ref subcommand
    ref_parser = subparsers.add_parser(
        "lookup-ref",
        help="Rebuild the fixed layout for a legacy dungeon identifier",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    ref_parser.add_argument("ref", help="Identifier, e.g. my-guild-7-L2-1700000000000-x1y2")
    ref_parser.set_defaults(command="lookup-ref")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
    return args


def _add_generation_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--width", type=int, default=None, help="Grid width (default: env CRYPTGEN_WIDTH or 25)")
    p.add_argument("--height", type=int, default=None, help="Grid height (default: env CRYPTGEN_HEIGHT or 17)")
    p.add_argument("--seed", default=None, help="Seed string (default: env CRYPTGEN_SEED or current ms)")
    p.add_argument("--level", type=int, default=None, help="Dungeon level (default: 1)")
    p.add_argument("--ttl", dest="ttl_seconds", type=int, default=None, help="ttlSeconds (default: 900)")
    p.add_argument(
        "--layout",
        choices=["walk", "rooms"],
        default="walk",
        help="walk: random-walk carving (default); rooms: fixed room/corridor layout",
    )


def _label(text: str) -> str:
    return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text


def _value(val) -> str:
    return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)


def _error(msg: str) -> None:
    prefix = f"{Fore.RED}[ERROR]{Style.RESET_ALL}" if _COLOR_ENABLED else "[ERROR]"
    print(f"{prefix} {msg}", file=sys.stderr)


def _banner(mode: str, summary: dict) -> None:
    title = f"{Fore.CYAN}{Style.BRIGHT}cryptgen{Style.RESET_ALL}" if _COLOR_ENABLED else "cryptgen"
    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    lines = [divider, f"  {title} {__version__}", divider, f"  {_label('Mode:'):12} {_value(mode.upper())}"]
    for key in ("seed", "width", "height", "walkable", "doors"):
        if key in summary:
            lines.append(f"  {_label(key.capitalize() + ':'):12} {_value(summary[key])}")
    lines.append(divider)
    print("\n".join(lines), file=sys.stderr)


def _build_dungeon(args: argparse.Namespace, cfg: GenerationConfig):
    """Return ``(ok, dungeon_or_error)`` for the generation flags on ``args``."""
    if args.layout == "rooms":
        raw_seed = args.seed if args.seed is not None else (cfg.seed or "1")
        try:
            seed = int(raw_seed)
        except ValueError:
            return False, {"field": "seed", "error": "rooms layout needs an integer seed", "code": "type"}
        try:
            layout = generate_room_corridor(cfg.width, cfg.height, seed)
        except GenerationPrecondition as exc:
            return False, exc.to_dict()
        return True, layout_to_dungeon(layout, level=cfg.level, ttl_seconds=cfg.ttl_seconds)
    return try_generate(seed=args.seed, config=cfg)


def _write_json(path: str, payload: dict) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
        f.write("\n")


def _read_text(path: str):
    if not os.path.exists(path):
        _error(f"File not found: {path}")
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _format_errors(err: dict) -> str:
    return "\n".join(f"  {e['field']}: {e['error']} ({e['code']})" for e in err.get("errors", [err]))


def cmd_generate(args: argparse.Namespace, cfg: GenerationConfig) -> int:
    ok, result = _build_dungeon(args, cfg)
    if not ok:
        _error(f"{result['field']}: {result['error']}")
        return 1
    summary = generation_summary(result)
    _banner("generate", summary)
    payload = result.to_dict()
    _write_json(args.out, payload)
    log.info(event="dungeon_written", path=args.out, id=result.id, seed=result.seed)
    if not args.quiet:
        print(json.dumps(payload, indent=2))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    text = _read_text(args.path)
    if text is None:
        return 1
    ok, result = load_dungeon_json(text)
    if not ok:
        print(f"INVALID {args.path}")
        print(_format_errors(result))
        return 1
    problems = check_endpoints(result)
    print(f"OK {args.path} ({result.width}x{result.height}, seed={result.seed})")
    for p in problems:
        print(f"  warning: {p}")
    return 0


def cmd_import_legacy(args: argparse.Namespace) -> int:
    text = _read_text(args.path)
    if text is None:
        return 1
    try:
        tokens = json.loads(text)
    except json.JSONDecodeError as exc:
        _error(f"{args.path}: invalid JSON ({exc.msg})")
        return 1
    if not isinstance(tokens, list) or not all(isinstance(row, list) for row in tokens):
        _error(f"{args.path}: expected a JSON array of token rows")
        return 1
    dungeon = from_legacy(tokens, args.seed)
    for p in check_endpoints(dungeon):
        print(f"  warning: {p}", file=sys.stderr)
    payload = dungeon.to_dict()
    if args.out:
        _write_json(args.out, payload)
    print(json.dumps(payload, indent=2))
    return 0


def cmd_render(args: argparse.Namespace, cfg: GenerationConfig) -> int:
    if args.path:
        text = _read_text(args.path)
        if text is None:
            return 1
        ok, result = load_dungeon_json(text)
        if not ok:
            print(_format_errors(result))
            return 1
    else:
        ok, result = _build_dungeon(args, cfg)
        if not ok:
            _error(f"{result['field']}: {result['error']}")
            return 1
    print(render_dungeon(result))
    return 0


def cmd_lookup_ref(args: argparse.Namespace) -> int:
    payload = layout_for_ref(args.ref)
    if payload is None:
        _error(f"Could not parse ref: {args.ref}. Expected format: guild-number-level-timestamp-id")
        return 1
    print(json.dumps(payload, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    # stdout carries JSON/ASCII payloads; structured log lines go to stderr
    log_level = args.log_level or os.getenv("CRYPTGEN_LOG_LEVEL", "info")
    configure_logging(log_level, args.log_file, stream="stderr")
    mode = args.command
    if not mode:
        return 0

    try:
        cfg = GenerationConfig.from_env(
            width=getattr(args, "width", None),
            height=getattr(args, "height", None),
            level=getattr(args, "level", None),
            ttl_seconds=getattr(args, "ttl_seconds", None),
        )
    except ValueError as exc:
        _error(str(exc))
        return 1
    log.debug(event="startup", mode=mode, version=__version__)

    if mode == "generate":
        return cmd_generate(args, cfg)
    elif mode == "validate":
        return cmd_validate(args)
    elif mode == "import-legacy":
        return cmd_import_legacy(args)
    elif mode == "render":
        return cmd_render(args, cfg)
    elif mode == "lookup-ref":
        return cmd_lookup_ref(args)
    _error(f"Unknown command: {mode}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
