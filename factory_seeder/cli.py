"""Command line interface for FactorySeeder.

Usage:
    # List discovered factories
    factory-seeder list

    # Create 10 users with the admin trait
    factory-seeder generate user --count 10 --traits admin --attributes role=admin,age=30

    # Pick a factory interactively
    factory-seeder generate

    # Preview without saving
    factory-seeder preview post --count 2 --traits published

    # Run a custom seed
    factory-seeder run-seed hello_world -p name=Ada -p count=3

    # Serve the dashboard
    factory-seeder web --port 4567
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import uvicorn
import yaml

from factory_seeder.core.config import CONFIG_FILE_NAME, Settings, get_settings
from factory_seeder.core.database import get_session_maker
from factory_seeder.core.exceptions import FactorySeederError
from factory_seeder.core.logging import configure_logging, get_logger
from factory_seeder.shared.factories import FactoryCatalog, RecordGenerator
from factory_seeder.shared.seeds import CustomSeedLoader, SeedRegistry, coerce_arguments

logger = get_logger(__name__)

EXAMPLE_SEED_FILE = "example_seed.py"

EXAMPLE_SEED = '''"""Example custom seed. Run it with: factory-seeder run-seed hello_world -p name=Ada"""


def register(registry):
    def configure(seed):
        seed.description("Print a greeting a few times")
        seed.string_param("name", required=True, description="Who to greet")
        seed.integer_param("count", default=1, min=1, max=10)

    @registry.seed("hello_world", configure)
    def hello_world(name, count):
        return [f"Hello, {name}!" for _ in range(count)]
'''


def parse_key_values(pairs: Sequence[str]) -> dict[str, str]:
    """Parse ``key=value`` items; the value keeps any further ``=``.

    Raises:
        argparse.ArgumentTypeError: If an item has no ``=`` or no key.
    """
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Invalid key=value pair: {pair!r}")
        parsed[key.strip()] = value.strip()
    return parsed


def decode_scalar(value: str) -> Any:
    """Decode JSON scalars (``5``, ``true``, ``null``); anything else stays a string."""
    try:
        decoded = json.loads(value)
    except json.JSONDecodeError:
        return value
    if isinstance(decoded, (dict, list)):
        return value
    return decoded


def parse_attributes(raw: str | None) -> dict[str, Any]:
    """Parse ``--attributes email=a@b.c,age=30`` into typed values."""
    if not raw:
        return {}
    pairs = [p for p in raw.split(",") if p.strip()]
    return {key: decode_scalar(value) for key, value in parse_key_values(pairs).items()}


def parse_traits(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="factory-seeder",
        description="Generate seed data from factory_boy factories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Load settings from a YAML file (default: ./{CONFIG_FILE_NAME} if present)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable detailed logging",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List all available factories")

    generate = commands.add_parser("generate", help="Generate records for a factory")
    generate.add_argument("factory", nargs="?", help="Factory name (prompted for when omitted)")
    generate.add_argument("-c", "--count", type=int, help="Number of records (default: per environment)")
    generate.add_argument("-t", "--traits", help="Comma-separated traits to apply")
    generate.add_argument("-a", "--attributes", help="Comma-separated key=value overrides")
    generate.add_argument(
        "-s",
        "--strategy",
        choices=["create", "build"],
        help="create persists records, build only constructs them (default: per environment)",
    )

    preview = commands.add_parser("preview", help="Preview records without saving them")
    preview.add_argument("factory", help="Factory name")
    preview.add_argument("-c", "--count", type=int, default=1, help="Number of records (default: 1)")
    preview.add_argument("-t", "--traits", help="Comma-separated traits to apply")
    preview.add_argument("-a", "--attributes", help="Comma-separated key=value overrides")

    web = commands.add_parser("web", help="Start the web interface")
    web.add_argument("-p", "--port", type=int, help="Port to listen on (default: 4567)")
    web.add_argument("--host", help="Interface to bind (default: localhost)")

    init = commands.add_parser("init", help=f"Write {CONFIG_FILE_NAME} and an example custom seed")
    init.add_argument("--force", action="store_true", help="Overwrite existing files")

    seeds = commands.add_parser("seeds", help="List or search custom seeds")
    seeds.add_argument("query", nargs="?", help="Search term")

    run_seed = commands.add_parser("run-seed", help="Run a custom seed")
    run_seed.add_argument("name", help="Seed name")
    run_seed.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Seed argument (repeatable)",
    )

    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from ``--config`` or the default sources, with ``--verbose`` applied."""
    settings = Settings.from_yaml(args.config) if args.config else get_settings()
    if args.verbose:
        settings = settings.model_copy(update={"verbose": True})
    return settings


def load_catalog(settings: Settings) -> FactoryCatalog:
    catalog = FactoryCatalog()
    catalog.load_modules(settings.factory_modules)
    catalog.load_paths(settings.factory_paths)
    for source, error in catalog.load_errors.items():
        print(f"WARNING: could not load {source}: {error}", file=sys.stderr)
    return catalog


def load_registry(settings: Settings) -> SeedRegistry:
    registry = SeedRegistry()
    CustomSeedLoader(registry, settings.custom_seeds_dir).load_all()
    return registry


def print_not_found(name: str, available: list[str], kind: str = "Factory") -> None:
    print(f"ERROR: {kind} '{name}' not found")
    if available:
        print(f"Available: {', '.join(available[:10])}")


def generation_blocked(settings: Settings) -> bool:
    if settings.is_production and not settings.allow_production:
        print("ERROR: Cannot generate seed data in the production environment.")
        print("Set ALLOW_PRODUCTION=true to override (not recommended).")
        return True
    return False


def run_list(_args: argparse.Namespace, settings: Settings) -> int:
    names = load_catalog(settings).names()
    if not names:
        print("No factories found. Searched: " + ", ".join(settings.factory_paths + settings.factory_modules))
        return 0

    print(f"Found {len(names)} factories:\n")
    for name in names:
        print(f"  {name}")
    return 0


def choose_factory(names: list[str], prompt: Callable[[str], str] | None = None) -> str | None:
    """Ask for a factory by number or name; None on an invalid answer."""
    prompt = prompt or input
    print("Available factories:")
    for index, name in enumerate(names, start=1):
        print(f"  {index}. {name}")

    selection = prompt("\nSelect factory (number or name): ").strip()
    if selection.isdigit():
        index = int(selection) - 1
        return names[index] if 0 <= index < len(names) else None
    return selection if selection in names else None


def run_generate(args: argparse.Namespace, settings: Settings) -> int:
    """Generate records and print the outcome."""
    if generation_blocked(settings):
        return 1

    catalog = load_catalog(settings)
    names = catalog.names()
    if not names:
        print("ERROR: No factories found")
        return 1

    factory_name = args.factory or choose_factory(names)
    if factory_name is None:
        print("ERROR: Invalid selection")
        return 1
    if factory_name not in catalog:
        print_not_found(factory_name, names)
        return 1

    session_maker = get_session_maker(settings.database_url)
    with session_maker() as session:
        generator = RecordGenerator(
            catalog,
            session=session,
            conflict_policy=settings.association_conflict_policy,
        )
        result = generator.generate(
            factory_name,
            count=args.count or settings.default_count_for_environment(),
            traits=parse_traits(args.traits),
            attributes=parse_attributes(args.attributes),
            strategy=args.strategy or settings.default_strategy_for_environment(),
        )

    print(f"Generated {result.count}/{result.requested_count} {factory_name} records")
    print(f"Strategy: {result.strategy}")
    if result.traits:
        print(f"Traits: {', '.join(result.traits)}")
    if result.attributes:
        print(f"Attributes: {result.attributes}")
    for key, reason in result.stripped_attributes.items():
        print(f"Ignored attribute {key}: {reason}")
    for error in result.errors:
        print(f"ERROR: {error}")
    if settings.verbose:
        print()
        print(generator.summary())

    return 0 if result.success else 1


def run_preview(args: argparse.Namespace, settings: Settings) -> int:
    catalog = load_catalog(settings)
    if args.factory not in catalog:
        print_not_found(args.factory, catalog.names())
        return 1

    generator = RecordGenerator(catalog, conflict_policy=settings.association_conflict_policy)
    preview = generator.preview(
        args.factory,
        count=args.count,
        traits=parse_traits(args.traits),
        attributes=parse_attributes(args.attributes),
    )
    print(f"Preview for {args.factory}:")
    print(json.dumps(preview, indent=2, default=str))
    return 0


def run_web(args: argparse.Namespace, settings: Settings) -> int:
    from factory_seeder.main import create_app

    host = args.host or settings.api_host
    port = args.port or settings.api_port
    print(f"Starting FactorySeeder web interface on http://{host}:{port}")
    print("Press Ctrl+C to stop")
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.effective_log_level.lower())
    return 0


def run_init(args: argparse.Namespace, settings: Settings) -> int:
    """Write the config file and an example seed in the current directory."""
    config_path = Path(CONFIG_FILE_NAME)
    if config_path.exists() and not args.force:
        print(f"ERROR: {config_path} already exists. Use --force to overwrite.")
        return 1

    detected = [p for p in Settings.model_fields["factory_paths"].default if Path(p).is_dir()]
    config = {
        "factory_paths": detected or list(settings.factory_paths),
        "custom_seeds_dir": settings.custom_seeds_dir,
        "verbose": True,
    }
    with config_path.open("w") as f:
        yaml.safe_dump(config, f, sort_keys=False)

    seeds_dir = Path(settings.custom_seeds_dir)
    seeds_dir.mkdir(parents=True, exist_ok=True)
    example = seeds_dir / EXAMPLE_SEED_FILE
    if not example.exists() or args.force:
        example.write_text(EXAMPLE_SEED)

    print("FactorySeeder initialized!")
    print("Configuration:")
    print(f"  Config file: {config_path}")
    print(f"  Factory paths: {', '.join(config['factory_paths'])}")
    print(f"  Custom seeds: {seeds_dir}")
    print("  Verbose mode: True")
    return 0


def run_seeds(args: argparse.Namespace, settings: Settings) -> int:
    registry = load_registry(settings)
    seeds = registry.search(args.query) if args.query else registry.list()
    if not seeds:
        print("No custom seeds found" + (f" matching '{args.query}'" if args.query else ""))
        return 0

    for seed in seeds:
        print(f"{seed.name}: {seed.description}")
        for spec in seed.parameters:
            flags = "required" if spec.required else f"default={spec.default!r}"
            print(f"    {spec.name} ({spec.type.value}, {flags})")
    return 0


def run_custom_seed(args: argparse.Namespace, settings: Settings) -> int:
    """Coerce ``-p`` values, validate them and run the seed."""
    if generation_blocked(settings):
        return 1

    registry = load_registry(settings)
    seed = registry.find(args.name)
    if seed is None:
        print_not_found(args.name, registry.names(), kind="Seed")
        return 1

    arguments = coerce_arguments(seed.parameters, parse_key_values(args.param))
    outcome = registry.run(args.name, **arguments)
    print(outcome.message)
    if outcome.success and outcome.result is not None:
        print(json.dumps(outcome.result, indent=2, default=str))
    return 0 if outcome.success else 1


COMMANDS: dict[str, Callable[[argparse.Namespace, Settings], int]] = {
    "list": run_list,
    "generate": run_generate,
    "preview": run_preview,
    "web": run_web,
    "init": run_init,
    "seeds": run_seeds,
    "run-seed": run_custom_seed,
}


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
        configure_logging(settings, stream=sys.stderr)
        return COMMANDS[args.command](args, settings)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except (FactorySeederError, FileNotFoundError, ValueError) as e:
        logger.error("cli.command_failed", command=args.command, error=str(e), error_type=type(e).__name__)
        print(f"ERROR: {e}")
        return 1
    return 1


if __name__ == "__main__":
    sys.exit(main())
