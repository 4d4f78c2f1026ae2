"""Command line interface for the workload client configuration front-end."""

from __future__ import annotations

import argparse
import sys
import time
from collections import Counter
from contextlib import contextmanager
from pathlib import Path

from flowgen.config import ClientConfig
from flowgen.errors import ConfigError, ConfigFileError
from flowgen.log_config import get_logger
from flowgen.seeding import make_rng, resolve_seed

logger = get_logger(__name__)


@contextmanager
def Timer(description: str):
    """Context manager for timing operations with both print and log output.

    Args:
        description: Operation description for timing messages.

    Yields:
        None: Context manager yields nothing.
    """
    print(f"🔄 {description}...")
    logger.info(f"Starting {description}")
    start = time.time()
    try:
        yield
        elapsed = time.time() - start
        print(f"✅ {description} (completed in {elapsed:.3f}s)")
        logger.info(f"Completed {description} in {elapsed:.3f}s")
    except Exception as e:
        elapsed = time.time() - start
        print(f"❌ {description} (failed after {elapsed:.3f}s)")
        logger.error(f"Failed {description} after {elapsed:.3f}s: {e}")
        raise


def _load_config(config_path: Path, seed: int | None = None) -> ClientConfig:
    """Load and validate configuration.

    Args:
        config_path: Path to the client configuration file.
        seed: Resolved random seed for the run.

    Returns:
        Loaded and validated configuration object.

    Raises:
        SystemExit: If configuration loading or validation fails.
    """
    try:
        with Timer(f"Parse configuration {config_path}"):
            config = ClientConfig.from_file(config_path, seed=seed)
        logger.info(f"Loaded configuration from {config_path}")
        return config
    except ConfigFileError as e:
        print(f"❌ Cannot read configuration file: {e}")
        logger.error(f"Cannot read configuration file: {e}")
        sys.exit(2)  # Config problem
    except ConfigError as e:
        print(f"❌ Configuration error: {e}")
        print(f"💡 Check directives in: {config_path}")
        logger.error(f"Failed to load config: {e}")
        sys.exit(2)  # Config problem


def info_command(args: argparse.Namespace) -> None:
    """Parse a configuration file and show what was read.

    Args:
        args: Parsed command line arguments with config path, seed and format.
    """
    seed = resolve_seed(args.seed)
    config = _load_config(Path(args.config), seed=seed)
    with config:
        if getattr(args, "yaml", False):
            print(config.to_yaml(), end="")
        else:
            print(config.summary())


def sample_command(args: argparse.Namespace) -> None:
    """Draw values from each weighted distribution of a configuration.

    Args:
        args: Parsed command line arguments with config path, seed and count.
    """
    if args.count < 1:
        print("❌ --count must be positive")
        sys.exit(1)

    seed = resolve_seed(args.seed)
    config = _load_config(Path(args.config), seed=seed)
    rng = make_rng(seed)
    with config:
        print(f"Seed: {seed}")
        for name, dist in config.distributions.items():
            if dist is None:
                continue
            drawn = Counter(dist.sample_index(rng) for _ in range(args.count))
            print(f"\n{name} ({args.count} draws, total weight {dist.weight_total})")
            for i, entry in enumerate(dist):
                hits = drawn.get(i, 0)
                print(
                    f"   {entry.value}: {hits} "
                    f"(expected {args.count * entry.weight / dist.weight_total:.1f})"
                )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        required=True,
        help="Configuration file path (required)",
    )
    parser.add_argument(
        "-s",
        "--seed",
        type=int,
        default=None,
        help="Random seed value (default: current time)",
    )


def main() -> None:
    """Parse command line arguments and execute the appropriate subcommand.

    Configures logging, parses CLI arguments, and dispatches to the correct
    command function (info or sample).
    """
    parser = argparse.ArgumentParser(
        prog="flowgen",
        description="Parse and inspect workload client configuration files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress console output (logs only)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Info command
    info_parser = subparsers.add_parser(
        "info", help="Parse a configuration file and show its tables"
    )
    _add_common_arguments(info_parser)
    info_parser.add_argument(
        "--yaml",
        action="store_true",
        help="Print the parsed configuration as YAML",
    )
    info_parser.set_defaults(func=info_command)

    # Sample command
    sample_parser = subparsers.add_parser(
        "sample", help="Draw values from the configured weighted distributions"
    )
    _add_common_arguments(sample_parser)
    sample_parser.add_argument(
        "-n",
        "--count",
        type=int,
        default=1000,
        help="Number of draws per distribution (default: 1000)",
    )
    sample_parser.set_defaults(func=sample_command)

    # Parse arguments and dispatch
    args = parser.parse_args()

    # Configure logging based on arguments
    from flowgen.log_config import level_for, set_global_log_level

    set_global_log_level(level_for(args.verbose))

    # Suppress print output if --quiet is set
    if args.quiet:
        import builtins

        builtins.print = lambda *args, **kwargs: None

    if not hasattr(args, "func") or args.func is None:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except Exception as e:
        logger.error(f"Command failed: {e}")
        print("💡 Use -v for detailed error information")
        sys.exit(1)  # Runtime error


if __name__ == "__main__":
    main()
