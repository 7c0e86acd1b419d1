#!/usr/bin/env python3
"""skyform - Main Entry Point.

Bootstraps an authenticated AWS session from the tool configuration and
reports the services or template drivers available with it.
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .aws.bootstrap import init_services, new_driver
from .aws.credentials import CACHE_ENV_VAR
from .core.config import Configuration
from .core.errors import AuthError, BootstrapError, ConfigError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="skyform AWS session bootstrap",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s                          # Auto-detect config.yaml, list services
  %(prog)s config.yaml              # Use specific configuration file
  %(prog)s --region eu-west-1       # Override configured region
  %(prog)s --drivers                # List template driver capabilities

Set {CACHE_ENV_VAR} to a directory to cache resolved credentials.
        """,
    )

    parser.add_argument(
        "config_file",
        nargs="?",
        help="Path to configuration file (default: auto-detect config.yaml)",
    )

    parser.add_argument(
        "--drivers",
        action="store_true",
        help="Build the aggregate template driver instead of the service registry",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"skyform v{__version__}",
    )

    parser.add_argument(
        "--profile", help="AWS profile name to use for credentials"
    )

    parser.add_argument(
        "--region", help="AWS region to use (overrides configuration file)"
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    return parser.parse_args(argv)


def auto_detect_config() -> Optional[str]:
    """Auto-detect configuration file in current directory.

    Returns:
        Path to configuration file if found, None otherwise
    """
    if Path("config.yaml").exists():
        return "config.yaml"

    if Path("config/settings.yaml").exists():
        return "config/settings.yaml"

    return None


def load_configuration(args: argparse.Namespace) -> Configuration:
    """Load configuration and apply command line overrides.

    Without a configuration file, region and profile come from the
    command line and environment only.
    """
    config_path = args.config_file or auto_detect_config()
    if config_path:
        config = Configuration(config_path)
        print(f"📄 Using configuration file: {config_path}")
    else:
        config = Configuration.from_dict({}, apply_environment=True)

    overrides = config.to_dict()
    if args.region:
        overrides.setdefault("aws", {})["region"] = args.region
    if args.profile:
        overrides.setdefault("aws", {})["profile"] = args.profile
    return Configuration.from_dict(overrides)


def show_drivers(config: Configuration) -> None:
    """Build the aggregate driver and print its capabilities."""
    driver = new_driver(config.region(), config.profile(), logging.getLogger("skyform.driver"))
    print(f"✅ Template driver ready with {len(driver)} service drivers")
    for service_driver in driver.drivers:
        verbs = ", ".join(f"{action} {entity}" for action, entity in service_driver.capabilities())
        print(f"   • {service_driver.service.name}: {verbs}")


def show_services(config: Configuration) -> None:
    """Initialize the service registry and print its content."""
    registry = init_services(config, logging.getLogger("skyform.services"))
    print(f"✅ AWS session ready in {config.region()}")
    for name in registry.names():
        print(f"   • {name}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        args = parse_arguments(argv)

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        try:
            config = load_configuration(args)
        except ConfigError as e:
            print(f"❌ Configuration error: {e}")
            return 1

        try:
            if args.drivers:
                show_drivers(config)
            else:
                show_services(config)
        except ConfigError as e:
            print(f"❌ Configuration error: {e}")
            return 1
        except AuthError as e:
            print(f"❌ {e}")
            return 1
        except BootstrapError as e:
            print(f"❌ AWS session initialization failed: {e}")
            return 1

        return 0

    except KeyboardInterrupt:
        print("\n\n👋 Operation cancelled by user.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
