#!/usr/bin/env python3
"""
Entry point for the KRaft provisioner.

Running without arguments checks free space, then installs or updates the
OpenJDK runtime and the Kafka broker, asking interactively what to do with
components that are already installed.
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from pydantic import ValidationError

from common.env_utils import ProfileEnvironmentStore
from common.logging_config import setup_logging
from provisioning.errors import PreconditionFailure, SelectionCancelled
from provisioning.intent import IntentKind
from provisioning.orchestrator import ProvisionOrchestrator
from settings import config as static_config
from settings.config_loader import load_app_settings
from ui.selector import InteractiveSelector

INTENT_NAMES = [kind.value for kind in IntentKind]


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments. If None, sys.argv[1:] is used.

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="kraft-provisioner",
        description="Provision a local single-node Kafka (KRaft) broker and its Java runtime",
    )

    # General options
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--config",
        default=static_config.DEFAULT_CONFIG_FILE,
        help=f"YAML configuration file (default: {static_config.DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument("--log-file", help="Also write JSON log records to this file")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {static_config.SCRIPT_VERSION}"
    )

    # Provisioning options
    parser.add_argument("--java-version", help="OpenJDK version to install")
    parser.add_argument("--kafka-version", help="Kafka version to install")
    parser.add_argument(
        "--java-intent",
        choices=INTENT_NAMES,
        help="What to do with the Java runtime instead of asking",
    )
    parser.add_argument(
        "--kafka-intent",
        choices=INTENT_NAMES,
        help="What to do with the Kafka broker instead of asking",
    )
    parser.add_argument("--skip-java", action="store_true", help="Leave the Java runtime alone")
    parser.add_argument("--skip-kafka", action="store_true", help="Leave the Kafka broker alone")
    parser.add_argument(
        "--smoke-test",
        action="store_true",
        help="Start the broker and a console producer/consumer pair afterwards",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt; keep installed components unless an intent is given",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    subparsers.add_parser("install", help="Provision components (default)")
    subparsers.add_parser("status", help="Show installed versions")
    subparsers.add_parser("list", help="List available components")

    return parser.parse_args(args)


def selected_components(parsed_args: argparse.Namespace) -> List[str]:
    components = []
    if not parsed_args.skip_java:
        components.append("java")
    if not parsed_args.skip_kafka:
        components.append("kafka")
    return components


def requested_intents(parsed_args: argparse.Namespace) -> Dict[str, IntentKind]:
    intents: Dict[str, IntentKind] = {}
    if parsed_args.java_intent:
        intents["java"] = IntentKind(parsed_args.java_intent)
    if parsed_args.kafka_intent:
        intents["kafka"] = IntentKind(parsed_args.kafka_intent)
    return intents


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for the provisioner.

    Args:
        args: Command-line arguments. If None, sys.argv[1:] is used.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parsed_args = parse_args(args)

    log_level = logging.DEBUG if parsed_args.verbose else logging.INFO
    setup_logging(log_level=log_level, log_file=parsed_args.log_file)
    logger = logging.getLogger("kraft_provisioner")

    try:
        app_settings = load_app_settings(
            cli_args=parsed_args,
            config_file_path=parsed_args.config,
            current_logger=logger,
        )
    except ValidationError:
        return 1

    setup_logging(
        log_level=log_level,
        log_file=parsed_args.log_file,
        log_prefix=app_settings.log_prefix,
        symbols=app_settings.symbols,
    )

    select = None
    if app_settings.interactive and sys.stdin.isatty():
        select = InteractiveSelector(app_settings.selector_page_size, logger)

    try:
        orchestrator = ProvisionOrchestrator(
            app_settings,
            select=select,
            env_store=ProfileEnvironmentStore(),
            logger=logger,
        )

        if parsed_args.command == "list":
            logger.info("Available components:")
            for name, provisioner_class in orchestrator.get_available_components().items():
                description = getattr(provisioner_class, "metadata", {}).get(
                    "description", ""
                )
                logger.info(f"  {name}: {description}")
            return 0

        components = selected_components(parsed_args)
        if not components:
            logger.warning("Nothing selected: both --skip-java and --skip-kafka were given")
            return 0

        if parsed_args.command == "status":
            status = orchestrator.check_status(components)
            logger.info("Installation status:")
            for name, record in status.items():
                if record.is_installed:
                    logger.info(f"  {name}: {record.version} at {record.install_path}")
                else:
                    logger.info(f"  {name}: not installed")
            return 0 if all(record.is_installed for record in status.values()) else 1

        report = orchestrator.run(
            components,
            requested_intents(parsed_args),
            smoke_test=parsed_args.smoke_test,
        )
        logger.info("Summary:")
        for result in report.results.values():
            logger.info(f"  {result.summary()}")
        if report.succeeded:
            logger.info("Provisioning completed successfully")
        else:
            logger.error(f"Provisioning finished with errors (exit code {report.exit_code})")
        return report.exit_code

    except SelectionCancelled as e:
        logger.warning(f"Aborted: {e}")
        return static_config.SELECTION_CANCELLED_EXIT_CODE
    except PreconditionFailure as e:
        logger.error(f"Precondition failed, nothing was changed: {e}")
        return e.exit_code
    except Exception as e:
        logger.exception(f"Error: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
