#!/usr/bin/env python3
"""
Rule Responder - Main Entry Point
=================================

Command-line interface for the rule-based chat responder.

Usage:
    python main.py --test "where am i"     # Match a message
    python main.py --status                # Show index statistics
    python main.py --placeholders          # List placeholders
    python main.py --web                   # Start the HTTP service
    python main.py --help                  # Show help
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from core import __version__
from core.config import Config, load_config
from core.exceptions import ResponderError
from core.logging import setup_logging, get_logger
from rules.context import AttributeContext

logger = get_logger("main")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Rule Responder - template responses without a language model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --test "how many zombies nearby"
  python main.py --test "where am i" --context player.yaml
  python main.py --status --rules-dir ./rules
  python main.py --web --port 9000
        """
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--test",
        type=str,
        metavar="MESSAGE",
        help="Match a message and print every resolved response"
    )
    mode_group.add_argument(
        "--status",
        action="store_true",
        help="Show rule index statistics"
    )
    mode_group.add_argument(
        "--placeholders",
        action="store_true",
        help="List registered placeholders"
    )
    mode_group.add_argument(
        "--web",
        action="store_true",
        help="Start the HTTP service"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--rules-dir",
        type=str,
        metavar="PATH",
        help="Directory of rule documents (overrides configuration)"
    )
    parser.add_argument(
        "--context",
        type=str,
        metavar="PATH",
        help="JSON or YAML file of context attributes for --test"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP service (default: from configuration)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host for the HTTP service (default: from configuration)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser.parse_args(argv)


def load_context(path: Optional[str]) -> AttributeContext:
    """
    Load context attributes from a JSON or YAML file.

    Raises:
        ResponderError: If the file cannot be read or is not a mapping
    """
    if not path:
        return AttributeContext()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ResponderError(f"Failed to read context file: {e}", {"path": path})

    if not isinstance(data, dict):
        raise ResponderError("Context file must contain a mapping", {"path": path})

    return AttributeContext(data)


def build_engine(config: Config):
    from rules.engine import RulesEngine
    return RulesEngine.from_config(config)


def run_test_message(config: Config, message: str, context_path: Optional[str] = None) -> int:
    """Match one message and print the responses."""
    engine = build_engine(config)
    context = load_context(context_path)

    responses = engine.match(context, message)

    print(f"\nInput: {message}")
    print("-" * 50)
    if not responses:
        print("No rule matched.")
        return 1

    for number, response in enumerate(responses, 1):
        print(f"[{number}] {response}")
    return 0


def run_status_check(config: Config) -> None:
    """Display index statistics."""
    engine = build_engine(config)

    print("\n" + "=" * 50)
    print("Rule Responder - Status")
    print("=" * 50 + "\n")
    print(f"Rules directory: {config.rules_path}")
    for key, value in engine.stats().items():
        print(f"  {key.replace('_', ' ').capitalize()}: {value}")


def run_list_placeholders() -> None:
    """Print every registered placeholder."""
    from rules.templates import default_registry

    for name in default_registry().names():
        print(name)


def run_web_ui(config: Config, host: str, port: int, debug: bool) -> None:
    """Start the HTTP service."""
    from ui.web.app import run_app

    run_app(host=host, port=port, debug=debug, config=config)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ResponderError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.rules_dir:
        config.rules.rules_dir = str(Path(args.rules_dir))
    if args.debug:
        config.debug = True

    setup_logging(
        log_dir=config.log_dir if args.web else None,
        log_level="DEBUG" if config.debug else config.logging.level,
        json_format=config.logging.json_format,
        console_output=config.logging.console_output and (config.debug or args.web)
    )

    try:
        if args.test:
            return run_test_message(config, args.test, args.context)
        if args.status:
            run_status_check(config)
            return 0
        if args.placeholders:
            run_list_placeholders()
            return 0
        if args.web:
            run_web_ui(
                config,
                host=args.host or config.ui.web_host,
                port=args.port or config.ui.web_port,
                debug=config.debug
            )
            return 0
    except ResponderError as e:
        logger.error(f"Command failed: {e}")
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0

    print("\nNo mode specified. Use --test, --status, --placeholders, --web or --help")
    return 0


if __name__ == "__main__":
    sys.exit(main())
