"""CRISPE CLI - Command-line interface for prompt optimization.

This module provides the main CLI entrypoint, allowing users to optimize a
CRISPE prompt from the command line or to run the credential-injecting relay.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from crispe.core.errors import CrispeError
from crispe.core.schema.crispe_input import CrispeInput, Language
from crispe.core.session import GenerationSession

logger = logging.getLogger(__name__)

FIELD_NAMES = ("context", "role", "instruction", "specifics", "process", "example")


def main(argv=None):
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="crispe",
        description="CRISPE - optimize prompts with a completion provider",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Optimize through a running relay (English only)
  crispe optimize --instruction "Write a product description" --role "copywriter"

  # Chinese + English versions, straight to the OpenAI-compatible API
  crispe optimize --input fields.json --language cn --backend openai

  # Local inference engine
  crispe optimize --instruction "Summarize meeting notes" --backend local

  # Run the relay server
  crispe relay --port 8000

Note:
  The relay and the openai backend read the key from config.json
  ({'siliconflow': {'api_key': '...'}}) or SILICONFLOW_API_KEY.
"""
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Optimize command
    optimize_parser = subparsers.add_parser(
        "optimize",
        help="Optimize a prompt from CRISPE fields"
    )
    for name in FIELD_NAMES:
        optimize_parser.add_argument(
            f"--{name}",
            default=None,
            help=f"CRISPE {name} field"
        )
    optimize_parser.add_argument(
        "--input",
        help="JSON file with CRISPE fields (command-line fields override it)"
    )
    optimize_parser.add_argument(
        "--language",
        choices=[lang.value for lang in Language],
        default=Language.EN.value,
        help="Output language: en (English only) or cn (Chinese and English)"
    )
    optimize_parser.add_argument(
        "--backend",
        choices=["relay", "openai", "local"],
        default="relay",
        help="Completion provider (default: relay)"
    )
    optimize_parser.add_argument(
        "--model",
        help="Model name for the openai or local backend"
    )
    optimize_parser.add_argument(
        "--relay-url",
        help="Relay endpoint (default: from config.json or http://localhost:8000/api/optimize)"
    )
    optimize_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )
    optimize_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    # Relay command
    relay_parser = subparsers.add_parser(
        "relay",
        help="Run the credential-injecting relay server"
    )
    relay_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Bind address (default: 127.0.0.1)"
    )
    relay_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port (default: 8000)"
    )
    relay_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    args = parser.parse_args(argv)

    # Setup logging
    if hasattr(args, 'verbose') and args.verbose:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')

    # Handle commands
    if args.command == "optimize":
        return cmd_optimize(args)
    elif args.command == "relay":
        return cmd_relay(args)
    else:
        parser.print_help()
        return 1


def load_input(args) -> CrispeInput:
    """Merge the --input JSON file with fields given on the command line."""
    values = {}
    if args.input:
        with open(Path(args.input), "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("Input file must contain a JSON object")
        values.update(data)
    for name in FIELD_NAMES:
        value = getattr(args, name)
        if value is not None:
            values[name] = value
    return CrispeInput.from_dict(values)


def build_provider_config(args) -> dict:
    config = {}
    if args.backend == "relay" and args.relay_url:
        config["url"] = args.relay_url
    if args.backend in ("openai", "local") and args.model:
        config["model"] = args.model
    return config


def cmd_optimize(args):
    """Handle optimize command."""
    try:
        data = load_input(args)
    except (OSError, ValueError) as e:
        print(f"Error: Could not read input: {e}", file=sys.stderr)
        return 1

    if not data.has_instruction():
        print("Error: Instruction is required", file=sys.stderr)
        return 1

    from crispe.llm.adapter import CompletionAdapter

    def show_progress(text: str) -> None:
        print(text, file=sys.stderr)

    try:
        adapter = CompletionAdapter(provider_type=args.backend, **build_provider_config(args))
        session = GenerationSession(adapter)
        result = session.run(data, args.language, on_progress=show_progress)
    except CrispeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    elif Language.parse(args.language) is Language.CN:
        print("## 中文")
        print(result.cn)
        print()
        print("## English")
        print(result.en)
    else:
        print(result.en)
    return 0


def cmd_relay(args):
    """Handle relay command."""
    import uvicorn

    from crispe.relay.app import create_app

    app = create_app()
    print(f"Relay listening on http://{args.host}:{args.port}/api/optimize")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info" if args.verbose else "warning")
    return 0


if __name__ == "__main__":
    sys.exit(main())
