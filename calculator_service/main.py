"""
Command line entrypoint.

Subcommands:
- serve:  run the HTTP service
- calc:   validate and evaluate a single operation against a running service
- keypad: interactive keypad session against a running service
"""

import argparse
import sys
from typing import List, Literal, Optional, TextIO

from pydantic import BaseModel, Field, IPvAnyAddress, ValidationError

from calculator_service.client.client import CalculatorApiError, CalculatorClient
from calculator_service.client.formatting import format_number
from calculator_service.client.keypad import Keypad
from calculator_service.common.config import Settings, get_settings
from calculator_service.common.logger import logger, setup_logging
from calculator_service.common.operations import Operation
from calculator_service.common.validation import blocking_issues, parse_number, validate_operation


class ServeArgs(BaseModel):
    """
    Pydantic model used to validate ``serve`` arguments.

    Attributes
    ----------
    host : IPvAnyAddress
        Address to bind.
    port : int
        TCP port to listen on.
    """

    host: IPvAnyAddress
    port: int = Field(..., ge=1, le=65535)


class CalcArgs(BaseModel):
    """
    Pydantic model used to validate ``calc`` arguments.

    Operands stay raw strings: they go through the calculator validators, which produce
    user-facing messages.
    """

    operation: Operation
    a: str
    b: Optional[str] = None
    method: Literal["POST", "GET"] = "POST"
    url: str


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calculator-service", description="Arithmetic calculator service and client"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=str(settings.host), help="Address to bind")
    serve.add_argument("--port", default=settings.port, help="TCP port to listen on")

    calc = subparsers.add_parser("calc", help="Evaluate one operation")
    calc.add_argument("operation", help="One of: " + ", ".join(op.value for op in Operation))
    calc.add_argument("a", help="First operand")
    calc.add_argument("b", nargs="?", default=None, help="Second operand (binary operations)")
    calc.add_argument("--get", action="store_true", help="Send query parameters instead of a JSON body")
    calc.add_argument("--url", default=settings.api_base_url, help="Service root URL")

    keypad = subparsers.add_parser("keypad", help="Interactive keypad session")
    keypad.add_argument("--url", default=settings.api_base_url, help="Service root URL")

    return parser


def run_server(args: ServeArgs, settings: Settings) -> None:
    """
    Start the calculator service.

    Logging is configured here, not at import time, so tests and the client stay quiet.
    """
    import uvicorn

    from calculator_service.server.app import create_app

    setup_logging(settings.log_level, settings.log_file, settings.log_format)
    logger.info(f"🖥️ Starting server on {args.host}:{args.port}")
    if settings.log_file is not None:
        logger.info(f"🖥️ Logging to file: {settings.log_file}")
    uvicorn.run(create_app(settings), host=str(args.host), port=args.port, log_level="info")


def run_calc(args: CalcArgs, client: CalculatorClient, out: Optional[TextIO] = None) -> int:
    """
    Validate and evaluate a single operation.

    :return: Exit code: 0 on success, 1 if the service rejected the call, 2 on invalid input
    :rtype: int
    """
    out = out or sys.stdout
    b = args.b if not args.operation.is_unary else None
    issues = validate_operation(args.operation, args.a, b)
    blocking = blocking_issues(issues)
    for issue in issues:
        prefix = "Warning" if issue.advisory else "Error"
        out.write(f"{prefix}: {issue.field}: {issue.message}\n")
    if blocking:
        return 2

    try:
        result = client.calculate(
            args.operation,
            parse_number(args.a),
            parse_number(b) if b is not None else None,
            method=args.method,
        )
    except CalculatorApiError as exc:
        out.write(f"Error: {exc}\n")
        return 1

    out.write(f"{format_number(result)}\n")
    return 0


def run_keypad(keypad: Keypad, lines: Optional[TextIO] = None, out: Optional[TextIO] = None) -> None:
    """
    Drive a keypad from text input.

    Each line holds whitespace-separated keys. ``history`` prints the history, ``clear-history``
    empties it and ``quit`` ends the session.
    """
    lines = lines or sys.stdin
    out = out or sys.stdout
    out.write("Keys: digits . + - * / = C CE √ x^y % ∛ 1/x -/+ | history, clear-history, quit\n")
    for line in lines:
        command = line.strip()
        if command == "quit":
            break
        if command == "history":
            for entry in keypad.history.render() or ["(empty)"]:
                out.write(f"{entry}\n")
            continue
        if command == "clear-history":
            keypad.history.clear()
            continue

        for key in command.split():
            if not keypad.press_key(key):
                out.write(f"Unknown key: {key}\n")
        for screen_line in keypad.screen():
            out.write(f"{screen_line}\n")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function executed by the ``calculator-service`` script.
    """
    settings = get_settings()
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            run_server(ServeArgs(host=args.host, port=args.port), settings)
            return 0

        if args.command == "calc":
            calc_args = CalcArgs(
                operation=args.operation,
                a=args.a,
                b=args.b,
                method="GET" if args.get else "POST",
                url=args.url,
            )
            if not calc_args.operation.is_unary and calc_args.b is None:
                parser.error(f"operation '{calc_args.operation.value}' requires two operands")
            client = CalculatorClient(base_url=calc_args.url, timeout=settings.request_timeout)
            return run_calc(calc_args, client)

        client = CalculatorClient(base_url=args.url, timeout=settings.request_timeout)
        run_keypad(Keypad(client))
        return 0
    except ValidationError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    sys.exit(main())
