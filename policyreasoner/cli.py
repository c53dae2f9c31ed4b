"""Command-line arguments of the policy reasoner server."""

from __future__ import annotations

import argparse
import ipaddress
import os
from collections.abc import Sequence
from dataclasses import dataclass

DEFAULT_ADDRESS = "127.0.0.1:3030"


@dataclass(frozen=True)
class Arguments:
    """The parsed arguments of the server."""

    trace: bool
    address: tuple[str, int]
    help_state_resolver: bool
    state_resolver: str | None
    help_reasoner_connector: bool
    reasoner_connector: str | None


def _socket_address(raw: str) -> tuple[str, int]:
    host, sep, port_text = raw.rpartition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"invalid socket address '{raw}': missing port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise argparse.ArgumentTypeError(f"invalid socket address '{raw}': bracket IPv6 hosts")
    try:
        ip = ipaddress.ip_address(host)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"invalid socket address '{raw}': {err}") from err
    if not port_text.isdigit() or int(port_text) > 65535:
        raise argparse.ArgumentTypeError(f"invalid socket address '{raw}': bad port")
    return str(ip), int(port_text)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="The policy reasoner server.")
    parser.add_argument("--trace", action="store_true", help="If given, enables more verbose debugging.")
    parser.add_argument(
        "-a",
        "--address",
        type=_socket_address,
        default=os.environ.get("ADDRESS", DEFAULT_ADDRESS),
        help="The address on which to bind the server.",
    )
    parser.add_argument(
        "--help-state-resolver",
        action="store_true",
        help="If given, shows the possible arguments to pass to the state resolver plugin in '--state-resolver'.",
    )
    parser.add_argument(
        "-s",
        "--state-resolver",
        default=os.environ.get("STATE_RESOLVER"),
        help="Arguments to pass to the current state resolver plugin. "
        "To find which are possible, see '--help-state-resolver'.",
    )
    parser.add_argument(
        "--help-reasoner-connector",
        action="store_true",
        help="If given, shows the possible arguments to pass to the reasoner connector plugin "
        "in '--reasoner-connector'.",
    )
    parser.add_argument(
        "-r",
        "--reasoner-connector",
        default=os.environ.get("REASONER_CONNECTOR"),
        help="Arguments to pass to the current reasoner connector plugin. "
        "To find which are possible, see '--help-reasoner-connector'.",
    )
    return parser


def parse_arguments(argv: Sequence[str] | None = None) -> Arguments:
    """Parse the server's arguments, falling back to environment variables.

    Invalid arguments make the parser print usage and raise ``SystemExit``.
    """
    namespace = _parser().parse_args(argv)
    return Arguments(
        trace=namespace.trace,
        address=namespace.address,
        help_state_resolver=namespace.help_state_resolver,
        state_resolver=namespace.state_resolver,
        help_reasoner_connector=namespace.help_reasoner_connector,
        reasoner_connector=namespace.reasoner_connector,
    )