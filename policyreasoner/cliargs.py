"""Parsing of nested ``key=value`` argument strings handed to plugins."""

from __future__ import annotations

import shlex
from collections.abc import Iterable, Sequence
from dataclasses import dataclass


class MapArgsError(ValueError):
    """A nested argument string could not be parsed."""


@dataclass(frozen=True)
class MapOption:
    """One recognised nested argument, known by a short and a long key."""

    short: str
    long: str
    description: str


def _tokens(raw: str) -> list[str]:
    lexer = shlex.shlex(raw, posix=True)
    lexer.whitespace += ","
    lexer.whitespace_split = True
    lexer.commenters = ""
    try:
        return list(lexer)
    except ValueError as err:
        raise MapArgsError(f"Failed to split '{raw}' into arguments: {err}") from err


def parse_map_args(raw: str, options: Iterable[MapOption]) -> dict[str, str | None]:
    """Parse ``key=value`` pairs, separated by commas or whitespace.

    Keys may be given by their short or long name; the result is keyed by long
    name. A key given without ``=`` maps to ``None``. Unknown and repeated keys
    raise :class:`MapArgsError`.
    """
    by_key: dict[str, MapOption] = {}
    for option in options:
        by_key[option.short] = option
        by_key[option.long] = option

    result: dict[str, str | None] = {}
    for token in _tokens(raw):
        key, sep, value = token.partition("=")
        option = by_key.get(key)
        if option is None:
            raise MapArgsError(f"Unknown argument '{key}'")
        if option.long in result:
            raise MapArgsError(
                f"Duplicate specification of argument '{option.long}' "
                f"(both '{option.short}=...' and '{option.long}=...' given)"
            )
        result[option.long] = value if sep else None
    return result


def format_help(name: str, short: str, long: str, options: Sequence[MapOption]) -> str:
    """Describe the nested arguments of a plugin for display to a user."""
    lines = [
        f"Nested arguments for the {name}:",
        f"  Give them as '-{short} \"<key>=<value>,...\"' or '--{long} \"<key>=<value>,...\"'.",
        "",
    ]
    if not options:
        lines.append("  <none>")
    else:
        labels = [f"{option.short}, {option.long}" for option in options]
        width = max(len(label) for label in labels)
        lines.extend(
            f"  {label.ljust(width)}    {option.description}"
            for label, option in zip(labels, options)
        )
    return "\n".join(lines)