"""Reading eFLINT policy content and choosing which reasoner errors clients see."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from policyreasoner.cliargs import MapOption
from policyreasoner.models import Policy, PolicyContent

EFLINT_JSON_ID = "eflint-json"
"""The reasoner identifier of eFLINT JSON policy content."""

DEFAULT_PREFIX = "pub-"

_U32 = re.compile(r"\+?[0-9]+")
_RULE = "-" * 80


def _eflint_content(policy: Policy) -> PolicyContent:
    for item in policy.content:
        if item.reasoner == EFLINT_JSON_ID:
            return item
    raise ValueError(f"Policy has no '{EFLINT_JSON_ID}' content")


def _parse_u32(part: str, name: str) -> int:
    if _U32.fullmatch(part) and int(part) < 2**32:
        return int(part)
    raise ValueError(f"Invalid {name} version part, could not parse {part} into u32")


def extract_eflint_version(policy: Policy) -> tuple[int, int, int]:
    """The ``(major, minor, patch)`` reasoner version of the policy's eFLINT content.

    Raises ``ValueError`` if there is no eFLINT content or the version is malformed.
    """
    raw = _eflint_content(policy).reasoner_version
    parts = raw.split(".")
    if len(parts) != 3:
        raise ValueError(f"Invalid version format, should be 'maj.min.patch', got '{raw}'")
    major = _parse_u32(parts[0], "major")
    minor = _parse_u32(parts[1], "minor")
    patch = _parse_u32(parts[2], "patch")
    return major, minor, patch


def extract_eflint_policy(policy: Policy) -> list[Any]:
    """The phrases of the policy's eFLINT content.

    The content may be JSON text or an already decoded request. Raises
    ``ValueError`` if it is not an eFLINT JSON phrases request.
    """
    content = _eflint_content(policy).content
    if isinstance(content, str):
        try:
            request = json.loads(content)
        except json.JSONDecodeError as err:
            raise ValueError(
                f"Input is not valid eFLINT JSON: {err}\n\nInput:\n{_RULE}\n{content}\n{_RULE}\n"
            ) from err
    else:
        request = content

    if not isinstance(request, Mapping) or "kind" not in request:
        raise ValueError(f"Input is not valid eFLINT JSON: not a request\n\nInput:\n{_RULE}\n{content}\n{_RULE}\n")
    if request["kind"] != "phrases":
        raise ValueError("Cannot accept non-Phrases Request input from request")
    phrases = request.get("phrases")
    if not isinstance(phrases, list):
        raise ValueError(f"Input is not valid eFLINT JSON: missing phrases\n\nInput:\n{_RULE}\n{content}\n{_RULE}\n")
    return list(phrases)


class EFlintLeakNoErrors:
    """Shares none of the reasoner's violations with clients."""

    NESTED_OPTIONS: tuple[MapOption, ...] = ()

    def __init__(self, args: Mapping[str, str | None] | None = None) -> None:
        pass

    def extract_errors(self, result: Any) -> list[str]:
        """Always an empty list."""
        return []


class EFlintLeakPrefixErrors:
    """Shares the violations whose identifier starts with a configured prefix."""

    NESTED_OPTIONS: tuple[MapOption, ...] = (
        MapOption(
            "p",
            "prefix",
            f"Any eFLINT facts that have this prefix will be shared with clients. Default: '{DEFAULT_PREFIX}'",
        ),
    )

    def __init__(self, args: Mapping[str, str | None] | None = None) -> None:
        given = (args or {}).get("prefix")
        self.prefix = given if given is not None else DEFAULT_PREFIX

    def extract_errors(self, result: Any) -> list[str]:
        """Identifiers of the prefixed violations in a state-change result."""
        if not isinstance(result, Mapping) or "violated" not in result:
            return []
        violations = result.get("violations") or []
        return [
            violation["identifier"]
            for violation in violations
            if violation["identifier"].startswith(self.prefix)
        ]