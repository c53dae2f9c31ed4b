"""The POSIX policy: per location, a map from global usernames to local identities."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from policyreasoner.models import Policy
from policyreasoner.permissions import PosixLocalIdentity


class PolicyError(Exception):
    """The policy does not cover what a request needs."""


class MissingLocationError(PolicyError):
    """The policy has no entry for a location."""

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f"Missing location: {location}")


class MissingUserError(PolicyError):
    """A location in the policy has no mapping for a user."""

    def __init__(self, user: str, location: str) -> None:
        self.user = user
        self.location = location
        super().__init__(f"Missing user: {user} for location: {location}")


def _is_u32(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 2**32


def _parse_identity(raw: Any) -> PosixLocalIdentity:
    if not isinstance(raw, Mapping):
        raise ValueError("local identity must be an object")
    uid = raw.get("uid")
    gids = raw.get("gids")
    if not _is_u32(uid):
        raise ValueError("uid must be an unsigned 32-bit integer")
    if not isinstance(gids, list) or not all(_is_u32(gid) for gid in gids):
        raise ValueError("gids must be a list of unsigned 32-bit integers")
    return PosixLocalIdentity(uid=uid, gids=gids)


def _parse_datasets(raw: Any) -> dict[str, dict[str, PosixLocalIdentity]]:
    if not isinstance(raw, Mapping):
        raise ValueError("policy must be an object of locations")
    datasets: dict[str, dict[str, PosixLocalIdentity]] = {}
    for location, entry in raw.items():
        if not isinstance(entry, Mapping) or not isinstance(entry.get("user_map"), Mapping):
            raise ValueError(f"location '{location}' must hold a 'user_map' object")
        datasets[location] = {
            user: _parse_identity(identity) for user, identity in entry["user_map"].items()
        }
    return datasets


@dataclass
class PosixPolicy:
    """Maps, for each location, global usernames to local POSIX identities."""

    datasets: dict[str, dict[str, PosixLocalIdentity]] = field(default_factory=dict)

    @classmethod
    def from_policy(cls, policy: Policy) -> PosixPolicy:
        """Read the POSIX policy from the first content of ``policy``.

        The content may be JSON text or an already decoded object. Raises
        ``ValueError`` if there is no content or it does not have the expected form.
        """
        if not policy.content:
            raise ValueError("Failed to parse PolicyContent")
        content = policy.content[0].content
        try:
            raw = json.loads(content.strip()) if isinstance(content, str) else content
            return cls(datasets=_parse_datasets(raw))
        except ValueError as err:
            raise ValueError(f"Failed to parse PosixPolicy: {err}") from err

    def local_identity(self, location: str, user: str) -> PosixLocalIdentity:
        """The local identity of ``user`` at ``location``."""
        try:
            user_map = self.datasets[location]
        except KeyError:
            raise MissingLocationError(location) from None
        try:
            return user_map[user]
        except KeyError:
            raise MissingUserError(user, location) from None