"""POSIX file permission checks for a local identity."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from functools import reduce


class PosixFilePermission(Enum):
    """A single POSIX file permission."""

    READ = "read"
    WRITE = "write"
    EXECUTE = "execute"

    def mode_bit(self) -> int:
        """The permission's mode bit: read is 4, write is 2, execute is 1."""
        return _MODE_BITS[self]


_MODE_BITS = {
    PosixFilePermission.READ: 4,
    PosixFilePermission.WRITE: 2,
    PosixFilePermission.EXECUTE: 1,
}


class PosixFileClass(Enum):
    """A POSIX file class (scope): owner, group or others."""

    OWNER = "owner"
    GROUP = "group"
    OTHERS = "others"

    def mode_bitmask(self, permissions: Iterable[PosixFilePermission]) -> int:
        """The mode bits that must be set for this class to hold all ``permissions``.

        For example, read and write for the owner give ``0o600``.
        """
        multiplier = _ALIGNMENT[self]
        return reduce(lambda acc, perm: acc | (multiplier * perm.mode_bit()), permissions, 0)


_ALIGNMENT = {
    PosixFileClass.OWNER: 0o100,
    PosixFileClass.GROUP: 0o10,
    PosixFileClass.OTHERS: 0o1,
}


@dataclass(frozen=True)
class PosixLocalIdentity:
    """A local user id and the group ids it belongs to."""

    uid: int
    gids: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "gids", tuple(self.gids))


def satisfies_posix_permissions(
    path: str | os.PathLike[str],
    identity: PosixLocalIdentity,
    permissions: Iterable[PosixFilePermission],
) -> bool:
    """Whether ``identity`` holds every one of ``permissions`` on the file at ``path``.

    The owner bits apply if the identity's uid owns the file, the group bits if
    one of its gids is the file's group; the others bits are checked last.
    Raises ``OSError`` if the file's metadata cannot be read.
    """
    required = list(permissions)
    metadata = os.stat(path)
    mode = metadata.st_mode

    def granted(file_class: PosixFileClass) -> bool:
        mask = file_class.mode_bitmask(required)
        return mode & mask == mask

    if metadata.st_uid == identity.uid and granted(PosixFileClass.OWNER):
        return True
    if metadata.st_gid in identity.gids and granted(PosixFileClass.GROUP):
        return True
    return granted(PosixFileClass.OTHERS)