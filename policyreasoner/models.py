"""Policy records and the SQLite schema that stores them."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class PolicyContent:
    """One reasoner-specific body of a policy."""

    reasoner: str
    reasoner_version: str
    content: Any


@dataclass
class PolicyVersion:
    """Metadata describing one version of a policy."""

    version_description: str
    reasoner_connector_context: str
    created_at: datetime
    creator: str | None = None
    version: int | None = None


@dataclass
class Policy:
    """A policy: a description, its version metadata and its contents."""

    description: str
    version: PolicyVersion
    content: list[PolicyContent] = field(default_factory=list)


@dataclass(frozen=True)
class Context:
    """Who initiated a change to the policy store."""

    initiator: str


class PolicyDataError(Exception):
    """A policy store operation failed."""


class PolicyNotFoundError(PolicyDataError):
    """The requested policy (or active version) does not exist."""

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(message)


@dataclass
class SqlitePolicy:
    """A row of the ``policies`` table."""

    description: str
    version: int
    version_description: str
    creator: str
    created_at: int
    content: str
    reasoner_connector_context: str


@dataclass
class SqliteActiveVersion:
    """A row of the ``active_version`` table."""

    version: int
    activated_on: datetime
    activated_by: str
    deactivated_on: datetime | None = None
    deactivated_by: str | None = None

    @classmethod
    def now(cls, version: int, activated_by: str) -> SqliteActiveVersion:
        """Build a record activating ``version`` at the current (naive UTC) time."""
        activated_on = datetime.now(timezone.utc).replace(tzinfo=None)
        return cls(version=version, activated_on=activated_on, activated_by=activated_by)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS policies (
    version BIGINT NOT NULL PRIMARY KEY,
    description TEXT NOT NULL,
    version_description TEXT NOT NULL,
    creator TEXT NOT NULL,
    created_at BIGINT NOT NULL,
    content TEXT NOT NULL,
    reasoner_connector_context TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS active_version (
    version BIGINT NOT NULL REFERENCES policies(version),
    activated_on TIMESTAMP NOT NULL,
    activated_by TEXT NOT NULL,
    deactivated_on TIMESTAMP,
    deactivated_by TEXT,
    PRIMARY KEY (version, activated_on)
);
"""


def create_schema(connection: sqlite3.Connection) -> None:
    """Create the ``policies`` and ``active_version`` tables if they are missing."""
    connection.executescript(_SCHEMA)