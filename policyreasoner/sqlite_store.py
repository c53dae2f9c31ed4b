"""A policy store backed by an SQLite database."""

from __future__ import annotations

import copy
import json
import sqlite3
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

from policyreasoner.models import (
    Context,
    Policy,
    PolicyContent,
    PolicyDataError,
    PolicyNotFoundError,
    PolicyVersion,
    SqliteActiveVersion,
    SqlitePolicy,
    create_schema,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

_POLICY_COLUMNS = (
    "description, version, version_description, creator, created_at, content, "
    "reasoner_connector_context"
)


def _to_micros(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // timedelta(microseconds=1)


def _from_micros(micros: int) -> datetime:
    return _EPOCH + timedelta(microseconds=micros)


def _format_timestamp(moment: datetime) -> str:
    return moment.strftime(_TIMESTAMP_FORMAT)


def _content_to_json(content: list[PolicyContent]) -> str:
    return json.dumps(
        [
            {
                "reasoner": item.reasoner,
                "reasoner_version": item.reasoner_version,
                "content": item.content,
            }
            for item in content
        ]
    )


def _content_from_json(raw: str) -> list[PolicyContent]:
    return [
        PolicyContent(
            reasoner=item["reasoner"],
            reasoner_version=item["reasoner_version"],
            content=item["content"],
        )
        for item in json.loads(raw)
    ]


def _row_to_policy(row: sqlite3.Row) -> Policy:
    record = SqlitePolicy(**{key: row[key] for key in row.keys()})
    return Policy(
        description=record.description,
        version=PolicyVersion(
            creator=record.creator,
            created_at=_from_micros(record.created_at),
            version=record.version,
            version_description=record.version_description,
            reasoner_connector_context=record.reasoner_connector_context,
        ),
        content=_content_from_json(record.content),
    )


def _run_callback(callback: Callable[..., Any], *args: Any) -> None:
    try:
        callback(*args)
    except PolicyDataError as err:
        raise PolicyDataError(str(err)) from err


class SqlitePolicyDataStore:
    """Stores policy versions and the history of which version is active."""

    def __init__(self, database_url: str) -> None:
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(
                database_url,
                uri=database_url.startswith("file:"),
                check_same_thread=False,
                isolation_level=None,
            )
            self._conn.row_factory = sqlite3.Row
            create_schema(self._conn)
        except sqlite3.Error as err:
            raise PolicyDataError(f"Could not open database '{database_url}': {err}") from err

    def __enter__(self) -> SqlitePolicyDataStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying database connection."""
        with self._lock:
            self._conn.close()

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as err:
                raise PolicyDataError(str(err)) from err

    @contextmanager
    def _exclusive(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                self._conn.execute("BEGIN EXCLUSIVE")
            except sqlite3.Error as err:
                raise PolicyDataError(str(err)) from err
            try:
                yield self._conn
            except sqlite3.Error as err:
                self._conn.execute("ROLLBACK")
                raise PolicyDataError(str(err)) from err
            except BaseException:
                self._conn.execute("ROLLBACK")
                raise
            try:
                self._conn.execute("COMMIT")
            except sqlite3.Error as err:
                raise PolicyDataError(str(err)) from err

    def _get_active(self) -> int:
        rows = self._query(
            "SELECT version, activated_on, activated_by, deactivated_on, deactivated_by "
            "FROM active_version ORDER BY activated_on DESC, rowid DESC LIMIT 1"
        )
        if len(rows) != 1:
            raise PolicyNotFoundError()
        row = rows[0]
        if row["deactivated_on"] is not None:
            raise PolicyNotFoundError()
        return row["version"]

    def get_most_recent(self) -> Policy:
        """Return the policy with the most recent creation time."""
        rows = self._query(
            f"SELECT {_POLICY_COLUMNS} FROM policies ORDER BY created_at DESC LIMIT 1"
        )
        if len(rows) != 1:
            raise PolicyNotFoundError()
        return _row_to_policy(rows[0])

    def add_version(
        self,
        policy: Policy,
        context: Context,
        transaction: Callable[[Policy], Any],
    ) -> Policy:
        """Store ``policy`` as the next version, committing only if ``transaction`` succeeds."""
        rows = self._query("SELECT version FROM policies ORDER BY created_at DESC LIMIT 1")
        latest_version = rows[0]["version"] if len(rows) == 1 else 0
        next_version = latest_version + 1

        model = SqlitePolicy(
            description=policy.description,
            version=next_version,
            version_description=policy.version.version_description,
            creator=context.initiator,
            created_at=_to_micros(policy.version.created_at),
            content=_content_to_json(policy.content),
            reasoner_connector_context=policy.version.reasoner_connector_context,
        )

        with self._exclusive() as conn:
            conn.execute(
                f"INSERT INTO policies ({_POLICY_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    model.description,
                    model.version,
                    model.version_description,
                    model.creator,
                    model.created_at,
                    model.content,
                    model.reasoner_connector_context,
                ),
            )
            stored = replace(policy, version=replace(policy.version, version=next_version))
            _run_callback(transaction, copy.deepcopy(stored))
        return stored

    def get_version(self, version: int) -> Policy:
        """Return the policy with the given version number."""
        rows = self._query(
            f"SELECT {_POLICY_COLUMNS} FROM policies WHERE version = ? "
            "ORDER BY created_at DESC LIMIT 1",
            (version,),
        )
        if len(rows) != 1:
            raise PolicyNotFoundError()
        return _row_to_policy(rows[0])

    def get_versions(self) -> list[PolicyVersion]:
        """Return the metadata of every stored version, newest creation time first."""
        rows = self._query(
            "SELECT version, version_description, creator, created_at, "
            "reasoner_connector_context FROM policies ORDER BY created_at DESC"
        )
        return [
            PolicyVersion(
                version=row["version"],
                version_description=row["version_description"],
                creator=row["creator"],
                created_at=_from_micros(row["created_at"]),
                reasoner_connector_context=row["reasoner_connector_context"],
            )
            for row in rows
        ]

    def get_active(self) -> Policy:
        """Return the currently active policy."""
        return self.get_version(self._get_active())

    def set_active(
        self,
        version: int,
        context: Context,
        transaction: Callable[[Policy], Any],
    ) -> Policy:
        """Make ``version`` the active policy, committing only if ``transaction`` succeeds."""
        policy = self.get_version(version)
        try:
            current: int | None = self._get_active()
        except PolicyDataError:
            current = None
        if current == version:
            raise PolicyDataError(f"Version already active: {version}")

        record = SqliteActiveVersion.now(version, context.initiator)
        with self._exclusive() as conn:
            conn.execute(
                "INSERT INTO active_version (version, activated_on, activated_by, "
                "deactivated_on, deactivated_by) VALUES (?, ?, ?, ?, ?)",
                (
                    record.version,
                    _format_timestamp(record.activated_on),
                    record.activated_by,
                    None,
                    None,
                ),
            )
            _run_callback(transaction, copy.deepcopy(policy))
        return policy

    def deactivate_policy(self, context: Context, transaction: Callable[[], Any]) -> None:
        """Deactivate the active policy, committing only if ``transaction`` succeeds."""
        active = self._get_active()
        deactivated_on = datetime.now(timezone.utc).replace(tzinfo=None)
        with self._exclusive() as conn:
            conn.execute(
                "UPDATE active_version SET deactivated_on = ?, deactivated_by = ? "
                "WHERE version = ?",
                (_format_timestamp(deactivated_on), context.initiator, active),
            )
            _run_callback(transaction)