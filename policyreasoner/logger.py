"""Audit loggers: one that appends statements to a file and one that ignores them."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import IO, Any

_log = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class FileLoggerErrorKind(Enum):
    """What step of writing to the log file failed."""

    FILE_CREATE = "create"
    FILE_OPEN = "open"
    FILE_SHUTDOWN = "shutdown"
    FILE_WRITE = "write"
    STATEMENT_SERIALIZE = "serialize"


class FileLoggerError(Exception):
    """Writing a statement to the audit log failed."""

    def __init__(
        self,
        kind: FileLoggerErrorKind,
        path: Path | None = None,
        statement: str | None = None,
    ) -> None:
        self.kind = kind
        self.path = path
        self.statement = statement
        super().__init__(self._message())

    def _message(self) -> str:
        if self.kind is FileLoggerErrorKind.FILE_CREATE:
            return f"Failed to create new log file '{self.path}'"
        if self.kind is FileLoggerErrorKind.FILE_OPEN:
            return f"Failed to open existing log file '{self.path}'"
        if self.kind is FileLoggerErrorKind.FILE_SHUTDOWN:
            return f"Failed to flush log file '{self.path}'"
        if self.kind is FileLoggerErrorKind.FILE_WRITE:
            return f"Failed to write to log file '{self.path}'"
        return f"Failed to serialize {self.statement}"


@dataclass(frozen=True)
class FileLogger:
    """Appends audit statements as JSON lines to a file.

    Each line is prefixed with the logger's identifier and the local time. The log
    is not tamper-proof: nothing checks or signs earlier contents.
    """

    identifier: str
    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    def _open(self) -> IO[str]:
        if not self.path.exists():
            _log.debug("Creating new log file at '%s'...", self.path)
            try:
                return open(self.path, "w", encoding="utf-8")
            except OSError as err:
                raise FileLoggerError(FileLoggerErrorKind.FILE_CREATE, path=self.path) from err
        _log.debug("Opening existing log file at '%s'...", self.path)
        try:
            return open(self.path, "a", encoding="utf-8")
        except OSError as err:
            raise FileLoggerError(FileLoggerErrorKind.FILE_OPEN, path=self.path) from err

    def log(self, kind: str, statement: Any) -> None:
        """Append one statement of the given kind to the log file."""
        try:
            message = json.dumps({kind: statement})
        except (TypeError, ValueError) as err:
            raise FileLoggerError(FileLoggerErrorKind.STATEMENT_SERIALIZE, statement=kind) from err

        handle = self._open()
        _log.debug("Writing %s-statement to logfile...", kind)
        try:
            try:
                handle.write(f"[{self.identifier}]")
                handle.write(f"[{datetime.now().strftime(_TIMESTAMP_FORMAT)}]")
                handle.write(f" {message}\n")
            except OSError as err:
                raise FileLoggerError(FileLoggerErrorKind.FILE_WRITE, path=self.path) from err
        finally:
            _log.debug("Flushing log file...")
            try:
                handle.close()
            except OSError as err:
                raise FileLoggerError(FileLoggerErrorKind.FILE_SHUTDOWN, path=self.path) from err


class MockLogger:
    """A logger that only announces each statement kind on standard output."""

    def log(self, kind: str, statement: Any) -> None:
        """Print the statement kind and discard the statement."""
        print(f"AUDIT LOG: {kind}")