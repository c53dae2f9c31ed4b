"""A state resolver that serves a state read once from a JSON file."""

from __future__ import annotations

import copy
import json
import logging
from enum import Enum
from pathlib import Path

from policyreasoner.cliargs import MapArgsError, MapOption, format_help, parse_map_args
from policyreasoner.state import State

_log = logging.getLogger(__name__)

FILE_STATE_RESOLVER_KEYS = ("f", "file")

DEFAULT_STATE_PATH = Path("examples/eflint_reasonerconn/example-state.json")

_OPTIONS = (
    MapOption(
        "p",
        "path",
        f"The path to the file that we read the state from. Default: '{DEFAULT_STATE_PATH}'",
    ),
)


class FileStateResolverErrorKind(Enum):
    """What went wrong while building a FileStateResolver."""

    CLI_ARGUMENTS_PARSE = "cli-arguments-parse"
    CLI_DUPLICATE_PATH = "cli-duplicate-path"
    CLI_MISSING_PATH = "cli-missing-path"
    FILE_READ = "file-read"
    FILE_DESERIALIZE = "file-deserialize"


class FileStateResolverError(Exception):
    """Building a FileStateResolver failed."""

    def __init__(
        self,
        kind: FileStateResolverErrorKind,
        raw: str | None = None,
        path: Path | None = None,
    ) -> None:
        self.kind = kind
        self.raw = raw
        self.path = path
        super().__init__(self._message())

    def _message(self) -> str:
        kind = FileStateResolverErrorKind
        if self.kind is kind.CLI_ARGUMENTS_PARSE:
            return f"Failed to parse '{self.raw}' as CLI argument string for a FileStateResolver"
        if self.kind is kind.CLI_DUPLICATE_PATH:
            return "Duplicate specification of file path (both 'p=...' and 'path=...' given)"
        if self.kind is kind.CLI_MISSING_PATH:
            return (
                "File path not specified (give it as either '--state-resolver \"p=...\"' "
                "or '--state-resolver \"path=...\"')"
            )
        if self.kind is kind.FILE_READ:
            return f"Failed to read file '{self.path}'"
        return f"Failed to deserialize file '{self.path}' as JSON"


class FileStateResolver:
    """Resolves every use case to the same state, read from a file at start-up."""

    def __init__(self, cli_args: str = "") -> None:
        _log.debug("Parsing nested arguments for FileStateResolver")
        try:
            args = parse_map_args(cli_args, _OPTIONS)
        except MapArgsError as err:
            raise FileStateResolverError(
                FileStateResolverErrorKind.CLI_ARGUMENTS_PARSE, raw=cli_args
            ) from err

        given = args.get("path")
        path = Path(given) if given is not None else DEFAULT_STATE_PATH

        _log.debug("Opening input file '%s'...", path)
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            raise FileStateResolverError(FileStateResolverErrorKind.FILE_READ, path=path) from err

        _log.debug("Parsing input file '%s'...", path)
        try:
            self._state = State.from_dict(json.loads(raw))
        except (ValueError, TypeError, AttributeError) as err:
            raise FileStateResolverError(
                FileStateResolverErrorKind.FILE_DESERIALIZE, path=path
            ) from err

    def get_state(self, use_case: str) -> State:
        """Return a copy of the stored state; the use case is ignored."""
        return copy.deepcopy(self._state)

    @staticmethod
    def help(short: str, long: str) -> str:
        """Describe the nested arguments this resolver accepts."""
        return format_help("FileStateResolver plugin", short, long, _OPTIONS)