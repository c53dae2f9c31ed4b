# policyreasoner

Building blocks for a policy reasoner: a service that decides whether a
workflow, a task within it, or a data transfer it asks for is allowed under
the policy currently in force. The package has no dependencies outside the
standard library.

It contains:

- **Policy models** – `policyreasoner.models` defines `Policy`,
  `PolicyVersion`, `PolicyContent` and `Context`, the `PolicyDataError` and
  `PolicyNotFoundError` exceptions, the table rows `SqlitePolicy` and
  `SqliteActiveVersion`, and `create_schema(connection)`, which creates the
  `policies` and `active_version` tables.
- **Policy storage** – `policyreasoner.sqlite_store.SqlitePolicyDataStore`
  keeps numbered policy versions in SQLite and records which version is
  active.
- **Audit logging** – `policyreasoner.logger.FileLogger` and `MockLogger`.
- **State** – `policyreasoner.state.State` (with `User` and `Dataset`) lists
  the users, locations, datasets and functions known to the system;
  `policyreasoner.resolver.FileStateResolver` reads it from a JSON file.
- **Nested plugin arguments** – `policyreasoner.cliargs`.
- **Server arguments** – `policyreasoner.cli.parse_arguments`.
- **POSIX permissions** – `policyreasoner.permissions` and
  `policyreasoner.posix_policy`.
- **eFLINT** – `policyreasoner.eflint_phrases` builds eFLINT JSON phrases;
  `policyreasoner.eflint_handlers` reads eFLINT policy content and filters
  the violations that clients may see.

## Storing and activating policies

```python
from datetime import datetime, timezone

from policyreasoner.models import Context, Policy, PolicyContent, PolicyVersion
from policyreasoner.sqlite_store import SqlitePolicyDataStore

policy = Policy(
    description="Example policy",
    version=PolicyVersion(
        version_description="first draft",
        reasoner_connector_context="example",
        created_at=datetime.now(timezone.utc),
    ),
    content=[PolicyContent(reasoner="eflint-json", reasoner_version="0.1.0", content={})],
)

def on_commit(policy):
    print("stored version", policy.version.version)

with SqlitePolicyDataStore("policy.db") as store:
    stored = store.add_version(policy, Context(initiator="alice"), on_commit)
    store.set_active(stored.version.version, Context(initiator="alice"), on_commit)

    active = store.get_active()
    for version in store.get_versions():
        print(version.version, version.version_description)
```

Each new version gets the number after that of the most recently created
one, starting at 1, and its creator is the context's initiator. Adding a
version, activating it and deactivating it (`deactivate_policy(context,
transaction)`, whose callback takes no arguments) each run in an exclusive
transaction together with the callback; if the callback raises, the change
is rolled back and a `PolicyDataError` is raised.

`get_version`, `get_most_recent` and `get_active` raise
`PolicyNotFoundError` when there is no such policy or no version is active.
Activating the version that is already active raises `PolicyDataError`.

## Audit logging

```python
from policyreasoner.logger import FileLogger

logger = FileLogger("policy-reasoner v0.1.0", "audit-log.log")
logger.log("verdict", {"reference": "abc", "verdict": "allow"})
```

Each call appends one line: `[identifier][YYYY-mm-dd HH:MM:SS] ` followed by
`{kind: statement}` as JSON. A statement that cannot be serialised, or a
failure to create, open, write or close the file, raises `FileLoggerError`;
its `kind` tells which step failed and `path` names the file.
`MockLogger().log(kind, statement)` only prints `AUDIT LOG: <kind>`.

## State

```python
from policyreasoner.resolver import FileStateResolver

resolver = FileStateResolver("path=./state.json")
state = resolver.get_state("any-use-case")
print(FileStateResolver.help("s", "state-resolver"))
```

The file holds an object with `users`, `locations`, `datasets` and
`functions` lists (`State.from_dict` / `State.to_dict`). Without a `path`
argument the resolver reads
`examples/eflint_reasonerconn/example-state.json`. Unparseable arguments,
an unreadable file or malformed JSON raise `FileStateResolverError`.

## Nested plugin arguments

`parse_map_args(raw, options)` parses `key=value` pairs separated by commas
or whitespace, where each `MapOption` may be named by its short or long key;
the result is keyed by long name, and a key without `=` maps to `None`.
Unknown or repeated keys raise `MapArgsError`. `format_help(name, short,
long, options)` renders the options for display.

## Server arguments

`parse_arguments(argv)` returns an `Arguments` record with `trace`,
`address` (a `(host, port)` pair, default `127.0.0.1:3030`),
`help_state_resolver`, `state_resolver`, `help_reasoner_connector` and
`reasoner_connector`. The address and the two plugin strings fall back to
the `ADDRESS`, `STATE_RESOLVER` and `REASONER_CONNECTOR` environment
variables.

## POSIX permissions

A POSIX policy maps each location to a table of workflow users and their
local identity:

```json
{
  "surf": {
    "user_map": {
      "test": {"uid": 1000, "gids": [1001, 1002]}
    }
  }
}
```

```python
from policyreasoner.permissions import PosixFilePermission, satisfies_posix_permissions
from policyreasoner.posix_policy import PosixPolicy

posix_policy = PosixPolicy.from_policy(policy)
identity = posix_policy.local_identity("surf", "test")
allowed = satisfies_posix_permissions(
    "/data/file.csv", identity, [PosixFilePermission.READ]
)
```

The owner bits apply if the identity's uid owns the file, the group bits if
one of its gids is the file's group, and the others bits otherwise.
`local_identity` raises `MissingLocationError` or `MissingUserError`, both
`PolicyError`s.

## eFLINT

`state_to_phrases(state)` describes a state as creation phrases;
`execute_task_question`, `access_data_question` and `workflow_question`
build the question phrase for each kind of request.
`extract_eflint_version(policy)` returns the `(major, minor, patch)` of the
policy's `eflint-json` content and `extract_eflint_policy(policy)` its
phrases; both raise `ValueError` on malformed content.
`EFlintLeakPrefixErrors({"prefix": ...})` returns the identifiers of
violations starting with the prefix (default `pub-`), while
`EFlintLeakNoErrors` returns none.

## What this package does not do

There is no server and no command to start one: `parse_arguments` only
parses the arguments such a server would take. Nothing here sends phrases
to an eFLINT reasoner or interprets its replies, and there is no complete
reasoner that walks a workflow, collects the datasets it touches and
returns a verdict; the package supplies the permission checks, policy
lookups and phrase builders such a reasoner would use.