from datetime import datetime, timezone

import pytest

from policyreasoner.models import (
    Context,
    Policy,
    PolicyContent,
    PolicyDataError,
    PolicyNotFoundError,
    PolicyVersion,
)
from policyreasoner.sqlite_store import SqlitePolicyDataStore


@pytest.fixture
def store(tmp_path):
    with SqlitePolicyDataStore(str(tmp_path / "policy.db")) as s:
        yield s


def make_policy(created_at, description="desc"):
    return Policy(
        description=description,
        version=PolicyVersion(
            version_description="first",
            reasoner_connector_context="ctx-hash",
            created_at=created_at,
            creator="ignored",
        ),
        content=[PolicyContent(reasoner="eflint-json", reasoner_version="0.1.0", content={"a": [1, 2]})],
    )


T2023 = datetime(2023, 1, 1, tzinfo=timezone.utc)
T2024 = datetime(2024, 1, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)
CTX = Context(initiator="alice")


def noop(*_args):
    return None


def test_empty_store_not_found(store):
    with pytest.raises(PolicyNotFoundError):
        store.get_most_recent()
    with pytest.raises(PolicyNotFoundError):
        store.get_version(1)
    with pytest.raises(PolicyNotFoundError):
        store.get_active()
    assert store.get_versions() == []


def test_add_version_numbers_and_round_trip(store):
    calls = []
    first = store.add_version(make_policy(T2023), CTX, calls.append)
    second = store.add_version(make_policy(T2024, "second"), CTX, calls.append)
    assert first.version.version == 1
    assert second.version.version == 2
    assert [p.version.version for p in calls] == [1, 2]

    loaded = store.get_version(2)
    assert loaded.description == "second"
    assert loaded.version.creator == "alice"
    assert loaded.version.created_at == T2024
    assert loaded.content == make_policy(T2024).content
    assert loaded.version.reasoner_connector_context == "ctx-hash"


def test_transaction_failure_rolls_back(store):
    def fail(_policy):
        raise PolicyNotFoundError()

    with pytest.raises(PolicyDataError) as info:
        store.add_version(make_policy(T2023), CTX, fail)
    assert str(info.value) == "Not Found"
    assert not isinstance(info.value, PolicyNotFoundError)
    assert store.get_versions() == []


def test_most_recent_and_versions_ordered_by_creation(store):
    store.add_version(make_policy(T2024), CTX, noop)
    store.add_version(make_policy(T2023), CTX, noop)
    assert store.get_most_recent().version.version == 1
    assert [v.version for v in store.get_versions()] == [1, 2]


def test_next_version_follows_latest_created(store):
    store.add_version(make_policy(T2024), CTX, noop)
    store.add_version(make_policy(T2023), CTX, noop)
    calls = []
    with pytest.raises(PolicyDataError):
        store.add_version(make_policy(datetime(2022, 1, 1, tzinfo=timezone.utc)), CTX, calls.append)
    assert calls == []
    assert len(store.get_versions()) == 2


def test_set_active_and_get_active(store):
    store.add_version(make_policy(T2023), CTX, noop)
    seen = []
    activated = store.set_active(1, Context(initiator="bob"), seen.append)
    assert activated.version.version == 1
    assert seen[0].version.version == 1
    assert store.get_active().version.version == 1


def test_set_active_twice_rejected(store):
    store.add_version(make_policy(T2023), CTX, noop)
    store.set_active(1, CTX, noop)
    with pytest.raises(PolicyDataError, match="Version already active: 1"):
        store.set_active(1, CTX, noop)


def test_set_active_unknown_version(store):
    with pytest.raises(PolicyNotFoundError):
        store.set_active(7, CTX, noop)


def test_set_active_switches_version(store):
    store.add_version(make_policy(T2023), CTX, noop)
    store.add_version(make_policy(T2024), CTX, noop)
    store.set_active(1, CTX, noop)
    store.set_active(2, CTX, noop)
    assert store.get_active().version.version == 2


def test_set_active_transaction_failure(store):
    store.add_version(make_policy(T2023), CTX, noop)

    def fail(_policy):
        raise PolicyDataError("refused")

    with pytest.raises(PolicyDataError, match="refused"):
        store.set_active(1, CTX, fail)
    with pytest.raises(PolicyNotFoundError):
        store.get_active()


def test_deactivate(store):
    store.add_version(make_policy(T2023), CTX, noop)
    store.set_active(1, CTX, noop)
    calls = []
    assert store.deactivate_policy(CTX, lambda: calls.append("done")) is None
    assert calls == ["done"]
    with pytest.raises(PolicyNotFoundError):
        store.get_active()
    store.set_active(1, CTX, noop)
    assert store.get_active().version.version == 1


def test_deactivate_without_active(store):
    calls = []
    with pytest.raises(PolicyNotFoundError):
        store.deactivate_policy(CTX, lambda: calls.append(1))
    assert calls == []


def test_deactivate_transaction_failure_keeps_active(store):
    store.add_version(make_policy(T2023), CTX, noop)
    store.set_active(1, CTX, noop)

    def fail():
        raise PolicyDataError("nope")

    with pytest.raises(PolicyDataError, match="nope"):
        store.deactivate_policy(CTX, fail)
    assert store.get_active().version.version == 1


def test_persists_across_connections(tmp_path):
    path = str(tmp_path / "p.db")
    with SqlitePolicyDataStore(path) as first:
        first.add_version(make_policy(T2023), CTX, noop)
    with SqlitePolicyDataStore(path) as second:
        assert second.get_most_recent().version.created_at == T2023