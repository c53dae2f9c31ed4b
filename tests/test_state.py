import json

import pytest

from policyreasoner.state import Dataset, State, User

SAMPLE = {
    "users": [{"name": "amy"}],
    "locations": [{"name": "surf"}, {"name": "umc_utrecht"}],
    "datasets": [{"name": "st_antonius_ect", "from": None}],
    "functions": [{"name": "epi", "from": "<central>"}],
}


def test_from_dict_reads_all_fields():
    state = State.from_dict(SAMPLE)
    assert state.users == [User("amy")]
    assert state.locations == [User("surf"), User("umc_utrecht")]
    assert state.datasets == [Dataset("st_antonius_ect")]
    assert state.functions == [Dataset("epi", from_="<central>")]


def test_round_trip_through_json():
    state = State.from_dict(SAMPLE)
    again = State.from_dict(json.loads(json.dumps(state.to_dict())))
    assert again == state
    assert state.to_dict() == SAMPLE


def test_missing_from_defaults_to_none():
    data = dict(SAMPLE, datasets=[{"name": "d"}])
    assert State.from_dict(data).datasets[0].from_ is None


def test_default_state_is_empty():
    state = State()
    assert state.to_dict() == {"users": [], "locations": [], "datasets": [], "functions": []}


@pytest.mark.parametrize("missing", ["users", "locations", "datasets", "functions"])
def test_missing_field_raises(missing):
    data = {key: value for key, value in SAMPLE.items() if key != missing}
    with pytest.raises(ValueError, match=missing):
        State.from_dict(data)


def test_wrong_type_raises():
    data = dict(SAMPLE, users=[{"name": 5}])
    with pytest.raises(ValueError):
        State.from_dict(data)


def test_datasets_are_hashable_and_compare_by_value():
    sets = {Dataset("a"), Dataset("a"), Dataset("a", from_="x")}
    assert len(sets) == 2
    assert Dataset("a") in sets