import json
from datetime import datetime, timezone

import pytest

from policyreasoner.eflint_handlers import (
    EFLINT_JSON_ID,
    EFlintLeakNoErrors,
    EFlintLeakPrefixErrors,
    extract_eflint_policy,
    extract_eflint_version,
)
from policyreasoner.models import Policy, PolicyContent, PolicyVersion


def make_policy(*contents):
    return Policy(
        description="d",
        version=PolicyVersion(
            version_description="v",
            reasoner_connector_context="c",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ),
        content=list(contents),
    )


PHRASES = [{"kind": "create", "operand": {"identifier": "user", "operands": ["amy"]}}]


def eflint_content(version="0.1.0", content=None):
    if content is None:
        content = json.dumps({"kind": "phrases", "phrases": PHRASES})
    return PolicyContent(reasoner=EFLINT_JSON_ID, reasoner_version=version, content=content)


def test_version_parsed():
    assert extract_eflint_version(make_policy(eflint_content("1.2.3"))) == (1, 2, 3)


def test_version_uses_first_eflint_content():
    other = PolicyContent(reasoner="posix", reasoner_version="9", content="{}")
    policy = make_policy(other, eflint_content("4.5.6"), eflint_content("7.8.9"))
    assert extract_eflint_version(policy) == (4, 5, 6)


def test_version_wrong_part_count():
    with pytest.raises(ValueError, match="Invalid version format"):
        extract_eflint_version(make_policy(eflint_content("1.2")))


@pytest.mark.parametrize(
    "version, part",
    [("x.2.3", "major"), ("1.x.3", "minor"), ("1.2.-3", "patch")],
)
def test_version_bad_part(version, part):
    with pytest.raises(ValueError, match=f"Invalid {part} version part"):
        extract_eflint_version(make_policy(eflint_content(version)))


def test_version_without_eflint_content():
    other = PolicyContent(reasoner="posix", reasoner_version="1.0.0", content="{}")
    with pytest.raises(ValueError, match=EFLINT_JSON_ID):
        extract_eflint_version(make_policy(other))


def test_policy_phrases_from_text():
    assert extract_eflint_policy(make_policy(eflint_content())) == PHRASES


def test_policy_phrases_from_object():
    content = eflint_content(content={"kind": "phrases", "phrases": PHRASES})
    assert extract_eflint_policy(make_policy(content)) == PHRASES


def test_policy_rejects_non_phrases_request():
    content = eflint_content(content=json.dumps({"kind": "ping"}))
    with pytest.raises(ValueError, match="non-Phrases"):
        extract_eflint_policy(make_policy(content))


def test_policy_rejects_invalid_json():
    with pytest.raises(ValueError, match="not valid eFLINT JSON"):
        extract_eflint_policy(make_policy(eflint_content(content="{not json")))


def state_change(*identifiers, violations=True):
    return {
        "success": True,
        "violated": bool(identifiers),
        "violations": [{"identifier": i} for i in identifiers] if violations else None,
    }


def test_no_errors_handler_leaks_nothing():
    assert EFlintLeakNoErrors({}).extract_errors(state_change("pub-a", "pub-b")) == []


def test_prefix_handler_default_prefix():
    handler = EFlintLeakPrefixErrors({})
    assert handler.prefix == "pub-"
    assert handler.extract_errors(state_change("pub-a", "internal-b")) == ["pub-a"]


def test_prefix_handler_custom_prefix():
    handler = EFlintLeakPrefixErrors({"prefix": "x-"})
    assert handler.extract_errors(state_change("x-one", "pub-two", "x-three")) == ["x-one", "x-three"]


def test_prefix_handler_key_without_value_uses_default():
    assert EFlintLeakPrefixErrors({"prefix": None}).prefix == "pub-"


@pytest.mark.parametrize(
    "result",
    [None, {"result": True}, {"results": []}, state_change(violations=False)],
)
def test_prefix_handler_ignores_other_results(result):
    assert EFlintLeakPrefixErrors({}).extract_errors(result) == []