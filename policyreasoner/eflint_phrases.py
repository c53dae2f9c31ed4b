"""Builders for eFLINT JSON phrases describing state and questions."""

from __future__ import annotations

import logging
from typing import Any

from policyreasoner.state import State

_log = logging.getLogger(__name__)

Phrase = dict[str, Any]
Expression = Any


def create(operand: Expression) -> Phrase:
    """A phrase that creates the instance ``operand`` (``+operand.``)."""
    return {"kind": "create", "operand": operand}


def constructor_app(identifier: str, *args: Expression) -> Expression:
    """A constructor application such as ``foo(Amy, Bob)``."""
    return {"identifier": identifier, "operands": list(args)}


def string_literal(value: str) -> Expression:
    """A string primitive."""
    return str(value)


def state_to_phrases(state: State) -> list[Phrase]:
    """Describe the users, locations, datasets and functions of ``state`` as phrases."""
    phrases: list[Phrase] = []
    for user in state.users:
        phrases.append(create(constructor_app("user", string_literal(user.name))))
    for location in state.locations:
        user = constructor_app("user", string_literal(location.name))
        phrases.append(create(user))
        phrases.append(create(constructor_app("domain", user)))
    for dataset in state.datasets:
        phrases.append(create(constructor_app("asset", string_literal(dataset.name))))
    for function in state.functions:
        asset = constructor_app("asset", string_literal(function.name))
        phrases.append(create(asset))
        phrases.append(create(constructor_app("code", asset)))
    _log.debug("Generated %d state phrases", len(phrases))
    return phrases


def _workflow(workflow_id: str) -> Expression:
    return constructor_app("workflow", string_literal(workflow_id))


def _node(workflow_id: str, task: str) -> Expression:
    return constructor_app("node", _workflow(workflow_id), string_literal(task))


def execute_task_question(workflow_id: str, task: str) -> Phrase:
    """``+task-to-execute(task(node(workflow(id), task))).``"""
    return create(
        constructor_app("task-to-execute", constructor_app("task", _node(workflow_id, task)))
    )


def access_data_question(workflow_id: str, user: str, data: str, task: str | None) -> Phrase:
    """Ask about transferring ``data`` to a task, or to the workflow's user if no task."""
    asset = constructor_app("asset", string_literal(data))
    if task is not None:
        return create(
            constructor_app(
                "dataset-to-transfer",
                constructor_app("node-input", _node(workflow_id, task), asset),
            )
        )
    return create(
        constructor_app(
            "result-to-transfer",
            constructor_app(
                "workflow-result-recipient",
                constructor_app("workflow-result", _workflow(workflow_id), asset),
                constructor_app("user", string_literal(user)),
            ),
        )
    )


def workflow_question(workflow_id: str) -> Phrase:
    """``+workflow-to-execute(workflow(id)).``"""
    return create(constructor_app("workflow-to-execute", _workflow(workflow_id)))