"""The policy input state: which users, locations, datasets and functions exist."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class User:
    """A user or a location (domain), identified by name."""

    name: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> User:
        name = data["name"]
        if not isinstance(name, str):
            raise TypeError("user name must be a string")
        return cls(name=name)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class Dataset:
    """A dataset or function, with the location it comes from if known."""

    name: str
    from_: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Dataset:
        name = data["name"]
        origin = data.get("from")
        if not isinstance(name, str) or not (origin is None or isinstance(origin, str)):
            raise TypeError("dataset name and origin must be strings")
        return cls(name=name, from_=origin)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "from": self.from_}


@dataclass
class State:
    """Everything a reasoner needs to know about the world it reasons in."""

    users: list[User] = field(default_factory=list)
    locations: list[User] = field(default_factory=list)
    datasets: list[Dataset] = field(default_factory=list)
    functions: list[Dataset] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> State:
        """Build a state from its JSON form; raise ValueError if it is malformed."""
        try:
            return cls(
                users=[User.from_dict(item) for item in data["users"]],
                locations=[User.from_dict(item) for item in data["locations"]],
                datasets=[Dataset.from_dict(item) for item in data["datasets"]],
                functions=[Dataset.from_dict(item) for item in data["functions"]],
            )
        except KeyError as err:
            raise ValueError(f"missing field {err.args[0]!r} in state") from err
        except (TypeError, AttributeError) as err:
            raise ValueError(f"invalid state: {err}") from err

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of this state."""
        return {
            "users": [user.to_dict() for user in self.users],
            "locations": [location.to_dict() for location in self.locations],
            "datasets": [dataset.to_dict() for dataset in self.datasets],
            "functions": [function.to_dict() for function in self.functions],
        }