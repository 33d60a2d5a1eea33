"""Map raw GraphQL response objects onto domain entities.

Nested objects that are null or missing become ``None``; Relay connections
(``{"nodes": [...]}``) become plain lists, empty when missing. A malformed
object raises (KeyError, TypeError or pydantic.ValidationError) and the
caller turns that into a single decode error for the whole operation.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar

from .models import (
    Cycle,
    Initiative,
    Issue,
    Label,
    Organisation,
    Project,
    Team,
    User,
    WorkflowState,
)

T = TypeVar("T")

Raw = Dict[str, Any]


def _scalars(raw: Raw) -> Raw:
    """Keep the non-null scalar fields of a raw object."""
    return {
        key: value
        for key, value in raw.items()
        if value is not None and not isinstance(value, (dict, list))
    }


def _optional(fn: Callable[[Raw], T], value: Optional[Raw]) -> Optional[T]:
    return fn(value) if value is not None else None


def _nodes(raw: Raw, key: str) -> List[Raw]:
    connection = raw.get(key) or {}
    return connection.get("nodes") or []


def to_user(raw: Raw) -> User:
    return User.model_validate(_scalars(raw))


def to_team(raw: Raw) -> Team:
    return Team.model_validate(_scalars(raw))


def to_workflow_state(raw: Raw) -> WorkflowState:
    return WorkflowState.model_validate(
        {**_scalars(raw), "team": _optional(to_team, raw.get("team"))}
    )


def to_label(raw: Raw) -> Label:
    return Label.model_validate(
        {**_scalars(raw), "team": _optional(to_team, raw.get("team"))}
    )


def to_cycle(raw: Raw, team: Optional[Team] = None) -> Cycle:
    """Map a cycle; ``team`` is used when the cycle was fetched through its team."""
    if team is None:
        team = _optional(to_team, raw.get("team"))
    return Cycle.model_validate({**_scalars(raw), "team": team})


def to_project(raw: Raw) -> Project:
    return Project.model_validate(
        {
            **_scalars(raw),
            "lead": _optional(to_user, raw.get("lead")),
            "teams": [to_team(t) for t in _nodes(raw, "teams")],
        }
    )


def to_issue(raw: Raw) -> Issue:
    return Issue.model_validate(
        {
            **_scalars(raw),
            "team": to_team(raw["team"]),
            "state": _optional(to_workflow_state, raw.get("state")),
            "assignee": _optional(to_user, raw.get("assignee")),
            "creator": _optional(to_user, raw.get("creator")),
            "project": _optional(to_project, raw.get("project")),
            "cycle": _optional(to_cycle, raw.get("cycle")),
            "labels": [to_label(label) for label in _nodes(raw, "labels")],
        }
    )


def to_initiative(raw: Raw) -> Initiative:
    return Initiative.model_validate(
        {
            **_scalars(raw),
            "owner": _optional(to_user, raw.get("owner")),
            "projects": [to_project(p) for p in _nodes(raw, "projects")],
        }
    )


def to_organisation(raw: Raw) -> Organisation:
    return Organisation.model_validate(_scalars(raw))


def map_nodes(fn: Callable[[Raw], T], data: Raw, key: str) -> List[T]:
    """Map every node of the top-level connection ``data[key]``."""
    if key not in data or data[key] is None:
        raise KeyError(key)
    return [fn(node) for node in data[key].get("nodes") or []]
