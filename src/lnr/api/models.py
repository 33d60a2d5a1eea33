"""Domain entities for the Linear workspace.

Entities are immutable snapshots of what the API returned for one call.
Optional relations are ``None`` when absent; list relations default to an
empty list. Serialised with the API's camelCase field names.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IssuePriority(int, Enum):
    """Issue priority (0=none, 1=urgent, 4=low)."""

    NO_PRIORITY = 0
    URGENT = 1
    HIGH = 2
    MEDIUM = 3
    LOW = 4

    @property
    def label(self) -> str:
        return _PRIORITY_LABELS[self]


_PRIORITY_LABELS = {
    IssuePriority.NO_PRIORITY: "No priority",
    IssuePriority.URGENT: "Urgent",
    IssuePriority.HIGH: "High",
    IssuePriority.MEDIUM: "Medium",
    IssuePriority.LOW: "Low",
}


def priority_label(priority: int) -> str:
    """Human-readable label for a priority value, including unknown ones."""
    try:
        return IssuePriority(priority).label
    except ValueError:
        return f"Priority {priority}"


class Entity(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str


class User(Entity):
    name: str = ""
    email: str = ""
    display_name: str = ""
    active: bool = True
    admin: bool = False
    avatar_url: Optional[str] = None


class Team(Entity):
    name: str = ""
    key: str = ""
    description: Optional[str] = None
    private: bool = False


class WorkflowState(Entity):
    name: str = ""
    color: str = ""
    type: str = ""  # backlog, unstarted, started, completed, canceled, triage
    position: float = 0.0
    team: Optional[Team] = None


class Label(Entity):
    name: str = ""
    description: Optional[str] = None
    color: str = ""
    team: Optional[Team] = None


class Cycle(Entity):
    name: Optional[str] = None
    number: int = 0
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    progress: float = 0.0
    description: Optional[str] = None
    team: Optional[Team] = None

    @property
    def display_name(self) -> str:
        return self.name or f"Cycle {self.number}"


class Project(Entity):
    name: str = ""
    description: Optional[str] = None
    state: str = ""
    progress: float = 0.0
    start_date: Optional[date] = None
    target_date: Optional[date] = None
    lead: Optional[User] = None
    teams: List[Team] = Field(default_factory=list)
    url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Issue(Entity):
    identifier: str  # e.g. "ENG-123"
    title: str
    description: Optional[str] = None
    priority: int = IssuePriority.NO_PRIORITY
    estimate: Optional[float] = None
    due_date: Optional[date] = None
    url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    team: Team
    state: Optional[WorkflowState] = None
    assignee: Optional[User] = None
    creator: Optional[User] = None
    project: Optional[Project] = None
    cycle: Optional[Cycle] = None
    labels: List[Label] = Field(default_factory=list)

    @property
    def priority_label(self) -> str:
        return priority_label(self.priority)


class Initiative(Entity):
    name: str = ""
    description: Optional[str] = None
    target_date: Optional[date] = None
    owner: Optional[User] = None
    projects: List[Project] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Organisation(Entity):
    name: str = ""
    url_key: str = ""
    logo_url: Optional[str] = None
    user_count: int = 0
