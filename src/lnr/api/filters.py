"""Client-side filters and page-size handling.

Linear list operations fetch a single page; the filters here run over that
page after mapping. A matching entity beyond the first page is therefore
never seen, which is why every list result reports whether it may be
truncated.
"""

import logging
from dataclasses import dataclass, field
from typing import Generic, Iterable, Iterator, List, Optional, TypeVar

from .models import Issue, Project

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 50
DEFAULT_REFERENCE_PAGE_SIZE = 100  # users, teams, labels, workflow states
MAX_PAGE_SIZE = 250


@dataclass
class IssueListOptions:
    """Filters for listing or searching issues. ``first`` of 0/None uses the default."""

    team_id: Optional[str] = None
    assignee_id: Optional[str] = None
    state_id: Optional[str] = None
    project_id: Optional[str] = None
    first: Optional[int] = None


@dataclass
class ProjectListOptions:
    team_id: Optional[str] = None
    state: Optional[str] = None
    first: Optional[int] = None


@dataclass(frozen=True)
class Page(Generic[T]):
    """One fetched page of entities, in API order."""

    items: List[T] = field(default_factory=list)
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def truncated(self) -> bool:
        """True when the page is full, so more results may exist server-side."""
        return len(self.items) >= self.page_size

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> T:
        return self.items[index]


def resolve_page_size(requested: Optional[int], default: int) -> int:
    """Effective page size: the default when unset, capped at MAX_PAGE_SIZE."""
    if not requested or requested < 0:
        return default
    return min(requested, MAX_PAGE_SIZE)


def make_page(items: Iterable[T], page_size: int, operation: str = "") -> Page[T]:
    page = Page(items=list(items), page_size=page_size)
    if page.truncated:
        logger.info(
            "%s returned %d items (page size %d); results may be incomplete",
            operation or "list",
            len(page),
            page_size,
        )
    return page


def filter_issues(issues: Iterable[Issue], options: IssueListOptions) -> List[Issue]:
    """Keep issues whose relations match every filter that is set."""

    def matches(issue: Issue) -> bool:
        if options.team_id is not None and issue.team.id != options.team_id:
            return False
        if options.assignee_id is not None and (
            issue.assignee is None or issue.assignee.id != options.assignee_id
        ):
            return False
        if options.state_id is not None and (
            issue.state is None or issue.state.id != options.state_id
        ):
            return False
        if options.project_id is not None and (
            issue.project is None or issue.project.id != options.project_id
        ):
            return False
        return True

    return [issue for issue in issues if matches(issue)]


def filter_by_team(items: Iterable[T], team_id: Optional[str]) -> List[T]:
    """Keep entities owned by ``team_id``; entities without a team are dropped.

    Works for anything with an optional ``team`` relation (labels, workflow
    states, cycles). With no ``team_id`` everything is kept.
    """
    if team_id is None:
        return list(items)
    return [
        item
        for item in items
        if getattr(item, "team", None) is not None and item.team.id == team_id
    ]


def filter_projects(
    projects: Iterable[Project], options: ProjectListOptions
) -> List[Project]:
    """Keep projects in the requested state that include the requested team."""
    result = []
    for project in projects:
        if options.state is not None and project.state != options.state:
            continue
        if options.team_id is not None and not any(
            team.id == options.team_id for team in project.teams
        ):
            continue
        result.append(project)
    return result
