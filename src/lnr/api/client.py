"""Linear API client.

One method per read operation. Each method runs a fixed query document,
maps the response onto domain entities and, for lists, applies the
client-side filters and returns a ``Page``.

Linear priority values: 0=No priority, 1=Urgent, 2=High, 3=Medium, 4=Low.
"""

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..exceptions import LinearDecodeError, NoActiveCycleError
from . import mapper, queries
from .filters import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_REFERENCE_PAGE_SIZE,
    IssueListOptions,
    Page,
    ProjectListOptions,
    filter_by_team,
    filter_issues,
    filter_projects,
    make_page,
    resolve_page_size,
)
from .graphql import DEFAULT_TIMEOUT, LINEAR_API, GraphQLClient
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
from .transport import DEFAULT_BASE_DELAY, DEFAULT_MAX_RETRIES, build_transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LinearClient:
    """Read-only client for the Linear GraphQL API.

    Use as an async context manager so the underlying HTTP client is closed::

        async with LinearClient(api_key) as client:
            page = await client.get_issues(IssueListOptions(team_id="..."))

    ``transport`` replaces the real HTTP transport underneath the auth and
    retry stages (tests pass an ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = LINEAR_API,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        page_size: int = DEFAULT_PAGE_SIZE,
        reference_page_size: int = DEFAULT_REFERENCE_PAGE_SIZE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.page_size = page_size
        self.reference_page_size = reference_page_size
        self._gql = GraphQLClient(
            build_transport(
                api_key,
                max_retries=max_retries,
                base_delay=retry_base_delay,
                transport=transport,
            ),
            endpoint=endpoint,
            timeout=timeout,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "LinearClient":
        """Build a client from settings. Raises ConfigurationError without an API key."""
        return cls(
            settings.require_api_key(),
            endpoint=settings.api_url,
            max_retries=settings.max_retries,
            retry_base_delay=settings.retry_base_delay,
            timeout=settings.timeout,
            page_size=settings.page_size,
            reference_page_size=settings.reference_page_size,
            transport=transport,
        )

    async def __aenter__(self) -> "LinearClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._gql.aclose()

    # -- helpers -----------------------------------------------------------

    async def _fetch(
        self,
        operation: str,
        query: str,
        decode: Callable[[Dict[str, Any]], T],
        variables: Optional[Dict[str, Any]] = None,
    ) -> T:
        data = await self._gql.execute(query, variables, operation=operation)
        try:
            return decode(data)
        except (KeyError, TypeError, AttributeError, ValidationError) as exc:
            logger.debug("Could not decode %s response", operation, exc_info=True)
            raise LinearDecodeError(
                f"unexpected response shape: {exc}", operation
            ) from exc

    # -- Workspace ---------------------------------------------------------

    async def get_viewer(self) -> User:
        """The user the API key belongs to."""
        return await self._fetch(
            "get viewer",
            queries.VIEWER_QUERY,
            lambda data: mapper.to_user(data["viewer"]),
        )

    async def get_organisation(self) -> Organisation:
        return await self._fetch(
            "get organisation",
            queries.ORGANISATION_QUERY,
            lambda data: mapper.to_organisation(data["organization"]),
        )

    async def get_users(self) -> Page[User]:
        users = await self._fetch(
            "list users",
            queries.LIST_USERS_QUERY,
            lambda data: mapper.map_nodes(mapper.to_user, data, "users"),
            {"first": self.reference_page_size},
        )
        return make_page(users, self.reference_page_size, "list users")

    async def get_teams(self) -> Page[Team]:
        teams = await self._fetch(
            "list teams",
            queries.LIST_TEAMS_QUERY,
            lambda data: mapper.map_nodes(mapper.to_team, data, "teams"),
            {"first": self.reference_page_size},
        )
        return make_page(teams, self.reference_page_size, "list teams")

    async def get_team(self, team_id: str) -> Team:
        return await self._fetch(
            "get team",
            queries.GET_TEAM_QUERY,
            lambda data: mapper.to_team(data["team"]),
            {"id": team_id},
        )

    async def get_labels(self, team_id: Optional[str] = None) -> Page[Label]:
        """Issue labels; with ``team_id`` only that team's labels (workspace labels dropped)."""
        labels = await self._fetch(
            "list labels",
            queries.LIST_LABELS_QUERY,
            lambda data: mapper.map_nodes(mapper.to_label, data, "issueLabels"),
            {"first": self.reference_page_size},
        )
        return make_page(
            filter_by_team(labels, team_id), self.reference_page_size, "list labels"
        )

    async def get_workflow_states(
        self, team_id: Optional[str] = None
    ) -> Page[WorkflowState]:
        states = await self._fetch(
            "list workflow states",
            queries.LIST_WORKFLOW_STATES_QUERY,
            lambda data: mapper.map_nodes(
                mapper.to_workflow_state, data, "workflowStates"
            ),
            {"first": self.reference_page_size},
        )
        return make_page(
            filter_by_team(states, team_id),
            self.reference_page_size,
            "list workflow states",
        )

    # -- Issues ------------------------------------------------------------

    async def get_issues(
        self, options: Optional[IssueListOptions] = None
    ) -> Page[Issue]:
        """List issues, filtered client-side by team, assignee, state and project."""
        options = options or IssueListOptions()
        first = resolve_page_size(options.first, self.page_size)
        issues = await self._fetch(
            "list issues",
            queries.LIST_ISSUES_QUERY,
            lambda data: mapper.map_nodes(mapper.to_issue, data, "issues"),
            {"first": first},
        )
        return make_page(filter_issues(issues, options), first, "list issues")

    async def get_issue(self, issue_id: str) -> Issue:
        """Fetch one issue by UUID or identifier (e.g. "ENG-123")."""
        return await self._fetch(
            "get issue",
            queries.GET_ISSUE_QUERY,
            lambda data: mapper.to_issue(data["issue"]),
            {"id": issue_id},
        )

    async def search_issues(
        self, query: str, options: Optional[IssueListOptions] = None
    ) -> Page[Issue]:
        """Issues whose title contains ``query``, case-insensitively."""
        options = options or IssueListOptions()
        first = resolve_page_size(options.first, self.page_size)
        variables = {
            "first": first,
            "filter": {"title": {"containsIgnoreCase": query}},
        }
        issues = await self._fetch(
            "search issues",
            queries.SEARCH_ISSUES_QUERY,
            lambda data: mapper.map_nodes(mapper.to_issue, data, "issues"),
            variables,
        )
        return make_page(filter_issues(issues, options), first, "search issues")

    # -- Projects & initiatives --------------------------------------------

    async def get_projects(
        self, options: Optional[ProjectListOptions] = None
    ) -> Page[Project]:
        options = options or ProjectListOptions()
        first = resolve_page_size(options.first, self.page_size)
        projects = await self._fetch(
            "list projects",
            queries.LIST_PROJECTS_QUERY,
            lambda data: mapper.map_nodes(mapper.to_project, data, "projects"),
            {"first": first},
        )
        return make_page(filter_projects(projects, options), first, "list projects")

    async def get_project(self, project_id: str) -> Project:
        return await self._fetch(
            "get project",
            queries.GET_PROJECT_QUERY,
            lambda data: mapper.to_project(data["project"]),
            {"id": project_id},
        )

    async def get_initiatives(self) -> Page[Initiative]:
        initiatives = await self._fetch(
            "list initiatives",
            queries.LIST_INITIATIVES_QUERY,
            lambda data: mapper.map_nodes(mapper.to_initiative, data, "initiatives"),
            {"first": self.page_size},
        )
        return make_page(initiatives, self.page_size, "list initiatives")

    async def get_initiative(self, initiative_id: str) -> Initiative:
        return await self._fetch(
            "get initiative",
            queries.GET_INITIATIVE_QUERY,
            lambda data: mapper.to_initiative(data["initiative"]),
            {"id": initiative_id},
        )

    # -- Cycles ------------------------------------------------------------

    async def get_cycles(self, team_id: Optional[str] = None) -> Page[Cycle]:
        cycles = await self._fetch(
            "list cycles",
            queries.LIST_CYCLES_QUERY,
            lambda data: mapper.map_nodes(mapper.to_cycle, data, "cycles"),
            {"first": self.page_size},
        )
        return make_page(filter_by_team(cycles, team_id), self.page_size, "list cycles")

    async def get_cycle(self, cycle_id: str) -> Cycle:
        return await self._fetch(
            "get cycle",
            queries.GET_CYCLE_QUERY,
            lambda data: mapper.to_cycle(data["cycle"]),
            {"id": cycle_id},
        )

    async def get_active_cycle(self, team_id: str) -> Cycle:
        """The team's cycle in progress.

        Raises:
            NoActiveCycleError: The team exists but has no active cycle.
            LinearGraphQLError: The team does not exist (reported by Linear).
        """
        operation = "get active cycle"

        def decode(data: Dict[str, Any]) -> Optional[Cycle]:
            team = data["team"]
            if team is None:
                raise KeyError("team")
            active = team.get("activeCycle")
            if active is None:
                return None
            return mapper.to_cycle(active, team=mapper.to_team(team))

        cycle = await self._fetch(
            operation, queries.ACTIVE_CYCLE_QUERY, decode, {"id": team_id}
        )
        if cycle is None:
            raise NoActiveCycleError(team_id, operation)
        return cycle
