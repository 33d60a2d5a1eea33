"""Tests for LinearClient operations against a fake Linear endpoint."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from lnr.api import queries
from lnr.api.client import LinearClient
from lnr.api.filters import IssueListOptions, ProjectListOptions
from lnr.api.models import Issue, User
from lnr.config import Settings
from lnr.exceptions import (
    ConfigurationError,
    LinearDecodeError,
    LinearGraphQLError,
    LinearRateLimitError,
    NoActiveCycleError,
)


def _issues(*nodes):
    return {"issues": {"nodes": list(nodes)}}


def _user(user_id="user-1", name="Ada"):
    return {"id": user_id, "name": name, "email": f"{name.lower()}@acme.test"}


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestFromSettings:
    def test_without_api_key_fails_before_network(self, linear):
        settings = Settings(_env_file=None)

        with pytest.raises(ConfigurationError, match="LINEAR_API_KEY"):
            LinearClient.from_settings(settings, transport=linear.transport())

        assert linear.requests == []

    async def test_uses_configured_values(self, linear):
        settings = Settings(
            _env_file=None,
            api_key="lin_api_x",
            api_url="https://linear.test/graphql",
            page_size=20,
            reference_page_size=30,
        )
        linear.reply({"viewer": _user()})

        async with LinearClient.from_settings(settings, transport=linear.transport()) as client:
            assert client.page_size == 20
            assert client.reference_page_size == 30
            await client.get_viewer()

        request = linear.requests[0]
        assert request.headers["Authorization"] == "lin_api_x"
        assert str(request.url) == "https://linear.test/graphql"


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------

async def test_get_viewer(linear, make_client):
    linear.reply({"viewer": {**_user(), "displayName": "ada", "admin": True, "active": True}})

    async with make_client() as client:
        user = await client.get_viewer()

    assert isinstance(user, User)
    assert user.display_name == "ada"
    assert user.admin is True
    assert linear.payloads[0]["query"] == queries.VIEWER_QUERY


async def test_get_organisation(linear, make_client):
    linear.reply(
        {"organization": {"id": "org-1", "name": "Acme", "urlKey": "acme", "userCount": 12}}
    )

    async with make_client() as client:
        organisation = await client.get_organisation()

    assert organisation.name == "Acme"
    assert organisation.url_key == "acme"
    assert organisation.user_count == 12


async def test_get_users_uses_reference_page_size(linear, make_client):
    linear.reply({"users": {"nodes": [_user("u1", "Ada"), _user("u2", "Grace")]}})

    async with make_client() as client:
        users = await client.get_users()

    assert [u.name for u in users] == ["Ada", "Grace"]
    assert linear.last_variables == {"first": 100}
    assert users.page_size == 100
    assert not users.truncated


async def test_get_teams_truncated_when_page_full(linear, make_client, make_team):
    linear.reply({"teams": {"nodes": [make_team("t1", "A"), make_team("t2", "B")]}})

    async with make_client(reference_page_size=2) as client:
        teams = await client.get_teams()

    assert [t.key for t in teams] == ["A", "B"]
    assert linear.last_variables == {"first": 2}
    assert teams.truncated


async def test_get_team(linear, make_client, make_team):
    linear.reply({"team": {**make_team(), "description": "Core", "private": False}})

    async with make_client() as client:
        team = await client.get_team("team-1")

    assert team.key == "ENG"
    assert team.description == "Core"
    assert linear.last_variables == {"id": "team-1"}


async def test_get_team_not_found_is_graphql_error(linear, make_client):
    linear.queue(httpx.Response(200, json={"data": None, "errors": [{"message": "Entity not found"}]}))

    async with make_client() as client:
        with pytest.raises(LinearGraphQLError) as exc_info:
            await client.get_team("missing")

    assert exc_info.value.operation == "get team"


class TestLabels:
    @pytest.fixture(autouse=True)
    def labels(self, linear, make_team):
        linear.reply(
            {
                "issueLabels": {
                    "nodes": [
                        {"id": "l1", "name": "Bug", "color": "#f00", "team": make_team("t1", "A")},
                        {"id": "l2", "name": "Feature", "color": "#0f0", "team": None},
                        {"id": "l3", "name": "Chore", "color": "#00f", "team": make_team("t2", "B")},
                    ]
                }
            }
        )

    async def test_without_team_keeps_workspace_labels(self, make_client):
        async with make_client() as client:
            labels = await client.get_labels()

        assert [label.name for label in labels] == ["Bug", "Feature", "Chore"]
        assert labels[1].team is None

    async def test_team_filter_drops_labels_without_team(self, make_client):
        async with make_client() as client:
            labels = await client.get_labels("t1")

        assert [label.id for label in labels] == ["l1"]


async def test_get_workflow_states_team_filter(linear, make_client, make_team):
    linear.reply(
        {
            "workflowStates": {
                "nodes": [
                    {"id": "s1", "name": "Todo", "type": "unstarted", "position": 1, "team": make_team("t1")},
                    {"id": "s2", "name": "Done", "type": "completed", "position": 2, "team": make_team("t2")},
                    {"id": "s3", "name": "Doing", "type": "started", "position": 1.5, "team": make_team("t1")},
                ]
            }
        }
    )

    async with make_client() as client:
        states = await client.get_workflow_states("t1")

    assert [s.name for s in states] == ["Todo", "Doing"]
    assert states[1].position == 1.5
    assert states.page_size == 100


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------

class TestGetIssues:
    async def test_default_page_size(self, linear, make_client):
        linear.reply(_issues())

        async with make_client() as client:
            page = await client.get_issues()

        assert linear.last_variables == {"first": 50}
        assert len(page) == 0
        assert not page.truncated

    async def test_requested_page_size(self, linear, make_client):
        linear.reply(_issues())

        async with make_client() as client:
            await client.get_issues(IssueListOptions(first=10))

        assert linear.last_variables == {"first": 10}

    async def test_page_size_capped(self, linear, make_client):
        linear.reply(_issues())

        async with make_client() as client:
            await client.get_issues(IssueListOptions(first=1000))

        assert linear.last_variables == {"first": 250}

    async def test_zero_uses_configured_default(self, linear, make_client):
        linear.reply(_issues())

        async with make_client(page_size=25) as client:
            await client.get_issues(IssueListOptions(first=0))

        assert linear.last_variables == {"first": 25}

    async def test_team_filter_preserves_order(self, linear, make_client, make_issue, make_team):
        t1 = make_team("T1", "ONE")
        t2 = make_team("T2", "TWO")
        linear.reply(
            _issues(
                make_issue("a", "ONE-1", "First", team=t1),
                make_issue("b", "TWO-1", "Second", team=t2),
                make_issue("c", "ONE-2", "Third", team=t1),
            )
        )

        async with make_client() as client:
            page = await client.get_issues(IssueListOptions(team_id="T1"))

        assert [i.identifier for i in page] == ["ONE-1", "ONE-2"]
        assert all(isinstance(i, Issue) for i in page)

    async def test_assignee_filter_skips_unassigned(self, linear, make_client, make_issue):
        linear.reply(
            _issues(
                make_issue("a", "ENG-1", assignee=_user("u1")),
                make_issue("b", "ENG-2"),
                make_issue("c", "ENG-3", assignee=_user("u2", "Grace")),
            )
        )

        async with make_client() as client:
            page = await client.get_issues(IssueListOptions(assignee_id="u1"))

        assert [i.identifier for i in page] == ["ENG-1"]

    async def test_state_and_project_filters_combine(self, linear, make_client, make_issue):
        todo = {"id": "s1", "name": "Todo", "color": "#ccc", "type": "unstarted"}
        done = {"id": "s2", "name": "Done", "color": "#0f0", "type": "completed"}
        project = {"id": "p1", "name": "Launch"}
        linear.reply(
            _issues(
                make_issue("a", "ENG-1", state=todo, project=project),
                make_issue("b", "ENG-2", state=done, project=project),
                make_issue("c", "ENG-3", state=todo),
            )
        )

        async with make_client() as client:
            page = await client.get_issues(IssueListOptions(state_id="s1", project_id="p1"))

        assert [i.identifier for i in page] == ["ENG-1"]

    async def test_truncated_counts_filtered_items(self, linear, make_client, make_issue, make_team):
        other = make_team("T2", "TWO")
        linear.reply(
            _issues(
                make_issue("a", "ENG-1"),
                make_issue("b", "TWO-1", team=other),
            )
        )

        async with make_client() as client:
            full = await client.get_issues(IssueListOptions(first=2))
            filtered = await client.get_issues(IssueListOptions(first=2, team_id="team-1"))

        assert full.truncated
        assert not filtered.truncated


async def test_get_issue_with_relations(linear, make_client, make_issue):
    linear.reply(
        {
            "issue": make_issue(
                "a",
                "ENG-7",
                "Crash on start",
                priority=1,
                creator=_user("u9", "Linus"),
                cycle={"id": "c1", "number": 4, "name": None},
                labels={"nodes": [{"id": "l1", "name": "Bug", "color": "#f00"}]},
            )
        }
    )

    async with make_client() as client:
        issue = await client.get_issue("ENG-7")

    assert linear.last_variables == {"id": "ENG-7"}
    assert linear.payloads[0]["query"] == queries.GET_ISSUE_QUERY
    assert issue.priority_label == "Urgent"
    assert issue.creator.name == "Linus"
    assert issue.cycle.display_name == "Cycle 4"
    assert [label.name for label in issue.labels] == ["Bug"]


async def test_get_issue_not_found(linear, make_client):
    linear.queue(httpx.Response(200, json={"data": None, "errors": [{"message": "Entity not found"}]}))

    async with make_client() as client:
        with pytest.raises(LinearGraphQLError) as exc_info:
            await client.get_issue("ENG-404")

    assert str(exc_info.value) == "get issue: Entity not found"


async def test_get_issue_malformed_is_decode_error(linear, make_client):
    linear.reply({"issue": {"id": "a", "identifier": "ENG-1", "title": "No team"}})

    async with make_client() as client:
        with pytest.raises(LinearDecodeError) as exc_info:
            await client.get_issue("ENG-1")

    assert exc_info.value.operation == "get issue"


async def test_missing_connection_is_decode_error(linear, make_client):
    linear.reply({})

    async with make_client() as client:
        with pytest.raises(LinearDecodeError) as exc_info:
            await client.get_issues()

    assert exc_info.value.operation == "list issues"


class TestSearchIssues:
    async def test_query_passed_as_variable(self, linear, make_client):
        linear.reply(_issues())
        text = 'login" } } { viewer { id'

        async with make_client() as client:
            await client.search_issues(text)

        payload = linear.payloads[0]
        assert payload["query"] == queries.SEARCH_ISSUES_QUERY
        assert text not in payload["query"]
        assert payload["variables"] == {
            "first": 50,
            "filter": {"title": {"containsIgnoreCase": text}},
        }

    async def test_applies_issue_filters(self, linear, make_client, make_issue, make_team):
        linear.reply(
            _issues(
                make_issue("a", "ENG-1", "Login broken"),
                make_issue("b", "OPS-1", "Login slow", team=make_team("T2", "OPS")),
            )
        )

        async with make_client() as client:
            page = await client.search_issues("login", IssueListOptions(team_id="T2", first=5))

        assert [i.identifier for i in page] == ["OPS-1"]
        assert linear.last_variables["first"] == 5


# ---------------------------------------------------------------------------
# Projects & initiatives
# ---------------------------------------------------------------------------

def _project(project_id, name, state, *teams):
    return {
        "id": project_id,
        "name": name,
        "state": state,
        "progress": 0.5,
        "lead": None,
        "teams": {"nodes": list(teams)},
    }


class TestGetProjects:
    @pytest.fixture(autouse=True)
    def projects(self, linear, make_team):
        t1 = make_team("T1", "ONE")
        t2 = make_team("T2", "TWO")
        linear.reply(
            {
                "projects": {
                    "nodes": [
                        _project("p1", "Launch", "started", t1),
                        _project("p2", "Cleanup", "completed", t1, t2),
                        _project("p3", "Docs", "started", t2),
                    ]
                }
            }
        )

    async def test_no_filters(self, make_client):
        async with make_client() as client:
            page = await client.get_projects()

        assert [p.id for p in page] == ["p1", "p2", "p3"]
        assert [t.key for t in page[1].teams] == ["ONE", "TWO"]

    async def test_state_filter(self, make_client):
        async with make_client() as client:
            page = await client.get_projects(ProjectListOptions(state="started"))

        assert [p.id for p in page] == ["p1", "p3"]

    async def test_team_filter_matches_any_team(self, make_client):
        async with make_client() as client:
            page = await client.get_projects(ProjectListOptions(team_id="T2"))

        assert [p.id for p in page] == ["p2", "p3"]

    async def test_combined_filters(self, linear, make_client):
        async with make_client() as client:
            page = await client.get_projects(
                ProjectListOptions(team_id="T2", state="started", first=3)
            )

        assert [p.id for p in page] == ["p3"]
        assert linear.last_variables == {"first": 3}


async def test_get_project(linear, make_client):
    linear.reply(
        {
            "project": {
                **_project("p1", "Launch", "started"),
                "lead": _user(),
                "startDate": "2024-01-15",
                "targetDate": "2024-06-30",
            }
        }
    )

    async with make_client() as client:
        project = await client.get_project("p1")

    assert project.lead.name == "Ada"
    assert project.target_date.isoformat() == "2024-06-30"
    assert project.teams == []


async def test_get_initiatives(linear, make_client):
    linear.reply(
        {
            "initiatives": {
                "nodes": [
                    {"id": "i1", "name": "Growth", "owner": _user()},
                    {"id": "i2", "name": "Quality", "owner": None},
                ]
            }
        }
    )

    async with make_client(page_size=10) as client:
        page = await client.get_initiatives()

    assert [i.name for i in page] == ["Growth", "Quality"]
    assert page[1].owner is None
    assert linear.last_variables == {"first": 10}


async def test_get_initiative_with_projects(linear, make_client):
    linear.reply(
        {
            "initiative": {
                "id": "i1",
                "name": "Growth",
                "targetDate": "2024-12-31",
                "projects": {"nodes": [{"id": "p1", "name": "Launch", "state": "started"}]},
            }
        }
    )

    async with make_client() as client:
        initiative = await client.get_initiative("i1")

    assert [(p.name, p.state) for p in initiative.projects] == [("Launch", "started")]
    assert linear.last_variables == {"id": "i1"}


# ---------------------------------------------------------------------------
# Cycles
# ---------------------------------------------------------------------------

async def test_get_cycles_team_filter(linear, make_client, make_team):
    linear.reply(
        {
            "cycles": {
                "nodes": [
                    {"id": "c1", "number": 1, "team": make_team("T1", "ONE")},
                    {"id": "c2", "number": 2, "team": make_team("T2", "TWO")},
                ]
            }
        }
    )

    async with make_client() as client:
        everything = await client.get_cycles()
        page = await client.get_cycles("T2")

    assert [c.id for c in everything] == ["c1", "c2"]
    assert [c.id for c in page] == ["c2"]


async def test_get_cycle(linear, make_client):
    linear.reply(
        {
            "cycle": {
                "id": "c1",
                "number": 3,
                "name": "Sprint 3",
                "startsAt": "2024-03-01T00:00:00.000Z",
                "endsAt": "2024-03-15T00:00:00.000Z",
                "progress": 0.25,
            }
        }
    )

    async with make_client() as client:
        cycle = await client.get_cycle("c1")

    assert cycle.display_name == "Sprint 3"
    assert cycle.starts_at.day == 1
    assert cycle.progress == 0.25


class TestActiveCycle:
    async def test_returns_cycle_with_team(self, linear, make_client, make_team):
        linear.reply(
            {"team": {**make_team("T1", "ONE"), "activeCycle": {"id": "c5", "number": 5}}}
        )

        async with make_client() as client:
            cycle = await client.get_active_cycle("T1")

        assert cycle.id == "c5"
        assert cycle.team.key == "ONE"
        assert linear.last_variables == {"id": "T1"}

    async def test_no_active_cycle(self, linear, make_client, make_team):
        linear.reply({"team": {**make_team("T1"), "activeCycle": None}})

        async with make_client() as client:
            with pytest.raises(NoActiveCycleError) as exc_info:
                await client.get_active_cycle("T1")

        assert exc_info.value.team_id == "T1"
        assert str(exc_info.value) == "get active cycle: no active cycle for this team"

    async def test_unknown_team(self, linear, make_client):
        linear.queue(
            httpx.Response(200, json={"data": None, "errors": [{"message": "Entity not found"}]})
        )

        async with make_client() as client:
            with pytest.raises(LinearGraphQLError):
                await client.get_active_cycle("nope")

    async def test_null_team_is_decode_error(self, linear, make_client):
        linear.reply({"team": None})

        async with make_client() as client:
            with pytest.raises(LinearDecodeError):
                await client.get_active_cycle("T1")


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------

@patch("lnr.api.transport.asyncio.sleep", new_callable=AsyncMock)
async def test_rate_limit_exhausted(mock_sleep, linear):
    linear.queue(
        *[
            httpx.Response(429, json={"errors": [{"message": "Rate limited"}]})
            for _ in range(4)
        ]
    )
    client = LinearClient(
        "lin_api_test",
        endpoint="https://linear.test/graphql",
        max_retries=3,
        retry_base_delay=1.0,
        transport=linear.transport(),
    )

    async with client:
        with pytest.raises(LinearRateLimitError) as exc_info:
            await client.get_issues()

    assert len(linear.requests) == 4
    assert [c.args[0] for c in mock_sleep.await_args_list] == [1.0, 2.0, 4.0]
    assert exc_info.value.operation == "list issues"


@patch("lnr.api.transport.asyncio.sleep", new_callable=AsyncMock)
async def test_rate_limit_recovers(mock_sleep, linear, make_client, make_issue):
    linear.queue(httpx.Response(429, headers={"Retry-After": "2"}))
    linear.reply(_issues(make_issue()))

    async with make_client() as client:
        page = await client.get_issues()

    assert [i.identifier for i in page] == ["ENG-1"]
    assert len(linear.requests) == 2
    mock_sleep.assert_awaited_once_with(2.0)
