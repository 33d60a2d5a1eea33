"""GraphQL documents for every read operation.

Kept together so they are easy to audit. Page sizes and user input always
travel as typed variables, never interpolated into the documents.
"""

# -- Fragments ---------------------------------------------------------------

_TEAM_REF = "id name key"

_USER_FIELDS = "id name email displayName active admin avatarUrl"

_TEAM_FIELDS = "id name key description private"

_ISSUE_FIELDS = f"""
    id
    identifier
    title
    description
    priority
    estimate
    url
    createdAt
    updatedAt
    dueDate
    state {{ id name color type }}
    assignee {{ id name email }}
    team {{ {_TEAM_REF} }}
    project {{ id name }}
    labels {{ nodes {{ id name color }} }}
"""

_PROJECT_FIELDS = f"""
    id
    name
    description
    state
    progress
    startDate
    targetDate
    url
    createdAt
    updatedAt
    lead {{ id name }}
    teams {{ nodes {{ {_TEAM_REF} }} }}
"""

_CYCLE_FIELDS = "id name number startsAt endsAt progress description"

# -- Workspace ---------------------------------------------------------------

VIEWER_QUERY = f"""
query Viewer {{
  viewer {{ {_USER_FIELDS} }}
}}
"""

ORGANISATION_QUERY = """
query Organization {
  organization { id name urlKey logoUrl userCount }
}
"""

LIST_USERS_QUERY = f"""
query ListUsers($first: Int!) {{
  users(first: $first) {{
    nodes {{ {_USER_FIELDS} }}
  }}
}}
"""

LIST_TEAMS_QUERY = f"""
query ListTeams($first: Int!) {{
  teams(first: $first) {{
    nodes {{ {_TEAM_FIELDS} }}
  }}
}}
"""

GET_TEAM_QUERY = f"""
query GetTeam($id: String!) {{
  team(id: $id) {{ {_TEAM_FIELDS} }}
}}
"""

LIST_LABELS_QUERY = f"""
query ListLabels($first: Int!) {{
  issueLabels(first: $first) {{
    nodes {{
      id
      name
      description
      color
      team {{ {_TEAM_REF} }}
    }}
  }}
}}
"""

LIST_WORKFLOW_STATES_QUERY = f"""
query ListWorkflowStates($first: Int!) {{
  workflowStates(first: $first) {{
    nodes {{
      id
      name
      color
      type
      position
      team {{ {_TEAM_REF} }}
    }}
  }}
}}
"""

# -- Issues ------------------------------------------------------------------

LIST_ISSUES_QUERY = f"""
query ListIssues($first: Int!) {{
  issues(first: $first) {{
    nodes {{ {_ISSUE_FIELDS} }}
  }}
}}
"""

GET_ISSUE_QUERY = f"""
query GetIssue($id: String!) {{
  issue(id: $id) {{
    {_ISSUE_FIELDS}
    creator {{ id name email }}
    cycle {{ id name number }}
  }}
}}
"""

SEARCH_ISSUES_QUERY = f"""
query SearchIssues($first: Int!, $filter: IssueFilter!) {{
  issues(filter: $filter, first: $first) {{
    nodes {{ {_ISSUE_FIELDS} }}
  }}
}}
"""

# -- Projects & initiatives --------------------------------------------------

LIST_PROJECTS_QUERY = f"""
query ListProjects($first: Int!) {{
  projects(first: $first) {{
    nodes {{ {_PROJECT_FIELDS} }}
  }}
}}
"""

GET_PROJECT_QUERY = f"""
query GetProject($id: String!) {{
  project(id: $id) {{ {_PROJECT_FIELDS} }}
}}
"""

LIST_INITIATIVES_QUERY = """
query ListInitiatives($first: Int!) {
  initiatives(first: $first) {
    nodes {
      id
      name
      description
      targetDate
      createdAt
      updatedAt
      owner { id name }
    }
  }
}
"""

GET_INITIATIVE_QUERY = """
query GetInitiative($id: String!) {
  initiative(id: $id) {
    id
    name
    description
    targetDate
    createdAt
    updatedAt
    owner { id name }
    projects { nodes { id name state } }
  }
}
"""

# -- Cycles ------------------------------------------------------------------

LIST_CYCLES_QUERY = f"""
query ListCycles($first: Int!) {{
  cycles(first: $first) {{
    nodes {{
      {_CYCLE_FIELDS}
      team {{ {_TEAM_REF} }}
    }}
  }}
}}
"""

GET_CYCLE_QUERY = f"""
query GetCycle($id: String!) {{
  cycle(id: $id) {{
    {_CYCLE_FIELDS}
    team {{ {_TEAM_REF} }}
  }}
}}
"""

ACTIVE_CYCLE_QUERY = f"""
query ActiveCycle($id: String!) {{
  team(id: $id) {{
    {_TEAM_REF}
    activeCycle {{ {_CYCLE_FIELDS} }}
  }}
}}
"""
