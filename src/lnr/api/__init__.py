"""Linear GraphQL API access layer."""

from .client import LinearClient
from .filters import IssueListOptions, Page, ProjectListOptions

__all__ = ["LinearClient", "IssueListOptions", "Page", "ProjectListOptions"]
