"""HTTP client for the GitHub REST and GraphQL APIs."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

import httpx
from pydantic import TypeAdapter

from ledgersync.adapters.http_resilience import ResilientClient
from ledgersync.domain.ports.fetching import (
    ProjectItemsFilter,
    RepositoryFilter,
    SingleItemFilter,
)
from ledgersync.domain.types import ItemKind

from .schema import (
    ContentNode,
    GraphQLError,
    IssuePayload,
    ItemProjectConnection,
    ProjectConnection,
    ProjectItemConnection,
    ProjectSummary,
    PullRequestPayload,
)
from .translator import parse_content, parse_issue, parse_pull_request

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Sequence
    from types import TracebackType

    from ledgersync.common.logging import SyncLogger
    from ledgersync.config.github import GitHubConfig
    from ledgersync.config.http_resilience import ResilienceConfig
    from ledgersync.domain.ports.fetching import ItemFilter
    from ledgersync.domain.types import SourceItem

log = getLogger(__name__)

PER_PAGE: Final[int] = 100
STATUS_FIELD_NAME: Final[str] = "Status"

_CONTENT_FIELDS = """
    id
    number
    title
    body
    state
    url
    labels(first: 20) { nodes { name color } }
    repository { name owner { login } }
"""

_CONTENT_SELECTION = f"""
    __typename
    ... on Issue {{ {_CONTENT_FIELDS} }}
    ... on PullRequest {{
        {_CONTENT_FIELDS}
        merged
        mergedAt
        isDraft
        additions
        deletions
        changedFiles
    }}
"""

NODE_QUERY = f"""
query($id: ID!) {{
  node(id: $id) {{ {_CONTENT_SELECTION} }}
}}
"""

PROJECTS_QUERY = """
query($owner: String!) {
  repositoryOwner(login: $owner) {
    ... on ProjectV2Owner {
      projectsV2(first: 20) { nodes { id title } }
    }
  }
}
"""

PROJECT_ITEMS_QUERY = f"""
query($projectId: ID!, $cursor: String) {{
  node(id: $projectId) {{
    ... on ProjectV2 {{
      items(first: {PER_PAGE}, after: $cursor) {{
        pageInfo {{ hasNextPage endCursor }}
        nodes {{ id content {{ {_CONTENT_SELECTION} }} }}
      }}
    }}
  }}
}}
"""

_PROJECT_ITEMS_SELECTION = f"""
    projectItems(first: 20) {{
      nodes {{
        project {{ title }}
        fieldValueByName(name: "{STATUS_FIELD_NAME}") {{
          ... on ProjectV2ItemFieldSingleSelectValue {{ name }}
        }}
      }}
    }}
"""

PROJECT_STATUS_QUERY = f"""
query($owner: String!, $repo: String!, $number: Int!) {{
  repository(owner: $owner, name: $repo) {{
    issueOrPullRequest(number: $number) {{
      ... on Issue {{ {_PROJECT_ITEMS_SELECTION} }}
      ... on PullRequest {{ {_PROJECT_ITEMS_SELECTION} }}
    }}
  }}
}}
"""

_ISSUES = TypeAdapter(list[IssuePayload])
_PULLS = TypeAdapter(list[PullRequestPayload])
_GRAPHQL_ERRORS = TypeAdapter(list[GraphQLError])


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns a payload that cannot be interpreted."""


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class GitHubClient:
    """Tracker adapter: fetches items and their planning-board status."""

    def __init__(
        self,
        *,
        config: GitHubConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        logger: SyncLogger | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or _default_client_factory
        self._client: ResilientClient | None = None
        self._log = logger or log

    async def __aenter__(self) -> GitHubClient:
        self._http()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # -- SourceItemFetcher -------------------------------------------------

    async def fetch_one(self, item_id: str) -> SourceItem | None:
        data = await self._graphql(NODE_QUERY, {"id": item_id})
        node = (data or {}).get("node")
        if not node or node.get("__typename") not in {"Issue", "PullRequest"}:
            return None
        return parse_content(ContentNode.model_validate(node))

    async def fetch_batch(self, item_filter: ItemFilter) -> Sequence[SourceItem]:
        match item_filter:
            case ProjectItemsFilter():
                return await self._fetch_project_items(item_filter)
            case RepositoryFilter():
                return await self._fetch_repository_items(item_filter)
            case SingleItemFilter():
                item = await self._fetch_single_item(item_filter)
                return [item] if item is not None else []
        raise TypeError(f"Unsupported item filter: {item_filter!r}")

    # -- ProjectStatusSource -----------------------------------------------

    async def status_for(self, item: SourceItem) -> str | None:
        if not self._config.has_token:
            self._log.warning("GitHub token not available, skipping project status lookup")
            return None
        repository = item.repository or self._config.repository
        self._log.debug("Fetching project status for %s#%s", repository, item.number)
        data = await self._graphql(
            PROJECT_STATUS_QUERY,
            {"owner": repository.owner, "repo": repository.name, "number": item.number},
        )
        content = ((data or {}).get("repository") or {}).get("issueOrPullRequest") or {}
        connection = ItemProjectConnection.model_validate(content.get("projectItems") or {})
        nodes = [node for node in connection.nodes if node is not None and node.project]
        self._log.debug(
            "Projects for %s: %s",
            item.describe(),
            [(node.project.title, node.status.name if node.status else None)
             for node in nodes if node.project],
        )
        chosen = self._select_by_title(
            nodes, lambda node: node.project.title if node.project else ""
        )
        if chosen is None or chosen.status is None:
            return None
        return chosen.status.name or None

    # -- REST --------------------------------------------------------------

    async def _fetch_repository_items(self, item_filter: RepositoryFilter) -> list[SourceItem]:
        repository = item_filter.repository
        items: list[SourceItem] = []
        params: dict[str, str | int] = {"state": "all", "per_page": PER_PAGE}
        if item_filter.since is not None:
            params["since"] = item_filter.since.isoformat()

        async for page in self._paginate(f"/repos/{repository}/issues", params):
            issues = [
                payload for payload in _ISSUES.validate_python(page) if not payload.is_pull_request
            ]
            items.extend(parse_issue(payload, repository=repository) for payload in issues)
        self._log.info("Fetched %s issues from %s", len(items), repository)

        if item_filter.include_pull_requests:
            pulls: list[SourceItem] = []
            async for page in self._paginate(
                f"/repos/{repository}/pulls", {"state": "all", "per_page": PER_PAGE}
            ):
                for payload in _PULLS.validate_python(page):
                    if (
                        item_filter.since is not None
                        and payload.updated_at is not None
                        and payload.updated_at < item_filter.since
                    ):
                        continue
                    pulls.append(parse_pull_request(payload, repository=repository))
            self._log.info("Fetched %s pull requests from %s", len(pulls), repository)
            items.extend(pulls)

        return items

    async def _fetch_single_item(self, item_filter: SingleItemFilter) -> SourceItem | None:
        repository = item_filter.repository
        if item_filter.kind is ItemKind.PULL_REQUEST:
            payload = await self._get_json(f"/repos/{repository}/pulls/{item_filter.number}")
            if payload is None:
                return None
            return parse_pull_request(
                PullRequestPayload.model_validate(payload), repository=repository
            )

        payload = await self._get_json(f"/repos/{repository}/issues/{item_filter.number}")
        if payload is None:
            return None
        issue = IssuePayload.model_validate(payload)
        if issue.is_pull_request:
            self._log.warning("#%s in %s is a pull request, not an issue", issue.number, repository)
            return None
        return parse_issue(issue, repository=repository)

    async def _paginate(
        self, path: str, params: dict[str, str | int]
    ) -> AsyncIterator[list[Any]]:
        page = 1
        while True:
            response = await self._http().get(path, params={**params, "page": page})
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, list):
                raise GitHubAPIError(f"Unexpected GitHub response payload for {path}")
            if not payload:
                return
            self._log.debug("Fetched %s page %s: %s entries", path, page, len(payload))
            yield payload
            if len(payload) < PER_PAGE:
                return
            page += 1

    async def _get_json(self, path: str) -> dict[str, Any] | None:
        response = await self._http().get(path)
        if response.status_code == httpx.codes.NOT_FOUND:
            self._log.error("GitHub resource not found: %s", path)
            return None
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise GitHubAPIError(f"Unexpected GitHub response payload for {path}")
        return payload

    # -- GraphQL -----------------------------------------------------------

    async def _fetch_project_items(self, item_filter: ProjectItemsFilter) -> list[SourceItem]:
        if not self._config.has_token:
            self._log.warning("GitHub token not provided, cannot fetch project items")
            return []

        data = await self._graphql(PROJECTS_QUERY, {"owner": item_filter.owner})
        owner = (data or {}).get("repositoryOwner") or {}
        projects = [
            project
            for project in ProjectConnection.model_validate(owner.get("projectsV2") or {}).nodes
            if project is not None
        ]
        project = self._select_by_title(
            projects, lambda candidate: candidate.title, name=item_filter.project_name
        )
        if project is None:
            self._log.warning("No project found for %s", item_filter.owner)
            return []

        self._log.info("Using project: %s", project.title)
        items = await self._fetch_items_of(project)
        self._log.info("Found %s items in project %r", len(items), project.title)
        return items

    async def _fetch_items_of(self, project: ProjectSummary) -> list[SourceItem]:
        items: list[SourceItem] = []
        cursor: str | None = None
        while True:
            data = await self._graphql(
                PROJECT_ITEMS_QUERY, {"projectId": project.id, "cursor": cursor}
            )
            node = (data or {}).get("node") or {}
            if "items" not in node:
                return items
            connection = ProjectItemConnection.model_validate(node["items"])
            items.extend(
                parse_content(entry.content) for entry in connection.nodes if entry.content
            )
            if not connection.page_info.has_next_page:
                return items
            cursor = connection.page_info.end_cursor

    def _select_by_title[T](
        self,
        candidates: Sequence[T],
        title_of: Callable[[T], str],
        *,
        name: str | None = None,
    ) -> T | None:
        """Pick the configured project; falling back to the first one is a degraded mode."""

        project_name = name if name is not None else self._config.project_name
        if not candidates:
            return None
        if project_name is not None:
            for candidate in candidates:
                if title_of(candidate) == project_name:
                    return candidate
            if not self._config.fallback_to_first_project:
                self._log.warning("Project %r not found", project_name)
                return None
            self._log.warning(
                "Project %r not found, falling back to first available project %r",
                project_name,
                title_of(candidates[0]),
            )
            return candidates[0]
        self._log.warning(
            "No project name configured, using first available project %r",
            title_of(candidates[0]),
        )
        return candidates[0]

    async def _graphql(self, query: str, variables: dict[str, object]) -> dict[str, Any] | None:
        response = await self._http().post(
            "/graphql", json={"query": query, "variables": variables}
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise GitHubAPIError("Unexpected GitHub GraphQL response payload")
        if payload.get("errors"):
            errors = _GRAPHQL_ERRORS.validate_python(payload["errors"])
            self._log.error("GraphQL errors: %s", "; ".join(error.message for error in errors))
            return None
        data = payload.get("data")
        return data if isinstance(data, dict) else None

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self._client_factory(self._config.resilience)
        return self._client
