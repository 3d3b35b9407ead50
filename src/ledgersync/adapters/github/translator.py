"""Translate GitHub payloads into tracker items."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledgersync.domain.types import ItemState, PullRequest, RepositoryRef, SourceItem

if TYPE_CHECKING:
    from .schema import ContentNode, IssuePayload, PullRequestPayload

_REPOS_PATH = "/repos/"


def repository_from_api_url(url: str | None) -> RepositoryRef | None:
    """Extract ``owner/name`` from ``https://api.github.com/repos/owner/name``."""

    if not url or _REPOS_PATH not in url:
        return None
    owner, _, rest = url.split(_REPOS_PATH, 1)[1].partition("/")
    name = rest.split("/", 1)[0]
    if not owner or not name:
        return None
    return RepositoryRef(owner=owner, name=name)


def parse_issue(
    payload: IssuePayload,
    *,
    repository: RepositoryRef | None = None,
) -> SourceItem:
    return SourceItem(
        id=payload.node_id,
        number=payload.number,
        title=payload.title,
        body=payload.body,
        state=ItemState(payload.state),
        labels=tuple(label.name for label in payload.labels),
        url=payload.html_url,
        repository=repository or repository_from_api_url(payload.repository_url),
    )


def parse_pull_request(
    payload: PullRequestPayload,
    *,
    repository: RepositoryRef | None = None,
) -> PullRequest:
    merged = payload.merged if payload.merged is not None else payload.merged_at is not None
    return PullRequest(
        id=payload.node_id,
        number=payload.number,
        title=payload.title,
        body=payload.body,
        state=ItemState(payload.state),
        labels=tuple(label.name for label in payload.labels),
        url=payload.html_url,
        repository=repository,
        merged=merged,
        draft=payload.draft,
        merged_at=payload.merged_at,
        additions=payload.additions,
        deletions=payload.deletions,
        changed_files=payload.changed_files,
    )


def parse_content(node: ContentNode) -> SourceItem:
    repository = (
        RepositoryRef(owner=node.repository.owner.login, name=node.repository.name)
        if node.repository
        else None
    )
    labels = tuple(label.name for label in node.labels.nodes)
    state = ItemState(node.state)
    if node.typename == "PullRequest":
        return PullRequest(
            id=node.id,
            number=node.number,
            title=node.title,
            body=node.body,
            state=state,
            labels=labels,
            url=node.url,
            repository=repository,
            merged=bool(node.merged),
            draft=bool(node.draft),
            merged_at=node.merged_at,
            additions=node.additions,
            deletions=node.deletions,
            changed_files=node.changed_files,
        )
    return SourceItem(
        id=node.id,
        number=node.number,
        title=node.title,
        body=node.body,
        state=state,
        labels=labels,
        url=node.url,
        repository=repository,
    )
