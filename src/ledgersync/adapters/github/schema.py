"""Pydantic models describing the GitHub REST and GraphQL payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LabelPayload(GitHubBaseModel):
    name: str
    color: str | None = None


class PullRequestRef(GitHubBaseModel):
    url: str | None = None
    merged_at: datetime | None = None


class IssuePayload(GitHubBaseModel):
    """Issue (or pull request) as returned by ``/repos/{owner}/{repo}/issues``."""

    id: int
    node_id: str
    number: int
    title: str = ""
    body: str | None = None
    state: Literal["open", "closed"]
    html_url: str
    labels: list[LabelPayload] = Field(default_factory=list)
    repository_url: str | None = None
    updated_at: datetime | None = None
    pull_request: PullRequestRef | None = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None


class PullRequestPayload(GitHubBaseModel):
    """Pull request as returned by ``/repos/{owner}/{repo}/pulls``."""

    id: int
    node_id: str
    number: int
    title: str = ""
    body: str | None = None
    state: Literal["open", "closed"]
    html_url: str
    labels: list[LabelPayload] = Field(default_factory=list)
    updated_at: datetime | None = None
    merged: bool | None = None
    merged_at: datetime | None = None
    draft: bool = False
    additions: int | None = None
    deletions: int | None = None
    changed_files: int | None = None


class GraphQLError(GitHubBaseModel):
    message: str
    type: str | None = None


class LabelConnection(GitHubBaseModel):
    nodes: list[LabelPayload] = Field(default_factory=list)


class RepositoryOwner(GitHubBaseModel):
    login: str


class RepositoryNode(GitHubBaseModel):
    name: str
    owner: RepositoryOwner


class ContentNode(GitHubBaseModel):
    """Issue or pull request content of a project item / ``node(id:)`` lookup."""

    typename: Literal["Issue", "PullRequest"] = Field(alias="__typename")
    id: str
    number: int
    title: str = ""
    body: str | None = None
    state: str
    url: str
    labels: LabelConnection = Field(default_factory=LabelConnection)
    repository: RepositoryNode | None = None
    merged: bool | None = None
    merged_at: datetime | None = Field(default=None, alias="mergedAt")
    draft: bool | None = Field(default=None, alias="isDraft")
    additions: int | None = None
    deletions: int | None = None
    changed_files: int | None = Field(default=None, alias="changedFiles")

    @field_validator("state", mode="before")
    @classmethod
    def _lower_state(cls, value: object) -> object:
        # GraphQL reports MERGED for merged pull requests; the ledger only knows open/closed.
        if isinstance(value, str):
            lowered = value.lower()
            return "closed" if lowered == "merged" else lowered
        return value


class ProjectItemNode(GitHubBaseModel):
    id: str
    content: ContentNode | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _drop_draft_issues(cls, value: object) -> object:
        # Draft issues and redacted items carry no issue fields.
        if isinstance(value, dict) and value.get("__typename") not in {"Issue", "PullRequest"}:
            return None
        return value


class PageInfo(GitHubBaseModel):
    has_next_page: bool = Field(alias="hasNextPage")
    end_cursor: str | None = Field(default=None, alias="endCursor")


class ProjectItemConnection(GitHubBaseModel):
    page_info: PageInfo = Field(alias="pageInfo")
    nodes: list[ProjectItemNode] = Field(default_factory=list)


class ProjectSummary(GitHubBaseModel):
    id: str
    title: str


class ProjectConnection(GitHubBaseModel):
    nodes: list[ProjectSummary | None] = Field(default_factory=list)


class ProjectStatusValue(GitHubBaseModel):
    name: str | None = None


class ProjectRef(GitHubBaseModel):
    title: str


class ItemProjectNode(GitHubBaseModel):
    project: ProjectRef | None = None
    status: ProjectStatusValue | None = Field(default=None, alias="fieldValueByName")


class ItemProjectConnection(GitHubBaseModel):
    nodes: list[ItemProjectNode | None] = Field(default_factory=list)
