"""Pydantic models for raw Jira REST API payloads.

Decodes the search response and the subset of issue fields the converter
needs. Every nested record is nullable: team-managed projects and Server/DC
deployments omit priority, assignee, resolution and similar fields freely.

The description field changes shape by deployment (plain string on
Server/DC, ADF document on Cloud), so it is resolved at decode time into a
tagged variant: PlainTextDescription | DocumentDescription | AbsentDescription.

Reference: https://developer.atlassian.com/cloud/jira/platform/rest/v3/api-group-issue-search/
"""

from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from .adf_converter import adf_to_text

__all__ = [
    "AbsentDescription",
    "Description",
    "DocumentDescription",
    "JiraIssueLink",
    "JiraIssueType",
    "JiraLinkType",
    "JiraNamed",
    "JiraUser",
    "PlainTextDescription",
    "RawIssue",
    "RawIssueFields",
    "SearchResponse",
    "search_response_adapter",
]


class _JiraModel(BaseModel):
    """Shared config: immutable, tolerant of unknown keys, alias or name input."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat JSON null like a missing key so every field falls back to its default."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# =============================================================================
# Description tagged variant
# =============================================================================


class PlainTextDescription(_JiraModel):
    """Description delivered as a plain string (Jira Server/DC)."""

    kind: Literal["plain"] = "plain"
    text: str


class DocumentDescription(_JiraModel):
    """Description delivered as an ADF document (Jira Cloud)."""

    kind: Literal["document"] = "document"
    document: dict[str, Any]


class AbsentDescription(_JiraModel):
    """No description, or a value of neither supported shape."""

    kind: Literal["absent"] = "absent"


Description = Annotated[
    Union[PlainTextDescription, DocumentDescription, AbsentDescription],
    Field(discriminator="kind"),
]

_DESCRIPTION_VARIANTS = (PlainTextDescription, DocumentDescription, AbsentDescription)


# =============================================================================
# Nested records
# =============================================================================


class JiraNamed(_JiraModel):
    """Any ``{"name": ...}`` record: status, priority, resolution."""

    name: str = ""


class JiraIssueType(_JiraModel):
    name: str = ""
    subtask: bool = False


class JiraUser(_JiraModel):
    """Jira user reference.

    Attributes:
        name: Username (Server/DC)
        display_name: Display name (Cloud and Server/DC)
        email_address: Email, when the account's privacy settings expose it
    """

    name: str = ""
    display_name: str = Field(default="", alias="displayName")
    email_address: str = Field(default="", alias="emailAddress")


class JiraIssueRef(_JiraModel):
    key: str = ""


class JiraLinkType(_JiraModel):
    name: str = ""
    inward: str = ""
    outward: str = ""


class JiraIssueLink(_JiraModel):
    """Typed link to another issue. Exactly one side is normally populated."""

    type: JiraLinkType | None = None
    inward_issue: JiraIssueRef | None = Field(default=None, alias="inwardIssue")
    outward_issue: JiraIssueRef | None = Field(default=None, alias="outwardIssue")


# =============================================================================
# Issues
# =============================================================================


class RawIssueFields(_JiraModel):
    """The ``fields`` object of a Jira issue."""

    summary: str = ""
    description: Description = Field(default_factory=AbsentDescription)
    status: JiraNamed | None = None
    priority: JiraNamed | None = None
    issue_type: JiraIssueType | None = Field(default=None, alias="issuetype")
    assignee: JiraUser | None = None
    reporter: JiraUser | None = None
    labels: list[str] = Field(default_factory=list)
    created: str = ""
    updated: str = ""
    resolution: JiraNamed | None = None
    resolution_date: str | None = Field(default=None, alias="resolutiondate")
    parent: JiraIssueRef | None = None
    issue_links: list[JiraIssueLink] = Field(default_factory=list, alias="issuelinks")

    @field_validator("description", mode="before")
    @classmethod
    def resolve_description(cls, v: Any) -> Any:
        """Tag the dynamic description value with its shape."""
        if isinstance(v, _DESCRIPTION_VARIANTS):
            return v
        if isinstance(v, str):
            return PlainTextDescription(text=v)
        if isinstance(v, dict):
            return DocumentDescription(document=v)
        return AbsentDescription()

    def get_description(self) -> str:
        """Return the description as plain text.

        Plain-string descriptions are returned unchanged, ADF documents are
        flattened with adf_to_text(), and an absent description yields "".
        """
        description = self.description
        if isinstance(description, PlainTextDescription):
            return description.text
        if isinstance(description, DocumentDescription):
            return adf_to_text(description.document)
        return ""


class RawIssue(_JiraModel):
    """Issue as returned by the Jira search API, before normalization."""

    key: str
    fields: RawIssueFields = Field(default_factory=RawIssueFields)


class SearchResponse(_JiraModel):
    """One page of ``/rest/api/3/search/jql`` results.

    A missing or null ``total`` decodes to 0, so a page without one is the
    last page fetched.
    """

    start_at: int = Field(default=0, alias="startAt")
    max_results: int = Field(default=0, alias="maxResults")
    total: int = 0
    issues: list[RawIssue] = Field(default_factory=list)


search_response_adapter = TypeAdapter(SearchResponse)
