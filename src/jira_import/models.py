"""Internal issue model produced by the converter.

Defines the fixed vocabulary (status, issue type, priority range) that
Jira fields are narrowed onto, and the immutable InternalIssue record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

__all__ = [
    "PRIORITY_DEFAULT",
    "PRIORITY_HIGHEST",
    "PRIORITY_LOWEST",
    "InternalIssue",
    "IssueDependency",
    "IssueType",
    "Status",
]

PRIORITY_HIGHEST = 0
PRIORITY_DEFAULT = 2
PRIORITY_LOWEST = 4


class Status(str, Enum):
    """Normalized issue status.

    Note: Uses (str, Enum) so values serialise directly; use .value when formatting.
    """

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    CLOSED = "closed"


class IssueType(str, Enum):
    """Normalized issue type."""

    BUG = "bug"
    FEATURE = "feature"
    TASK = "task"
    EPIC = "epic"
    CHORE = "chore"


@dataclass(frozen=True)
class IssueDependency:
    """Relationship from an internal issue to another Jira issue.

    Attributes:
        kind: "parent" for the parent issue, otherwise the link phrase as seen
              from this issue (e.g. "blocks", "is blocked by")
        key: Jira key of the related issue (e.g. PROJ-7)
    """

    kind: str
    key: str


@dataclass(frozen=True)
class InternalIssue:
    """Issue in the downstream system's vocabulary.

    Attributes:
        id: Identifier assigned by the converter's ID scheme
        title: Jira summary, copied unchanged
        description: Plain-text description (ADF flattened)
        status: Normalized status bucket
        issue_type: Normalized issue type
        priority: 0 (highest) .. 4 (lowest)
        created_by: Reporter display name ("" when unknown)
        assignee: Assignee display name ("" when unassigned)
        labels: Jira labels, copied unchanged
        external_ref: Browse URL of the source Jira issue
        created_at: Jira creation time
        updated_at: Jira last-update time
        closed_at: Resolution time for closed issues, else None
        dependencies: Parent and issue-link relationships
    """

    id: str
    title: str
    description: str
    status: Status
    issue_type: IssueType
    priority: int
    created_by: str
    assignee: str
    labels: tuple[str, ...]
    external_ref: str
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None
    dependencies: tuple[IssueDependency, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "issue_type": self.issue_type.value,
            "priority": self.priority,
            "created_by": self.created_by,
            "assignee": self.assignee,
            "labels": list(self.labels),
            "external_ref": self.external_ref,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "dependencies": [
                {"kind": dep.kind, "key": dep.key} for dep in self.dependencies
            ],
        }
