"""Jira issue to internal issue converter.

Maps raw Jira records onto the fixed internal vocabulary:
- Status names into four buckets (default: open)
- Issue type names into five types (default: task)
- Priority names into 0 (highest) .. 4 (lowest) (default: 2)
- Timestamps in any of Jira's ISO 8601 variants
- User records to a single display name

A batch converts atomically: the first failing record aborts it and no
partial result is returned.
"""

import hashlib
import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from .errors import IDGenerationError, ParseError
from .models import (
    PRIORITY_DEFAULT,
    PRIORITY_HIGHEST,
    PRIORITY_LOWEST,
    InternalIssue,
    IssueDependency,
    IssueType,
    Status,
)
from .schema import JiraIssueLink, JiraUser, RawIssue

logger = logging.getLogger("jira_import.converter")

__all__ = [
    "ISSUE_TYPE_MAP",
    "PRIORITY_MAP",
    "STATUS_MAP",
    "TIMESTAMP_FORMATS",
    "Converter",
    "ConverterConfig",
    "IDGenerator",
    "browse_url",
    "default_issue_id",
    "display_name",
    "extract_key_from_url",
    "map_issue_type",
    "map_priority",
    "map_status",
    "parse_timestamp",
]

# Takes (title, created_at), returns an identifier or raises
IDGenerator = Callable[[str, datetime], str]

STATUS_MAP: dict[str, Status] = {
    "to do": Status.OPEN,
    "open": Status.OPEN,
    "backlog": Status.OPEN,
    "in progress": Status.IN_PROGRESS,
    "in review": Status.IN_PROGRESS,
    "blocked": Status.BLOCKED,
    "on hold": Status.BLOCKED,
    "done": Status.CLOSED,
    "closed": Status.CLOSED,
    "resolved": Status.CLOSED,
}

ISSUE_TYPE_MAP: dict[str, IssueType] = {
    "bug": IssueType.BUG,
    "defect": IssueType.BUG,
    "story": IssueType.FEATURE,
    "feature": IssueType.FEATURE,
    "enhancement": IssueType.FEATURE,
    "task": IssueType.TASK,
    "sub-task": IssueType.TASK,
    "epic": IssueType.EPIC,
    "technical task": IssueType.CHORE,
}

PRIORITY_MAP: dict[str, int] = {
    "highest": PRIORITY_HIGHEST,
    "critical": PRIORITY_HIGHEST,
    "high": 1,
    "major": 1,
    "medium": PRIORITY_DEFAULT,
    "normal": PRIORITY_DEFAULT,
    "low": 3,
    "minor": 3,
    "lowest": PRIORITY_LOWEST,
    "trivial": PRIORITY_LOWEST,
}

# Tried in order; %z accepts Z, +HHMM, -HHMM and +HH:MM
TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)

_BROWSE_KEY_RE = re.compile(r"/browse/([A-Z]+-\d+)")


def _normalize(name: str | None) -> str:
    return (name or "").strip().lower()


def map_status(name: str | None) -> Status:
    """Map a Jira status name to a Status bucket (unknown → OPEN)."""
    return STATUS_MAP.get(_normalize(name), Status.OPEN)


def map_issue_type(name: str | None) -> IssueType:
    """Map a Jira issue type name to an IssueType (unknown → TASK)."""
    return ISSUE_TYPE_MAP.get(_normalize(name), IssueType.TASK)


def map_priority(name: str | None) -> int:
    """Map a Jira priority name to 0-4 (unknown → 2)."""
    return PRIORITY_MAP.get(_normalize(name), PRIORITY_DEFAULT)


def parse_timestamp(value: str) -> datetime:
    """Parse a Jira timestamp into a timezone-aware datetime.

    Accepts e.g. "2024-01-15T10:30:00.000+0000", "2024-01-15T10:30:00.000Z",
    "2024-01-15T10:30:00.000+00:00", "2024-01-15T10:30:00+0000".

    Raises:
        ParseError: If value is empty or matches no known format
    """
    if not value:
        raise ParseError(value, "empty Jira timestamp")
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ParseError(value)


def display_name(user: JiraUser | None) -> str:
    """Best available name for a user: display name, username, then email."""
    if user is None:
        return ""
    return user.display_name or user.name or user.email_address


def browse_url(base_url: str, key: str) -> str:
    """Deep link to an issue in the Jira UI."""
    return f"{base_url.rstrip('/')}/browse/{key}"


def extract_key_from_url(external_ref: str) -> str:
    """Extract a Jira issue key from a browse URL.

    Example:
        >>> extract_key_from_url("https://company.atlassian.net/browse/PROJ-123")
        'PROJ-123'
        >>> extract_key_from_url("https://example.com/not-a-jira-url")
        ''
    """
    match = _BROWSE_KEY_RE.search(external_ref or "")
    return match.group(1) if match else ""


def default_issue_id(prefix: str, key: str) -> str:
    """Stable identifier derived from the Jira key, e.g. ``jira-3f1c9a2b``.

    Re-importing the same issue always yields the same identifier.
    """
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return f"{prefix}-{digest[:8]}"


def _link_dependency(link: JiraIssueLink) -> IssueDependency | None:
    link_type = link.type
    type_name = link_type.name if link_type else ""
    if link.outward_issue and link.outward_issue.key:
        kind = (link_type.outward if link_type else "") or type_name
        return IssueDependency(kind=kind.lower(), key=link.outward_issue.key)
    if link.inward_issue and link.inward_issue.key:
        kind = (link_type.inward if link_type else "") or type_name
        return IssueDependency(kind=kind.lower(), key=link.inward_issue.key)
    return None


@dataclass(frozen=True)
class ConverterConfig:
    """Converter settings.

    Attributes:
        base_url: Jira instance URL, used to build external references
        prefix: Prefix for the default ID scheme
        id_generator: Optional (title, created_at) -> id callable replacing
                      the default scheme. Exceptions it raises abort the batch.
    """

    base_url: str
    prefix: str = "jira"
    id_generator: IDGenerator | None = None


class Converter:
    """Converts RawIssue records into InternalIssue records.

    Example:
        >>> converter = Converter(ConverterConfig(base_url="https://test.atlassian.net"))
        >>> issues = converter.convert(raw_issues)
    """

    def __init__(self, config: ConverterConfig) -> None:
        self.config = config
        self.base_url = config.base_url.rstrip("/")

    def convert(self, raw_issues: Iterable[RawIssue]) -> list[InternalIssue]:
        """Convert a batch of raw issues, preserving order.

        Raises:
            ConversionError: On the first record that fails; nothing is returned
        """
        issues = [self.convert_issue(raw) for raw in raw_issues]
        logger.info("jira_convert_complete", extra={"issues_converted": len(issues)})
        return issues

    def convert_issue(self, raw: RawIssue) -> InternalIssue:
        """Convert a single raw issue.

        Raises:
            ParseError: If created/updated/resolution timestamps are invalid
            IDGenerationError: If the configured ID generator fails
        """
        fields = raw.fields
        try:
            created_at = parse_timestamp(fields.created)
            updated_at = parse_timestamp(fields.updated)
            closed_at = (
                parse_timestamp(fields.resolution_date)
                if fields.resolution_date
                else None
            )
        except ParseError as e:
            logger.error(
                "jira_timestamp_invalid",
                extra={"issue_key": raw.key, "value": e.value},
            )
            raise

        status = map_status(fields.status.name if fields.status else None)
        if status is Status.CLOSED and closed_at is None:
            closed_at = updated_at

        dependencies: list[IssueDependency] = []
        if fields.parent and fields.parent.key:
            dependencies.append(IssueDependency(kind="parent", key=fields.parent.key))
        for link in fields.issue_links:
            dependency = _link_dependency(link)
            if dependency is not None:
                dependencies.append(dependency)

        return InternalIssue(
            id=self._issue_id(raw, created_at),
            title=fields.summary,
            description=fields.get_description(),
            status=status,
            issue_type=map_issue_type(fields.issue_type.name if fields.issue_type else None),
            priority=map_priority(fields.priority.name if fields.priority else None),
            created_by=display_name(fields.reporter),
            assignee=display_name(fields.assignee),
            labels=tuple(fields.labels),
            external_ref=browse_url(self.base_url, raw.key),
            created_at=created_at,
            updated_at=updated_at,
            closed_at=closed_at,
            dependencies=tuple(dependencies),
        )

    def _issue_id(self, raw: RawIssue, created_at: datetime) -> str:
        generator = self.config.id_generator
        if generator is None:
            return default_issue_id(self.config.prefix, raw.key)

        title = raw.fields.summary
        try:
            issue_id = generator(title, created_at)
        except Exception as e:
            logger.error(
                "jira_id_generation_failed",
                extra={"issue_key": raw.key, "error": str(e)},
            )
            raise IDGenerationError(
                title, f"generating ID for {raw.key}: {e}"
            ) from e
        if not issue_id:
            raise IDGenerationError(title, f"ID generator returned no ID for {raw.key}")
        return issue_id
