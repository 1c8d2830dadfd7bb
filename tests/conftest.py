"""Shared pytest fixtures for jira-import tests.

Fixture Organization:
    - Client fixtures: JiraClient for Cloud and Server/DC deployments
    - Sample data fixtures: Raw Jira issue payloads
"""

from typing import Any

import pytest

from jira_import.client import ConnectionConfig, JiraClient
from jira_import.config import reset_config
from jira_import.schema import RawIssue

CLOUD_URL = "https://test.atlassian.net"
SERVER_URL = "https://jira.example.com"


# =============================================================================
# Client fixtures
# =============================================================================


@pytest.fixture
def jira_client():
    """JiraClient for a Jira Cloud site with a configured project."""
    client = JiraClient(
        ConnectionConfig(
            url=CLOUD_URL,
            username="test@example.com",
            api_token="test-token-123",
            project="PROJ",
        )
    )
    yield client
    client.close()


@pytest.fixture
def server_client():
    """JiraClient for Jira Server/DC using a personal access token."""
    client = JiraClient(ConnectionConfig(url=SERVER_URL, api_token="pat-456"))
    yield client
    client.close()


@pytest.fixture(autouse=True)
def clean_config_cache():
    """Make every test load configuration from scratch."""
    reset_config()
    yield
    reset_config()


# =============================================================================
# Sample data
# =============================================================================


@pytest.fixture
def raw_issue_data() -> dict[str, Any]:
    """Complete Jira Server/DC style issue payload."""
    return {
        "key": "PROJ-123",
        "fields": {
            "summary": "Test issue",
            "description": "Test description",
            "status": {"name": "In Progress"},
            "priority": {"name": "High"},
            "issuetype": {"name": "Bug", "subtask": False},
            "created": "2024-01-15T10:30:00.000+0000",
            "updated": "2024-01-16T11:00:00.000+0000",
            "reporter": {"displayName": "John Doe", "name": "jdoe"},
            "assignee": {"displayName": "Jane Smith", "name": "jsmith"},
            "labels": ["label1", "label2"],
        },
    }


@pytest.fixture
def raw_issue(raw_issue_data) -> RawIssue:
    return RawIssue.model_validate(raw_issue_data)
