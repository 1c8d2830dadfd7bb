"""Jira REST API client.

Provides a synchronous httpx-based client for the Jira issue search API.
Supports Jira Cloud (Basic Auth with email + API token) and Jira Server/Data
Center (Basic Auth with username + password, or Bearer personal access token).
Implements offset-based pagination (startAt/maxResults/total) over
/rest/api/3/search/jql, merging every page into one ordered list.

No request is ever retried; retry policy belongs to the caller.

Reference: https://developer.atlassian.com/cloud/jira/platform/rest/v3/intro/
"""

import base64
import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from .errors import APIError, ConfigError, DeadlineExceeded, DecodeError, JiraClientError
from .schema import RawIssue, SearchResponse, search_response_adapter

logger = logging.getLogger("jira_import.client")

__all__ = [
    "CLOUD_HOST_MARKER",
    "ConnectionConfig",
    "JiraClient",
    "VALID_STATES",
    "is_cloud_url",
]

# Jira Cloud sites live under *.atlassian.net
CLOUD_HOST_MARKER = "atlassian.net"

VALID_STATES = ("open", "closed", "all")

CLOUD_TOKEN_URL = "https://id.atlassian.com/manage-profile/security/api-tokens"


def is_cloud_url(url: str) -> bool:
    """Return True when ``url`` points at a Jira Cloud site."""
    return CLOUD_HOST_MARKER in url


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection settings for a Jira deployment.

    Attributes:
        url: Jira instance URL (e.g., https://company.atlassian.net)
        api_token: API token (Cloud) or PAT/password (Server/DC). Required.
        project: Project key used to synthesize JQL when none is given
        username: Email (Cloud) or username (Server/DC). Required for Cloud.
    """

    url: str
    api_token: str
    project: str = ""
    username: str = ""

    def __repr__(self) -> str:
        return (
            f"ConnectionConfig(url={self.url!r}, project={self.project!r}, "
            f"username={self.username!r}, api_token='**********')"
        )


class JiraClient:
    """Jira REST API client using a synchronous httpx.Client.

    The deployment kind (Cloud vs Server/DC) is detected once from the URL and
    fixed for the client's lifetime. Each call to search_issues() is
    self-contained: the client keeps no request-scoped state between calls.

    Attributes:
        base_url: Jira instance URL without trailing slash
        project: Default project key for synthesized JQL
        is_cloud: True for *.atlassian.net sites
        client: Underlying httpx.Client

    Example:
        >>> config = ConnectionConfig(
        ...     url="https://company.atlassian.net",
        ...     username="user@example.com",
        ...     api_token="token",
        ...     project="PROJ",
        ... )
        >>> with JiraClient(config) as client:
        ...     issues = client.search_issues(state="open")
    """

    SEARCH_PATH = "/rest/api/3/search/jql"
    MYSELF_PATH = "/rest/api/2/myself"

    PAGE_SIZE = 100
    REQUEST_TIMEOUT = 30.0  # seconds, applied per httpx phase
    USER_AGENT = "jira-import/1.0"

    def __init__(self, config: ConnectionConfig) -> None:
        """Validate configuration and create the HTTP client.

        Args:
            config: Connection settings

        Raises:
            ConfigError: If the URL or token is missing, or a Cloud URL is
                given without a username
        """
        if not config.url:
            raise ConfigError("Jira URL is required")
        if not config.api_token:
            raise ConfigError("Jira API token is required")

        self.base_url = config.url.rstrip("/")
        self.project = config.project
        self.is_cloud = is_cloud_url(self.base_url)
        self._username = config.username
        self._api_token = config.api_token

        if self.is_cloud and not self._username:
            raise ConfigError("username (email) is required for Jira Cloud")

        self.client = httpx.Client(
            timeout=httpx.Timeout(self.REQUEST_TIMEOUT),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": self.USER_AGENT,
            },
        )

    # --- Authentication ---

    def auth_header(self) -> str:
        """Return the Authorization header value.

        Basic Auth with username:token whenever a username is configured
        (always the case on Cloud); otherwise a Bearer personal access token
        for Server/DC.
        """
        if self.is_cloud or self._username:
            credentials = f"{self._username}:{self._api_token}"
            encoded = base64.b64encode(credentials.encode()).decode()
            return f"Basic {encoded}"
        return f"Bearer {self._api_token}"

    def test_connection(self) -> dict[str, Any]:
        """Test Jira API connectivity and authentication.

        Sends GET request to /rest/api/2/myself, which exists on both Cloud
        and Server/DC.

        Returns:
            dict with keys:
                - success (bool): True if authenticated successfully
                - user (str | None): Display name of the authenticated user
                - error (str | None): Error message if failed
        """
        try:
            response = self._get(self.MYSELF_PATH, params=None, deadline=None)
            data = self._decode_json(response)
        except JiraClientError as e:
            return {"success": False, "user": None, "error": str(e)}

        user = None
        if isinstance(data, dict):
            user = data.get("displayName") or data.get("name") or data.get("emailAddress")
        return {"success": True, "user": user, "error": None}

    # --- Search ---

    def build_jql(self, jql: str = "", state: str = "all") -> str:
        """Return the JQL to run.

        A non-empty ``jql`` is used as-is. Otherwise one is synthesized from the
        configured project plus a status clause for ``state``.

        Args:
            jql: Caller-supplied JQL (may be empty)
            state: "open", "closed" or "all"

        Raises:
            ConfigError: If both jql and project are empty, or state is invalid
        """
        if jql:
            return jql
        if not self.project:
            raise ConfigError("either project or JQL query is required")
        if state not in VALID_STATES:
            raise ConfigError(
                f"invalid state {state!r}: expected one of {', '.join(VALID_STATES)}"
            )

        query = f"project = {self.project}"
        if state == "open":
            query += " AND status != Done AND status != Closed"
        elif state == "closed":
            query += " AND (status = Done OR status = Closed)"
        return query

    def search_issues(
        self,
        jql: str = "",
        state: str = "all",
        deadline: float | None = None,
    ) -> list[RawIssue]:
        """Fetch every issue matching a JQL query.

        Pages are requested one at a time with startAt/maxResults. The loop
        stops when the offset reaches the reported total or a page comes back
        empty; the empty page wins when the total is stale. A response without
        a total counts as total 0, so that page is the last one requested.

        Args:
            jql: JQL query; synthesized from project and state when empty
            state: "open", "closed" or "all" (only used when jql is empty)
            deadline: Optional time.monotonic() value after which the fetch
                      is abandoned

        Returns:
            All matching issues in server order

        Raises:
            ConfigError: If no query can be built
            APIError: On a non-2xx response
            DecodeError: On a malformed response body
            DeadlineExceeded: If the deadline passes mid-fetch
            JiraClientError: On transport failure

        Example:
            >>> issues = client.search_issues("project = PROJ ORDER BY key")
            >>> for issue in issues:
            ...     print(issue.key, issue.fields.summary)
        """
        query = self.build_jql(jql, state)

        all_issues: list[RawIssue] = []
        start_at = 0

        while True:
            params = {
                "jql": query,
                "startAt": start_at,
                "maxResults": self.PAGE_SIZE,
                "expand": "changelog",
            }
            response = self._get(self.SEARCH_PATH, params=params, deadline=deadline)
            page = self._decode_page(response)

            all_issues.extend(page.issues)
            start_at += len(page.issues)

            logger.info(
                "jira_search_page",
                extra={
                    "start_at": start_at,
                    "page_issues": len(page.issues),
                    "total": page.total,
                },
            )

            if not page.issues or start_at >= page.total:
                break

        logger.info(
            "jira_search_complete",
            extra={"jql": query, "total_issues": len(all_issues)},
        )
        return all_issues

    # --- Internals ---

    def _timeout_for(self, deadline: float | None) -> float:
        """Per-request timeout: REQUEST_TIMEOUT, capped by the time left to ``deadline``.

        httpx applies this value to each phase (connect, write, pool, and every
        read) rather than to the round-trip as a whole. A server that trickles
        its body can therefore overrun both the 30s bound and the deadline;
        the deadline is rechecked before the next page is requested.
        """
        if deadline is None:
            return self.REQUEST_TIMEOUT
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DeadlineExceeded("deadline exceeded before request was sent")
        return min(self.REQUEST_TIMEOUT, remaining)

    def _get(
        self,
        path: str,
        params: dict[str, Any] | None,
        deadline: float | None,
    ) -> httpx.Response:
        """Send one authenticated GET and raise APIError on non-2xx."""
        timeout = self._timeout_for(deadline)
        try:
            response = self.client.get(
                f"{self.base_url}{path}",
                params=params,
                headers={"Authorization": self.auth_header()},
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            logger.error("jira_request_timeout", extra={"path": path, "error": str(e)})
            if deadline is not None and time.monotonic() >= deadline:
                raise DeadlineExceeded(f"deadline exceeded during GET {path}") from e
            raise JiraClientError(f"JIRA_REQUEST_TIMEOUT: GET {path}: {e}") from e
        except httpx.HTTPError as e:
            logger.error("jira_request_error", extra={"path": path, "error": str(e)})
            raise JiraClientError(f"JIRA_REQUEST_ERROR: GET {path}: {e}") from e

        if not 200 <= response.status_code < 300:
            error = self._api_error(response.status_code, response.text)
            logger.error(
                "jira_api_error",
                extra={"path": path, "status_code": response.status_code},
            )
            raise error
        return response

    def _api_error(self, status_code: int, body: str) -> APIError:
        """Build an APIError with remediation guidance for ``status_code``."""
        if status_code == 401:
            hint = "Authentication failed. Check your credentials."
            if self.is_cloud:
                hint += (
                    "\nFor Jira Cloud, use your email as username and an API token."
                    f"\nCreate a token at: {CLOUD_TOKEN_URL}"
                )
            else:
                hint += "\nFor Jira Server/DC, use a Personal Access Token or username/password."
        elif status_code == 403:
            hint = f"Access forbidden. Check permissions for project.\n{body}"
        elif status_code == 400:
            hint = f"Bad request (invalid JQL?): {body}"
        else:
            hint = body
        return APIError(status_code, hint=hint, body=body)

    @staticmethod
    def _decode_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"decoding response: {e}") from e

    def _decode_page(self, response: httpx.Response) -> SearchResponse:
        data = self._decode_json(response)
        try:
            return search_response_adapter.validate_python(data)
        except ValidationError as e:
            raise DecodeError(f"decoding response: {e}") from e

    def close(self) -> None:
        """Close the HTTP client connection."""
        self.client.close()

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
