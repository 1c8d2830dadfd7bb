"""Tests for the import_issues.py CLI.

Covers:
- Argument parsing and config overrides
- JSON Lines output for converted issues
- --check connection test
- Exit codes for configuration, API and conversion failures
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Allow importing import_issues from scripts/
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "scripts"))

import import_issues

from jira_import.config import JiraImportConfig
from jira_import.errors import APIError, ConfigError
from jira_import.schema import RawIssue


def _config(**overrides) -> JiraImportConfig:
    values = {
        "url": "https://company.atlassian.net",
        "project": "PROJ",
        "username": "user@example.com",
        "api_token": "token",
    }
    values.update(overrides)
    return JiraImportConfig(_env_file=None, **values)


def _raw(key: str, status: str = "To Do") -> RawIssue:
    return RawIssue.model_validate(
        {
            "key": key,
            "fields": {
                "summary": f"Summary {key}",
                "status": {"name": status},
                "created": "2024-01-15T10:30:00.000+0000",
                "updated": "2024-01-15T10:30:00.000+0000",
            },
        }
    )


@pytest.fixture
def mock_client():
    """Patch JiraClient in the CLI module; yields the client instance mock."""
    with patch.object(import_issues, "JiraClient") as client_cls:
        instance = MagicMock()
        instance.is_cloud = True
        instance.base_url = "https://company.atlassian.net"
        client_cls.return_value.__enter__.return_value = instance
        instance.client_cls = client_cls
        yield instance


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch.object(import_issues, "configure_logging"):
        yield


class TestArgumentParsing:
    def test_defaults(self):
        args = import_issues.build_parser().parse_args([])
        assert args.jql is None
        assert args.state is None
        assert args.check is False

    def test_invalid_state_rejected(self):
        with pytest.raises(SystemExit):
            import_issues.build_parser().parse_args(["--state", "pending"])


class TestImport:
    def test_writes_json_lines(self, mock_client, capsys):
        mock_client.search_issues.return_value = [_raw("PROJ-1"), _raw("PROJ-2", "Done")]

        with patch.object(import_issues, "get_config", return_value=_config()):
            exit_code = import_issues.main([])

        assert exit_code == 0
        captured = capsys.readouterr()
        lines = [json.loads(line) for line in captured.out.splitlines()]
        assert [line["external_ref"] for line in lines] == [
            "https://company.atlassian.net/browse/PROJ-1",
            "https://company.atlassian.net/browse/PROJ-2",
        ]
        assert lines[1]["status"] == "closed"
        assert "Imported 2 issues" in captured.err

    def test_config_values_passed_to_client(self, mock_client):
        mock_client.search_issues.return_value = []

        with patch.object(
            import_issues, "get_config", return_value=_config(jql="", state="open")
        ):
            import_issues.main([])

        mock_client.search_issues.assert_called_once_with("", "open")
        connection = mock_client.client_cls.call_args.args[0]
        assert connection.project == "PROJ"
        assert connection.api_token == "token"

    def test_cli_overrides(self, mock_client, capsys):
        mock_client.search_issues.return_value = [_raw("OTHER-1")]

        with patch.object(import_issues, "get_config", return_value=_config()):
            import_issues.main(
                ["--jql", "project = OTHER", "--project", "other", "--prefix", "bd"]
            )

        mock_client.search_issues.assert_called_once_with("project = OTHER", "all")
        assert mock_client.client_cls.call_args.args[0].project == "OTHER"
        line = json.loads(capsys.readouterr().out.splitlines()[0])
        assert line["id"].startswith("bd-")


class TestCheck:
    def test_check_success(self, mock_client, capsys):
        mock_client.test_connection.return_value = {
            "success": True,
            "user": "Test User",
            "error": None,
        }

        with patch.object(import_issues, "get_config", return_value=_config()):
            exit_code = import_issues.main(["--check"])

        assert exit_code == 0
        assert "Connected to Jira Cloud" in capsys.readouterr().out
        mock_client.search_issues.assert_not_called()

    def test_check_failure(self, mock_client, capsys):
        mock_client.test_connection.return_value = {
            "success": False,
            "user": None,
            "error": "Jira API error 401",
        }

        with patch.object(import_issues, "get_config", return_value=_config()):
            exit_code = import_issues.main(["--check"])

        assert exit_code == 1
        assert "401" in capsys.readouterr().err


class TestFailures:
    def test_config_load_failure(self, capsys):
        with patch.object(
            import_issues, "get_config", side_effect=ValueError("bad JIRA_STATE")
        ):
            assert import_issues.main([]) == 1
        assert "Failed to load configuration" in capsys.readouterr().err

    def test_missing_token(self, capsys):
        with patch.object(import_issues, "get_config", return_value=_config(api_token="")):
            assert import_issues.main([]) == 1
        assert "token is required" in capsys.readouterr().err

    def test_api_error(self, mock_client, capsys):
        mock_client.search_issues.side_effect = APIError(403, hint="Access forbidden.")

        with patch.object(import_issues, "get_config", return_value=_config()):
            assert import_issues.main([]) == 1

        captured = capsys.readouterr()
        assert "Jira API error 403" in captured.err
        assert captured.out == ""

    def test_query_error(self, mock_client):
        mock_client.search_issues.side_effect = ConfigError("either project or JQL query is required")

        with patch.object(import_issues, "get_config", return_value=_config()):
            assert import_issues.main([]) == 1

    def test_conversion_error_writes_nothing(self, mock_client, capsys):
        bad = RawIssue.model_validate(
            {"key": "PROJ-2", "fields": {"created": "garbage", "updated": "garbage"}}
        )
        mock_client.search_issues.return_value = [_raw("PROJ-1"), bad]

        with patch.object(import_issues, "get_config", return_value=_config()):
            assert import_issues.main([]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "garbage" in captured.err
