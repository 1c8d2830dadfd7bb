"""jira-import - read-only ingestion of Jira issues.

Fetches issues from the Jira REST API and converts them into a normalized
internal issue representation:
- Paginated, authenticated search client (Cloud and Server/DC)
- Atlassian Document Format (ADF) to plain text extraction
- Converter onto a fixed status / type / priority vocabulary

Python Version: 3.10+ required
"""

from .__version__ import __version__
from .adf_converter import adf_to_text
from .client import ConnectionConfig, JiraClient
from .config import JiraImportConfig, get_config, reset_config
from .converter import (
    Converter,
    ConverterConfig,
    extract_key_from_url,
    parse_timestamp,
)
from .errors import (
    APIError,
    ConfigError,
    ConversionError,
    DeadlineExceeded,
    DecodeError,
    IDGenerationError,
    JiraClientError,
    JiraImportError,
    ParseError,
)
from .logging_config import StructuredFormatter, configure_logging
from .models import InternalIssue, IssueDependency, IssueType, Status
from .schema import RawIssue, RawIssueFields

__all__ = [
    "APIError",
    "ConfigError",
    "ConnectionConfig",
    "ConversionError",
    "Converter",
    "ConverterConfig",
    "DeadlineExceeded",
    "DecodeError",
    "IDGenerationError",
    "InternalIssue",
    "IssueDependency",
    "IssueType",
    "JiraClient",
    "JiraClientError",
    "JiraImportConfig",
    "JiraImportError",
    "ParseError",
    "RawIssue",
    "RawIssueFields",
    "Status",
    "StructuredFormatter",
    "__version__",
    "adf_to_text",
    "configure_logging",
    "extract_key_from_url",
    "get_config",
    "parse_timestamp",
    "reset_config",
]
