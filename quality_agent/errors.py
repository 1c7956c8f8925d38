"""
Error taxonomy for Quality Checker Agent
Every collaborator failure is normalized once into an ErrorInfo before any branching inspects it
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

# API sources used in error reports
SOURCE_JIRA = "Jira API"
SOURCE_CONFLUENCE = "Jira/Confluence API"
SOURCE_OPENROUTER = "OpenRouter AI API"
SOURCE_GITHUB = "GitHub API"
SOURCE_DOCUMENTS = "Project documentation"
SOURCE_REPORT = "Report file"
SOURCE_PROJECT = "Project workspace"

RATE_LIMIT_TEXT = re.compile(r"\b429\b|rate limit", re.IGNORECASE)


class ErrorKind(str, Enum):
    """Uniform classification of collaborator failures"""
    CONFIGURATION = "configuration"
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    REPORT_UNAVAILABLE = "report_unavailable"
    PARSE_ERROR = "parse_error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorInfo:
    """Normalized view of a failure raised by a collaborator"""
    kind: ErrorKind
    source: str
    message: str
    http_status: Optional[int] = None

    def describe(self) -> str:
        status = self.http_status if self.http_status is not None else "N/A"
        return f"{self.source} [{self.kind.value}, status {status}]: {self.message}"


class QualityAgentError(Exception):
    """Base class for errors raised by the agent"""

    def __init__(self, message: str, info: Optional[ErrorInfo] = None):
        super().__init__(message)
        self.message = message
        self.info = info


class ConfigurationError(QualityAgentError):
    """A required configuration value is missing or invalid"""

    code = "ENV_NOT_SET"

    def __str__(self) -> str:
        return f"❌ {self.code}: {self.message}"


class ReportUnavailable(QualityAgentError):
    """The report artifact could not be read or parsed"""


class GenerationFailure(QualityAgentError):
    """A model call failed; the whole run is aborted"""

    def __init__(self, model_name: str, info: ErrorInfo):
        super().__init__(f"Model '{model_name}' failed: {info.message}", info)
        self.model_name = model_name


class DocumentationPublishFailure(QualityAgentError):
    """The documentation page could not be created"""


class CommentPublishFailure(QualityAgentError):
    """The pull request comment could not be posted"""


class NoTestsGenerated(QualityAgentError):
    """No model response contained a usable test file"""

    code = "NO_TESTS_GENERATED"

    def __init__(self, message: str = "No tests were generated. Please check the JIRA ticket and documentation."):
        super().__init__(f"{self.code}: {message}")


def _status_from(exc: BaseException) -> Optional[int]:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    for attribute in ("status_code", "status"):
        value = getattr(exc, attribute, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None) or getattr(response, "status", None)
    return value if isinstance(value, int) else None


def normalize_error(exc: BaseException, source: str) -> ErrorInfo:
    """
    Normalize an exception raised by a collaborator

    Args:
        exc: The raised exception (httpx, openai, or any other shape)
        source: Name of the API or artifact that failed

    Returns:
        ErrorInfo: Uniform error description
    """
    if isinstance(exc, QualityAgentError) and exc.info is not None:
        return exc.info

    message = str(exc) or exc.__class__.__name__
    status = _status_from(exc)

    if isinstance(exc, ConfigurationError):
        kind = ErrorKind.CONFIGURATION
    elif isinstance(exc, ReportUnavailable):
        kind = ErrorKind.REPORT_UNAVAILABLE
    elif status == 429:
        kind = ErrorKind.RATE_LIMITED
    elif status == 401:
        kind = ErrorKind.UNAUTHORIZED
    elif status == 403:
        kind = ErrorKind.FORBIDDEN
    elif status == 404:
        kind = ErrorKind.NOT_FOUND
    elif status is not None and status >= 500:
        kind = ErrorKind.SERVER_ERROR
    elif status is None and RATE_LIMIT_TEXT.search(message):
        # SDK errors without a status only carry the code in their text
        kind = ErrorKind.RATE_LIMITED
    else:
        kind = ErrorKind.UNKNOWN

    return ErrorInfo(kind=kind, source=source, message=message, http_status=status)


_HINTS = {
    ErrorKind.RATE_LIMITED: "⚠️  RATE LIMIT ERROR (429) - wait a few minutes and try again, or check the API plan and credits",
    ErrorKind.UNAUTHORIZED: "⚠️  AUTHENTICATION ERROR (401) - check that the API token is valid",
    ErrorKind.FORBIDDEN: "⚠️  PERMISSION ERROR (403) - check that the user may perform this action",
    ErrorKind.NOT_FOUND: "⚠️  NOT FOUND ERROR (404) - check that the requested resource exists",
}


def log_error_info(info: ErrorInfo, context: str) -> None:
    """Log a normalized error with a remediation hint for well-known statuses"""
    logger.error(f"❌ {context}: {info.describe()}")
    hint = _HINTS.get(info.kind)
    if hint:
        logger.error(f"{hint} (source: {info.source})")


__all__ = [
    "ErrorKind",
    "ErrorInfo",
    "QualityAgentError",
    "ConfigurationError",
    "ReportUnavailable",
    "GenerationFailure",
    "DocumentationPublishFailure",
    "CommentPublishFailure",
    "NoTestsGenerated",
    "normalize_error",
    "log_error_info",
]
