"""
Configuration for Quality Checker Agent
Builds a single immutable configuration from environment variables (and .env files)
"""

import os
import logging
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, ValidationError
from dotenv import load_dotenv

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_OPEN_ROUTER_API_URL = "https://openrouter.ai/api/v1"

# Values that must be present before any external call is made
REQUIRED_VARIABLES = [
    "REPORT_FILE_PATH",
    "OPEN_ROUTER_MODEL",
    "OPEN_ROUTER_API_KEY",
    "JIRA_URL_OUTPUT",
    "JIRA_EMAIL_OUTPUT",
    "JIRA_API_TOKEN_OUTPUT",
    "JIRA_SPACE_KEY_OUTPUT",
    "GITHUB_OWNER",
    "GITHUB_REPO",
    "GITHUB_ISSUE_NUMBER",
]

# Values the unit test generator needs; it publishes no report page
TEST_GENERATOR_REQUIRED_VARIABLES = [
    "OPEN_ROUTER_MODEL",
    "OPEN_ROUTER_API_KEY",
    "JIRA_URL",
    "JIRA_EMAIL",
    "JIRA_API_TOKEN",
    "GITHUB_OWNER",
    "GITHUB_REPO",
    "GITHUB_ISSUE_NUMBER",
]


class AgentConfig(BaseModel):
    """Immutable run configuration, created once and passed to every component"""
    model_config = {"frozen": True, "protected_namespaces": ()}

    # Ticket tracker (input)
    jira_url: str = Field(default="")
    jira_email: str = Field(default="")
    jira_api_token: str = Field(default="")
    jira_project_key: str = Field(default="")
    jira_ticket_id: Optional[str] = Field(default=None)

    # Documentation system (output)
    jira_url_output: str = Field(default="")
    jira_email_output: str = Field(default="")
    jira_api_token_output: str = Field(default="")
    jira_space_key_output: str = Field(default="")

    # Model gateway
    open_router_api_key: Optional[str] = Field(default=None)
    open_router_api_url: str = Field(default=DEFAULT_OPEN_ROUTER_API_URL)
    model_names: Tuple[str, ...] = Field(default=())
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    max_retries: int = Field(default=2, ge=0)
    request_timeout: Optional[float] = Field(default=None, gt=0)
    model_call_delay_seconds: float = Field(default=60.0, ge=0.0)

    # Version-control host
    github_token: Optional[str] = Field(default=None)
    github_owner: str
    github_repo: str
    github_issue_number: int = Field(gt=0)
    github_api_url: str = Field(default="https://api.github.com")

    # Report and prompt inputs
    report_file_path: str = Field(default="")
    report_source_root: str = Field(default="src")
    report_build_root: str = Field(default="dist")
    report_source_extension: str = Field(default=".ts")
    use_for: str = Field(default="")
    project_document_path: Optional[str] = Field(default=None)
    project_document_page_id: Optional[str] = Field(default=None)
    user_prompt_path: Optional[str] = Field(default=None)
    summarize_prompt_path: Optional[str] = Field(default=None)
    prompt_debug_path: str = Field(default="prompt.txt")

    # Unit test generation
    project_root: str = Field(default=".")
    generated_tests_dir: str = Field(default="generated-tests")
    test_prompt_debug_path: str = Field(default="test-generation-prompt.txt")
    github_base_branch: str = Field(default="main")
    create_test_pull_request: bool = Field(default=True)

    report_timezone: str = Field(default="Asia/Kolkata")
    http_timeout: Optional[float] = Field(default=30.0, gt=0)

    @property
    def index_key(self) -> str:
        """Name of the document index shared by every model call"""
        return f"{self.jira_project_key}-index"

    @property
    def test_index_key(self) -> str:
        """Name of the document index used by test generation"""
        return f"{self.jira_project_key}-test-gen"

    @property
    def pull_request_url(self) -> str:
        return f"https://github.com/{self.github_owner}/{self.github_repo}/pull/{self.github_issue_number}"

    def masked_api_key(self) -> str:
        key = self.open_router_api_key or ""
        return "..." + key[-10:] if len(key) > 10 else "NOT_SET"


def parse_model_names(raw: str) -> Tuple[str, ...]:
    """
    Split the comma-separated model list, trimming every entry.
    Order and duplicates are kept; blank entries are dropped.
    """
    return tuple(name.strip() for name in raw.split(",") if name.strip())


def load_environment_files(app_env: Optional[str] = None) -> None:
    """
    Load .env then .env.<APP_ENV> (the latter overrides)

    Args:
        app_env: Environment name, defaults to the APP_ENV variable
    """
    if os.path.exists(".env"):
        logger.info("Loading environment variables from .env")
        load_dotenv(".env")

    app_env = app_env or os.getenv("APP_ENV")
    env_specific_path = f".env.{app_env}" if app_env else None
    if env_specific_path and os.path.exists(env_specific_path):
        logger.info(f"Loading environment-specific variables from {env_specific_path}")
        load_dotenv(env_specific_path, override=True)


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def _optional_float(name: str) -> Optional[float]:
    value = _optional(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{value}'")


def _flag(name: str, default: bool) -> bool:
    value = _optional(name)
    if value is None:
        return default
    if value.lower() in ("1", "true", "yes", "on"):
        return True
    if value.lower() in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be true or false, got '{value}'")


def get_agent_config(required_variables: Optional[List[str]] = None) -> AgentConfig:
    """
    Get and validate configuration from environment variables

    Args:
        required_variables: Variables that must be set, defaults to the quality checker's

    Returns:
        AgentConfig: Validated, immutable configuration

    Raises:
        ConfigurationError: If a required variable is missing or malformed
    """
    required = REQUIRED_VARIABLES if required_variables is None else required_variables
    missing: List[str] = [name for name in required if not os.getenv(name, "").strip()]
    if missing:
        raise ConfigurationError(
            "Missing required configuration:\n"
            + "\n".join(f"  - {name}" for name in missing)
            + "\n\nPlease configure these variables in your repository settings."
        )

    model_names = parse_model_names(os.getenv("OPEN_ROUTER_MODEL", ""))
    if not model_names:
        raise ConfigurationError("OPEN_ROUTER_MODEL does not name any model.")

    issue_number = os.getenv("GITHUB_ISSUE_NUMBER", "").strip()
    if not issue_number.isdigit():
        raise ConfigurationError(f"GITHUB_ISSUE_NUMBER must be a pull request number, got '{issue_number}'")

    max_tokens = _optional("LLM_MAX_TOKENS")
    if max_tokens is not None and not max_tokens.isdigit():
        raise ConfigurationError(f"LLM_MAX_TOKENS must be an integer, got '{max_tokens}'")
    max_retries = os.getenv("LLM_MAX_RETRIES", "2").strip()
    if not max_retries.isdigit():
        raise ConfigurationError(f"LLM_MAX_RETRIES must be an integer, got '{max_retries}'")

    delay = _optional_float("MODEL_CALL_DELAY_SECONDS")
    temperature = _optional_float("LLM_TEMPERATURE")

    values = dict(
        jira_url=os.getenv("JIRA_URL", "").rstrip("/"),
        jira_email=os.getenv("JIRA_EMAIL", ""),
        jira_api_token=os.getenv("JIRA_API_TOKEN", ""),
        jira_project_key=os.getenv("JIRA_PROJECT_KEY", ""),
        jira_ticket_id=_optional("JIRA_TICKET_ID"),
        jira_url_output=os.getenv("JIRA_URL_OUTPUT", "").strip().rstrip("/"),
        jira_email_output=os.getenv("JIRA_EMAIL_OUTPUT", "").strip(),
        jira_api_token_output=os.getenv("JIRA_API_TOKEN_OUTPUT", "").strip(),
        jira_space_key_output=os.getenv("JIRA_SPACE_KEY_OUTPUT", "").strip(),
        open_router_api_key=_optional("OPEN_ROUTER_API_KEY"),
        open_router_api_url=os.getenv("OPEN_ROUTER_API_URL") or DEFAULT_OPEN_ROUTER_API_URL,
        model_names=model_names,
        temperature=0.1 if temperature is None else temperature,
        max_tokens=int(max_tokens) if max_tokens else None,
        max_retries=int(max_retries),
        request_timeout=_optional_float("LLM_TIMEOUT"),
        model_call_delay_seconds=60.0 if delay is None else delay,
        github_token=_optional("GITHUB_TOKEN"),
        github_owner=os.getenv("GITHUB_OWNER", "").strip(),
        github_repo=os.getenv("GITHUB_REPO", "").strip(),
        github_issue_number=int(issue_number),
        github_api_url=os.getenv("GITHUB_API_URL") or "https://api.github.com",
        report_file_path=os.getenv("REPORT_FILE_PATH", "").strip(),
        report_source_root=os.getenv("REPORT_SOURCE_ROOT") or "src",
        report_build_root=os.getenv("REPORT_BUILD_ROOT") or "dist",
        report_source_extension=os.getenv("REPORT_SOURCE_EXTENSION") or ".ts",
        use_for=os.getenv("USE_FOR", ""),
        project_document_path=_optional("PROJECT_DOCUMENT_PATH"),
        project_document_page_id=_optional("PROJECT_DOCUMENT_PAGE_ID"),
        user_prompt_path=_optional("USER_PROMPT_PATH"),
        summarize_prompt_path=_optional("SUMMARIZE_PROMPT_PATH"),
        prompt_debug_path=os.getenv("PROMPT_DEBUG_PATH") or "prompt.txt",
        report_timezone=os.getenv("REPORT_TIMEZONE") or "Asia/Kolkata",
        http_timeout=_optional_float("HTTP_TIMEOUT") or 30.0,
        project_root=os.getenv("PROJECT_ROOT") or ".",
        generated_tests_dir=os.getenv("GENERATED_TESTS_DIR") or "generated-tests",
        test_prompt_debug_path=os.getenv("TEST_PROMPT_DEBUG_PATH") or "test-generation-prompt.txt",
        github_base_branch=os.getenv("GITHUB_BASE_BRANCH") or "main",
        create_test_pull_request=_flag("CREATE_TEST_PULL_REQUEST", default=True),
    )

    try:
        return AgentConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def setup_langsmith() -> None:
    """
    Configure LangSmith for LLM observability and monitoring

    Environment variables required:
    - LANGCHAIN_API_KEY: LangSmith API key
    - LANGCHAIN_PROJECT: Project name (optional, defaults to 'quality-checker-agent')
    """
    langchain_api_key = os.getenv("LANGCHAIN_API_KEY")

    if langchain_api_key:
        os.environ["LANGCHAIN_TRACING_V2"] = "true"
        if not os.getenv("LANGCHAIN_PROJECT"):
            os.environ["LANGCHAIN_PROJECT"] = "quality-checker-agent"
        logger.info(f"✅ LangSmith enabled for project: {os.getenv('LANGCHAIN_PROJECT')}")
    else:
        logger.debug("LangSmith not configured - set LANGCHAIN_API_KEY to enable tracing")


def setup_logging(level: str = "INFO") -> None:
    """
    Setup logging configuration for the application

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if level.upper() == "DEBUG":
        logging.getLogger("quality_agent").setLevel(logging.DEBUG)
        logging.getLogger("langchain").setLevel(logging.INFO)
    else:
        # Keep third-party clients quiet during normal runs
        logging.getLogger("langchain").setLevel(logging.WARNING)
        logging.getLogger("openai").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


__all__ = [
    "AgentConfig",
    "REQUIRED_VARIABLES",
    "TEST_GENERATOR_REQUIRED_VARIABLES",
    "get_agent_config",
    "load_environment_files",
    "parse_model_names",
    "setup_langsmith",
    "setup_logging",
]
