import pytest

from quality_agent.config.agent_config import AgentConfig, REQUIRED_VARIABLES, TEST_GENERATOR_REQUIRED_VARIABLES
from quality_agent.models.quality_models import PageReference, TicketDetailsModel, TicketModel


def make_config(**overrides) -> AgentConfig:
    values = dict(
        jira_url="https://tracker.example.net",
        jira_email="bot@example.net",
        jira_api_token="jira-token",
        jira_project_key="PROJ",
        jira_url_output="https://docs.example.net",
        jira_email_output="bot@example.net",
        jira_api_token_output="docs-token",
        jira_space_key_output="QA",
        open_router_api_key="sk-or-0123456789abcdef",
        model_names=("gpt-x",),
        model_call_delay_seconds=0.0,
        github_token="gh-token",
        github_owner="acme",
        github_repo="shop",
        github_issue_number=42,
        report_file_path="coverage/ut-results.json",
        use_for="Unit tests",
    )
    values.update(overrides)
    return AgentConfig(**values)


class FakeLLMClient:
    """Records calls; responses are looked up per model name"""

    def __init__(self, responses=None, summaries=None, failing_models=()):
        self.responses = responses or {}
        self.summaries = summaries or {}
        self.failing_models = set(failing_models)
        self.calls = []
        self.documents = []

    async def add_document(self, index_name, document):
        self.documents.append((index_name, document))

    async def generate(self, model_name, index_name, prompt):
        self.calls.append(("generate", model_name))
        if model_name in self.failing_models:
            raise RuntimeError("429 Too Many Requests: rate limit exceeded")
        return self.responses.get(model_name, f"Assessment by {model_name}")

    async def make_call_to_model(self, model_name, text, prompt):
        self.calls.append(("summarize", model_name))
        return self.summaries.get(model_name, '{"summary": "Fine", "score": 7}')


class FakeDocumentationClient:
    def __init__(self, error=None):
        self.error = error
        self.pages = []

    async def create_page(self, title, body):
        self.pages.append((title, body))
        if self.error:
            raise self.error
        return PageReference(page_id="321", page_title=title, url="https://docs.example.net/wiki/spaces/QA/pages/321")


class FakeGitHubClient:
    def __init__(self, changed_files=None, changed_files_error=None, comment_error=None, pull_request_error=None):
        self.changed_files = changed_files or []
        self.changed_files_error = changed_files_error
        self.comment_error = comment_error
        self.pull_request_error = pull_request_error
        self.comments = []
        self.branches = []
        self.files = {}
        self.pull_requests = []

    async def get_changed_files(self):
        if self.changed_files_error:
            raise self.changed_files_error
        return list(self.changed_files)

    async def create_or_update_comment(self, body, marker=None):
        if self.comment_error:
            raise self.comment_error
        self.comments.append((body, marker))
        return {"id": 1, "html_url": "https://github.com/acme/shop/pull/42#issuecomment-1"}

    async def get_branch_sha(self, branch):
        return "abc1234def"

    async def create_branch(self, branch, sha):
        self.branches.append((branch, sha))
        return True

    async def put_file(self, path, content, message, branch):
        self.files[path] = (content, branch)
        return {"content": {"path": path}}

    async def create_pull_request(self, title, head, base, body):
        if self.pull_request_error:
            raise self.pull_request_error
        self.pull_requests.append((title, head, base, body))
        return {"number": 43, "html_url": "https://github.com/acme/shop/pull/43"}


class FakeJiraClient:
    def __init__(self, title="Add {cart} totals", error=None, description="", details_error=None):
        self.title = title
        self.error = error
        self.description = description
        self.details_error = details_error

    async def get_ticket_id(self):
        return "PROJ-7"

    async def get_ticket(self, ticket_id):
        if self.error:
            raise self.error
        return TicketModel(id=ticket_id, title=self.title)

    async def get_ticket_details(self, ticket_id):
        if self.details_error:
            raise self.details_error
        return TicketDetailsModel(id=ticket_id, title=self.title, description=self.description, issue_type="Story", priority="High")


class FakeDocumentSource:
    def __init__(self, document="The cart shows totals including tax.", error=None):
        self.document = document
        self.error = error

    async def get_project_document(self):
        if self.error:
            raise self.error
        return self.document


@pytest.fixture
def clean_env(monkeypatch):
    for name in REQUIRED_VARIABLES + TEST_GENERATOR_REQUIRED_VARIABLES + [
        "JIRA_TICKET_ID", "MODEL_CALL_DELAY_SECONDS", "LLM_TEMPERATURE", "LLM_MAX_TOKENS",
        "LLM_MAX_RETRIES", "LLM_TIMEOUT", "HTTP_TIMEOUT", "APP_ENV", "LANGCHAIN_API_KEY",
        "PROJECT_ROOT", "GENERATED_TESTS_DIR", "TEST_PROMPT_DEBUG_PATH", "GITHUB_BASE_BRANCH",
        "CREATE_TEST_PULL_REQUEST",
    ]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def required_env(clean_env):
    clean_env.setenv("REPORT_FILE_PATH", "coverage/ut-results.json")
    clean_env.setenv("OPEN_ROUTER_MODEL", "gpt-x, claude-y ,")
    clean_env.setenv("OPEN_ROUTER_API_KEY", "sk-or-0123456789abcdef")
    clean_env.setenv("JIRA_URL_OUTPUT", "https://docs.example.net/")
    clean_env.setenv("JIRA_EMAIL_OUTPUT", "bot@example.net")
    clean_env.setenv("JIRA_API_TOKEN_OUTPUT", "docs-token")
    clean_env.setenv("JIRA_SPACE_KEY_OUTPUT", "QA")
    clean_env.setenv("GITHUB_OWNER", "acme")
    clean_env.setenv("GITHUB_REPO", "shop")
    clean_env.setenv("GITHUB_ISSUE_NUMBER", "42")
    return clean_env
