import os

import pytest
from pydantic import ValidationError

from conftest import make_config
from quality_agent.config.agent_config import (
    TEST_GENERATOR_REQUIRED_VARIABLES,
    get_agent_config,
    load_environment_files,
    parse_model_names
)
from quality_agent.errors import ConfigurationError


def test_parse_model_names_trims_and_keeps_duplicates():
    assert parse_model_names(" a, b ,a,, ") == ("a", "b", "a")
    assert parse_model_names("") == ()


def test_get_agent_config_from_environment(required_env):
    config = get_agent_config()

    assert config.model_names == ("gpt-x", "claude-y")
    assert config.github_issue_number == 42
    assert config.jira_url_output == "https://docs.example.net"
    assert config.model_call_delay_seconds == 60.0
    assert config.report_timezone == "Asia/Kolkata"
    assert config.prompt_debug_path == "prompt.txt"
    assert config.pull_request_url == "https://github.com/acme/shop/pull/42"


def test_missing_variables_are_all_listed(clean_env):
    clean_env.setenv("OPEN_ROUTER_MODEL", "gpt-x")

    with pytest.raises(ConfigurationError) as excinfo:
        get_agent_config()

    message = str(excinfo.value)
    assert message.startswith("❌ ENV_NOT_SET:")
    assert "REPORT_FILE_PATH" in message
    assert "GITHUB_ISSUE_NUMBER" in message
    assert "OPEN_ROUTER_MODEL" not in message


def test_issue_number_must_be_integer(required_env):
    required_env.setenv("GITHUB_ISSUE_NUMBER", "abc")

    with pytest.raises(ConfigurationError):
        get_agent_config()


def test_model_list_of_blanks_is_rejected(required_env):
    required_env.setenv("OPEN_ROUTER_MODEL", " , ,")

    with pytest.raises(ConfigurationError):
        get_agent_config()


def test_zero_delay_and_temperature_are_kept(required_env):
    required_env.setenv("MODEL_CALL_DELAY_SECONDS", "0")
    required_env.setenv("LLM_TEMPERATURE", "0")

    config = get_agent_config()

    assert config.model_call_delay_seconds == 0.0
    assert config.temperature == 0.0


def test_invalid_number_is_configuration_error(required_env):
    required_env.setenv("LLM_TEMPERATURE", "warm")

    with pytest.raises(ConfigurationError):
        get_agent_config()


def test_config_is_immutable():
    config = make_config()

    with pytest.raises(ValidationError):
        config.github_repo = "other"


def test_masked_api_key():
    assert make_config(open_router_api_key="sk-or-0123456789abcdef").masked_api_key() == "...6789abcdef"
    assert make_config(open_router_api_key="short").masked_api_key() == "NOT_SET"


def test_index_key():
    assert make_config(jira_project_key="SHOP").index_key == "SHOP-index"


def test_load_environment_files_override(clean_env, tmp_path):
    clean_env.chdir(tmp_path)
    for name in ("GITHUB_REPO", "GITHUB_OWNER"):
        # Recorded so the values loaded below are removed after the test
        clean_env.setenv(name, "unset")
        clean_env.delenv(name)
    (tmp_path / ".env").write_text("GITHUB_REPO=base\nGITHUB_OWNER=acme\n", encoding="utf-8")
    (tmp_path / ".env.ci").write_text("GITHUB_REPO=ci\n", encoding="utf-8")

    load_environment_files("ci")

    assert os.environ["GITHUB_REPO"] == "ci"
    assert os.environ["GITHUB_OWNER"] == "acme"


def test_generation_settings(required_env):
    required_env.setenv("CREATE_TEST_PULL_REQUEST", "false")
    required_env.setenv("PROJECT_ROOT", "web")

    config = get_agent_config()

    assert config.create_test_pull_request is False
    assert config.project_root == "web"
    assert config.generated_tests_dir == "generated-tests"
    assert config.github_base_branch == "main"


def test_invalid_flag_is_configuration_error(required_env):
    required_env.setenv("CREATE_TEST_PULL_REQUEST", "sometimes")

    with pytest.raises(ConfigurationError):
        get_agent_config()


def test_generator_config_skips_report_settings(clean_env):
    for name in TEST_GENERATOR_REQUIRED_VARIABLES:
        clean_env.setenv(name, "42" if name == "GITHUB_ISSUE_NUMBER" else "value")

    config = get_agent_config(TEST_GENERATOR_REQUIRED_VARIABLES)

    assert config.report_file_path == ""
    assert config.jira_url_output == ""
    assert config.model_names == ("value",)
