import asyncio

import pytest

from quality_agent.quality_checker.main import is_error_response, main, run_quality_checker


def test_missing_configuration_is_returned_as_message(clean_env, tmp_path):
    clean_env.chdir(tmp_path)

    response = asyncio.run(run_quality_checker())

    assert response.startswith("❌ ENV_NOT_SET:")
    assert is_error_response(response)


def test_cli_writes_result_and_fails_on_error(clean_env, tmp_path):
    clean_env.chdir(tmp_path)
    output = tmp_path / "result.txt"

    with pytest.raises(SystemExit) as excinfo:
        asyncio.run(main(["--output", str(output), "--fail-on-error"]))

    assert excinfo.value.code == 1
    assert output.read_text(encoding="utf-8").startswith("❌ ENV_NOT_SET:")


def test_cli_without_fail_on_error_exits_normally(clean_env, tmp_path):
    clean_env.chdir(tmp_path)

    asyncio.run(main(["--output", str(tmp_path / "result.txt")]))

    assert (tmp_path / "result.txt").exists()
