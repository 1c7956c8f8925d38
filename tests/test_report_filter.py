import json

import pytest

from quality_agent.errors import ReportUnavailable
from quality_agent.quality_checker.report_filter import filter_report, normalize_changed_path


def write_report(tmp_path, content):
    path = tmp_path / "ut-results.json"
    path.write_text(content, encoding="utf-8")
    return str(path)


def test_normalize_changed_path_replaces_first_occurrence_only():
    assert normalize_changed_path("src/app/src/x.ts", "src", "dist", ".ts") == "dist/app/src/x"
    assert normalize_changed_path("lib/a.ts.ts", "src", "dist", ".ts") == "lib/a.ts"


def test_filter_selects_and_rekeys_matching_entries(tmp_path):
    report = {"dist/app/a.spec.js": ["t1"], "dist/app/b.spec.js": ["t2"]}
    path = write_report(tmp_path, json.dumps(report))

    result = filter_report(["src/app/a.spec.ts"], path)

    assert json.loads(result) == {"a.spec.js": ["t1"]}
    assert result == json.dumps({"a.spec.js": ["t1"]}, indent=2)


def test_filter_with_no_changed_files_returns_raw_content(tmp_path):
    raw = '{"dist/x.js": ["t"]}'
    path = write_report(tmp_path, raw)

    assert filter_report([], path) == raw


def test_filter_with_no_changed_files_tolerates_non_json(tmp_path):
    path = write_report(tmp_path, "not json at all")

    assert filter_report([], path) == "not json at all"


def test_filter_without_matches_returns_raw_content(tmp_path):
    raw = json.dumps({"dist/app/a.spec.js": ["t1"]})
    path = write_report(tmp_path, raw)

    assert filter_report(["src/other/z.ts"], path) == raw


def test_filter_later_matches_overwrite_same_file_name(tmp_path):
    report = {"dist/one/a.js": ["first"], "dist/two/a.js": ["second"]}
    path = write_report(tmp_path, json.dumps(report))

    result = json.loads(filter_report(["one/a", "two/a"], path))

    assert result == {"a.js": ["second"]}


def test_filtered_keys_come_from_matching_raw_keys(tmp_path):
    report = {
        "dist/cart/cart.service.spec.js": {"adds items": "ok"},
        "dist/cart/cart.component.spec.js": {"renders": "ok"},
        "dist/user/user.service.spec.js": {"logs in": "ok"},
    }
    path = write_report(tmp_path, json.dumps(report))

    result = json.loads(filter_report(["src/cart/cart.service.ts", "src/user/user.service.ts"], path))

    assert set(result) == {"cart.service.spec.js", "user.service.spec.js"}
    assert result["cart.service.spec.js"] == {"adds items": "ok"}


def test_filter_missing_file_raises_report_unavailable(tmp_path):
    with pytest.raises(ReportUnavailable):
        filter_report(["src/a.ts"], str(tmp_path / "missing.json"))


def test_filter_invalid_json_raises_report_unavailable(tmp_path):
    path = write_report(tmp_path, "{broken")

    with pytest.raises(ReportUnavailable):
        filter_report(["src/a.ts"], path)


def test_filter_uses_configured_roots(tmp_path):
    report = {"build/lib/a.test.mjs": ["t"]}
    path = write_report(tmp_path, json.dumps(report))

    result = filter_report(["lib/a.js"], path, source_root="lib", build_root="build/lib", source_extension=".js")

    assert json.loads(result) == {"a.test.mjs": ["t"]}


def test_raw_content_keeps_crlf_line_endings(tmp_path):
    raw = b'{\r\n  "dist/app/a.spec.js": ["t1"]\r\n}\r\n'
    path = tmp_path / "ut-results.json"
    path.write_bytes(raw)

    assert filter_report([], str(path)).encode("utf-8") == raw
    assert filter_report(["src/other/z.ts"], str(path)).encode("utf-8") == raw
