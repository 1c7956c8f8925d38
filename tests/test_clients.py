import asyncio
import base64
import json

import httpx
import pytest

from conftest import make_config
from quality_agent.clients import (
    ConfluenceClient,
    GitHubClient,
    JiraClient,
    ProjectDocumentSource,
    create_project_document_source
)
from quality_agent.clients.jira_client import adf_to_text


def test_get_changed_files_paginates():
    pages = {
        "1": [{"filename": f"src/file{i}.ts"} for i in range(100)],
        "2": [{"filename": "src/last.ts"}, {"filename": ""}],
    }
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=pages[request.url.params["page"]])

    client = GitHubClient(make_config(), transport=httpx.MockTransport(handler))
    files = asyncio.run(client.get_changed_files())

    assert len(files) == 101
    assert files[-1] == "src/last.ts"
    assert seen[0].url.path == "/repos/acme/shop/pulls/42/files"
    assert seen[0].headers["Authorization"] == "token gh-token"


def test_create_or_update_comment_updates_marked_comment():
    requests = []

    def handler(request):
        requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json=[
                {"id": 1, "body": "unrelated"},
                {"id": 7, "body": "## Quality Checker Overview\nold"},
            ])
        return httpx.Response(200, json={"id": 7, "html_url": "https://github.com/acme/shop/pull/42#issuecomment-7"})

    client = GitHubClient(make_config(), transport=httpx.MockTransport(handler))
    comment = asyncio.run(client.create_or_update_comment("new body", marker="Quality Checker Overview"))

    assert requests[-1].method == "PATCH"
    assert requests[-1].url.path == "/repos/acme/shop/issues/comments/7"
    assert json.loads(requests[-1].content) == {"body": "new body"}
    assert comment["id"] == 7


def test_create_or_update_comment_creates_when_no_marked_comment():
    requests = []

    def handler(request):
        requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json=[])
        return httpx.Response(201, json={"id": 9, "html_url": "https://github.com/acme/shop/pull/42#issuecomment-9"})

    client = GitHubClient(make_config(), transport=httpx.MockTransport(handler))
    asyncio.run(client.create_or_update_comment("body", marker="Quality Checker Overview"))

    assert requests[-1].method == "POST"
    assert requests[-1].url.path == "/repos/acme/shop/issues/42/comments"


def test_comment_http_error_is_raised():
    client = GitHubClient(make_config(), transport=httpx.MockTransport(lambda request: httpx.Response(403)))

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.create_or_update_comment("body"))


def test_jira_ticket_id_from_config_or_pull_request():
    def handler(request):
        return httpx.Response(200, json={"title": "Cart totals", "head": {"ref": "feature/proj-12-cart"}})

    github = GitHubClient(make_config(), transport=httpx.MockTransport(handler))

    assert asyncio.run(JiraClient(make_config(jira_ticket_id="PROJ-1")).get_ticket_id()) == "PROJ-1"
    assert asyncio.run(JiraClient(make_config(), github_client=github).get_ticket_id()) == "PROJ-12"


def test_jira_ticket_id_not_found():
    def handler(request):
        return httpx.Response(200, json={"title": "No key", "head": {"ref": "main"}})

    github = GitHubClient(make_config(), transport=httpx.MockTransport(handler))

    with pytest.raises(ValueError):
        asyncio.run(JiraClient(make_config(), github_client=github).get_ticket_id())


def test_jira_get_ticket():
    def handler(request):
        assert request.url.path == "/rest/api/3/issue/PROJ-7"
        assert request.headers["Authorization"].startswith("Basic ")
        return httpx.Response(200, json={"key": "PROJ-7", "fields": {"summary": "Cart totals"}})

    client = JiraClient(make_config(), transport=httpx.MockTransport(handler))
    ticket = asyncio.run(client.get_ticket("PROJ-7"))

    assert ticket.id == "PROJ-7"
    assert ticket.title == "Cart totals"


def test_confluence_create_page():
    def handler(request):
        payload = json.loads(request.content)
        assert payload["space"] == {"key": "QA"}
        assert payload["body"]["storage"]["representation"] == "storage"
        return httpx.Response(200, json={"id": "555", "title": payload["title"]})

    client = ConfluenceClient("https://docs.example.net/", "bot@example.net", "token", space_key="QA",
                              transport=httpx.MockTransport(handler))
    page = asyncio.run(client.create_page("PROJ-7 report", "<b>body</b>"))

    assert page.page_id == "555"
    assert page.url == "https://docs.example.net/wiki/spaces/QA/pages/555/PROJ-7%20report"


def test_confluence_page_text_strips_markup():
    def handler(request):
        return httpx.Response(200, json={"body": {"storage": {"value": "<h1>Cart</h1><p>Totals &amp; tax</p>"}}})

    client = ConfluenceClient("https://docs.example.net", "bot@example.net", "token",
                              transport=httpx.MockTransport(handler))

    assert asyncio.run(client.get_page_text("1")) == "Cart Totals & tax"


def test_project_document_file_wins(tmp_path):
    path = tmp_path / "docs.md"
    path.write_text("Project docs", encoding="utf-8")

    source = create_project_document_source(make_config(project_document_path=str(path), project_document_page_id="9"))

    assert asyncio.run(source.get_project_document()) == "Project docs"


def test_project_document_missing_configuration_is_empty():
    assert asyncio.run(ProjectDocumentSource().get_project_document()) == ""


def test_jira_get_ticket_details_renders_description():
    description = {
        "type": "doc",
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": "As a shopper I want totals So that I can pay"}]},
            {"type": "orderedList", "content": [
                {"type": "listItem", "content": [
                    {"type": "paragraph", "content": [{"type": "text", "text": "Totals include tax"}]}
                ]},
                {"type": "listItem", "content": [
                    {"type": "paragraph", "content": [{"type": "text", "text": "Shipping is free over 50"}]}
                ]},
            ]},
            {"type": "taskList", "content": [
                {"type": "taskItem", "attrs": {"state": "DONE"}, "content": [{"type": "text", "text": "Empty cart shows 0"}]},
            ]},
        ],
    }

    def handler(request):
        assert request.url.params["fields"] == "summary,description,issuetype,priority"
        return httpx.Response(200, json={"key": "PROJ-7", "fields": {
            "summary": "Cart totals",
            "description": description,
            "issuetype": {"name": "Bug"},
            "priority": None,
        }})

    client = JiraClient(make_config(), transport=httpx.MockTransport(handler))
    ticket = asyncio.run(client.get_ticket_details("PROJ-7"))

    assert ticket.title == "Cart totals"
    assert ticket.issue_type == "Bug"
    assert ticket.priority == "Medium"
    assert ticket.description == (
        "As a shopper I want totals So that I can pay\n"
        "1. Totals include tax\n"
        "2. Shipping is free over 50\n"
        "- [x] Empty cart shows 0"
    )


def test_adf_to_text_passes_plain_strings():
    assert adf_to_text("plain description") == "plain description"
    assert adf_to_text(None) == ""


def test_confluence_search_text():
    def handler(request):
        assert request.url.path == "/wiki/rest/api/content/search"
        assert request.url.params["cql"] == 'type = page AND text ~ "PROJ-7"'
        return httpx.Response(200, json={"results": [
            {"title": "Cart", "body": {"storage": {"value": "<p>Totals</p>"}}},
            {"title": "Tax", "body": {"storage": {"value": "<p>Rates</p>"}}},
        ]})

    client = ConfluenceClient("https://tracker.example.net", "bot@example.net", "token",
                              transport=httpx.MockTransport(handler))

    assert asyncio.run(client.search_text('type = page AND text ~ "PROJ-7"')) == "# Cart\nTotals\n\n# Tax\nRates"


def test_put_file_updates_existing_file_with_its_sha():
    requests = []

    def handler(request):
        requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json={"sha": "old-sha"})
        return httpx.Response(200, json={"content": {"path": "generated-tests/a.spec.ts"}})

    client = GitHubClient(make_config(), transport=httpx.MockTransport(handler))
    asyncio.run(client.put_file("generated-tests/a.spec.ts", "it()", "Add tests", "test/PROJ-7-generated-tests"))

    payload = json.loads(requests[-1].content)
    assert requests[-1].method == "PUT"
    assert requests[-1].url.path == "/repos/acme/shop/contents/generated-tests/a.spec.ts"
    assert payload["sha"] == "old-sha"
    assert payload["branch"] == "test/PROJ-7-generated-tests"
    assert base64.b64decode(payload["content"]).decode("utf-8") == "it()"


def test_put_file_creates_missing_file():
    requests = []

    def handler(request):
        requests.append(request)
        if request.method == "GET":
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(201, json={"content": {}})

    client = GitHubClient(make_config(), transport=httpx.MockTransport(handler))
    asyncio.run(client.put_file("generated-tests/a.spec.ts", "it()", "Add tests", "branch"))

    assert "sha" not in json.loads(requests[-1].content)


def test_create_branch_tolerates_existing_branch():
    def handler(request):
        if request.url.path.endswith("/git/ref/heads/main"):
            return httpx.Response(200, json={"object": {"sha": "abc1234"}})
        return httpx.Response(422, json={"message": "Reference already exists"})

    client = GitHubClient(make_config(), transport=httpx.MockTransport(handler))
    sha = asyncio.run(client.get_branch_sha("main"))

    assert sha == "abc1234"
    assert asyncio.run(client.create_branch("test/PROJ-7-generated-tests", sha)) is False


def test_create_pull_request():
    def handler(request):
        payload = json.loads(request.content)
        assert request.url.path == "/repos/acme/shop/pulls"
        assert payload == {"title": "t", "head": "feature", "base": "main", "body": "b"}
        return httpx.Response(201, json={"html_url": "https://github.com/acme/shop/pull/43"})

    client = GitHubClient(make_config(), transport=httpx.MockTransport(handler))
    pull_request = asyncio.run(client.create_pull_request("t", "feature", "main", "b"))

    assert pull_request["html_url"] == "https://github.com/acme/shop/pull/43"
