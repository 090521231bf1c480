"""Tests for the command-line interface."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import respx
import structlog
from httpx import Response
from typer.testing import CliRunner

from commitresume import __version__
from commitresume.cli import app, git_provider
from commitresume.models import Settings
from commitresume.pipeline import ResumePipeline

runner = CliRunner()
API = "https://api.github.com"
COMMITS_URL = f"{API}/repos/octo/app/commits"

REPLY = json.dumps(
    {
        "bulletPoints": [
            {
                "text": "Implemented OAuth login for the customer portal",
                "actionVerb": "Implemented",
                "businessImpact": "Reduced sign-up friction",
                "confidence": 0.9,
            }
        ],
        "isTrivial": False,
    }
)


def listing_entry(sha, message="Implement feature"):
    return {
        "sha": sha,
        "html_url": f"https://github.com/octo/app/commit/{sha}",
        "commit": {
            "message": message,
            "author": {"name": "Octo Cat", "email": "octo@example.com", "date": "2024-01-15T10:30:00Z"},
            "committer": {"name": "Octo Cat", "email": "octo@example.com", "date": "2024-01-15T10:30:00Z"},
        },
        "author": {"login": "octocat"},
        "parents": [],
    }


DETAIL = {
    "stats": {"additions": 40, "deletions": 2, "total": 42},
    "files": [{"filename": "src/app.py", "status": "modified", "additions": 40, "deletions": 2, "changes": 42}],
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate settings from the developer environment."""
    monkeypatch.chdir(tmp_path)
    for name in ("GITHUB_TOKEN", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "LLM_PROVIDER"):
        monkeypatch.delenv(name, raising=False)
    yield
    structlog.reset_defaults()


@pytest.fixture
def synthesis_client():
    """Create mock synthesis client."""
    client = MagicMock()
    client.synthesize = AsyncMock(return_value=REPLY)
    client.synthesize_commit = AsyncMock(return_value=REPLY)
    client.provider.get_usage_stats = MagicMock(
        return_value={
            "total_tokens": {"input": 1200, "output": 340},
            "total_cost": 0.0087,
            "model": "claude-sonnet-4-20250514",
        }
    )
    return client


@pytest.fixture
def commits_file(tmp_path, raw_commit, trivial_raw_commit):
    """Write a JSON file of commits."""
    path = tmp_path / "commits.json"
    path.write_text(json.dumps([raw_commit(), trivial_raw_commit()]))
    return path


def test_version():
    """Test version command."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_generate_file(commits_file, synthesis_client, tmp_path):
    """Test generating bullets from a commit file."""
    output = tmp_path / "out" / "bullets.json"

    with patch("commitresume.cli.build_pipeline", return_value=ResumePipeline(synthesis_client)):
        result = runner.invoke(app, ["generate-file", str(commits_file), "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert "Development & Implementation" in result.output
    assert "Implemented OAuth login" in result.output
    assert "Input Tokens: 1,200" in result.output
    assert "Total Cost: $0.0087" in result.output

    payload = json.loads(output.read_text())
    assert payload["summary"]["total"] == 2
    assert payload["summary"]["trivial"] == 1
    assert payload["summary"]["bulletPointsGenerated"] == 1
    assert payload["groups"][0]["count"] == 1


def test_generate_file_accepts_commits_key(tmp_path, raw_commit, synthesis_client):
    """Test a {"commits": [...]} document is accepted."""
    path = tmp_path / "wrapped.json"
    path.write_text(json.dumps({"commits": [raw_commit()]}))

    with patch("commitresume.cli.build_pipeline", return_value=ResumePipeline(synthesis_client)):
        result = runner.invoke(app, ["generate-file", str(path)])

    assert result.exit_code == 0, result.output


def test_generate_file_synthesis_failure(commits_file, synthesis_client):
    """Test a failed synthesis exits non-zero with the error shown."""
    synthesis_client.synthesize = AsyncMock(return_value="no json here")

    with patch("commitresume.cli.build_pipeline", return_value=ResumePipeline(synthesis_client)):
        result = runner.invoke(app, ["generate-file", str(commits_file)])

    assert result.exit_code == 1
    assert "FormatError" in result.output


def test_generate_file_without_api_key(commits_file):
    """Test missing LLM credentials are reported."""
    result = runner.invoke(app, ["generate-file", str(commits_file)])

    assert result.exit_code == 1
    assert "API key is required" in result.output


def test_repos_without_token():
    """Test missing GitHub token is reported."""
    result = runner.invoke(app, ["repos"])

    assert result.exit_code == 1
    assert "GITHUB_TOKEN" in result.output


@respx.mock
def test_contributors(monkeypatch):
    """Test contributors table output."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    respx.get("https://api.github.com/repos/octo/app/contributors").mock(
        return_value=Response(200, json=[{"login": "octocat", "name": "Octo Cat", "contributions": 12}])
    )
    respx.get("https://api.github.com/repos/octo/app/commits").mock(return_value=Response(200, json=[]))

    result = runner.invoke(app, ["contributors", "octo", "app"])

    assert result.exit_code == 0, result.output
    assert "octocat" in result.output
    assert "12" in result.output


def test_git_provider_uses_request_timeout():
    """Test the configured request timeout reaches the HTTP client."""
    provider = git_provider(Settings(github_token="test-token", request_timeout=42))

    assert provider._client.timeout.read == 42.0
    assert provider._client.timeout.connect == 42.0


@respx.mock
def test_whoami(monkeypatch):
    """Test the authenticated account is shown."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    respx.get(f"{API}/user").mock(
        return_value=Response(200, json={"id": 1, "login": "octocat", "name": "Octo Cat", "email": None})
    )

    result = runner.invoke(app, ["whoami"])

    assert result.exit_code == 0, result.output
    assert "Authenticated as octocat" in result.output
    assert "Octo Cat" in result.output


@respx.mock
def test_whoami_bad_token(monkeypatch):
    """Test rejected credentials exit non-zero."""
    monkeypatch.setenv("GITHUB_TOKEN", "bad-token")
    respx.get(f"{API}/user").mock(return_value=Response(401, json={"message": "Bad credentials"}))

    result = runner.invoke(app, ["whoami"])

    assert result.exit_code == 1
    assert "Bad credentials" in result.output


@respx.mock
def test_repo_details(monkeypatch):
    """Test repository details are shown after validation."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    route = respx.get(f"{API}/repos/octo/app").mock(
        return_value=Response(
            200,
            json={
                "name": "app",
                "full_name": "octo/app",
                "description": "Customer portal",
                "private": False,
                "default_branch": "main",
                "language": "Python",
                "html_url": "https://github.com/octo/app",
                "stargazers_count": 7,
                "forks_count": 2,
                "owner": {"login": "octo"},
            },
        )
    )

    result = runner.invoke(app, ["repo", "octo", "app"])

    assert result.exit_code == 0, result.output
    assert route.call_count == 2
    assert "octo/app" in result.output
    assert "Customer portal" in result.output
    assert "Default Branch: main" in result.output
    assert "Visibility: public" in result.output


@respx.mock
def test_repo_not_found(monkeypatch):
    """Test an inaccessible repository is reported."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    respx.get(f"{API}/repos/octo/missing").mock(return_value=Response(404, json={"message": "Not Found"}))

    result = runner.invoke(app, ["repo", "octo", "missing"])

    assert result.exit_code == 1
    assert "octo/missing not found" in result.output


@respx.mock
def test_generate_reports_dropped_commits(monkeypatch, synthesis_client, tmp_path):
    """Test generate fetches a full page and reports commits beyond the cap."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    listing = respx.get(COMMITS_URL).mock(
        return_value=Response(200, json=[listing_entry(f"{i:040x}", f"Implement feature {i}") for i in range(30)])
    )
    respx.get(url__regex=r"https://api\.github\.com/repos/octo/app/commits/\w+").mock(
        return_value=Response(200, json=DETAIL)
    )
    output = tmp_path / "bullets.json"

    with patch("commitresume.cli.build_pipeline", return_value=ResumePipeline(synthesis_client)):
        result = runner.invoke(app, ["generate", "octo", "app", "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert listing.calls[0].request.url.params["per_page"] == "100"
    assert "25 of 30 analyzed" in result.output
    assert "Total Cost: $0.0087" in result.output

    summary = json.loads(output.read_text())["summary"]
    assert summary["originalTotal"] == 30
    assert summary["total"] == 25
    digest = synthesis_client.synthesize.call_args.args[0]
    assert digest.count == 25


@respx.mock
def test_generate_per_commit(monkeypatch, synthesis_client, tmp_path):
    """Test each commit is described separately and trivial ones are skipped."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    shas = ["a" * 40, "b" * 40]
    respx.get(COMMITS_URL).mock(
        return_value=Response(
            200,
            json=[listing_entry(shas[0], "Add OAuth login"), listing_entry(shas[1], "Merge branch 'feature/x'")],
        )
    )
    for sha in shas:
        respx.get(f"{COMMITS_URL}/{sha}").mock(return_value=Response(200, json=DETAIL))
    output = tmp_path / "commits.json"

    with patch("commitresume.cli.build_pipeline", return_value=ResumePipeline(synthesis_client)):
        result = runner.invoke(app, ["generate", "octo", "app", "--per-commit", "--output", str(output)])

    assert result.exit_code == 0, result.output
    synthesis_client.synthesize_commit.assert_awaited_once()
    synthesis_client.synthesize.assert_not_awaited()
    assert "Implemented OAuth login" in result.output
    assert "trivial_message" in result.output
    assert "Input Tokens: 1,200" in result.output

    described = json.loads(output.read_text())["commits"]
    assert [entry["sha"] for entry in described] == shas
    assert described[0]["bulletPoints"][0]["actionVerb"] == "Implemented"
    assert described[1]["isTrivial"] is True


@respx.mock
def test_generate_per_commit_failure(monkeypatch, synthesis_client):
    """Test a failed commit is reported without hiding the others."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    synthesis_client.synthesize_commit = AsyncMock(return_value="no json here")
    respx.get(COMMITS_URL).mock(return_value=Response(200, json=[listing_entry("a" * 40, "Add OAuth login")]))
    respx.get(f"{COMMITS_URL}/{'a' * 40}").mock(return_value=Response(200, json=DETAIL))

    with patch("commitresume.cli.build_pipeline", return_value=ResumePipeline(synthesis_client)):
        result = runner.invoke(app, ["generate", "octo", "app", "--per-commit"])

    assert result.exit_code == 1
    assert "FormatError" in result.output


@respx.mock
def test_commits_table_and_summaries(monkeypatch, tmp_path):
    """Test commit listing shows type and language and saves summaries."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    sha = "a" * 40
    respx.get(COMMITS_URL).mock(return_value=Response(200, json=[listing_entry(sha, "Fix login redirect")]))
    respx.get(f"{COMMITS_URL}/{sha}").mock(return_value=Response(200, json=DETAIL))
    output = tmp_path / "commits.json"

    result = runner.invoke(app, ["commits", "octo", "app", "--output", str(output)])

    assert result.exit_code == 0, result.output

    summaries = json.loads(output.read_text())["summaries"]
    assert summaries == [
        {
            "sha": "aaaaaaa",
            "type": "bugfix",
            "language": "Python",
            "impact": 42,
            "files_changed": 1,
            "is_trivial": False,
            "message_preview": "Fix login redirect",
        }
    ]
