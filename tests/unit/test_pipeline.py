"""Tests for the analysis pipeline."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from commitresume.errors import AuthError, FormatError, ValidationError
from commitresume.models.analysis import TERMINAL_STATES, AnalysisState
from commitresume.models.resume import Category
from commitresume.pipeline import MAX_COMMITS, ResumePipeline, analyze_commits

REPLY = {
    "bulletPoints": [
        {
            "text": "Developed OAuth login for the customer portal",
            "actionVerb": "Developed",
            "businessImpact": "Reduced sign-up friction",
            "confidence": 0.9,
        },
        {
            "text": "Built session refresh to keep users signed in",
            "actionVerb": "Built",
            "businessImpact": "Fewer forced logouts",
            "confidence": 0.8,
        },
        {
            "text": "Optimized token validation",
            "actionVerb": "Optimized",
            "businessImpact": "Faster page loads",
            "confidence": 0.7,
        },
    ],
    "isTrivial": False,
    "reasoning": "Authentication work",
}


@pytest.fixture
def synthesis_client():
    """Create mock synthesis client replying with three bullets."""
    client = MagicMock()
    client.synthesize = AsyncMock(return_value="Here you go:\n" + json.dumps(REPLY))
    client.synthesize_commit = AsyncMock(return_value=json.dumps(REPLY))
    return client


@pytest.fixture
def pipeline(synthesis_client):
    """Create pipeline around the mock client."""
    return ResumePipeline(synthesis_client)


@pytest.mark.asyncio
async def test_scenario_filters_trivial_commits(pipeline, synthesis_client, raw_commit, trivial_raw_commit):
    """Test 28 trivial and 2 significant commits yield a 2-commit digest."""
    commits = [trivial_raw_commit() for _ in range(28)]
    commits.insert(5, raw_commit(message="Implement OAuth login flow"))
    commits.insert(20, raw_commit(message="Add session refresh"))

    result = await pipeline.run(commits)

    synthesis_client.synthesize.assert_awaited_once()
    digest = synthesis_client.synthesize.call_args.args[0]
    assert digest.count == 2
    assert digest.sample_messages == ["Implement OAuth login flow", "Add session refresh"]
    assert AnalysisState.SYNTHESIZING in result.states
    assert result.state == AnalysisState.SUMMARIZED
    assert result.state in TERMINAL_STATES
    assert result.summary.total == 30
    assert result.summary.processed == 2
    assert result.summary.trivial == 28


@pytest.mark.asyncio
async def test_scenario_empty_input(pipeline, synthesis_client):
    """Test an empty batch short-circuits without synthesis."""
    result = await pipeline.run([])

    synthesis_client.synthesize.assert_not_awaited()
    assert result.state == AnalysisState.NO_SIGNIFICANT_COMMITS
    assert result.state in TERMINAL_STATES
    assert result.states == [
        AnalysisState.RECEIVED,
        AnalysisState.FILTERED,
        AnalysisState.NO_SIGNIFICANT_COMMITS,
    ]
    summary = result.to_payload()["summary"]
    assert summary["total"] == 0
    assert summary["processed"] == 0
    assert summary["trivial"] == 0
    assert summary["bulletPointsGenerated"] == 0
    assert result.bullet_points == []


@pytest.mark.asyncio
async def test_only_trivial_commits(pipeline, synthesis_client, trivial_raw_commit):
    """Test a batch of trivial commits never reaches synthesis."""
    result = await pipeline.run([trivial_raw_commit() for _ in range(3)])

    synthesis_client.synthesize.assert_not_awaited()
    assert result.state == AnalysisState.NO_SIGNIFICANT_COMMITS
    assert result.summary.trivial == 3
    assert result.reasoning == "No significant commits found for analysis"


@pytest.mark.asyncio
async def test_scenario_unparseable_reply(pipeline, synthesis_client, raw_commit):
    """Test a reply without JSON fails with FormatError."""
    synthesis_client.synthesize = AsyncMock(return_value="Sorry, I cannot help with that.")

    result = await pipeline.run([raw_commit()])

    assert result.state == AnalysisState.FAILED
    assert result.state in TERMINAL_STATES
    assert result.failed
    assert result.error_type == "FormatError"
    assert result.error == "No JSON object found in response"
    assert result.bullet_points == []
    assert result.groups == []
    payload = result.to_payload()
    assert payload["errorType"] == "FormatError"
    assert payload["bulletPoints"] == []


@pytest.mark.asyncio
async def test_upstream_failure(pipeline, synthesis_client, raw_commit):
    """Test synthesis errors end in FAILED with their type preserved."""
    synthesis_client.synthesize = AsyncMock(side_effect=AuthError("Invalid API key"))

    result = await pipeline.run([raw_commit()])

    assert result.states[-2:] == [AnalysisState.SYNTHESIZING, AnalysisState.FAILED]
    assert result.error_type == "AuthError"
    assert result.error == "Invalid API key"


@pytest.mark.asyncio
async def test_malformed_bullet_rejects_whole_reply(pipeline, synthesis_client, raw_commit):
    """Test no partial bullet list survives a malformed reply."""
    reply = json.loads(json.dumps(REPLY))
    del reply["bulletPoints"][2]["businessImpact"]
    synthesis_client.synthesize = AsyncMock(return_value=json.dumps(reply))

    result = await pipeline.run([raw_commit()])

    assert result.state == AnalysisState.FAILED
    assert result.bullet_points == []


@pytest.mark.asyncio
async def test_successful_run_groups_and_summarizes(pipeline, raw_commit):
    """Test the full happy path."""
    result = await pipeline.run([raw_commit()])

    assert result.states == [
        AnalysisState.RECEIVED,
        AnalysisState.FILTERED,
        AnalysisState.SYNTHESIZING,
        AnalysisState.PARSED,
        AnalysisState.GROUPED,
        AnalysisState.SUMMARIZED,
    ]
    assert [g.category for g in result.groups] == [Category.DEVELOPMENT, Category.PERFORMANCE]
    assert [g.count for g in result.groups] == [2, 1]
    assert result.summary.bullet_points_generated == 3
    assert result.summary.categories == 2
    assert result.reasoning == "Authentication work"

    payload = result.to_payload()
    assert set(payload) == {"bulletPoints", "groups", "summary"}
    assert payload["summary"]["bulletPointsGenerated"] == 3
    assert payload["groups"][0]["bulletPoints"][0]["actionVerb"] == "Developed"


@pytest.mark.asyncio
async def test_trivial_reply_yields_no_bullets(pipeline, synthesis_client, raw_commit):
    """Test a reply marked trivial summarizes with zero bullets."""
    synthesis_client.synthesize = AsyncMock(
        return_value=json.dumps({"bulletPoints": [], "isTrivial": True, "reasoning": "Routine"})
    )

    result = await pipeline.run([raw_commit()])

    assert result.state == AnalysisState.SUMMARIZED
    assert result.groups == []
    assert result.summary.bullet_points_generated == 0
    assert result.summary.processed == 1


@pytest.mark.asyncio
async def test_invalid_records_rejected_individually(pipeline, raw_commit):
    """Test invalid commits are counted, not fatal."""
    result = await pipeline.run([raw_commit(sha="abc"), raw_commit(), "not a commit"])

    assert result.state == AnalysisState.SUMMARIZED
    assert result.summary.total == 3
    assert result.summary.rejected == 2
    assert result.summary.processed == 1


@pytest.mark.asyncio
async def test_scenario_caps_batch(pipeline, synthesis_client, raw_commit):
    """Test only the first 25 of 40 commits are analyzed."""
    commits = [raw_commit(message=f"Implement feature {i}") for i in range(40)]

    result = await analyze_commits(pipeline, commits)

    assert MAX_COMMITS == 25
    assert result.summary.original_total == 40
    assert result.summary.total == 25
    assert result.to_payload()["summary"]["originalTotal"] == 40
    digest = synthesis_client.synthesize.call_args.args[0]
    assert digest.count == 25
    assert digest.sample_messages[0] == "Implement feature 0"


@pytest.mark.asyncio
async def test_analyze_commits_requires_list(pipeline):
    """Test non-list input is rejected."""
    with pytest.raises(ValidationError, match="commits array is required"):
        await analyze_commits(pipeline, None)


@pytest.mark.asyncio
async def test_analyze_commits_under_cap(pipeline, raw_commit):
    """Test small batches report matching totals."""
    result = await analyze_commits(pipeline, [raw_commit()], max_commits=5)

    assert result.summary.total == 1
    assert result.summary.original_total == 1


@pytest.mark.asyncio
async def test_every_run_ends_in_terminal_state(pipeline, synthesis_client, raw_commit, trivial_raw_commit):
    """Test only the final recorded state is terminal."""
    results = [await pipeline.run([raw_commit()]), await pipeline.run([trivial_raw_commit()])]
    synthesis_client.synthesize = AsyncMock(side_effect=AuthError("Invalid API key"))
    results.append(await pipeline.run([raw_commit()]))

    assert {r.state for r in results} == set(TERMINAL_STATES)
    for result in results:
        assert result.states[-1] == result.state
        assert not TERMINAL_STATES.intersection(result.states[:-1])


@pytest.mark.asyncio
async def test_describe_commit(pipeline, synthesis_client, raw_commit):
    """Test a single commit is sent with the commit prompt and parsed."""
    synthesis = await pipeline.describe_commit(raw_commit(message="Implement OAuth login flow"))

    synthesis_client.synthesize_commit.assert_awaited_once()
    commit = synthesis_client.synthesize_commit.call_args.args[0]
    assert commit.message == "Implement OAuth login flow"
    assert not synthesis.is_trivial
    assert [b.action_verb for b in synthesis.bullet_points] == ["Developed", "Built", "Optimized"]


@pytest.mark.asyncio
async def test_describe_trivial_commit_skips_synthesis(pipeline, synthesis_client, trivial_raw_commit):
    """Test trivial commits are answered without a generation call."""
    synthesis = await pipeline.describe_commit(trivial_raw_commit())

    synthesis_client.synthesize_commit.assert_not_awaited()
    assert synthesis.is_trivial
    assert synthesis.bullet_points == []
    assert "trivial_message" in synthesis.reasoning


@pytest.mark.asyncio
async def test_describe_commit_errors_propagate(pipeline, synthesis_client, raw_commit):
    """Test invalid records and malformed replies raise for the caller."""
    with pytest.raises(ValidationError):
        await pipeline.describe_commit(raw_commit(sha="abc"))

    synthesis_client.synthesize_commit = AsyncMock(return_value="no json")
    with pytest.raises(FormatError):
        await pipeline.describe_commit(raw_commit())
