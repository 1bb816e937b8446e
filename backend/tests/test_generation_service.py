"""
Tests for the generation pipeline.
"""

import httpx
import openai
import pytest

from storytests.core.exceptions import (
    GenerationServiceException,
    MalformedModelOutputException,
    SchemaMismatchException,
)
from storytests.schemas.issue_tracker import JiraIssue
from storytests.services.ai.openai_service import OpenAIService
from storytests.services.generation import TestGenerationService as GenerationService, merge_issue_fields
from storytests.services.issue_tracker.jira_client import JiraClient
from tests.helpers import (
    FakeChatClient,
    bdd_case,
    chat_completion,
    jira_settings,
    jira_transport,
    manual_case,
    model_output,
)


def _service(settings, content, jira_client=None):
    client = FakeChatClient(response=chat_completion(content))
    gateway = OpenAIService(settings=settings, client=client)
    return GenerationService(gateway=gateway, jira_client=jira_client), client


class TestMergeIssueFields:
    """Caller-supplied fields always win over Jira fields."""

    def test_fills_only_empty_fields(self, manual_request):
        issue = JiraIssue(
            key="PROJ-1",
            title="Jira title",
            description="Jira description",
            acceptance_criteria="Jira criteria",
        )

        merged = merge_issue_fields(manual_request, issue)

        assert merged.story_title == "Login"
        assert merged.acceptance_criteria == "User can log in with valid credentials"
        assert merged.description == "Jira description"

    def test_blank_description_is_replaced(self, manual_request):
        request = manual_request.model_copy(update={"description": "  "})
        merged = merge_issue_fields(request, JiraIssue(description="From Jira"))

        assert merged.description == "From Jira"

    def test_does_not_mutate_input(self, manual_request):
        merged = merge_issue_fields(manual_request, JiraIssue(description="From Jira"))

        assert merged is not manual_request
        assert manual_request.description is None

    def test_nothing_to_fill_returns_same_request(self, bdd_request):
        merged = merge_issue_fields(bdd_request, JiraIssue(description="From Jira"))
        assert merged is bdd_request


class TestGenerationPipeline:
    """End-to-end pipeline with fake collaborators."""

    @pytest.mark.asyncio
    async def test_generates_manual_cases(self, settings, manual_request):
        service, client = _service(settings, model_output(manual_case()))

        response = await service.generate(manual_request)

        assert len(response.cases) == 1
        assert response.cases[0].format == "Manual"
        assert response.model == "test-model-2024"
        assert response.prompt_tokens == 120
        assert response.completion_tokens == 340
        assert "Story Title: Login" in client.calls[0]["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_generates_bdd_cases(self, settings, bdd_request):
        service, _ = _service(settings, model_output(bdd_case(), bdd_case(id="TC-002", category="Negative")))

        response = await service.generate(bdd_request)

        assert [case.format for case in response.cases] == ["BDD", "BDD"]
        assert response.cases[1].category == "Negative"

    @pytest.mark.asyncio
    async def test_truncated_output_is_malformed_not_schema_mismatch(self, settings, manual_request):
        service, _ = _service(settings, "{ cases: []")

        with pytest.raises(MalformedModelOutputException):
            await service.generate(manual_request)

    @pytest.mark.asyncio
    async def test_schema_violation_carries_paths(self, settings, manual_request):
        service, _ = _service(settings, '{"cases": [{"id": "TC-001", "format": "BDD"}]}')

        with pytest.raises(SchemaMismatchException) as exc_info:
            await service.generate(manual_request)

        paths = {v["path"] for v in exc_info.value.violations}
        assert "cases.0.BDD.given" in paths

    @pytest.mark.asyncio
    async def test_gateway_failure_propagates(self, settings, manual_request):
        error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.example.com"))
        gateway = OpenAIService(settings=settings, client=FakeChatClient(error=error))
        service = GenerationService(gateway=gateway)

        with pytest.raises(GenerationServiceException):
            await service.generate(manual_request)

    @pytest.mark.asyncio
    async def test_jira_network_failure_degrades_gracefully(self, settings, manual_request):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        jira = JiraClient(settings=jira_settings(), transport=jira_transport(handler))
        service, client = _service(settings, model_output(manual_case()), jira_client=jira)
        request = manual_request.model_copy(update={"jira_id": "PROJ-9"})

        response = await service.generate(request)

        assert len(response.cases) == 1
        assert len(client.calls) == 1

    @pytest.mark.asyncio
    async def test_unconfigured_jira_degrades_gracefully(self, settings, manual_request, unconfigured_jira):
        service, _ = _service(settings, model_output(manual_case()), jira_client=unconfigured_jira)
        request = manual_request.model_copy(update={"jira_id": "PROJ-9"})

        response = await service.generate(request)

        assert len(response.cases) == 1

    @pytest.mark.asyncio
    async def test_jira_description_reaches_prompt(self, settings, manual_request):
        payload = {"key": "PROJ-9", "fields": {"summary": "Login", "description": "Supports SSO users"}}
        jira = JiraClient(
            settings=jira_settings(),
            transport=jira_transport(lambda request: httpx.Response(200, json=payload)),
        )
        service, client = _service(settings, model_output(manual_case()), jira_client=jira)
        request = manual_request.model_copy(update={"jira_id": "PROJ-9"})

        await service.generate(request)

        user_prompt = client.calls[0]["messages"][1]["content"]
        assert "Description:\nSupports SSO users" in user_prompt

    @pytest.mark.asyncio
    async def test_no_jira_lookup_without_issue_id(self, settings, manual_request):
        def handler(request):
            raise AssertionError("Jira must not be called")

        jira = JiraClient(settings=jira_settings(), transport=jira_transport(handler))
        service, _ = _service(settings, model_output(manual_case()), jira_client=jira)

        response = await service.generate(manual_request)

        assert len(response.cases) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"key": 123, "fields": {"summary": "Login"}},
        {"key": "PROJ-9", "fields": "oops"},
    ])
    async def test_unexpected_jira_payload_degrades_gracefully(self, settings, manual_request, payload):
        jira = JiraClient(
            settings=jira_settings(),
            transport=jira_transport(lambda request: httpx.Response(200, json=payload)),
        )
        service, client = _service(settings, model_output(manual_case()), jira_client=jira)
        request = manual_request.model_copy(update={"jira_id": "PROJ-9"})

        response = await service.generate(request)

        assert len(response.cases) == 1
        assert "Description:" not in client.calls[0]["messages"][1]["content"]
