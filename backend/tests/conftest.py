"""
Shared fixtures for the User Story to Tests test suite.
"""

import pytest

from storytests.core.config import Settings
from storytests.schemas.generation import GenerationRequest
from storytests.services.ai.openai_service import OpenAIService
from storytests.services.issue_tracker.jira_client import JiraClient
from tests.helpers import FakeChatClient, chat_completion, make_settings, manual_case, model_output


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def manual_request() -> GenerationRequest:
    return GenerationRequest(
        story_title="Login",
        acceptance_criteria="User can log in with valid credentials",
        categories=["Positive"],
        format="Manual",
    )


@pytest.fixture
def bdd_request() -> GenerationRequest:
    return GenerationRequest(
        story_title="Password reset",
        acceptance_criteria="User receives a reset link by email",
        description="Users who forgot their password can request a reset link.",
        categories=["Positive", "Negative", "Edge Case"],
        format="BDD",
    )


@pytest.fixture
def fake_client() -> FakeChatClient:
    return FakeChatClient(response=chat_completion(model_output(manual_case())))


@pytest.fixture
def gateway(settings, fake_client) -> OpenAIService:
    return OpenAIService(settings=settings, client=fake_client)


@pytest.fixture
def unconfigured_jira(settings) -> JiraClient:
    return JiraClient(settings=settings)
