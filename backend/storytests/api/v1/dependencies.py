"""
API dependencies for the User Story to Tests service.

Services are built per request from the current settings. Tests replace
them through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends

from storytests.core.config import Settings, settings
from storytests.services.ai.openai_service import OpenAIService
from storytests.services.generation import TestGenerationService
from storytests.services.issue_tracker.jira_client import JiraClient


def get_settings() -> Settings:
    """Get application settings dependency."""
    return settings


def get_openai_service(app_settings: Settings = Depends(get_settings)) -> OpenAIService:
    """
    Get the generation gateway dependency.

    Raises:
        ConfigurationException: when no API key is configured.
    """
    return OpenAIService(settings=app_settings)


def get_jira_client(app_settings: Settings = Depends(get_settings)) -> JiraClient:
    return JiraClient(settings=app_settings)


def get_generation_service(
    gateway: OpenAIService = Depends(get_openai_service),
    jira_client: Optional[JiraClient] = Depends(get_jira_client),
) -> TestGenerationService:
    """Get the generation pipeline dependency wired to the gateway and Jira client."""
    return TestGenerationService(gateway=gateway, jira_client=jira_client)
