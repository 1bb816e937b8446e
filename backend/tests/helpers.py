"""
In-process fakes and payload builders for the test suite.

External services never run here: the generation gateway gets a fake
chat-completions client and Jira gets an httpx.MockTransport.
"""

import json
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import httpx

from storytests.core.config import Settings


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    values = {
        "OPENAI_API_KEY": "test-key",
        "OPENAI_MODEL": "test-model",
        "JIRA_BASE_URL": None,
        "JIRA_EMAIL": None,
        "JIRA_API_TOKEN": None,
        "LOG_FORMAT": "console",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def jira_settings(**overrides) -> Settings:
    values = {
        "JIRA_BASE_URL": "https://example.atlassian.net/",
        "JIRA_EMAIL": "qa@example.com",
        "JIRA_API_TOKEN": "jira-token",
    }
    values.update(overrides)
    return make_settings(**values)


def chat_completion(
    content: Optional[str],
    model: Optional[str] = "test-model-2024",
    prompt_tokens: int = 120,
    completion_tokens: int = 340,
) -> SimpleNamespace:
    """Build an object shaped like an openai ChatCompletion."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        model=model,
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


class FakeCompletions:
    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeChatClient:
    """Stands in for AsyncOpenAI: exposes client.chat.completions.create."""

    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self.completions = FakeCompletions(response=response, error=error)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.completions.calls


def manual_case(**overrides) -> Dict[str, Any]:
    case = {
        "id": "TC-001",
        "title": "Login with valid credentials",
        "format": "Manual",
        "steps": ["Open the login page", "Enter valid credentials", "Click the login button"],
        "testData": "user=alice;password=secret",
        "expectedResult": "The dashboard is shown",
        "category": "Positive",
    }
    case.update(overrides)
    return case


def bdd_case(**overrides) -> Dict[str, Any]:
    case = {
        "id": "TC-001",
        "title": "Login with valid credentials",
        "format": "BDD",
        "category": "Positive",
        "given": ["Given the user is on the login page"],
        "when": ["When the user submits valid credentials"],
        "then": ["Then the dashboard is shown", "And a welcome message is displayed"],
    }
    case.update(overrides)
    return case


def model_output(*cases: Dict[str, Any]) -> str:
    return json.dumps({"cases": list(cases)})


def jira_transport(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
    return httpx.MockTransport(handler)
