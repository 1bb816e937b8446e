"""
Tests for prompt rendering.
"""

from storytests.schemas.generation import GenerationRequest
from storytests.services.ai.prompt_manager import (
    BDD_GUIDANCE,
    MANUAL_GUIDANCE,
    SYSTEM_PROMPT,
    PromptManager,
)


class TestPromptManager:
    """Prompt content and determinism."""

    def setup_method(self):
        self.manager = PromptManager()

    def test_rendering_is_deterministic(self, bdd_request):
        first = self.manager.build_prompt(bdd_request)
        second = self.manager.build_prompt(bdd_request.model_copy(deep=True))

        assert first == second
        assert first.system_prompt == SYSTEM_PROMPT

    def test_login_example(self, manual_request):
        prompt = self.manager.build_user_prompt(manual_request)

        assert "Story Title: Login" in prompt
        assert "User can log in with valid credentials" in prompt
        assert "Positive" in prompt
        assert MANUAL_GUIDANCE in prompt
        for keyword in ("Given", "When", "Then"):
            assert keyword not in prompt

    def test_bdd_prompt_carries_gherkin_guidance_only(self, bdd_request):
        prompt = self.manager.build_user_prompt(bdd_request)

        assert BDD_GUIDANCE in prompt
        assert '"given"' in prompt and '"when"' in prompt and '"then"' in prompt
        assert MANUAL_GUIDANCE not in prompt
        assert "in BDD format" in prompt

    def test_categories_restated_identically(self, bdd_request):
        prompt = self.manager.build_user_prompt(bdd_request)
        expected = "Positive, Negative, Edge Case"

        assert f"focusing on these test categories: {expected}." in prompt
        assert f"covering the specified categories: {expected}." in prompt

    def test_duplicate_categories_are_kept(self):
        request = GenerationRequest(
            story_title="Search",
            acceptance_criteria="Results are paged",
            categories=["Negative", "Positive", "Negative"],
            format="Manual",
        )
        prompt = self.manager.build_user_prompt(request)

        assert prompt.count("Negative, Positive, Negative") == 2

    def test_optional_sections_omitted_when_blank(self, manual_request):
        blank = manual_request.model_copy(update={"description": "   ", "additional_info": ""})
        prompt = self.manager.build_user_prompt(blank)

        assert "Description:" not in prompt
        assert "Additional Information:" not in prompt

    def test_optional_sections_rendered_when_present(self, manual_request):
        request = manual_request.model_copy(update={
            "description": "Login with email and password",
            "additional_info": "Lock the account after 5 failures",
        })
        prompt = self.manager.build_user_prompt(request)

        assert "Description:\nLogin with email and password" in prompt
        assert "Additional Information:\nLock the account after 5 failures" in prompt
        assert prompt.index("Acceptance Criteria:") < prompt.index("Description:")
        assert prompt.endswith("Return only the JSON response.")

    def test_user_text_is_not_escaped_or_interpreted(self, manual_request):
        request = manual_request.model_copy(update={
            "acceptance_criteria": "Shows <b>error</b> & keeps {{ input }}",
        })
        prompt = self.manager.build_user_prompt(request)

        assert "Shows <b>error</b> & keeps {{ input }}" in prompt
