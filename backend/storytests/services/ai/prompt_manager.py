"""
Prompt Management for Test Case Generation

This module turns a validated generation request into the system and user
prompts sent to the generation service. Rendering is pure: the same request
always yields byte-identical prompts.
"""

from dataclasses import dataclass
from typing import Dict, Optional
from jinja2 import Environment, BaseLoader, StrictUndefined

from storytests.schemas.generation.request import GenerationRequest, TestFormat


SYSTEM_PROMPT = """You are a senior QA engineer who turns user stories into thorough, well-structured test cases. Depending on the request you write cases either in Manual format or in BDD format.

CRITICAL: Respond with ONLY valid JSON that follows exactly one of these shapes.

Manual format:
{
  "cases": [
    {
      "id": "TC-001",
      "title": "string",
      "format": "Manual",
      "steps": ["string"],
      "testData": "string (optional)",
      "expectedResult": "string",
      "category": "string"
    }
  ]
}

BDD format:
{
  "cases": [
    {
      "id": "TC-001",
      "title": "string",
      "format": "BDD",
      "testData": "string (optional)",
      "category": "string",
      "given": ["string"],
      "when": ["string"],
      "then": ["string"]
    }
  ]
}

Rules:
- Number the cases TC-001, TC-002, and so on.
- Set "category" to the test category the case covers.
- Manual format:
  * Write short, imperative steps that name an action or a check
  * Example steps: ["Open the login page", "Enter valid credentials", "Click the login button"]
- BDD format (Gherkin):
  * given: preconditions and setup; the first entry starts with "Given", later entries start with "And"
    Example: ["Given the user is on the login page", "And the user has valid credentials"]
  * when: the actions performed; the first entry starts with "When", later entries start with "And"
    Example: ["When the user submits a valid username and password", "And the user clicks the login button"]
  * then: the expected outcomes; the first entry starts with "Then", later entries start with "And"
    Example: ["Then the user lands on the dashboard", "And a welcome message is displayed"]
  * Never include a "steps" array or an "expectedResult" field in BDD cases
  * Use proper Gherkin keywords and phrasing

Return ONLY the JSON object, with no surrounding text or markdown."""


BDD_GUIDANCE = """Write every test case in Gherkin-style Given-When-Then form and follow these strict rules:

1. Every test case MUST contain all three arrays:
   - "given" for preconditions
   - "when" for actions
   - "then" for outcomes

2. Statement wording:
   - The first given statement MUST start with "Given" and describe the starting state or preconditions
   - The first when statement MUST start with "When" and describe the action taken
   - The first then statement MUST start with "Then" and describe a verifiable outcome
   - Every further statement in a section MUST start with "And"

3. Content:
   - given: system state, user state or data setup
   - when: user interactions or system events
   - then: verifiable outcomes or system responses

4. Do NOT include a "steps" array or an "expectedResult" field in BDD test cases.

Example structure:
"given": ["Given the user is on the login page", "And the user has valid credentials"]
"when": ["When the user enters their username", "And the user enters their password", "And the user clicks the login button"]
"then": ["Then the user is redirected to the dashboard", "And a welcome message is displayed"]"""

MANUAL_GUIDANCE = "Use clear, imperative steps for all test cases."

BDD_REMINDER = """CRITICAL BDD format reminders:
1. Every test case MUST contain the given, when and then arrays
2. The first statement of each array MUST start with its keyword (Given/When/Then) and later statements with "And"
3. Do NOT include a steps array or an expectedResult field
4. Given statements set up preconditions
5. When statements describe specific actions
6. Then statements state verifiable outcomes
7. Keep the language clear and business-focused"""

MANUAL_REMINDER = """Remember to:
- Use clear, imperative steps
- Include every action and verification needed
- Keep steps concise and actionable"""


USER_PROMPT_TEMPLATE = """Generate comprehensive test cases in {{ format }} format for the following user story, focusing on these test categories: {{ categories }}.

{{ format_guidance }}

Story Title: {{ story_title }}

Acceptance Criteria:
{{ acceptance_criteria }}
{% if description %}

Description:
{{ description }}
{% endif %}
{% if additional_info %}

Additional Information:
{{ additional_info }}
{% endif %}

Generate test cases covering the specified categories: {{ categories }}.

{{ format_reminder }}

Return only the JSON response."""


@dataclass(frozen=True)
class PromptPair:
    """System and user prompts for one generation call."""
    system_prompt: str
    user_prompt: str


class PromptManager:
    """Renders generation prompts from validated requests."""

    FORMAT_GUIDANCE: Dict[TestFormat, str] = {
        TestFormat.BDD: BDD_GUIDANCE,
        TestFormat.MANUAL: MANUAL_GUIDANCE,
    }
    FORMAT_REMINDERS: Dict[TestFormat, str] = {
        TestFormat.BDD: BDD_REMINDER,
        TestFormat.MANUAL: MANUAL_REMINDER,
    }

    def __init__(self, system_prompt: str = SYSTEM_PROMPT):
        self.system_prompt = system_prompt
        self.jinja_env = Environment(
            loader=BaseLoader(),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            autoescape=False,
        )
        self.user_template = self.jinja_env.from_string(USER_PROMPT_TEMPLATE)

    def build_prompt(self, request: GenerationRequest) -> PromptPair:
        """Build the system and user prompts for a request."""
        return PromptPair(
            system_prompt=self.system_prompt,
            user_prompt=self.build_user_prompt(request),
        )

    def build_user_prompt(self, request: GenerationRequest) -> str:
        # Rendered twice: in the opening line and again before the closing reminder.
        categories = ", ".join(request.category_labels)

        return self.user_template.render(
            format=request.format.value,
            categories=categories,
            format_guidance=self.FORMAT_GUIDANCE[request.format],
            format_reminder=self.FORMAT_REMINDERS[request.format],
            story_title=request.story_title,
            acceptance_criteria=request.acceptance_criteria,
            description=_non_blank(request.description),
            additional_info=_non_blank(request.additional_info),
        )


def _non_blank(value: Optional[str]) -> str:
    """Optional sections are only rendered when they carry text."""
    if value and value.strip():
        return value
    return ""


# Global prompt manager instance
prompt_manager = PromptManager()
