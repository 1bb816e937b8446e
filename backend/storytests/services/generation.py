"""
Test case generation pipeline.

One call handles one request from start to finish: optional Jira pre-fill,
prompt rendering, a single generation service call, and validation of the
model output. Nothing is shared between calls.
"""

import time
from typing import Optional

from storytests.schemas.generation.request import GenerationRequest
from storytests.schemas.generation.response import GenerationResponse
from storytests.schemas.issue_tracker.issue import JiraIssue
from storytests.services.ai.openai_service import OpenAIService
from storytests.services.ai.prompt_manager import PromptManager, prompt_manager as default_prompt_manager
from storytests.services.ai.response_parser import ResponseParser, response_parser as default_response_parser
from storytests.services.issue_tracker.jira_client import JiraClient
from storytests.utils.correlation import get_correlation_logger

logger = get_correlation_logger(__name__)


def merge_issue_fields(request: GenerationRequest, issue: JiraIssue) -> GenerationRequest:
    """
    Fill the request's empty story fields from a Jira issue.

    Fields the caller supplied always win. The request is not modified; a
    new one is returned when anything was filled in.
    """
    updates = {}
    if not request.story_title.strip() and issue.title:
        updates["story_title"] = issue.title
    if not (request.description or "").strip() and issue.description:
        updates["description"] = issue.description
    if not request.acceptance_criteria.strip() and issue.acceptance_criteria:
        updates["acceptance_criteria"] = issue.acceptance_criteria

    if not updates:
        return request
    return request.model_copy(update=updates)


class TestGenerationService:
    """Runs the generate pipeline for validated requests."""

    def __init__(
        self,
        gateway: OpenAIService,
        jira_client: Optional[JiraClient] = None,
        prompt_manager: Optional[PromptManager] = None,
        response_parser: Optional[ResponseParser] = None,
    ):
        self.gateway = gateway
        self.jira_client = jira_client
        self.prompt_manager = prompt_manager or default_prompt_manager
        self.response_parser = response_parser or default_response_parser

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """
        Generate test cases for a request that already passed schema validation.

        Raises:
            GenerationServiceException: the model call failed.
            MalformedModelOutputException: the model did not answer with JSON.
            SchemaMismatchException: the model's JSON violates the response schema.
        """
        start_time = time.perf_counter()

        request = await self.apply_issue_fields(request)

        prompt = self.prompt_manager.build_prompt(request)
        logger.info(
            "Built generation prompt",
            format=request.format.value,
            categories=request.category_labels,
            user_prompt_length=len(prompt.user_prompt),
        )
        logger.debug("Generation user prompt", user_prompt=prompt.user_prompt)

        completion = await self.gateway.generate(prompt.system_prompt, prompt.user_prompt)

        parsed = self.response_parser.parse(completion.content)
        response = self.response_parser.attach_metadata(parsed, completion)

        logger.info(
            "Generated test cases",
            case_count=len(response.cases),
            model=response.model,
            prompt_tokens=response.prompt_tokens,
            completion_tokens=response.completion_tokens,
            processing_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return response

    async def apply_issue_fields(self, request: GenerationRequest) -> GenerationRequest:
        """Merge Jira data into empty fields; tracker failures are logged and dropped."""
        if not request.jira_id or self.jira_client is None:
            return request

        lookup = await self.jira_client.lookup_issue(request.jira_id)
        if not lookup.ok:
            logger.warning(
                "Jira lookup failed, continuing with the submitted fields",
                issue_id=lookup.issue_id,
                error=str(lookup.error),
                error_code=lookup.error.error_code.value,
            )
            return request

        return merge_issue_fields(request, lookup.issue)
