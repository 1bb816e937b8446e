"""
Test case generation endpoint.
"""

from fastapi import APIRouter, Depends

from storytests.api.v1.dependencies import get_generation_service
from storytests.schemas.generation import GenerationRequest, GenerationResponse
from storytests.services.generation import TestGenerationService
from storytests.utils.correlation import get_correlation_logger

logger = get_correlation_logger(__name__)

router = APIRouter()


@router.post(
    "/generate",
    response_model=GenerationResponse,
    response_model_exclude_none=True,
    summary="Generate test cases for a user story",
)
async def generate_tests(
    request: GenerationRequest,
    service: TestGenerationService = Depends(get_generation_service),
) -> GenerationResponse:
    """
    Generate test cases for a user story.

    Empty story fields are filled from Jira when a ``jiraId`` is supplied and
    Jira is configured; Jira failures never fail the request. Generation
    service failures and unusable model output are returned as 502 errors
    with distinct error codes.
    """
    logger.info(
        "Test generation requested",
        format=request.format.value,
        categories=request.category_labels,
        jira_id=request.jira_id,
    )
    return await service.generate(request)
