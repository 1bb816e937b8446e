"""
Jira issue lookup endpoint.
"""

from fastapi import APIRouter, Depends

from storytests.api.v1.dependencies import get_jira_client
from storytests.schemas.issue_tracker import IssueFetchRequest, IssueFetchResponse
from storytests.services.issue_tracker.jira_client import JiraClient

router = APIRouter()


@router.post(
    "/fetch",
    response_model=IssueFetchResponse,
    response_model_exclude_none=True,
    summary="Fetch a Jira issue's story fields",
)
async def fetch_issue(
    request: IssueFetchRequest,
    jira_client: JiraClient = Depends(get_jira_client),
) -> IssueFetchResponse:
    """
    Fetch one Jira issue and return its summary, description and any
    acceptance criteria found in the description.

    Unlike the generate pipeline, tracker failures are reported to the
    caller: 404 for unknown issues, 401 for rejected credentials, 500 when
    Jira is not configured and 502 for anything else.
    """
    issue = await jira_client.fetch_issue(request.issue_id)
    return IssueFetchResponse(issue=issue)
