"""
Jira REST client used to pre-fill user story fields.

Only the issue summary and description are read. Descriptions arrive either
as plain text or as an Atlassian Document Format tree; both are flattened
to text and searched for an "Acceptance Criteria" section.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from storytests.core.config import Settings, settings as default_settings
from storytests.core.exceptions import (
    IssueNotFoundException,
    IssueTrackerAuthException,
    IssueTrackerException,
    IssueTrackerNotConfiguredException,
)
from storytests.schemas.issue_tracker.issue import JiraIssue
from storytests.utils.correlation import get_correlation_logger

logger = get_correlation_logger(__name__)

ACCEPTANCE_CRITERIA_PATTERN = re.compile(r"Acceptance Criteria[:\-\s]*([\s\S]+)", re.IGNORECASE)


@dataclass(frozen=True)
class IssueLookup:
    """Outcome of a best-effort issue fetch: either an issue or the error that prevented it."""
    issue_id: str
    issue: Optional[JiraIssue] = None
    error: Optional[IssueTrackerException] = None

    @property
    def ok(self) -> bool:
        return self.issue is not None


def flatten_document(node: Any) -> str:
    """Concatenate every text leaf below an ADF node, in document order."""
    if not isinstance(node, dict):
        return ""
    if node.get("type") == "text":
        return node.get("text") or ""
    children = node.get("content")
    if isinstance(children, list):
        return "".join(flatten_document(child) for child in children)
    return ""


def description_to_text(description: Any) -> str:
    """Render a Jira description (plain string or ADF document) as text, one line per block."""
    if isinstance(description, str):
        return description
    if isinstance(description, dict) and isinstance(description.get("content"), list):
        return "\n".join(flatten_document(block) for block in description["content"])
    return ""


def extract_acceptance_criteria(text: str) -> Optional[str]:
    match = ACCEPTANCE_CRITERIA_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return None


def parse_issue(payload: Dict[str, Any]) -> JiraIssue:
    """Map a raw Jira issue payload to the story fields we use."""
    fields = payload.get("fields") or {}
    description = description_to_text(fields.get("description"))

    return JiraIssue(
        key=payload.get("key"),
        title=fields.get("summary") or "",
        description=description,
        acceptance_criteria=extract_acceptance_criteria(description) if description else None,
        raw=payload,
    )


class JiraClient:
    """Fetches issues from Jira Cloud's REST API v3 with basic auth."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or default_settings
        self.base_url = (settings.JIRA_BASE_URL or "").rstrip("/")
        self.email = settings.JIRA_EMAIL
        self.api_token = settings.JIRA_API_TOKEN
        self.timeout = settings.JIRA_TIMEOUT_SECONDS
        self.configured = settings.jira_configured
        self.transport = transport

    def issue_url(self, issue_id: str) -> str:
        return f"{self.base_url}/rest/api/3/issue/{quote(issue_id, safe='')}"

    async def fetch_issue(self, issue_id: str) -> JiraIssue:
        """
        Fetch one issue.

        Raises:
            IssueTrackerNotConfiguredException: Jira settings are incomplete.
            IssueNotFoundException: Jira answered 404.
            IssueTrackerAuthException: Jira answered 401.
            IssueTrackerException: any other status, timeout or transport error.
        """
        if not self.configured:
            raise IssueTrackerNotConfiguredException()

        try:
            async with httpx.AsyncClient(
                auth=(self.email, self.api_token),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.get(self.issue_url(issue_id))
        except httpx.HTTPError as e:
            raise IssueTrackerException(
                f"Failed to fetch Jira issue: {e}", issue_id=issue_id, cause=e
            ) from e

        if response.status_code == 404:
            raise IssueNotFoundException(issue_id)
        if response.status_code == 401:
            raise IssueTrackerAuthException(issue_id)
        if not response.is_success:
            raise IssueTrackerException(
                f"Failed to fetch Jira issue: {response.status_code} {response.text[:500]}",
                issue_id=issue_id,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise IssueTrackerException(
                "Jira returned a non-JSON response", issue_id=issue_id, cause=e
            ) from e

        if not isinstance(payload, dict) or not isinstance(payload.get("fields") or {}, dict):
            raise IssueTrackerException("Jira returned an unexpected payload", issue_id=issue_id)

        try:
            issue = parse_issue(payload)
        except (ValidationError, TypeError, AttributeError) as e:
            raise IssueTrackerException(
                "Jira returned an unexpected payload", issue_id=issue_id, cause=e
            ) from e

        logger.info(
            "Fetched Jira issue",
            issue_id=issue_id,
            has_description=bool(issue.description),
            has_acceptance_criteria=issue.acceptance_criteria is not None,
        )
        return issue

    async def lookup_issue(self, issue_id: str) -> IssueLookup:
        """Fetch an issue, returning tracker failures as a value instead of raising."""
        try:
            issue = await self.fetch_issue(issue_id)
        except IssueTrackerException as e:
            return IssueLookup(issue_id=issue_id, error=e)
        return IssueLookup(issue_id=issue_id, issue=issue)
