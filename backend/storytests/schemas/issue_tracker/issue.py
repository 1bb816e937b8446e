"""
Schemas for issues pulled from the Jira REST API.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IssueFetchRequest(BaseModel):
    """Body of the issue lookup endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    issue_id: str = Field(..., min_length=1, description="Jira issue key, e.g. PROJ-123")


class JiraIssue(BaseModel):
    """Story fields scraped from a Jira issue, any of which may be empty."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: Optional[str] = Field(None, description="Issue key as reported by Jira")
    title: str = Field("", description="Issue summary")
    description: str = Field("", description="Description flattened to plain text")
    acceptance_criteria: Optional[str] = Field(None, description="Text following an 'Acceptance Criteria' label")
    raw: Optional[Dict[str, Any]] = Field(None, description="Unmodified issue payload")


class IssueFetchResponse(BaseModel):
    issue: JiraIssue
