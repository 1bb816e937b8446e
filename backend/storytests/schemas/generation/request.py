"""
Request schema definitions for test case generation.
"""

from typing import List, Optional
from enum import Enum
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TestCategory(str, Enum):
    """Kinds of coverage a caller can ask for."""

    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    E2E = "E2E"
    EDGE_CASE = "Edge Case"
    PERFORMANCE = "Performance"


class TestFormat(str, Enum):
    """Shape of the generated cases: imperative steps or Given/When/Then."""

    MANUAL = "Manual"
    BDD = "BDD"


class GenerationRequest(BaseModel):
    """User story plus generation options, as posted by the UI."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    story_title: str = Field(..., min_length=1, description="User story title")
    acceptance_criteria: str = Field(..., min_length=1, description="Acceptance criteria, passed to the model verbatim")
    description: Optional[str] = Field(None, description="Optional user story description")
    additional_info: Optional[str] = Field(None, description="Optional extra notes for the model")
    jira_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("jiraId", "issueTrackerId", "jira_id"),
        serialization_alias="jiraId",
        description="Jira issue key used to pre-fill empty story fields",
    )
    categories: List[TestCategory] = Field(
        ...,
        min_length=1,
        description="Requested test categories; order is preserved and duplicates are kept",
    )
    format: TestFormat = Field(..., description="Output format for every generated case")

    @field_validator("story_title")
    @classmethod
    def validate_story_title(cls, v):
        if not v.strip():
            raise ValueError("Story title is required")
        return v

    @field_validator("acceptance_criteria")
    @classmethod
    def validate_acceptance_criteria(cls, v):
        if not v.strip():
            raise ValueError("Acceptance criteria is required")
        return v

    @property
    def category_labels(self) -> List[str]:
        return [category.value for category in self.categories]

