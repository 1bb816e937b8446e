"""
Response schema definitions for test case generation.

The same models validate what the language model returns and what the
API sends back to the caller, so a case only reaches a consumer once it
has passed the per-format checks below.
"""

from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CaseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ManualTestCase(_CaseModel):
    """Test case expressed as imperative steps with one expected result."""

    id: str = Field(..., description="Case identifier, e.g. TC-001")
    title: str = Field(..., description="Test case title")
    format: Literal["Manual"] = Field("Manual", description="Format discriminator")
    steps: List[str] = Field(..., description="Ordered imperative steps")
    test_data: Optional[str] = Field(None, description="Sample data for the case")
    expected_result: str = Field(..., description="Expected result after the last step")
    category: str = Field(..., description="Category label")


class BDDTestCase(_CaseModel):
    """Test case expressed as Gherkin-style Given/When/Then clauses."""

    id: str = Field(..., description="Case identifier, e.g. TC-001")
    title: str = Field(..., description="Test case title")
    format: Literal["BDD"] = Field("BDD", description="Format discriminator")
    test_data: Optional[str] = Field(None, description="Sample data for the case")
    category: str = Field(..., description="Category label")
    given: List[str] = Field(..., description="Preconditions, first starts with 'Given', the rest with 'And'")
    when: List[str] = Field(..., description="Actions, first starts with 'When', the rest with 'And'")
    then: List[str] = Field(..., description="Outcomes, first starts with 'Then', the rest with 'And'")
    steps: Optional[List[str]] = Field(None, description="Tolerated for compatibility, not requested")
    expected_result: Optional[str] = Field(None, description="Tolerated for compatibility, not requested")


TestCase = Annotated[Union[ManualTestCase, BDDTestCase], Field(discriminator="format")]


class GenerationResponse(BaseModel):
    """Generated cases plus the model and token usage that produced them."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    cases: List[TestCase] = Field(..., description="Generated test cases, in model order")
    model: Optional[str] = Field(None, description="Model identifier reported by the generation service")
    prompt_tokens: int = Field(0, ge=0, description="Prompt tokens consumed")
    completion_tokens: int = Field(0, ge=0, description="Completion tokens consumed")
