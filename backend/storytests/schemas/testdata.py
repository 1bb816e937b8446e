"""
Schemas for the synthetic test data endpoints.
"""

from typing import Any, Dict, List
from pydantic import BaseModel, Field


class CsvExportRequest(BaseModel):
    """Cases to render as CSV; entries are rendered as-is without re-validation."""

    cases: List[Dict[str, Any]] = Field(..., description="Cases in the GenerationResponse wire format")
