"""
Synthetic test data and CSV export.

The synthetic generator returns placeholder cases in the same response
shape as the model-backed pipeline, without calling any external service.
"""

import csv
import io
import re
from typing import Any, Dict, Iterable

from storytests.schemas.generation.request import GenerationRequest, TestFormat
from storytests.schemas.generation.response import BDDTestCase, GenerationResponse, ManualTestCase

SYNTHETIC_MODEL_NAME = "test-data-generator"
CASES_PER_CATEGORY = 2

CSV_COLUMNS = [
    "id",
    "title",
    "category",
    "format",
    "testData",
    "expectedResult",
    "steps",
    "given",
    "when",
    "then",
]


def generate_synthetic_cases(request: GenerationRequest) -> GenerationResponse:
    """Build two placeholder cases per requested category."""
    cases = []
    for category_index, category in enumerate(request.category_labels, start=1):
        prefix = re.sub(r"\s+", "", category).upper()
        for n in range(1, CASES_PER_CATEGORY + 1):
            case_id = f"{prefix}-{category_index}-{n}"
            if request.format == TestFormat.BDD:
                cases.append(BDDTestCase(
                    id=case_id,
                    title=f"{request.story_title} - {category} BDD {n}",
                    category=category,
                    test_data=f"sample data {n}",
                    given=[f"Given precondition {n}"],
                    when=[f"When action {n}"],
                    then=[f"Then expected {n}"],
                ))
            else:
                cases.append(ManualTestCase(
                    id=case_id,
                    title=f"{request.story_title} - {category} Manual {n}",
                    steps=[f"Step 1 for {n}", f"Step 2 for {n}"],
                    test_data=f"field1=value{n};field2=value{n * 2}",
                    expected_result=f"Expected result {n}",
                    category=category,
                ))

    return GenerationResponse(
        cases=cases,
        model=SYNTHETIC_MODEL_NAME,
        prompt_tokens=0,
        completion_tokens=0,
    )


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return " | ".join(str(item) for item in value)
    return str(value)


def cases_to_csv(cases: Iterable[Dict[str, Any]]) -> str:
    """Render wire-format cases as CSV, one row per case, list fields joined with " | "."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for case in cases:
        writer.writerow([_csv_value(case.get(column)) for column in CSV_COLUMNS])
    return buf.getvalue().rstrip("\n")
