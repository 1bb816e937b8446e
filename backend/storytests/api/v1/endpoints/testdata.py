"""
Synthetic test data and CSV export endpoints.
"""

from fastapi import APIRouter, Response

from storytests.schemas.generation import GenerationRequest, GenerationResponse
from storytests.schemas.testdata import CsvExportRequest
from storytests.services.testdata import cases_to_csv, generate_synthetic_cases
from storytests.utils.correlation import get_correlation_logger

logger = get_correlation_logger(__name__)

router = APIRouter()

CSV_FILENAME = "test-cases.csv"


@router.post(
    "/generate",
    response_model=GenerationResponse,
    response_model_exclude_none=True,
    summary="Generate placeholder test cases without calling the model",
)
async def generate_test_data(request: GenerationRequest) -> GenerationResponse:
    response = generate_synthetic_cases(request)
    logger.info("Generated synthetic test cases", case_count=len(response.cases))
    return response


@router.post("/csv", summary="Export test cases as CSV")
async def export_csv(request: CsvExportRequest) -> Response:
    """Render the given cases as a CSV attachment."""
    content = cases_to_csv(request.cases)
    logger.info("Exported test cases as CSV", case_count=len(request.cases))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )
