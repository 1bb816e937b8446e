"""
Response Parser for Generation Service Output

This module validates the untrusted text returned by the language model.
Parsing happens in two strict stages so that callers can tell the failure
modes apart: text that is not JSON at all, and JSON that does not satisfy
the response contract.
"""

import json
from typing import Any, Dict, List

from pydantic import ValidationError

from storytests.core.exceptions import MalformedModelOutputException, SchemaMismatchException
from storytests.schemas.generation.response import GenerationResponse
from storytests.services.ai.openai_service import ModelCompletion
from storytests.utils.correlation import get_correlation_logger

logger = get_correlation_logger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


class ResponseParser:
    """Parses and validates generation service responses."""

    def parse(self, raw_response: str) -> GenerationResponse:
        """
        Parse model output into a typed response.

        Raises:
            MalformedModelOutputException: the text is not strict JSON.
            SchemaMismatchException: the JSON does not match GenerationResponse.
        """
        try:
            data = json.loads(raw_response, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            logger.warning(
                "Model output is not valid JSON",
                error=str(e),
                response_length=len(raw_response),
            )
            raise MalformedModelOutputException(
                f"Model output is not valid JSON: {e}",
                raw_response=raw_response,
                cause=e,
            ) from e

        try:
            return GenerationResponse.model_validate(data)
        except ValidationError as e:
            violations = self.format_violations(e)
            logger.warning(
                "Model output does not match expected schema",
                violations=violations,
            )
            raise SchemaMismatchException(violations, cause=e) from e

    @staticmethod
    def format_violations(error: ValidationError) -> List[Dict[str, Any]]:
        """Flatten a pydantic error into path/message/code entries."""
        violations = []
        for item in error.errors(include_url=False):
            path = ".".join(str(loc) for loc in item["loc"])
            violations.append({
                "path": path or "(root)",
                "message": item["msg"],
                "code": item["type"],
            })
        return violations

    @staticmethod
    def attach_metadata(response: GenerationResponse, completion: ModelCompletion) -> GenerationResponse:
        """Overlay the gateway's model id and token counts on a validated response."""
        return response.model_copy(update={
            "model": completion.model,
            "prompt_tokens": completion.prompt_tokens,
            "completion_tokens": completion.completion_tokens,
        })


# Global response parser instance
response_parser = ResponseParser()
