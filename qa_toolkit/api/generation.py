"""
Generation API: JSON endpoints consumed by the browser forms
"""

import logging

from fastapi import APIRouter, Depends

from qa_toolkit.models.generation import (
    ApiTestRequest,
    ErrorResponse,
    GenerationResponse,
    TestCaseRequest,
)
from qa_toolkit.services.completion_client import GenerationError
from qa_toolkit.services.generation_service import GenerationService, get_generation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/generate", tags=["generate"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or malformed input"},
    500: {"model": ErrorResponse, "description": "Completion API failure"},
}


class MissingRequiredFieldError(ValueError):
    """Required request fields were empty; answered with 400."""


class UpstreamGenerationError(RuntimeError):
    """Generation failed upstream; answered with 500 and a generic message."""


@router.post("/tests", response_model=GenerationResponse, responses=ERROR_RESPONSES)
async def generate_tests(
    request: TestCaseRequest,
    service: GenerationService = Depends(get_generation_service),
) -> GenerationResponse:
    if not request.title.strip() or not request.description.strip():
        raise MissingRequiredFieldError("Missing title or description")

    try:
        result = await service.generate_test_cases(request)
    except GenerationError as exc:
        logger.error("AI generation failed: %s", exc, exc_info=True)
        raise UpstreamGenerationError("AI generation failed.") from exc
    return GenerationResponse(result=result)


@router.post("/api-tests", response_model=GenerationResponse, responses=ERROR_RESPONSES)
async def generate_api_tests(
    request: ApiTestRequest,
    service: GenerationService = Depends(get_generation_service),
) -> GenerationResponse:
    if not request.service_name.strip() or not request.endpoint_name.strip():
        raise MissingRequiredFieldError("serviceName and endpointName are required")

    try:
        result = await service.generate_api_tests(request)
    except GenerationError as exc:
        logger.error("Error generating API tests: %s", exc, exc_info=True)
        raise UpstreamGenerationError("Postman test generation failed.") from exc
    return GenerationResponse(result=result)
