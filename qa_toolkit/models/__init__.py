from .forms import ApiTestForm, GenerationResult, GenerationStatus, TestCaseForm
from .generation import (
    ApiTestRequest,
    ErrorResponse,
    GenerationResponse,
    HttpMethod,
    TestCaseRequest,
)

__all__ = [
    "ApiTestForm",
    "ApiTestRequest",
    "ErrorResponse",
    "GenerationResponse",
    "GenerationResult",
    "GenerationStatus",
    "HttpMethod",
    "TestCaseForm",
    "TestCaseRequest",
]
