"""
Browser form snapshots and generation outcomes
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from qa_toolkit.models.generation import ApiTestRequest, TestCaseRequest


@dataclass(frozen=True)
class TestCaseForm:
    """Raw strings exactly as typed into the test-case form."""

    __test__ = False

    title: str = ""
    description: str = ""
    acceptance_criteria: str = ""
    api_schema: str = ""

    def to_request(self) -> TestCaseRequest:
        return TestCaseRequest(
            title=self.title.strip(),
            description=self.description.strip(),
            acceptance_criteria=self.acceptance_criteria,
            api_schema=self.api_schema,
        )


@dataclass(frozen=True)
class ApiTestForm:
    """Raw strings exactly as typed into the Postman form."""

    service_name: str = ""
    endpoint_name: str = ""
    method: str = "GET"
    expected_response_code: str = "200"
    expected_response_status: str = "OK"
    expected_response_body: str = ""

    def to_request(self) -> ApiTestRequest:
        return ApiTestRequest(
            service_name=self.service_name.strip(),
            endpoint_name=self.endpoint_name.strip(),
            method=self.method,
            expected_response_code=self.expected_response_code,
            expected_response_status=self.expected_response_status,
            expected_response_body=self.expected_response_body,
        )


class GenerationStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class GenerationResult:
    raw_text: Optional[str] = None
    error_message: Optional[str] = None

    def __post_init__(self):
        if (self.raw_text is None) == (self.error_message is None):
            raise ValueError("GenerationResult needs exactly one of raw_text or error_message")

    @classmethod
    def success(cls, raw_text: str) -> "GenerationResult":
        return cls(raw_text=raw_text)

    @classmethod
    def failure(cls, error_message: str) -> "GenerationResult":
        return cls(error_message=error_message)

    @property
    def succeeded(self) -> bool:
        return self.raw_text is not None
