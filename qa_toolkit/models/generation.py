"""
Generation API data models
"""

import json
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


def _coerce_json_value(value: Any) -> Any:
    """JSON text is parsed; blank text means absent; anything else passes through."""
    if isinstance(value, str):
        normalized = value.strip()
        if not normalized:
            return None
        try:
            return json.loads(normalized)
        except json.JSONDecodeError as exc:
            raise ValueError(f"must be valid JSON ({exc.msg})") from exc
    return value


class TestCaseRequest(BaseModel):
    __test__ = False

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field("", description="User story title")
    description: str = Field("", description="User story description")
    acceptance_criteria: List[str] = Field(
        default_factory=list,
        alias="acceptanceCriteria",
        description="One acceptance criterion per item",
    )
    api_schema: Optional[Any] = Field(
        None, alias="apiSchema", description="Optional API schema (JSON)"
    )

    @field_validator("title", "description", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("acceptance_criteria", mode="before")
    @classmethod
    def _normalize_criteria(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split("\n")
        normalized: List[str] = []
        for item in value:
            text = str(item or "").strip()
            if text:
                normalized.append(text)
        return normalized

    @field_validator("api_schema", mode="before")
    @classmethod
    def _parse_schema(cls, value: Any) -> Any:
        return _coerce_json_value(value)


class ApiTestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    service_name: str = Field("", alias="serviceName")
    endpoint_name: str = Field("", alias="endpointName")
    method: HttpMethod = Field(HttpMethod.GET)
    expected_response_code: str = Field("200", alias="expectedResponseCode")
    expected_response_status: str = Field("OK", alias="expectedResponseStatus")
    expected_response_body: Optional[Any] = Field(None, alias="expectedResponseBody")

    @field_validator("service_name", "endpoint_name", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return HttpMethod.GET
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("expected_response_code", mode="before")
    @classmethod
    def _normalize_code(cls, value: Any) -> str:
        if value is None:
            return "200"
        normalized = str(value).strip()
        return normalized or "200"

    @field_validator("expected_response_status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> str:
        if value is None:
            return "OK"
        normalized = str(value).strip()
        return normalized or "OK"

    @field_validator("expected_response_body", mode="before")
    @classmethod
    def _parse_body(cls, value: Any) -> Any:
        return _coerce_json_value(value)


def replace_lone_surrogates(text: str) -> str:
    """Unpaired UTF-16 surrogates (e.g. from a `\\ud800` JSON escape) become '?' so the text encodes as UTF-8."""
    return text.encode("utf-8", "replace").decode("utf-8")


class GenerationResponse(BaseModel):
    result: str

    @field_validator("result")
    @classmethod
    def _encodable_result(cls, value: str) -> str:
        return replace_lone_surrogates(value)


class ErrorResponse(BaseModel):
    error: str
