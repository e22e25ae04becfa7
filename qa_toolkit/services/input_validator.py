from __future__ import annotations

import json
from typing import Dict

from qa_toolkit.models.forms import ApiTestForm, TestCaseForm
from qa_toolkit.models.generation import HttpMethod

ALLOWED_METHODS = tuple(method.value for method in HttpMethod)

MESSAGES = {
    "title": "Title is required.",
    "description": "Description is required.",
    "acceptanceCriteria": "At least one acceptance criterion is required.",
    "apiSchema": "API Schema must be valid JSON.",
    "serviceName": "Service name is required.",
    "endpointName": "Endpoint name is required.",
    "method": "HTTP method is required.",
    "method.invalid": "HTTP method must be one of " + ", ".join(ALLOWED_METHODS) + ".",
    "expectedResponseCode": "Expected response code is required.",
    "expectedResponseCode.numeric": "Response code must be a number.",
    "expectedResponseStatus": "Expected response status is required.",
    "expectedResponseBody": "Expected response body must be valid JSON.",
}


def _is_blank(value: str) -> bool:
    return not str(value or "").strip()


def _is_valid_json(value: str) -> bool:
    try:
        json.loads(value)
    except (TypeError, ValueError, RecursionError):
        return False
    return True


def _is_integer(value: str) -> bool:
    try:
        int(str(value).strip())
    except ValueError:
        return False
    return True


def validate_test_case_form(form: TestCaseForm) -> Dict[str, str]:
    """Return field -> message for every problem; empty means submittable."""
    errors: Dict[str, str] = {}

    if _is_blank(form.title):
        errors["title"] = MESSAGES["title"]
    if _is_blank(form.description):
        errors["description"] = MESSAGES["description"]
    if _is_blank(form.acceptance_criteria):
        errors["acceptanceCriteria"] = MESSAGES["acceptanceCriteria"]

    if not _is_blank(form.api_schema) and not _is_valid_json(form.api_schema.strip()):
        errors["apiSchema"] = MESSAGES["apiSchema"]

    return errors


def validate_api_test_form(form: ApiTestForm) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if _is_blank(form.service_name):
        errors["serviceName"] = MESSAGES["serviceName"]
    if _is_blank(form.endpoint_name):
        errors["endpointName"] = MESSAGES["endpointName"]

    if _is_blank(form.method):
        errors["method"] = MESSAGES["method"]
    elif form.method.strip().upper() not in ALLOWED_METHODS:
        errors["method"] = MESSAGES["method.invalid"]

    if _is_blank(form.expected_response_code):
        errors["expectedResponseCode"] = MESSAGES["expectedResponseCode"]
    elif not _is_integer(form.expected_response_code):
        errors["expectedResponseCode"] = MESSAGES["expectedResponseCode.numeric"]

    if _is_blank(form.expected_response_status):
        errors["expectedResponseStatus"] = MESSAGES["expectedResponseStatus"]

    if not _is_blank(form.expected_response_body) and not _is_valid_json(
        form.expected_response_body.strip()
    ):
        errors["expectedResponseBody"] = MESSAGES["expectedResponseBody"]

    return errors
