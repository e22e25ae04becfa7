from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from qa_toolkit.models.forms import ApiTestForm, TestCaseForm
from qa_toolkit.services.input_validator import (
    MESSAGES,
    validate_api_test_form,
    validate_test_case_form,
)


def _valid_test_case_form(**overrides) -> TestCaseForm:
    values = {
        "title": "Login",
        "description": "User logs in with email and password",
        "acceptance_criteria": "Valid credentials succeed\nInvalid password shows error",
        "api_schema": "",
    }
    values.update(overrides)
    return TestCaseForm(**values)


def _valid_api_test_form(**overrides) -> ApiTestForm:
    values = {
        "service_name": "OrderService",
        "endpoint_name": "GetOrder",
        "method": "GET",
        "expected_response_code": "200",
        "expected_response_status": "OK",
        "expected_response_body": "",
    }
    values.update(overrides)
    return ApiTestForm(**values)


def test_complete_test_case_form_has_no_errors():
    assert validate_test_case_form(_valid_test_case_form()) == {}


def test_blank_test_case_form_reports_every_required_field():
    errors = validate_test_case_form(TestCaseForm())

    assert errors == {
        "title": MESSAGES["title"],
        "description": MESSAGES["description"],
        "acceptanceCriteria": MESSAGES["acceptanceCriteria"],
    }


def test_whitespace_only_fields_count_as_missing():
    errors = validate_test_case_form(
        _valid_test_case_form(title="   ", acceptance_criteria="\n \n")
    )

    assert set(errors) == {"title", "acceptanceCriteria"}


def test_invalid_api_schema_is_rejected():
    errors = validate_test_case_form(_valid_test_case_form(api_schema='{"id": string}'))

    assert errors == {"apiSchema": "API Schema must be valid JSON."}


def test_valid_api_schema_is_accepted():
    errors = validate_test_case_form(
        _valid_test_case_form(api_schema='  {"id": "string", "amount": "number"}  ')
    )

    assert errors == {}


def test_complete_api_test_form_has_no_errors():
    assert validate_api_test_form(_valid_api_test_form()) == {}


def test_api_test_form_requires_names_and_status():
    errors = validate_api_test_form(
        _valid_api_test_form(service_name="", endpoint_name=" ", expected_response_status="")
    )

    assert set(errors) == {"serviceName", "endpointName", "expectedResponseStatus"}


def test_non_numeric_response_code_is_rejected():
    errors = validate_api_test_form(_valid_api_test_form(expected_response_code="abc"))

    assert errors == {"expectedResponseCode": "Response code must be a number."}


def test_missing_response_code_uses_required_message():
    errors = validate_api_test_form(_valid_api_test_form(expected_response_code=""))

    assert errors["expectedResponseCode"] == MESSAGES["expectedResponseCode"]


def test_unknown_method_is_rejected_and_lowercase_is_accepted():
    assert validate_api_test_form(_valid_api_test_form(method="post")) == {}

    errors = validate_api_test_form(_valid_api_test_form(method="TRACE"))
    assert errors == {"method": MESSAGES["method.invalid"]}


def test_expected_response_body_must_be_json_when_present():
    errors = validate_api_test_form(
        _valid_api_test_form(expected_response_body="{success: true}")
    )
    assert errors == {"expectedResponseBody": MESSAGES["expectedResponseBody"]}

    ok = validate_api_test_form(
        _valid_api_test_form(expected_response_body='{"success": true}')
    )
    assert ok == {}
