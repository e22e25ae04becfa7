from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from qa_toolkit.main import app
from qa_toolkit.services.completion_client import GenerationError
from qa_toolkit.services.generation_service import get_generation_service


class FakeGenerationService:
    def __init__(self, result="# Generated", error=None):
        self.result = result
        self.error = error
        self.test_case_requests = []
        self.api_test_requests = []

    async def generate_test_cases(self, request):
        self.test_case_requests.append(request)
        if self.error:
            raise self.error
        return self.result

    async def generate_api_tests(self, request):
        self.api_test_requests.append(request)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def fake_service():
    service = FakeGenerationService()
    app.dependency_overrides[get_generation_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_generation_service, None)


def test_generate_tests_returns_result(fake_service):
    client = TestClient(app)

    response = client.post(
        "/generate/tests",
        json={
            "title": "Login",
            "description": "User logs in",
            "acceptanceCriteria": ["Valid creds succeed", "  "],
            "apiSchema": {"id": "string"},
        },
    )

    assert response.status_code == 200
    assert response.json() == {"result": "# Generated"}
    request = fake_service.test_case_requests[0]
    assert request.acceptance_criteria == ["Valid creds succeed"]
    assert request.api_schema == {"id": "string"}


def test_generate_tests_requires_title_and_description(fake_service):
    client = TestClient(app)

    response = client.post("/generate/tests", json={"title": "Login", "description": "  "})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing title or description"}
    assert fake_service.test_case_requests == []


def test_generate_tests_rejects_unparsable_schema_text(fake_service):
    client = TestClient(app)

    response = client.post(
        "/generate/tests",
        json={"title": "Login", "description": "d", "apiSchema": "{not json"},
    )

    assert response.status_code == 400
    assert "apiSchema" in response.json()["error"]
    assert fake_service.test_case_requests == []


def test_generate_tests_hides_upstream_failure_detail(fake_service):
    fake_service.error = GenerationError("Completion API failed (401): invalid key sk-123")
    client = TestClient(app)

    response = client.post("/generate/tests", json={"title": "Login", "description": "d"})

    assert response.status_code == 500
    assert response.json() == {"error": "AI generation failed."}


def test_generate_api_tests_applies_defaults(fake_service):
    fake_service.result = "pm.test('ok', function () {});"
    client = TestClient(app)

    response = client.post(
        "/generate/api-tests",
        json={"serviceName": "OrderService", "endpointName": "GetOrder"},
    )

    assert response.status_code == 200
    assert response.json() == {"result": "pm.test('ok', function () {});"}
    request = fake_service.api_test_requests[0]
    assert request.method.value == "GET"
    assert request.expected_response_code == "200"
    assert request.expected_response_status == "OK"
    assert request.expected_response_body is None


def test_generate_api_tests_requires_service_and_endpoint(fake_service):
    client = TestClient(app)

    response = client.post("/generate/api-tests", json={"serviceName": "OrderService"})

    assert response.status_code == 400
    assert response.json() == {"error": "serviceName and endpointName are required"}


def test_generate_api_tests_rejects_unknown_method(fake_service):
    client = TestClient(app)

    response = client.post(
        "/generate/api-tests",
        json={"serviceName": "Svc", "endpointName": "Ep", "method": "TRACE"},
    )

    assert response.status_code == 400
    assert "method" in response.json()["error"]


def test_generate_api_tests_failure_uses_generic_message(fake_service):
    fake_service.error = GenerationError("Completion API timed out after 120s")
    client = TestClient(app)

    response = client.post(
        "/generate/api-tests",
        json={"serviceName": "Svc", "endpointName": "Ep", "expectedResponseCode": 201},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Postman test generation failed."}
    assert fake_service.api_test_requests[0].expected_response_code == "201"


def test_health_check():
    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_generate_tests_result_with_lone_surrogate_is_encodable(fake_service):
    fake_service.result = "ok \ud800"
    client = TestClient(app)

    response = client.post("/generate/tests", json={"title": "Login", "description": "d"})

    assert response.status_code == 200
    assert response.json() == {"result": "ok ?"}


def test_openapi_documents_error_model_for_both_routes():
    schema = TestClient(app).get("/openapi.json").json()

    for path in ("/generate/tests", "/generate/api-tests"):
        responses = schema["paths"][path]["post"]["responses"]
        for code in ("400", "500"):
            ref = responses[code]["content"]["application/json"]["schema"]["$ref"]
            assert ref.endswith("/ErrorResponse")
