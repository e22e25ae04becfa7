from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from qa_toolkit.config import API_TEST_SYSTEM_PROMPT, GenerationConfig, PromptsConfig
from qa_toolkit.models.generation import ApiTestRequest, TestCaseRequest
from qa_toolkit.services.generation_service import GenerationService
from qa_toolkit.services.prompt_service import PromptService


class FakeCompletionClient:
    def __init__(self, content="# Result"):
        self.content = content
        self.calls = []

    async def complete(self, **kwargs):
        self.calls.append(kwargs)
        return self.content


def _service(client) -> GenerationService:
    return GenerationService(
        client=client,
        prompt_service=PromptService(prompts_config=PromptsConfig(), prompt_dir=""),
        generation_config=GenerationConfig(),
    )


@pytest.mark.asyncio
async def test_test_case_flow_makes_one_call_with_default_sampling():
    client = FakeCompletionClient("# 1. User Story Summary")

    result = await _service(client).generate_test_cases(
        TestCaseRequest(title="Login", description="d", acceptanceCriteria=["c"])
    )

    assert result == "# 1. User Story Summary"
    assert len(client.calls) == 1
    call = client.calls[0]
    assert call["model"] == "gpt-4.1"
    assert call["temperature"] is None
    assert call["max_tokens"] is None
    assert call["system_instruction"].startswith("You are an expert QA test engineer")
    assert "USER STORY TITLE:\nLogin" in call["user_prompt"]


@pytest.mark.asyncio
async def test_api_test_flow_uses_postman_settings_and_strips_fence():
    client = FakeCompletionClient("```javascript\npm.test('x', function () {});\n```")

    result = await _service(client).generate_api_tests(
        ApiTestRequest(serviceName="Svc", endpointName="Ep", method="POST")
    )

    assert result == "pm.test('x', function () {});"
    call = client.calls[0]
    assert call["system_instruction"] == API_TEST_SYSTEM_PROMPT
    assert call["temperature"] == 0.2
    assert call["max_tokens"] == 1200
    assert '[METHOD] with "POST"' in call["user_prompt"]
