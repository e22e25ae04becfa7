"""
Generation workflow: request model -> prompt -> completion text
"""

import logging
from typing import Optional

from qa_toolkit.config import GenerationConfig, GenerationStageConfig, get_settings
from qa_toolkit.models.generation import ApiTestRequest, TestCaseRequest
from qa_toolkit.services.completion_client import CompletionClient, get_completion_client
from qa_toolkit.services.prompt_service import PromptService, get_prompt_service
from qa_toolkit.services.result_renderer import strip_code_fences

logger = logging.getLogger(__name__)


class GenerationService:
    """Builds the flow's prompt and makes exactly one completion call for it."""

    def __init__(
        self,
        client: Optional[CompletionClient] = None,
        prompt_service: Optional[PromptService] = None,
        generation_config: Optional[GenerationConfig] = None,
    ):
        self._client = client or get_completion_client()
        self._prompts = prompt_service or get_prompt_service()
        self._config = generation_config or get_settings().generation

    async def _complete(self, stage: GenerationStageConfig, prompt: str) -> str:
        return await self._client.complete(
            system_instruction=stage.system_prompt,
            user_prompt=prompt,
            model=stage.model,
            temperature=stage.temperature,
            max_tokens=stage.max_tokens,
        )

    async def generate_test_cases(self, request: TestCaseRequest) -> str:
        prompt = self._prompts.build_test_case_prompt(request)
        logger.info(
            "Generating test cases: title=%r criteria=%d schema=%s",
            request.title,
            len(request.acceptance_criteria),
            request.api_schema is not None,
        )
        return await self._complete(self._config.test_cases, prompt)

    async def generate_api_tests(self, request: ApiTestRequest) -> str:
        """Returns the bare script; a fence the model added anyway is removed."""
        prompt = self._prompts.build_api_test_prompt(request)
        logger.info(
            "Generating Postman tests: service=%r endpoint=%r method=%s code=%s",
            request.service_name,
            request.endpoint_name,
            request.method.value,
            request.expected_response_code,
        )
        content = await self._complete(self._config.api_tests, prompt)
        return strip_code_fences(content)


_generation_service: Optional[GenerationService] = None


def get_generation_service() -> GenerationService:
    global _generation_service
    if _generation_service is None:
        _generation_service = GenerationService()
    return _generation_service
