"""Prompt rendering for the two generation flows.

This module:
- reads the test-case and Postman-script templates from settings
  (or from `<prompt_dir>/<stage>.md` when such a file exists)
- substitutes `{placeholder}` tokens in a single pass
- turns validated request models into the values each template expects
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

from qa_toolkit.config import PromptsConfig, get_settings
from qa_toolkit.models.generation import ApiTestRequest, TestCaseRequest

PromptStage = Literal["test_cases", "api_tests"]

NONE_SENTINEL = "None"
NO_BODY_SENTINEL = "No JSON body provided"

_PLACEHOLDER_PATTERN = re.compile(r"\{([a-z_]+)\}")

logger = logging.getLogger(__name__)


def pretty_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def quote_literal(value: str) -> str:
    """Quoted string literal; embedded quotes and backslashes are escaped."""
    return json.dumps(str(value), ensure_ascii=False)


def code_literal(value: str) -> str:
    normalized = str(value).strip()
    try:
        return str(int(normalized))
    except ValueError:
        return quote_literal(normalized)


class PromptService:
    """Renders generation prompts from the configured templates."""

    def __init__(
        self,
        prompts_config: Optional[PromptsConfig] = None,
        prompt_dir: Optional[Union[str, Path]] = None,
    ):
        self._config = prompts_config or get_settings().prompts
        configured_dir = prompt_dir if prompt_dir is not None else self._config.prompt_dir
        self._prompt_dir = Path(configured_dir) if configured_dir else None

    def get_prompt_template(self, stage: PromptStage) -> str:
        if self._prompt_dir is not None:
            prompt_file = self._prompt_dir / f"{stage}.md"
            if prompt_file.is_file():
                return prompt_file.read_text(encoding="utf-8")
            logger.debug("Prompt file %s not found, using configured template", prompt_file)
        return getattr(self._config, stage)

    def render_prompt(self, stage: PromptStage, replacements: Dict[str, str]) -> str:
        template = self.get_prompt_template(stage)

        def _substitute(match: "re.Match[str]") -> str:
            key = match.group(1)
            if key not in replacements:
                return match.group(0)
            value = replacements[key]
            return "" if value is None else str(value)

        return _PLACEHOLDER_PATTERN.sub(_substitute, template)

    def build_test_case_prompt(self, request: TestCaseRequest) -> str:
        criteria = request.acceptance_criteria
        return self.render_prompt(
            "test_cases",
            {
                "title": request.title,
                "description": request.description,
                "acceptance_criteria": "\n".join(criteria) if criteria else NONE_SENTINEL,
                "api_schema": (
                    pretty_json(request.api_schema)
                    if request.api_schema is not None
                    else NONE_SENTINEL
                ),
            },
        )

    def build_api_test_prompt(self, request: ApiTestRequest) -> str:
        body = request.expected_response_body
        return self.render_prompt(
            "api_tests",
            {
                "service_name": quote_literal(request.service_name),
                "endpoint_name": quote_literal(request.endpoint_name),
                "method": quote_literal(request.method.value),
                "expected_response_code": code_literal(request.expected_response_code),
                "expected_response_status": quote_literal(request.expected_response_status),
                "expected_response_body": (
                    pretty_json(body) if body is not None else NO_BODY_SENTINEL
                ),
            },
        )


_prompt_service: Optional[PromptService] = None


def get_prompt_service() -> PromptService:
    global _prompt_service
    if _prompt_service is None:
        _prompt_service = PromptService()
    return _prompt_service


def build_test_case_prompt(request: TestCaseRequest) -> str:
    return get_prompt_service().build_test_case_prompt(request)


def build_api_test_prompt(request: ApiTestRequest) -> str:
    return get_prompt_service().build_api_test_prompt(request)
