"""
Chat-completions client: one outbound call per generation
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from qa_toolkit.config import OpenAIConfig, get_settings
from qa_toolkit.models.generation import replace_lone_surrogates

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """The completion call failed or returned nothing usable."""


class CompletionClient:
    """Thin adapter over an OpenAI-compatible chat-completions endpoint."""

    def __init__(self, config: Optional[OpenAIConfig] = None):
        self._config = config or get_settings().openai

    @property
    def _api_key(self) -> str:
        return (self._config.api_key or "").strip()

    def _headers(self) -> Dict[str, str]:
        if not self._api_key:
            raise GenerationError("OpenAI API key is not configured (set OPENAI_API_KEY)")
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _coerce_content_text(raw: Any) -> str:
        if isinstance(raw, str):
            return raw.strip()
        if isinstance(raw, list):
            fragments: List[str] = []
            for item in raw:
                if isinstance(item, str) and item.strip():
                    fragments.append(item.strip())
                elif isinstance(item, dict):
                    candidate = item.get("text") or item.get("content")
                    if isinstance(candidate, str) and candidate.strip():
                        fragments.append(candidate.strip())
            return "\n".join(fragments).strip()
        return ""

    @classmethod
    def extract_response_content(cls, data: Any) -> str:
        """First choice's message text, or the flat `output_text` some gateways return."""
        if not isinstance(data, dict):
            return ""
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            choice = choices[0]
            message = choice.get("message") if isinstance(choice.get("message"), dict) else {}
            content = cls._coerce_content_text(message.get("content"))
            if content:
                return content
            content = cls._coerce_content_text(choice.get("text"))
            if content:
                return content
        return cls._coerce_content_text(data.get("output_text"))

    @staticmethod
    def extract_error_detail(text_body: str) -> str:
        try:
            error_payload = json.loads(text_body)
        except json.JSONDecodeError:
            return text_body
        if isinstance(error_payload, dict):
            error = error_payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if error_payload.get("message"):
                return str(error_payload["message"])
        return text_body

    async def _post_json(
        self,
        *,
        url: str,
        headers: Dict[str, str],
        payload: Dict[str, Any],
        timeout_seconds: int,
    ) -> Dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=max(1, timeout_seconds))
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, headers=headers, json=payload) as response:
                    text_body = await response.text()
                    status = response.status
        except asyncio.TimeoutError as exc:
            raise GenerationError(
                f"Completion API timed out after {timeout_seconds}s"
            ) from exc
        except aiohttp.ClientError as exc:
            raise GenerationError(
                f"Completion API unreachable ({type(exc).__name__}): {exc}"
            ) from exc
        except UnicodeDecodeError as exc:
            raise GenerationError("Completion API returned an undecodable body") from exc

        if status >= 400:
            detail = self.extract_error_detail(text_body)
            raise GenerationError(f"Completion API failed ({status}): {detail}")

        try:
            return json.loads(text_body)
        except json.JSONDecodeError as exc:
            raise GenerationError("Completion API returned a non-JSON body") from exc

    async def complete(
        self,
        *,
        system_instruction: str,
        user_prompt: str,
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        headers = self._headers()

        messages: List[Dict[str, str]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": user_prompt})

        payload: Dict[str, Any] = {"model": model, "messages": messages}
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max(1, int(max_tokens))

        logger.info(
            "Completion call: model=%s temperature=%s max_tokens=%s prompt_chars=%d",
            model,
            temperature if temperature is not None else "unset(default)",
            max_tokens if max_tokens is not None else "unset(default)",
            len(user_prompt),
        )

        data = await self._post_json(
            url=self._config.api_url,
            headers=headers,
            payload=payload,
            timeout_seconds=self._config.timeout,
        )
        content = self.extract_response_content(data)
        if not content:
            logger.warning(
                "Completion API returned empty content: model=%s response_id=%s",
                model,
                data.get("id") if isinstance(data, dict) else None,
            )
            raise GenerationError("Completion API returned no content")
        return replace_lone_surrogates(content)


_completion_client: Optional[CompletionClient] = None


def get_completion_client() -> CompletionClient:
    global _completion_client
    if _completion_client is None:
        _completion_client = CompletionClient()
    return _completion_client
