"""Generation pipeline services."""

from .artifact_exporter import ExportArtifact, export_artifact, postman_script_exports, result_exports
from .completion_client import CompletionClient, GenerationError
from .form_session import FormSession, FormSessionStore, GenerationInProgressError
from .generation_service import GenerationService
from .input_validator import validate_api_test_form, validate_test_case_form
from .prompt_service import PromptService
from .result_renderer import (
    FencedCode,
    InlineCode,
    RenderedArtifact,
    ResultRenderer,
    strip_script_fence,
    wrap_as_script_block,
)

__all__ = [
    "CompletionClient",
    "ExportArtifact",
    "FencedCode",
    "FormSession",
    "FormSessionStore",
    "GenerationError",
    "GenerationInProgressError",
    "GenerationService",
    "InlineCode",
    "PromptService",
    "RenderedArtifact",
    "ResultRenderer",
    "export_artifact",
    "postman_script_exports",
    "result_exports",
    "strip_script_fence",
    "validate_api_test_form",
    "validate_test_case_form",
    "wrap_as_script_block",
]
