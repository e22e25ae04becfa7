"""
Browser UI: test-case form and Postman form
"""

import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from qa_toolkit.models.forms import ApiTestForm, GenerationResult, TestCaseForm
from qa_toolkit.services.artifact_exporter import postman_script_exports, result_exports
from qa_toolkit.services.form_session import (
    FormKind,
    FormSession,
    FormSessionStore,
    GenerationInProgressError,
    get_form_session_store,
)
from qa_toolkit.services.generation_service import GenerationService, get_generation_service
from qa_toolkit.services.input_validator import (
    ALLOWED_METHODS,
    validate_api_test_form,
    validate_test_case_form,
)
from qa_toolkit.services.result_renderer import (
    RenderedArtifact,
    get_result_renderer,
    strip_code_fences,
    strip_script_fence,
    wrap_as_script_block,
)

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["pages"])

SESSION_COOKIE = "qa_toolkit_session"
FAILURE_NOTICES = {
    "test_cases": "AI generation failed. Please try again.",
    "api_tests": "Postman test generation failed. Please try again.",
}
BUSY_NOTICE = "A generation is already running for this form. Please wait for it to finish."


def _session_id(request: Request) -> str:
    return request.cookies.get(SESSION_COOKIE) or FormSessionStore.new_session_id()


def _result_context(kind: FormKind, session: FormSession) -> Dict[str, Any]:
    result = session.last_result
    if result is None:
        return {}
    if not result.succeeded:
        return {"error_message": result.error_message}

    artifact = session.artifact
    if kind == "api_tests":
        copy_text = strip_script_fence(artifact.raw_text)
        exports = postman_script_exports(copy_text)
    else:
        copy_text = artifact.raw_text
        exports = result_exports(copy_text)
    return {"artifact": artifact, "copy_text": copy_text, "exports": exports}


def _render_page(
    request: Request,
    kind: FormKind,
    session_id: str,
    session: FormSession,
    notice: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    if kind == "api_tests":
        template_name = "api_tests.html"
        form = session.form or ApiTestForm()
    else:
        template_name = "test_cases.html"
        form = session.form or TestCaseForm()

    context: Dict[str, Any] = {
        "active_view": kind,
        "form": form,
        "errors": session.validation_errors,
        "generation_status": session.status.value,
        "generation_id": session.generation_id,
        "notice": notice,
        "methods": ALLOWED_METHODS,
    }
    context.update(_result_context(kind, session))

    response = templates.TemplateResponse(
        request, template_name, context, status_code=status_code
    )
    response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return response


async def _dispatch(
    session: FormSession,
    form: Any,
    request_model: Any,
    generate: Callable[[Any], Awaitable[str]],
    present: Callable[[str], RenderedArtifact],
    failure_notice: str,
) -> None:
    generation_id = session.begin(form, request_model)
    result = GenerationResult.failure(failure_notice)
    artifact: Optional[RenderedArtifact] = None
    try:
        raw_text = await generate(request_model)
        artifact = present(raw_text)
        result = GenerationResult.success(raw_text)
    except Exception as exc:  # noqa: BLE001
        logger.error("UI generation failed: %s", exc, exc_info=True)
    finally:
        # Cancellation must not leave the form stuck in "generating"
        session.complete(generation_id, result, artifact)


def _present_markdown(raw_text: str) -> RenderedArtifact:
    return get_result_renderer().render(raw_text)


def _present_script(raw_text: str) -> RenderedArtifact:
    return get_result_renderer().render(wrap_as_script_block(strip_code_fences(raw_text)))


@router.get("/", response_class=HTMLResponse)
async def test_case_page(
    request: Request,
    store: FormSessionStore = Depends(get_form_session_store),
):
    session_id = _session_id(request)
    return _render_page(request, "test_cases", session_id, store.get(session_id, "test_cases"))


@router.post("/ui/tests", response_class=HTMLResponse)
async def submit_test_case_form(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    acceptance_criteria: str = Form(""),
    api_schema: str = Form(""),
    service: GenerationService = Depends(get_generation_service),
    store: FormSessionStore = Depends(get_form_session_store),
):
    session_id = _session_id(request)
    session = store.get(session_id, "test_cases")
    form = TestCaseForm(
        title=title,
        description=description,
        acceptance_criteria=acceptance_criteria,
        api_schema=api_schema,
    )

    try:
        errors = validate_test_case_form(form)
        if errors:
            session.reject(form, errors)
            return _render_page(
                request, "test_cases", session_id, session,
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        await _dispatch(
            session,
            form,
            form.to_request(),
            service.generate_test_cases,
            _present_markdown,
            FAILURE_NOTICES["test_cases"],
        )
    except GenerationInProgressError:
        return _render_page(
            request, "test_cases", session_id, session,
            notice=BUSY_NOTICE, status_code=status.HTTP_409_CONFLICT,
        )
    return _render_page(request, "test_cases", session_id, session)


@router.post("/ui/tests/reset")
async def reset_test_case_form(
    request: Request,
    store: FormSessionStore = Depends(get_form_session_store),
):
    session_id = _session_id(request)
    store.get(session_id, "test_cases").reset()
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/api-tests", response_class=HTMLResponse)
async def api_test_page(
    request: Request,
    store: FormSessionStore = Depends(get_form_session_store),
):
    session_id = _session_id(request)
    return _render_page(request, "api_tests", session_id, store.get(session_id, "api_tests"))


@router.post("/ui/api-tests", response_class=HTMLResponse)
async def submit_api_test_form(
    request: Request,
    service_name: str = Form(""),
    endpoint_name: str = Form(""),
    method: str = Form("GET"),
    expected_response_code: str = Form("200"),
    expected_response_status: str = Form("OK"),
    expected_response_body: str = Form(""),
    service: GenerationService = Depends(get_generation_service),
    store: FormSessionStore = Depends(get_form_session_store),
):
    session_id = _session_id(request)
    session = store.get(session_id, "api_tests")
    form = ApiTestForm(
        service_name=service_name,
        endpoint_name=endpoint_name,
        method=method,
        expected_response_code=expected_response_code,
        expected_response_status=expected_response_status,
        expected_response_body=expected_response_body,
    )

    try:
        errors = validate_api_test_form(form)
        if errors:
            session.reject(form, errors)
            return _render_page(
                request, "api_tests", session_id, session,
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        await _dispatch(
            session,
            form,
            form.to_request(),
            service.generate_api_tests,
            _present_script,
            FAILURE_NOTICES["api_tests"],
        )
    except GenerationInProgressError:
        return _render_page(
            request, "api_tests", session_id, session,
            notice=BUSY_NOTICE, status_code=status.HTTP_409_CONFLICT,
        )
    return _render_page(request, "api_tests", session_id, session)


@router.post("/ui/api-tests/reset")
async def reset_api_test_form(
    request: Request,
    store: FormSessionStore = Depends(get_form_session_store),
):
    session_id = _session_id(request)
    store.get(session_id, "api_tests").reset()
    return RedirectResponse(url="/api-tests", status_code=status.HTTP_303_SEE_OTHER)
