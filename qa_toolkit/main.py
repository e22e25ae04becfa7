from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pathlib import Path
import logging

from qa_toolkit.api import api_router
from qa_toolkit.api.generation import MissingRequiredFieldError, UpstreamGenerationError
from qa_toolkit.config import settings

# Configure logging
logging.basicConfig(level=logging.DEBUG if settings.app.debug else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="QA Engineering Toolkit",
    description="Generates test cases and Postman test scripts with an LLM completion API",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

STATIC_DIR = Path(__file__).resolve().parent / "static"
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

app.include_router(api_router)


@app.exception_handler(MissingRequiredFieldError)
async def missing_required_field_handler(request: Request, exc: MissingRequiredFieldError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        problems.append(f"{location}: {message}" if location else message)
    logger.info("Rejected malformed request to %s: %s", request.url.path, problems)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "; ".join(problems) or "Invalid request body"},
    )


@app.exception_handler(UpstreamGenerationError)
async def upstream_generation_handler(request: Request, exc: UpstreamGenerationError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.on_event("startup")
async def startup_event():
    if settings.openai.api_key:
        logger.info("Completion API configured: %s", settings.openai.api_url)
    else:
        logger.warning("OPENAI_API_KEY is not set; generation requests will fail")
    logger.info("QA toolkit backend listening on http://%s:%s", settings.app.host, settings.app.port)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.app.host, port=settings.app.port)
