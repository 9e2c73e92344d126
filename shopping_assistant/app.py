from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .catalog_client import CatalogClient
from .config import load_settings
from .errors import ShoppingAssistantError
from .gemini_client import GeminiClient
from .models import ChatRequest, ChatResponse, ErrorResponse, HealthResponse, ProductPayload
from .pipeline import AggregationPipeline
from .product_normalizer import ProductNormalizer
from .prompt_loader import build_extraction_instruction

BASE_DIR = Path(__file__).resolve().parent

ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=True)

settings = load_settings()

log_level = getattr(logging, settings.log_level, logging.INFO)
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

logging.getLogger("shopping_assistant").setLevel(log_level)
logger = logging.getLogger("shopping_assistant.api")

app = FastAPI(title="Shopping Assistant Catalog Search")
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["*"],
)

gemini = GeminiClient(settings)
catalog = CatalogClient(settings)
pipeline = AggregationPipeline(
    llm=gemini,
    catalog=catalog,
    normalizer=ProductNormalizer(settings),
    settings=settings,
    system_instruction=build_extraction_instruction(settings.prompts_dir, settings.max_terms),
)


def _error(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).dict(), headers=headers)


@app.exception_handler(ShoppingAssistantError)
async def handle_assistant_error(request: Request, exc: ShoppingAssistantError) -> JSONResponse:
    """Purpose: Render pipeline errors as {"error": ...} bodies.
    Inputs/Outputs: Inputs are the request and the raised error; output is a JSONResponse.
    Side Effects / State: Logs the failure.
    Dependencies: ShoppingAssistantError.status_code.
    Failure Modes: None.
    If Removed: LLM failures surface as FastAPI's default 500 page.
    Testing Notes: A failing LLM returns 500 with an "error" key.
    """
    # Upstream failures are server errors; invalid input is a client error.
    logger.warning("path=%s error=%s detail=%s", request.url.path, exc.__class__.__name__, exc)
    return _error(exc.status_code, str(exc))


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("path=%s invalid_request=%s", request.url.path, exc.errors())
    return _error(400, "Request body must be JSON with a string 'message' field")


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("path=%s unhandled_error=%s", request.url.path, exc.__class__.__name__)
    return _error(500, "Internal server error")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await catalog.aclose()


@app.get("/api/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Report the active catalog account, selection mode and model."""
    return HealthResponse(
        status="ok",
        catalog_account=settings.vtex_account,
        selection_mode=settings.selection_mode,
        model=gemini.model_name,
    )


@app.post("/api/chat", response_model=ChatResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def chat(request: ChatRequest) -> ChatResponse:
    """Purpose: Turn a shopping message into a reply plus matching catalog products.
    Inputs/Outputs: Input is ChatRequest; output is ChatResponse with reply/products.
    Side Effects / State: One LLM call and one catalog search per extracted term.
    Dependencies: AggregationPipeline.run.
    Failure Modes: Blank message -> 400; LLM failure -> 500; both as {"error": ...}.
    If Removed: Core chat functionality is unavailable.
    Testing Notes: Send a sample message and verify response schema.
    """
    # Run the pipeline (it rejects blank messages) and map products to the wire shape.
    result = await pipeline.run(request.message)
    return ChatResponse(
        reply=result.reply,
        products=[ProductPayload.from_product(product) for product in result.products],
    )
