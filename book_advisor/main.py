"""Main FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from book_advisor import __version__
from book_advisor.api.endpoints import router
from book_advisor.clients.anthropic import AnthropicClient, AnthropicConfig
from book_advisor.clients.google_books import BookLookupClient
from book_advisor.config import Settings, get_settings
from book_advisor.models.chat import ErrorResponse
from book_advisor.services.chat import ChatService
from book_advisor.services.reading_list import ReadingListStore
from book_advisor.tools.registry import ToolsRegistry
from book_advisor.utils.logging import LogConfig, get_logger, setup_logging

logger = get_logger(__name__)


def _build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        book_client = BookLookupClient(
            settings.google_books_base_url,
            api_key=settings.google_books_api_key,
            timeout=settings.book_api_timeout,
        )
        store = ReadingListStore(settings.database_url, book_client)
        await store.open()

        llm_client = AnthropicClient(
            api_key=settings.anthropic_api_key,
            config=AnthropicConfig(
                model=settings.llm_model,
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
            ),
        )
        tools_registry = ToolsRegistry(book_client, store)
        app.state.chat_service = ChatService(llm_client, tools_registry, max_input_chars=settings.max_input_chars)

        logger.info(f"Book Advisor {__version__} started with model {settings.llm_model}")
        try:
            yield
        finally:
            await store.close()
            await book_client.aclose()
            await llm_client.aclose()
            logger.info("Book Advisor shut down")

    return lifespan


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed request bodies with the service's error shape."""
    details = [error["msg"] for error in exc.errors()]
    logger.warning(f"Invalid request to {request.url.path}: {details}")
    return JSONResponse(status_code=422, content=ErrorResponse(error="Invalid request", details=details).model_dump())


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Runtime configuration (defaults to environment settings)
    """
    settings = settings or get_settings()
    setup_logging(LogConfig(level=settings.log_level))

    app = FastAPI(
        title="Book Advisor",
        description=(
            "A conversational book recommendation service that searches Google Books "
            "and manages a personal reading list through LLM tool use."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=_build_lifespan(settings),
        tags_metadata=[
            {
                "name": "Chat",
                "description": (
                    "Stateless chat turns. The client sends the full conversation history "
                    "and receives the assistant reply with the tools it used."
                ),
            },
            {
                "name": "Health",
                "description": "Service health monitoring and status checks.",
            },
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("book_advisor.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
