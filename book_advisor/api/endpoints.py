"""API endpoints for the Book Advisor service."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from book_advisor import __version__
from book_advisor.models.chat import ChatRequest, ChatResponse, ChatValidationError, ErrorResponse, HealthResponse
from book_advisor.services.chat import ChatService
from book_advisor.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

INTERNAL_ERROR = "Internal server error"


def get_chat_service(request: Request) -> ChatService:
    """Chat service created in the application lifespan."""
    return request.app.state.chat_service


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Chat"],
)
async def handle_chat(request: ChatRequest, chat_service: ChatService = Depends(get_chat_service)):
    """Run one chat turn over the full client-held conversation.

    The reply carries the assistant's text and the names of the tools it asked for.
    """
    last = request.messages[-1]
    logger.info(f"Processing chat with {len(request.messages)} messages, last {last.role}: {last.content[:50]}...")

    try:
        response = await chat_service.process_messages(request.messages)
    except ChatValidationError as e:
        logger.warning(f"Chat validation error: {e}")
        return JSONResponse(status_code=400, content=ErrorResponse(error=str(e)).model_dump(exclude_none=True))
    except Exception as e:
        logger.error(f"Chat processing error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content=ErrorResponse(error=INTERNAL_ERROR).model_dump(exclude_none=True))

    logger.info(f"Generated response: {response.content[:50]}... tools used: {response.tools_used}")
    return response


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )
