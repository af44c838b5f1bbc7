"""Sequence Assistant API.

Turns free-form chat into an editable, numbered sequence of steps:
- Conversation turns persisted per user
- Replies from a chain of chat-completion providers with fallback
- Replies parsed into a workspace of steps the user can edit
- {{key}} variables resolved when steps are displayed
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src import config
from src.api.dependencies import get_sessions, get_store
from src.api.routes import messages, workspace

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Provider chain: {', '.join(config.PROVIDER_CHAIN)}")
    logger.info(
        f"History limit {config.HISTORY_LIMIT} turns, "
        f"provider timeout {config.PROVIDER_TIMEOUT}s"
    )
    store = get_store()
    logger.info(f"Using {type(store).__name__}")
    logger.info("Sequence Assistant API ready")
    yield
    logger.info("Shutting down Sequence Assistant API")


app = FastAPI(
    title="Sequence Assistant API",
    description="""
## Conversation to sequence

Chat with an assistant that drafts numbered step sequences
(campaign plans, onboarding flows) and refine them step by step.

### Key Endpoints

- `POST /v1/messages` - Send a message, receive the reply and updated workspace
- `GET /v1/messages` - Conversation history
- `GET /v1/workspace` - Current steps, variables and rendered text
- `POST /v1/workspace/steps/{id}/commit` - Commit an edit to one step
- `PUT /v1/workspace/variables/{key}` - Set a {{key}} variable

All `/v1` endpoints require an `X-User-Id` header.
""",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(messages.router, prefix="/v1")
app.include_router(workspace.router, prefix="/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Sequence Assistant API",
        "version": "0.1.0",
        "docs": "/docs",
        "endpoints": {
            "messages": "/v1/messages",
            "workspace": "/v1/workspace",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "providers": config.PROVIDER_CHAIN,
        "store": config.STORE_BACKEND,
        "active_sessions": get_sessions().count(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
    )
