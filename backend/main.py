import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from api.pages import router as pages_router
from auth import UserRegistry
from config import (
    DEFAULT_PAGE_FORMAT,
    HOST,
    INITIAL_USER_EMAIL,
    INITIAL_USER_NAME,
    INITIAL_USER_URL,
    KATEX_MACROS,
    LOG_LEVEL,
    PAGES_DIRECTORY,
    PAGES_GIT_PRIVATE_KEY,
    PAGES_GIT_PUBLIC_KEY,
    PAGES_GIT_REPOSITORY,
    PANDOC_PATH,
    PORT,
    USERS_DATABASE,
)
from renderer import Format, PandocRenderer
from storage import PageStore, RemoteConfig, RepositoryHandle, Role, User

logging.basicConfig(level=LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def build_remote_config() -> RemoteConfig:
    if not PAGES_GIT_REPOSITORY:
        raise ValueError("PAGES_GIT_REPOSITORY environment variable is required. See .env.example")
    return RemoteConfig(
        url=PAGES_GIT_REPOSITORY,
        private_key=Path(PAGES_GIT_PRIVATE_KEY),
        public_key=Path(PAGES_GIT_PUBLIC_KEY) if PAGES_GIT_PUBLIC_KEY else None,
    )


def build_initial_user() -> User | None:
    if not (INITIAL_USER_NAME and INITIAL_USER_EMAIL):
        return None
    return User(
        name=INITIAL_USER_NAME,
        email=INITIAL_USER_EMAIL,
        url=INITIAL_USER_URL,
        approved=True,
        roles=[Role.ADMINISTRATOR],
    )


# Create FastAPI app
app = FastAPI(
    title="Wiki Backend",
    description="Git-backed wiki: versioned page storage with attributed history",
    version="1.0.0"
)

# Add CORS middleware for frontend connections
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual frontend URLs
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pages_router)


@app.on_event("startup")
async def startup_event():
    """Open (or clone) the pages repository, load users, check pandoc"""
    if not PAGES_DIRECTORY:
        raise ValueError("PAGES_DIRECTORY environment variable is required. See .env.example")

    remote_config = build_remote_config()
    handle = RepositoryHandle.open(PAGES_DIRECTORY, remote_config)
    logger.info(f"Wiki repository loaded ({handle.root})")

    app.state.registry = UserRegistry.load(USERS_DATABASE, build_initial_user())

    renderer = PandocRenderer(PANDOC_PATH, macros=KATEX_MACROS)
    renderer.self_test()

    app.state.store = PageStore(
        handle,
        remote_config,
        renderer,
        default_format=Format.from_name(DEFAULT_PAGE_FORMAT),
    )
    logger.info("Page store ready")


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "wiki-backend", "storage": "git"}


if __name__ == "__main__":
    # Run the server
    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=True,
        log_level=LOG_LEVEL
    )
