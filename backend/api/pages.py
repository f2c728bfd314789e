"""
REST API endpoints for pages, page history and user activity.

Store calls block on git and pandoc, so every handler runs them in the
default executor.
"""
import asyncio
from typing import Any, Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from auth import get_current_user, get_registry, require_administrator, UserRegistry
from renderer import ConversionError, Format
from storage import (
    FrontMatterError,
    InvalidPageException,
    NotFoundException,
    PageExistsException,
    PageStore,
    Role,
    User,
    ValidationException,
    WikiStoreException,
    parse_front_matter,
)
from storage.authors import author_to_dict

router = APIRouter(prefix="/api", tags=["pages"])


# ─────────────────────────────────────────────────────────────────────────────
# Pydantic Models
# ─────────────────────────────────────────────────────────────────────────────

class PageCreate(BaseModel):
    path: str
    content: str = ""
    format: Optional[str] = None  # pandoc reader name, e.g. "markdown", "org"


class PageUpdate(BaseModel):
    content: str


class RenderRequest(BaseModel):
    content: str
    format: Optional[str] = None


class UserUpdate(BaseModel):
    name: str
    url: str = ""
    approved: bool = False
    roles: List[str] = []


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def get_store(request: Request) -> PageStore:
    """The process-wide page store, set up in main.py."""
    return request.app.state.store


async def run_blocking(func: Callable[..., Any], *args) -> Any:
    """Run a blocking store call in the thread pool."""
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, lambda: func(*args))


def parse_format(name: Optional[str]) -> Optional[Format]:
    if name is None:
        return None
    try:
        return Format.from_name(name)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown format '{name}'")


def to_http_exception(e: WikiStoreException) -> HTTPException:
    """Map a store exception to the matching HTTP error."""
    if isinstance(e, NotFoundException):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (ValidationException, InvalidPageException)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, PageExistsException):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


# ─────────────────────────────────────────────────────────────────────────────
# Endpoints
# ─────────────────────────────────────────────────────────────────────────────

@router.get("/changes")
async def recent_changes(
    limit: int = 50,
    store: PageStore = Depends(get_store),
    registry: UserRegistry = Depends(get_registry),
):
    """Latest commits across the wiki"""
    try:
        commits = await run_blocking(store.recent_changes, registry, limit)
    except WikiStoreException as e:
        raise to_http_exception(e)
    return {"history": [commit.to_dict() for commit in commits]}


# History route MUST come before the general {path:path} routes
@router.get("/pages/{path:path}/history")
async def get_page_history(
    path: str,
    store: PageStore = Depends(get_store),
    registry: UserRegistry = Depends(get_registry),
):
    """Get commit history for a page"""
    try:
        page = await run_blocking(store.get_page, path)
        commits = await run_blocking(store.file_history, page, registry)
    except WikiStoreException as e:
        raise to_http_exception(e)
    return {"path": page.path, "history": [commit.to_dict() for commit in commits]}


@router.get("/pages/{path:path}")
async def get_page(path: str, revision: Optional[str] = None, store: PageStore = Depends(get_store)):
    """Get the raw text of a page, from the working copy or at a revision"""
    try:
        page = await run_blocking(store.get_page, path)
        if revision:
            content = await run_blocking(store.read_at_revision, page, revision)
        else:
            content = await run_blocking(store.read_working_copy, page)
    except WikiStoreException as e:
        raise to_http_exception(e)

    front_matter = store.front_matter(page, content)
    return {
        "path": page.path,
        "format": page.format.value if page.format else None,
        "revision": revision,
        "title": front_matter.title_or(page.path),
        "categories": list(front_matter.categories),
        "content": content,
    }


@router.post("/pages", status_code=status.HTTP_201_CREATED)
async def create_page(
    page_data: PageCreate,
    store: PageStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    """Create a new page"""
    fmt = parse_format(page_data.format)
    try:
        page = store.page(page_data.path, fmt)
        revision = await run_blocking(store.create, page, page_data.content, user)
    except WikiStoreException as e:
        raise to_http_exception(e)
    return {"path": page.path, "revision": revision}


@router.put("/pages/{path:path}")
async def update_page(
    path: str,
    page_data: PageUpdate,
    store: PageStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    """Update an existing page"""
    try:
        page = await run_blocking(store.get_page, path)
        revision = await run_blocking(store.update, page, page_data.content, user)
    except WikiStoreException as e:
        raise to_http_exception(e)
    return {"path": page.path, "revision": revision}


@router.post("/render")
async def render(data: RenderRequest, store: PageStore = Depends(get_store)):
    """Render content to HTML without saving it"""
    fmt = parse_format(data.format)
    try:
        front_matter, body = parse_front_matter(data.content)
        html = await run_blocking(store.renderer.render, body, fmt)
    except (FrontMatterError, ConversionError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"title": front_matter.title, "html": html}


@router.get("/formats")
async def list_formats():
    """Page formats offered by the editor, with their extensions"""
    return {
        "formats": [
            {"name": fmt.value, "extension": fmt.extension, "display_name": fmt.display_name}
            for fmt in Format
        ]
    }


@router.get("/users/{email}/history")
async def get_user_history(
    email: str,
    limit: int = 10,
    store: PageStore = Depends(get_store),
    registry: UserRegistry = Depends(get_registry),
):
    """Profile view: the user record and their most recent commits"""
    profile = registry.lookup(email)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"User '{email}' not found")

    try:
        commits = await run_blocking(store.author_history, email, limit, registry)
    except WikiStoreException as e:
        raise to_http_exception(e)

    return {
        "user": author_to_dict(profile),
        "recent_commits": [commit.to_dict() for commit in commits],
    }


@router.put("/users/{email}")
async def put_user(
    email: str,
    data: UserUpdate,
    registry: UserRegistry = Depends(get_registry),
    admin: User = Depends(require_administrator),
):
    """Register or update a user (administrators only)"""
    try:
        roles = [Role(role) for role in data.roles]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    user = User(name=data.name, email=email, url=data.url, approved=data.approved, roles=roles)
    await run_blocking(registry.put, user)
    return author_to_dict(user)
