"""
Page store: the transactional path for creating and updating wiki pages.

A mutation has its front matter parsed and its body validated by the
renderer first, then it is written to disk, staged, committed and pushed.
If any git step fails the working copy is put back the way it was before
the call and the git error propagates.

Pages are addressed by a logical, extension-less path ("guides/setup").
The file on disk is <pages_dir>/<path>.<format extension>.
"""
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from git import Actor

from renderer import ConversionError, Format, Renderer

from .authors import User, UserLookup
from .commits import CommitWriter
from .exceptions import (
    EncodingException,
    InvalidPageException,
    PageExistsException,
    PageNotFoundException,
    ValidationException,
)
from .frontmatter import FrontMatter, FrontMatterError, parse_front_matter
from .history import Commit, HistoryWalker
from .repository import RemoteConfig, RepositoryHandle
from .revisions import RevisionReader

logger = logging.getLogger(__name__)

# First path segment kept for the wiki's own pages (login, profiles, history views)
RESERVED_PREFIX = "meta"

CREATE = "create"
UPDATE = "update"


@dataclass(frozen=True)
class Page:
    """Logical page path plus the file it lives in."""

    path: str
    filepath: Path
    format: Optional[Format]


def normalize_page_path(path: str) -> str:
    """
    Validate a logical page path and return it in canonical POSIX form.

    Raises:
        InvalidPageException: If the path is empty, absolute, escapes the tree or is reserved
    """
    raw = path.replace("\\", "/")
    if raw.startswith("/"):
        raise InvalidPageException(path, "must be relative")

    parts = [part for part in PurePosixPath(raw).parts if part not in ("", ".")]
    if not parts:
        raise InvalidPageException(path, "must not be empty")
    if ".." in parts:
        raise InvalidPageException(path, "must not contain '..'")
    if any(part.startswith(".") for part in parts):
        raise InvalidPageException(path, "must not contain hidden segments")
    if parts[0] == RESERVED_PREFIX:
        raise InvalidPageException(path, f"'{RESERVED_PREFIX}/' is reserved for internal use")

    return "/".join(parts)


class PageStore:
    """
    Versioned content store for wiki pages.

    Owns the commit writer, revision reader and history walker for one
    repository handle. The user registry is never held here; history calls
    take it as an argument.
    """

    def __init__(
        self,
        handle: RepositoryHandle,
        remote_config: RemoteConfig,
        renderer: Renderer,
        pages_dir: Optional[Union[str, Path]] = None,
        default_format: Format = Format.MARKDOWN,
    ):
        """
        Args:
            handle: The process-wide repository handle
            remote_config: Remote pushed to after each commit
            renderer: Used to validate content before anything is written
            pages_dir: Directory holding pages, defaults to the working tree root
            default_format: Format for new pages given without an extension
        """
        self.handle = handle
        self.remote_config = remote_config
        self.renderer = renderer
        self.pages_dir = Path(pages_dir).resolve() if pages_dir else handle.root
        self.default_format = default_format

        self.commits = CommitWriter(handle)
        self.revisions = RevisionReader(handle)
        self.history = HistoryWalker(handle)

    # ─────────────────────────────────────────────────────────────────────────────
    # Page identity
    # ─────────────────────────────────────────────────────────────────────────────

    def page(self, path: str, fmt: Optional[Format] = None) -> Page:
        """
        Build the Page for a logical path without touching the disk.

        A trailing known extension is taken as the format when fmt is None,
        so "notes.org" and ("notes", Format.ORG) name the same page.
        """
        logical = normalize_page_path(path)

        if fmt is None:
            stem, dot, extension = logical.rpartition(".")
            detected = Format.from_extension(extension) if dot else None
            if detected is not None and stem and not stem.endswith("/"):
                logical, fmt = stem, detected
            else:
                fmt = self.default_format

        return Page(path=logical, filepath=self.pages_dir / f"{logical}.{fmt.extension}", format=fmt)

    def get_page(self, path: str) -> Page:
        """
        Find the existing page for a logical path, whatever its format.

        Raises:
            PageNotFoundException: If no file exists for any known format
        """
        page = self.page(path)
        if page.filepath.is_file():
            return page

        for fmt in Format:
            candidate = self.pages_dir / f"{page.path}.{fmt.extension}"
            if candidate.is_file():
                return Page(path=page.path, filepath=candidate, format=fmt)

        raise PageNotFoundException(page.path)

    def relative_path(self, page: Page) -> str:
        """Repository-relative path of the page's file."""
        return self.handle.relative_path(page.filepath)

    # ─────────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────────

    def read_working_copy(self, page: Page) -> str:
        """
        Get the current on-disk text of a page.

        Raises:
            PageNotFoundException: If the file doesn't exist
            EncodingException: If the file isn't valid UTF-8
        """
        try:
            data = page.filepath.read_bytes()
        except (FileNotFoundError, IsADirectoryError):
            raise PageNotFoundException(page.path)

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingException(page.path, None, e)

    def front_matter(self, page: Page, text: str) -> FrontMatter:
        """
        Header of a page's text.

        Files can be edited outside the wiki, so a malformed header on read
        is logged and treated as empty rather than failing the read.
        """
        try:
            front_matter, _ = parse_front_matter(text)
        except FrontMatterError as e:
            logger.warning(f"Ignoring front matter of {page.path}: {e}")
            return FrontMatter()
        return front_matter

    def read_at_revision(self, page: Page, revision: str) -> str:
        """Get the text of a page as of a full commit hash."""
        return self.revisions.read_at_revision(self.relative_path(page), revision)

    def file_history(self, page: Page, registry: UserLookup) -> List[Commit]:
        """Commits that touched the page's file, newest first."""
        return self.history.file_history(self.relative_path(page), registry)

    def author_history(self, email: str, limit: Optional[int], registry: UserLookup) -> List[Commit]:
        """Most recent commits authored by email, at most limit of them."""
        return self.history.author_history(email, limit, registry)

    def recent_changes(self, registry: UserLookup, limit: Optional[int] = 50) -> List[Commit]:
        """Latest commits across the whole wiki."""
        return self.history.history(registry, limit)

    # ─────────────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────────────

    def create(self, page: Page, content: str, user: User) -> str:
        """
        Create a new page and push it.

        Args:
            page: Page to create; its file must not exist yet
            content: Page text
            user: Acting user, recorded as author and committer

        Returns:
            Hash of the new commit

        Raises:
            ValidationException: If the renderer rejects the content
            PageExistsException: If the page already exists
            RepositoryException: If staging, committing or pushing fails; the
                file is removed again before this propagates
        """
        return self._mutate(page, content, user, CREATE)

    def update(self, page: Page, content: str, user: User) -> str:
        """
        Overwrite an existing page and push it.

        Raises:
            ValidationException: If the renderer rejects the content
            PageNotFoundException: If the page doesn't exist
            RepositoryException: If staging, committing or pushing fails; the
                previous bytes are restored before this propagates
        """
        return self._mutate(page, content, user, UPDATE)

    def _validate(self, page: Page, content: str) -> None:
        try:
            _, body = parse_front_matter(content)
        except FrontMatterError as e:
            raise ValidationException(page.path, str(e)) from e

        try:
            self.renderer.render(body, page.format)
        except ConversionError as e:
            raise ValidationException(page.path, str(e)) from e

    def _mutate(self, page: Page, content: str, user: User, action: str) -> str:
        # Rendering can be slow, keep it outside the repository lock
        self._validate(page, content)

        relative = self.relative_path(page)
        identity = Actor(user.name, user.email)
        message = f"[{action}] {page.path}"

        with self.handle.locked():
            previous = self._capture(page, action)
            created_dirs = self._missing_parents(page.filepath)

            committed = False
            try:
                page.filepath.parent.mkdir(parents=True, exist_ok=True)
                page.filepath.write_bytes(content.encode("utf-8"))
                self.commits.stage(relative)
                revision = self.commits.commit(message, identity)
                committed = True
                self.commits.push(self.remote_config)
            except Exception as e:
                logger.warning(f"{message} failed, rolling back working copy: {e}")
                self._rollback(page, relative, previous, created_dirs, committed)
                raise

        logger.info(f"{message} by {user.email} at {revision[:7]}")
        return revision

    @staticmethod
    def _capture(page: Page, action: str) -> Optional[bytes]:
        if action == UPDATE:
            try:
                return page.filepath.read_bytes()
            except (FileNotFoundError, IsADirectoryError):
                raise PageNotFoundException(page.path)

        if page.filepath.exists():
            raise PageExistsException(page.path)
        return None

    def _missing_parents(self, filepath: Path) -> List[Path]:
        missing = []
        parent = filepath.parent
        while parent != self.handle.root and not parent.exists():
            missing.append(parent)
            parent = parent.parent
        return missing

    def _rollback(
        self,
        page: Page,
        relative: str,
        previous: Optional[bytes],
        created_dirs: List[Path],
        committed: bool,
    ) -> None:
        """
        Put the working copy back to its pre-mutation state.

        The original error is what the caller sees, so failures here are
        logged rather than raised.
        """
        try:
            if previous is not None:
                page.filepath.write_bytes(previous)
            else:
                page.filepath.unlink(missing_ok=True)
                for directory in created_dirs:
                    directory.rmdir()
        except OSError as e:
            logger.error(f"Failed to restore {page.filepath}: {e}")

        # Once a commit exists it stays; it goes out with the next successful push
        if not committed:
            try:
                self.commits.unstage(relative)
            except Exception as e:
                logger.error(f"Failed to reset index entry for {relative}: {e}")
