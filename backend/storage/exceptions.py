"""
Exceptions raised by the versioned page store.

All of them derive from WikiStoreException so API handlers can catch the
whole family in one place and map each subclass to a status code.
"""
from typing import Optional


class WikiStoreException(Exception):
    """Base exception for page store operations"""
    pass


class ValidationException(WikiStoreException):
    """Raised when the renderer rejects page content. Nothing was written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Page '{path}' failed to render: {reason}")


class InvalidPageException(WikiStoreException):
    """Raised when a logical page path is unusable (empty, escapes the tree, reserved)"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid page path '{path}': {reason}")


class PageExistsException(WikiStoreException):
    """Raised when creating a page that already exists on disk"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Page '{path}' already exists. Use update instead.")


class RepositoryException(WikiStoreException):
    """Raised when a git step (open, clone, stage, commit, push) fails"""
    pass


class NoCommitException(RepositoryException):
    """Raised when committing onto a branch that has no commit yet"""

    def __init__(self, branch: Optional[str] = None):
        self.branch = branch
        target = f"branch '{branch}'" if branch else "HEAD"
        super().__init__(f"Cannot commit: {target} has no existing commit")


class PushRejectedException(RepositoryException):
    """Raised when the remote refuses a ref update"""

    def __init__(self, ref: str, remote_message: str):
        self.ref = ref
        self.remote_message = remote_message
        super().__init__(f"Push of {ref} rejected by remote: {remote_message}")


class NotFoundException(WikiStoreException):
    """Raised when a page, revision or historical path does not exist"""
    pass


class PageNotFoundException(NotFoundException):
    """Raised when a page is not found in the working tree"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Page '{path}' not found")


class RevisionNotFoundException(NotFoundException):
    """Raised when a revision id does not parse or names no commit"""

    def __init__(self, revision: str):
        self.revision = revision
        super().__init__(f"Revision '{revision}' not found")


class PathNotFoundAtRevisionException(NotFoundException):
    """Raised when a path is absent from a commit's tree"""

    def __init__(self, path: str, revision: str):
        self.path = path
        self.revision = revision
        super().__init__(f"'{path}' does not exist at revision {revision}")


class EncodingException(WikiStoreException):
    """Raised when stored content is not valid UTF-8"""

    def __init__(self, path: str, revision: Optional[str], error: UnicodeDecodeError):
        self.path = path
        self.revision = revision
        self.error = error
        where = f" at revision {revision}" if revision else ""
        super().__init__(f"'{path}'{where} is not valid UTF-8: {error}")
