"""Git-based versioned storage for wiki pages"""
from .authors import Author, Role, UntrackedSignature, User, UserLookup, resolve_author
from .commits import CommitWriter
from .exceptions import (
    EncodingException,
    InvalidPageException,
    NoCommitException,
    NotFoundException,
    PageExistsException,
    PageNotFoundException,
    PathNotFoundAtRevisionException,
    PushRejectedException,
    RepositoryException,
    RevisionNotFoundException,
    ValidationException,
    WikiStoreException,
)
from .frontmatter import FrontMatter, FrontMatterError, parse_front_matter
from .history import Commit, HistoryWalker
from .pages import Page, PageStore
from .repository import RemoteConfig, RepositoryHandle
from .revisions import RevisionReader

__all__ = [
    "Author",
    "Commit",
    "CommitWriter",
    "EncodingException",
    "FrontMatter",
    "FrontMatterError",
    "HistoryWalker",
    "InvalidPageException",
    "NoCommitException",
    "NotFoundException",
    "Page",
    "PageExistsException",
    "PageNotFoundException",
    "PageStore",
    "PathNotFoundAtRevisionException",
    "PushRejectedException",
    "RemoteConfig",
    "RepositoryException",
    "RepositoryHandle",
    "RevisionNotFoundException",
    "RevisionReader",
    "Role",
    "UntrackedSignature",
    "User",
    "UserLookup",
    "ValidationException",
    "WikiStoreException",
    "parse_front_matter",
    "resolve_author",
]
