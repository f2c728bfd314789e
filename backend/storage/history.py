"""
History walker: commit listings for a page, for an author, or for the whole wiki.

Traversal starts at the current branch tip and goes newest-first by commit
time. The changed-file set of a commit is the tree diff against its first
parent, with rename detection off so a rename shows up as its new path.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Tuple

from git import Commit as GitCommit
from git import GitCommandError

from .authors import Author, UserLookup, author_to_dict, resolve_author
from .exceptions import RepositoryException
from .repository import RepositoryHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Commit:
    """A commit as shown in history listings."""

    author: Author
    hash: str
    date: str
    message: str
    files: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "author": author_to_dict(self.author),
            "hash": self.hash,
            "date": self.date,
            "message": self.message,
            "files": list(self.files),
        }


def format_commit_time(commit: GitCommit) -> str:
    """RFC 3339 timestamp of the commit time, in UTC."""
    moment = datetime.fromtimestamp(commit.committed_date, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def changed_files(commit: GitCommit) -> Tuple[str, ...]:
    """Paths touched by commit relative to its first parent. Empty for a root commit."""
    if not commit.parents:
        return ()

    diffs = commit.parents[0].diff(commit, no_renames=True)
    return tuple(diff.b_path or diff.a_path for diff in diffs)


class HistoryWalker:
    """Walks the commit graph and materializes Commit records."""

    def __init__(self, handle: RepositoryHandle):
        self.handle = handle

    def _walk(self, repo) -> Iterator[GitCommit]:
        if not repo.head.is_valid():
            return iter(())
        return repo.iter_commits("HEAD", date_order=True)

    @staticmethod
    def _materialize(commit: GitCommit, author: Author, files: Tuple[str, ...]) -> Commit:
        return Commit(
            author=author,
            hash=commit.hexsha,
            date=format_commit_time(commit),
            message=commit.message,
            files=files,
        )

    @staticmethod
    def _author_of(commit: GitCommit, registry: UserLookup) -> Author:
        return resolve_author(commit.author.name, commit.author.email, registry)

    def file_history(self, path: str, registry: UserLookup) -> List[Commit]:
        """
        Get every commit that touched exactly this repository-relative path.

        Args:
            path: Repository-relative POSIX path, compared byte-for-byte
            registry: User lookup used to resolve authors

        Returns:
            Commits, newest first
        """
        history = []

        with self.handle.locked() as repo:
            try:
                for commit in self._walk(repo):
                    files = changed_files(commit)
                    if path in files:
                        history.append(self._materialize(commit, self._author_of(commit, registry), files))
            except GitCommandError as e:
                raise RepositoryException(f"Failed to get history for '{path}': {e}") from e

        return history

    def author_history(self, email: str, limit: Optional[int], registry: UserLookup) -> List[Commit]:
        """
        Get commits whose resolved author email equals email.

        Args:
            email: Exact email to match
            limit: Stop after this many matches; None for no limit
            registry: User lookup used to resolve authors

        Returns:
            At most limit commits, newest first
        """
        history = []
        if limit is not None and limit <= 0:
            return history

        with self.handle.locked() as repo:
            try:
                for commit in self._walk(repo):
                    author = self._author_of(commit, registry)
                    if author.email != email:
                        continue

                    history.append(self._materialize(commit, author, changed_files(commit)))
                    if limit is not None and len(history) >= limit:
                        break
            except GitCommandError as e:
                raise RepositoryException(f"Failed to get history for {email}: {e}") from e

        return history

    def history(self, registry: UserLookup, limit: Optional[int] = None) -> List[Commit]:
        """Get the unfiltered history of the branch, root commit included."""
        history = []
        if limit is not None and limit <= 0:
            return history

        with self.handle.locked() as repo:
            try:
                for commit in self._walk(repo):
                    history.append(self._materialize(commit, self._author_of(commit, registry), changed_files(commit)))
                    if limit is not None and len(history) >= limit:
                        break
            except GitCommandError as e:
                raise RepositoryException(f"Failed to get history: {e}") from e

        logger.debug(f"Walked {len(history)} commits")
        return history
