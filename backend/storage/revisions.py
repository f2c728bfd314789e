"""
Revision reader: file contents at a historical commit.
"""
import re

from git import BadName, BadObject, Blob

from .exceptions import EncodingException, PathNotFoundAtRevisionException, RevisionNotFoundException
from .repository import RepositoryHandle

# Full object ids only, short hashes are not disambiguated
REVISION_PATTERN = re.compile(r"^[0-9a-fA-F]{40}$")


class RevisionReader:
    """Reads blobs out of historical trees."""

    def __init__(self, handle: RepositoryHandle):
        self.handle = handle

    def read_bytes(self, path: str, revision: str) -> bytes:
        """
        Get the raw bytes of a repository-relative path at a commit.

        Raises:
            RevisionNotFoundException: If revision is malformed or unknown
            PathNotFoundAtRevisionException: If path is absent at that commit
        """
        if not REVISION_PATTERN.match(revision):
            raise RevisionNotFoundException(revision)

        with self.handle.locked() as repo:
            # The null hash resolves lazily, so the lookup only fails on first attribute access
            try:
                tree = repo.commit(revision).tree
            except (BadName, BadObject, ValueError):
                raise RevisionNotFoundException(revision)

            try:
                item = tree / path
            except KeyError:
                raise PathNotFoundAtRevisionException(path, revision)

            if not isinstance(item, Blob):
                raise PathNotFoundAtRevisionException(path, revision)

            return item.data_stream.read()

    def read_at_revision(self, path: str, revision: str) -> str:
        """
        Get the UTF-8 text of a repository-relative path at a commit.

        Raises:
            EncodingException: If the blob is not valid UTF-8
        """
        data = self.read_bytes(path, revision)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingException(path, revision, e)
