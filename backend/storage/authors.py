"""
Commit authors.

An Author is either a registered User or an UntrackedSignature carrying the
raw name/email found on the commit. Resolution happens whenever history is
read, against whatever the registry holds at that moment.
"""
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Union

UNKNOWN_AUTHOR_NAME = "Unknown"


class Role(str, Enum):
    ADMINISTRATOR = "Administrator"


@dataclass
class User:
    """A registered wiki user."""

    name: str
    email: str
    url: str
    approved: bool = False
    roles: List[Role] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "user"

    def has_role(self, role: Role) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class UntrackedSignature:
    """Commit signature with no matching registered user."""

    name: str
    email: Optional[str] = None

    @property
    def kind(self) -> str:
        return "untracked"


Author = Union[User, UntrackedSignature]


class UserLookup(Protocol):
    """Anything that can find a registered user by exact email."""

    def lookup(self, email: str) -> Optional[User]:
        ...


def resolve_author(name: Optional[str], email: Optional[str], registry: UserLookup) -> Author:
    """
    Map a commit signature to an Author.

    Args:
        name: Signature name, may be empty
        email: Signature email, may be empty
        registry: User lookup to resolve against

    Returns:
        A copy of the registered User whose email matches exactly, otherwise
        an UntrackedSignature
    """
    if email:
        user = registry.lookup(email)
        if user is not None:
            return copy.deepcopy(user)

    return UntrackedSignature(name=name or UNKNOWN_AUTHOR_NAME, email=email or None)


def author_to_dict(author: Author) -> dict:
    """Serialize an Author for JSON responses, tagged by kind."""
    if isinstance(author, User):
        return {
            "kind": author.kind,
            "name": author.name,
            "email": author.email,
            "url": author.url,
            "approved": author.approved,
            "roles": [role.value for role in author.roles],
        }
    return {"kind": author.kind, "name": author.name, "email": author.email}
