"""
Page front matter.

A page may open with a TOML header between two "---" lines:

    ---
    title = "Setting up"
    categories = ["guides"]
    ---
    Body text...

Only the body is handed to the renderer. A page without a header has empty
front matter and its whole text is the body.
"""
import tomllib
from dataclasses import dataclass
from typing import Optional, Tuple

DELIMITER = "---"


class FrontMatterError(ValueError):
    """Raised when a page header is not valid TOML or has wrongly typed fields"""
    pass


@dataclass(frozen=True)
class FrontMatter:
    title: Optional[str] = None
    categories: Tuple[str, ...] = ()

    def title_or(self, fallback: str) -> str:
        return self.title if self.title is not None else fallback


def split_front_matter(text: str) -> Tuple[str, str]:
    """
    Split text into its raw header and body.

    Returns:
        (header, body); header is "" when the text has no closed "---" block
    """
    lines = text.split("\n")
    if lines[0].rstrip("\r") != DELIMITER:
        return "", text

    for i, line in enumerate(lines[1:], start=1):
        if line.rstrip("\r") == DELIMITER:
            return "\n".join(lines[1:i]), "\n".join(lines[i + 1:])

    # No closing delimiter, treat the whole text as body
    return "", text


def parse_front_matter(text: str) -> Tuple[FrontMatter, str]:
    """
    Parse the header of a page.

    Returns:
        (FrontMatter, body)

    Raises:
        FrontMatterError: If the header isn't valid TOML, or title/categories have the wrong type
    """
    header, body = split_front_matter(text)
    if not header.strip():
        return FrontMatter(), body

    try:
        data = tomllib.loads(header)
    except tomllib.TOMLDecodeError as e:
        raise FrontMatterError(f"invalid front matter: {e}") from e

    title = data.get("title")
    if title is not None and not isinstance(title, str):
        raise FrontMatterError("front matter 'title' must be a string")

    categories = data.get("categories", [])
    if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
        raise FrontMatterError("front matter 'categories' must be a list of strings")

    return FrontMatter(title=title, categories=tuple(categories)), body
