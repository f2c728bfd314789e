"""
Page formats.

A page's on-disk extension decides which pandoc reader converts it.
"""
from enum import Enum
from typing import Optional


class Format(Enum):
    """Pandoc input formats a page can be written in. Value is the reader name."""

    MARKDOWN = "markdown"
    RST = "rst"
    HTML = "html"
    LATEX = "latex"
    MEDIAWIKI = "mediawiki"
    TEXTILE = "textile"
    ORG = "org"
    OPML = "opml"
    DOCX = "docx"
    HADDOCK = "haddock"
    EPUB = "epub"
    DOCBOOK = "docbook"
    T2T = "t2t"
    TWIKI = "twiki"
    JSON = "json"
    NATIVE = "native"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, self.value)

    @classmethod
    def from_extension(cls, extension: str) -> Optional["Format"]:
        """Look up a format by file extension, with or without the leading dot."""
        return _BY_EXTENSION.get(extension.lstrip(".").lower())

    @classmethod
    def from_name(cls, name: str) -> "Format":
        """
        Look up a format by pandoc reader name.

        Markdown dialects map onto MARKDOWN.

        Raises:
            ValueError: If pandoc has no such reader among the supported ones
        """
        if name in ("markdown_strict", "markdown_phpextra", "markdown_github", "commonmark"):
            return cls.MARKDOWN
        return cls(name)


_EXTENSIONS = {
    Format.MARKDOWN: "md",
    Format.RST: "rst",
    Format.HTML: "html",
    Format.LATEX: "tex",
    Format.MEDIAWIKI: "wiki",
    Format.TEXTILE: "textile",
    Format.ORG: "org",
    Format.OPML: "opml",
    Format.DOCX: "docx",
    Format.HADDOCK: "hs",
    Format.EPUB: "epub",
    Format.DOCBOOK: "dbk",
    Format.T2T: "t2t",
    Format.TWIKI: "twiki",
    Format.JSON: "json",
    Format.NATIVE: "lhs",
}

_BY_EXTENSION = {extension: fmt for fmt, extension in _EXTENSIONS.items()}

# Shown in format pickers; formats missing here fall back to their reader name
_DISPLAY_NAMES = {
    Format.MARKDOWN: "Markdown",
    Format.RST: "reStructuredText",
    Format.HTML: "HTML",
    Format.LATEX: "LaTeX",
    Format.MEDIAWIKI: "MediaWiki",
    Format.TEXTILE: "Textile",
    Format.ORG: "Emacs Org-Mode",
    Format.OPML: "OPML",
    Format.DOCX: ".docx",
    Format.HADDOCK: "Haddock",
    Format.EPUB: "EPUB",
    Format.DOCBOOK: "DocBook",
    Format.T2T: "txt2tags",
    Format.TWIKI: "TWiki",
}
