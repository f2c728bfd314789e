"""
Tests for page front matter parsing.
"""
import pytest

from storage import FrontMatter, FrontMatterError, parse_front_matter
from storage.frontmatter import split_front_matter


def test_header_and_body():
    front_matter, body = parse_front_matter('---\ntitle = "Setup"\ncategories = ["guides"]\n---\n# Setup\n')

    assert front_matter == FrontMatter(title="Setup", categories=("guides",))
    assert body == "# Setup\n"


def test_no_header():
    assert parse_front_matter("# Just text") == (FrontMatter(), "# Just text")


def test_empty_header():
    assert parse_front_matter("---\n---\nbody") == (FrontMatter(), "body")


def test_unclosed_header_is_body():
    text = '---\ntitle = "never closed"\nbody'

    assert split_front_matter(text) == ("", text)


def test_delimiter_must_start_the_text():
    text = 'intro\n---\ntitle = "x"\n---\n'

    assert split_front_matter(text) == ("", text)


def test_crlf_delimiters():
    front_matter, body = parse_front_matter('---\r\ntitle = "Windows"\r\n---\r\nbody')

    assert front_matter.title == "Windows"
    assert body == "body"


def test_unknown_keys_are_ignored():
    front_matter, _ = parse_front_matter('---\ntitle = "T"\nauthor = "someone"\n---\n')

    assert front_matter == FrontMatter(title="T")


@pytest.mark.parametrize(
    "header",
    [
        'title = "unterminated',
        "title = 3",
        'categories = "guides"',
        "categories = [1, 2]",
        "not toml at all",
    ],
)
def test_invalid_header(header):
    with pytest.raises(FrontMatterError):
        parse_front_matter(f"---\n{header}\n---\nbody")


def test_title_fallback():
    assert FrontMatter().title_or("guides/setup") == "guides/setup"
    assert FrontMatter(title="Setup").title_or("guides/setup") == "Setup"
