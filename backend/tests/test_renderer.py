"""
Tests for page formats and the pandoc renderer.
"""
import shutil

import pytest

from renderer import ConversionError, Format, PandocRenderer

requires_pandoc = pytest.mark.skipif(shutil.which("pandoc") is None, reason="pandoc not installed")


@pytest.mark.parametrize(
    "extension, expected",
    [("md", Format.MARKDOWN), (".org", Format.ORG), ("RST", Format.RST), ("tex", Format.LATEX), ("lhs", Format.NATIVE)],
)
def test_format_from_extension(extension, expected):
    assert Format.from_extension(extension) is expected


def test_unknown_extension():
    assert Format.from_extension("txt") is None
    assert Format.from_extension("") is None


def test_extensions_are_unique():
    extensions = [fmt.extension for fmt in Format]
    assert len(extensions) == len(set(extensions))


def test_format_from_name():
    assert Format.from_name("org") is Format.ORG
    assert Format.from_name("commonmark") is Format.MARKDOWN

    with pytest.raises(ValueError):
        Format.from_name("powerpoint")


def test_display_name_falls_back_to_reader_name():
    assert Format.ORG.display_name == "Emacs Org-Mode"
    assert Format.JSON.display_name == "json"


def test_command_line():
    renderer = PandocRenderer("/opt/pandoc/bin/pandoc")

    assert renderer._command(None) == ["/opt/pandoc/bin/pandoc", "--to", "html5", "--katex"]
    assert renderer._command(Format.RST)[-2:] == ["--from", "rst"]


def test_missing_executable(tmp_path):
    renderer = PandocRenderer(str(tmp_path / "no-pandoc"))

    with pytest.raises(ConversionError, match="not found"):
        renderer.render("# Title", Format.MARKDOWN)


@requires_pandoc
def test_self_test_passes():
    PandocRenderer().self_test()


@requires_pandoc
def test_render_markdown():
    html = PandocRenderer().render("*emphasis*", Format.MARKDOWN)

    assert "<em>emphasis</em>" in html


@requires_pandoc
def test_render_rejects_malformed_input():
    with pytest.raises(ConversionError):
        PandocRenderer().render("{not json", Format.JSON)


def test_macros_are_prepended_for_tex_aware_readers():
    renderer = PandocRenderer(macros={"\\RR": "\\mathbb{R}", "norm": "\\lVert #1 \\rVert"})

    prepared = renderer._prepare("$x \\in \\RR$", Format.MARKDOWN)

    assert prepared.splitlines()[:2] == [
        "\\newcommand{\\RR}{\\mathbb{R}}",
        "\\newcommand{\\norm}[1]{\\lVert #1 \\rVert}",
    ]
    assert prepared.endswith("\n\n$x \\in \\RR$")
    assert renderer._prepare("x", None).startswith("\\newcommand")
    assert renderer._prepare("* x", Format.ORG) == "* x"


def test_no_macros_leaves_content_alone():
    assert PandocRenderer()._prepare("$x$", Format.MARKDOWN) == "$x$"


@requires_pandoc
def test_render_expands_macros():
    renderer = PandocRenderer(macros={"\\RR": "\\mathbb{R}"})

    html = renderer.render("$x \\in \\RR$", Format.MARKDOWN)

    assert "\\mathbb{R}" in html
    assert "newcommand" not in html
