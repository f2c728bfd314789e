"""
Pandoc-backed renderer.

Runs the pandoc executable once per render. Calls block, so async callers
must push them to an executor.
"""
import logging
import re
import subprocess
from typing import Dict, Optional, Protocol

from .formats import Format

logger = logging.getLogger(__name__)

SELF_TEST_INPUT = "# Hello, world!"
SELF_TEST_EXPECTED = '<h1 id="hello-world">Hello, world!</h1>\n'

# Readers that expand \newcommand definitions inside math; None is pandoc's markdown default
MACRO_FORMATS = (None, Format.MARKDOWN, Format.LATEX)
MACRO_ARGUMENT = re.compile(r"#([1-9])")


class ConversionError(Exception):
    """Raised when content can't be converted to HTML"""
    pass


class Renderer(Protocol):
    """Converts page text to HTML."""

    def render(self, content: str, fmt: Optional[Format] = None) -> str:
        ...


class PandocRenderer:
    """
    Renderer that shells out to pandoc and emits HTML5 with KaTeX math.

    Math is left as KaTeX markup for the client. Configured macros are
    expanded by pandoc itself: they are prepended as \\newcommand
    definitions for the readers that understand them (markdown, LaTeX), so
    the HTML already carries the expanded math.
    """

    def __init__(
        self,
        executable: str = "pandoc",
        timeout: Optional[float] = 30.0,
        macros: Optional[Dict[str, str]] = None,
    ):
        """
        Args:
            executable: pandoc binary to run
            timeout: Seconds before a render is abandoned, None for no limit
            macros: KaTeX-style macros, e.g. {"\\\\RR": "\\\\mathbb{R}"}
        """
        self.executable = executable
        self.timeout = timeout
        self.macros = dict(macros or {})

    def _command(self, fmt: Optional[Format]) -> list:
        command = [self.executable, "--to", "html5", "--katex"]
        if fmt is not None:
            command += ["--from", fmt.value]
        return command

    def _macro_preamble(self) -> str:
        lines = []
        for name, expansion in self.macros.items():
            command = name if name.startswith("\\") else f"\\{name}"
            arity = max((int(n) for n in MACRO_ARGUMENT.findall(expansion)), default=0)
            arguments = f"[{arity}]" if arity else ""
            lines.append(f"\\newcommand{{{command}}}{arguments}{{{expansion}}}")
        return "\n".join(lines) + "\n\n" if lines else ""

    def _prepare(self, content: str, fmt: Optional[Format]) -> str:
        if fmt in MACRO_FORMATS:
            return self._macro_preamble() + content
        return content

    def render(self, content: str, fmt: Optional[Format] = None) -> str:
        """
        Convert content to HTML.

        Args:
            content: Page text
            fmt: Input format; pandoc's default reader when None

        Returns:
            HTML fragment

        Raises:
            ConversionError: If pandoc is missing, times out or rejects the input
        """
        try:
            result = subprocess.run(
                self._command(fmt),
                input=self._prepare(content, fmt).encode("utf-8"),
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ConversionError(f"pandoc executable not found: {self.executable}") from e
        except subprocess.TimeoutExpired as e:
            raise ConversionError(f"pandoc timed out after {self.timeout}s") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise ConversionError(stderr or f"pandoc exited with status {result.returncode}")

        return result.stdout.decode("utf-8")

    def self_test(self) -> None:
        """
        Render a known snippet and compare against the expected output.

        Raises:
            ConversionError: If pandoc fails or its output differs
        """
        actual = self.render(SELF_TEST_INPUT, Format.MARKDOWN)
        if actual != SELF_TEST_EXPECTED:
            raise ConversionError(
                f"Output from pandoc is wrong\nExpected:\n{SELF_TEST_EXPECTED}\n\nActual:\n{actual}"
            )
        logger.info("pandoc self-test passed")
