"""
ANSI styling for terminal output (rich).
"""

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text


def _render(text: Text) -> str:
    console = Console(force_terminal=True, color_system="standard", highlight=False)
    with console.capture() as capture:
        console.print(text, end="", soft_wrap=True)
    return capture.get()


def dim(value: str) -> str:
    return _render(Text(value, style="dim"))


def highlight(code: str, lexer: str) -> str:
    """Syntax-highlight ``code`` with the named Pygments lexer."""
    return _render(Syntax(code, lexer).highlight(code))
