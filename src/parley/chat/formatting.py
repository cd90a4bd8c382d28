"""Text formatting utilities.

Hides the details of markdown rendering and text cleanup. The chat view
only ever sees the styled ``rich.text.Text`` returned by format_markdown().
"""

import re

from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text

DEFAULT_WIDTH = 100


def clean_latex(text: str) -> str:
    """Convert LaTeX notation to plain text equivalents.

    Handles common LaTeX patterns that Rich cannot render:
    - \\( ... \\) inline math -> just the content
    - \\[ ... \\] display math -> just the content
    - $$...$$ display math -> just the content
    """
    text = re.sub(r'\\\(\s*', '', text)
    text = re.sub(r'\s*\\\)', '', text)

    text = re.sub(r'\\\[\s*', '', text)
    text = re.sub(r'\s*\\\]', '', text)

    text = re.sub(r'\$\$\s*', '', text)

    text = re.sub(r'\\frac\{([^}]*)\}\{([^}]*)\}', r'(\1)/(\2)', text)
    text = re.sub(r'\\sqrt\{([^}]*)\}', r'sqrt(\1)', text)
    text = re.sub(r'\\times', 'x', text)
    text = re.sub(r'\\cdot', '*', text)
    text = re.sub(r'\\leq', '<=', text)
    text = re.sub(r'\\geq', '>=', text)
    text = re.sub(r'\\neq', '!=', text)
    text = re.sub(r'\\text\{([^}]*)\}', r'\1', text)

    return text


def render_markdown(text: str) -> Markdown:
    """Render text as markdown with LaTeX cleaned up."""
    return Markdown(clean_latex(text))


def format_markdown(text: str, width: int = DEFAULT_WIDTH) -> Text:
    """Render markdown into styled text.

    Pure function: the same text and width always give an equal Text, so
    a whole partial answer can be re-rendered on every chunk.
    """
    if not text:
        return Text("")

    console = Console(
        width=width,
        force_terminal=True,
        color_system="truecolor",
        highlight=False,
        emoji=False,
    )
    with console.capture() as capture:
        console.print(render_markdown(text))

    result = Text.from_ansi(capture.get())
    result.rstrip()
    return result


def format_user_prompt(text: str) -> Text:
    """Styled transcript line for a prompt typed by the user."""
    return Text.assemble(("👤: ", "bold cyan"), (text, "cyan"))
