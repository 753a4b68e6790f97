"""Terminal input and output used by the setup session."""

from enum import Enum
from typing import Protocol

import click


class Tone(str, Enum):
    """How a message should be rendered."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    DETAIL = "detail"
    PLAIN = "plain"


class PromptIO(Protocol):
    """What the orchestrator needs from a terminal."""

    def ask_text(self, prompt: str, default: str = "") -> str:
        """Ask for a value; a blank answer returns ``default``."""
        ...

    def ask_secret(self, prompt: str, existing_redacted: str = "") -> str:
        """Ask for a secret without echoing it; a blank answer returns ``""``."""
        ...

    def show(self, message: str = "", tone: Tone = Tone.PLAIN) -> None:
        ...

    def close(self) -> None:
        ...


_STYLES = {
    Tone.INFO: {"fg": "blue"},
    Tone.SUCCESS: {"fg": "green"},
    Tone.WARNING: {"fg": "yellow"},
    Tone.ERROR: {"fg": "red"},
    Tone.DETAIL: {"dim": True},
    Tone.PLAIN: {},
}


class ClickPromptIO:
    """``PromptIO`` backed by click.

    Ctrl-C at any prompt raises ``click.Abort``, which click turns into exit
    code 1 before anything is written.
    """

    def __init__(self, err: bool = False):
        self.err = err

    def ask_text(self, prompt: str, default: str = "") -> str:
        answer = click.prompt(prompt, default=default, show_default=bool(default), err=self.err)
        return answer.strip() if isinstance(answer, str) else str(answer)

    def ask_secret(self, prompt: str, existing_redacted: str = "") -> str:
        text = f"{prompt} [{existing_redacted}]" if existing_redacted else prompt
        answer = click.prompt(text, default="", show_default=False, hide_input=True, err=self.err)
        return answer.strip()

    def show(self, message: str = "", tone: Tone = Tone.PLAIN) -> None:
        styled = click.style(message, **_STYLES[tone]) if message else message
        click.echo(styled, err=self.err or tone is Tone.ERROR)

    def close(self) -> None:
        click.get_text_stream("stdout").flush()
