import getpass
import logging
import sys
from typing import Sequence

from ..core.ports import Messenger

logger = logging.getLogger("vimbrowser")


class TerminalMessenger(Messenger):
    """Reports to stderr and prompts on the terminal."""

    def __init__(self, quiet: bool = False, interactive: bool = True):
        self.quiet = quiet
        self.interactive = interactive

    def message(self, text: str) -> None:
        if not self.quiet:
            print(text, file=sys.stderr)

    def warning(self, text: str) -> None:
        print(f"Warning: {text}", file=sys.stderr)

    def error(self, text: str) -> None:
        print(f"Error: {text}", file=sys.stderr)

    def debug(self, text: str) -> None:
        logger.debug(text)

    def ask(self, prompt: str, secret: bool = False) -> str | None:
        if not self.interactive:
            return None
        try:
            answer = getpass.getpass(prompt) if secret else input(prompt)
        except EOFError:
            return None
        return answer or None

    def choose(self, prompt: str, choices: Sequence[str]) -> int | None:
        """Returns the 0-based index of the chosen entry."""
        if not self.interactive or not choices:
            return None
        for i, choice in enumerate(choices, 1):
            print(f"{i}. {choice}", file=sys.stderr)
        answer = self.ask(prompt or "Choice: ")
        if answer is None or not answer.isdigit():
            return None
        index = int(answer) - 1
        return index if 0 <= index < len(choices) else None


class RecordingMessenger(Messenger):
    """Keeps every report in memory; answers prompts from a queue."""

    def __init__(self, answers: Sequence[str | int | None] = ()):
        self.messages: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.answers = list(answers)

    def message(self, text: str) -> None:
        self.messages.append(text)

    def warning(self, text: str) -> None:
        self.warnings.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)

    def debug(self, text: str) -> None:
        logger.debug(text)

    def ask(self, prompt: str, secret: bool = False) -> str | None:
        if not self.answers:
            return None
        answer = self.answers.pop(0)
        return None if answer is None else str(answer)

    def choose(self, prompt: str, choices: Sequence[str]) -> int | None:
        if not self.answers:
            return None
        answer = self.answers.pop(0)
        return answer if isinstance(answer, int) else None
