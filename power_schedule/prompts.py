"""Interactive fallbacks for parameters missing from the command line.

Provides an arrow-key selection menu for fixed choices (action, schedule
type) and a single-line text input for the time of day.
"""

from typing import List, Optional

from prompt_toolkit import prompt as pt_prompt
from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl


class SelectionMenu:
    """Arrow-key menu over a fixed list of choices."""

    def __init__(
        self, title: str, choices: List[str], descriptions: Optional[List[str]] = None
    ):
        self.title = title
        self.choices = choices
        self.descriptions = descriptions or [""] * len(choices)
        self.selected_idx = 0

    def _render(self) -> List:
        fragments = [("bold fg:ansicyan", f"\n  {self.title}\n\n")]
        for i, choice in enumerate(self.choices):
            if i == self.selected_idx:
                fragments.append(("bold fg:ansigreen", f" ❯ {choice}"))
                if self.descriptions[i]:
                    fragments.append(("fg:ansibrightblack", f"  - {self.descriptions[i]}"))
            else:
                fragments.append(("fg:ansibrightblack", f"   {choice}"))
            fragments.append(("", "\n"))
        fragments.append(("fg:ansibrightblack", "\n  ↑/↓ move  Enter select  Ctrl+C cancel"))
        return fragments

    def _move(self, step: int) -> None:
        self.selected_idx = (self.selected_idx + step) % len(self.choices)

    def run(self) -> Optional[str]:
        """Returns the selected choice, or None if cancelled."""
        kb = KeyBindings()
        kb.add("up")(lambda event: self._move(-1))
        kb.add("down")(lambda event: self._move(1))

        @kb.add("enter")
        def _(event):
            event.app.exit(result=self.choices[self.selected_idx])

        @kb.add("c-c")
        def _(event):
            event.app.exit(result=None)

        window = Window(content=FormattedTextControl(self._render), wrap_lines=True)
        app = Application(layout=Layout(window), key_bindings=kb, full_screen=False)
        return app.run()


class TextInputMenu:
    """Single-line text input."""

    def __init__(self, title: str, default: str = ""):
        self.title = title
        self.default = default

    def run(self) -> Optional[str]:
        """Returns entered text, the default on empty input, or None if cancelled."""
        try:
            message = f"  {self.title}"
            if self.default:
                message += f" [{self.default}]"
            message += ": "

            value = pt_prompt(message).strip()
        except (KeyboardInterrupt, EOFError):
            return None
        if not value and self.default:
            return self.default
        return value or None


def ask_choice(
    title: str, choices: List[str], descriptions: Optional[List[str]] = None
) -> Optional[str]:
    return SelectionMenu(title, choices, descriptions).run()


def ask_text(title: str, default: str = "") -> Optional[str]:
    return TextInputMenu(title, default=default).run()
