"""Prompt and output helpers shared by the console commands."""

from __future__ import annotations

from typing import List, Optional, Sequence

from rich.console import Console as RichConsole
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

from realtyhub.db import database


# Access SessionLocal dynamically so test fixtures that rebind the
# sessionmaker are respected.
def SessionLocal():
    database.ensure_sqlite_schema()
    return database.SessionLocal()


class Console:
    """Terminal I/O on rich; tests swap ``prompt``/``confirm_prompt`` for scripted doubles."""

    def __init__(self, term: Optional[RichConsole] = None, prompt=Prompt, confirm_prompt=Confirm):
        self.term = term or RichConsole()
        self.prompt = prompt
        self.confirm_prompt = confirm_prompt
        self.lines: List[str] = []

    def line(self, text: str = "") -> None:
        self.lines.append(text)
        self.term.print(text, markup=False, highlight=False)

    def ask(self, question: str, default: Optional[str] = None, choices: Optional[Sequence[str]] = None) -> str:
        options = {}
        if default is not None:
            options["default"] = default
        if choices is not None:
            options["choices"] = list(choices)
        return self.prompt.ask(question, console=self.term, **options)

    def secret(self, question: str) -> str:
        return self.prompt.ask(question, console=self.term, password=True)

    def confirm(self, question: str, default: bool = False) -> bool:
        return self.confirm_prompt.ask(question, console=self.term, default=default)

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[object]], title: Optional[str] = None) -> None:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(Text(str(cell)) for cell in row))
        self.term.print(table)
