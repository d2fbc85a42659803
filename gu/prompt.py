"""
Prompt Layer - line prompts and the UI object commands talk to.
"""

from __future__ import annotations

import getpass
from typing import Callable, List, Optional, Sequence

from . import tui
from .tui import Option


Validator = Callable[[str], Optional[str]]


def confirm(message: str, default: bool = False) -> bool:
    hint = "Y/n" if default else "y/N"
    while True:
        answer = input(f"{message} [{hint}] ").strip().lower()
        if not answer:
            return default
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("Please answer y or n.")


def ask(message: str, default: str = "", validate: Optional[Validator] = None) -> str:
    suffix = f" [{default}]" if default else ""
    while True:
        answer = input(f"{message}{suffix}: ").strip()
        if not answer:
            answer = default
        if validate:
            problem = validate(answer)
            if problem:
                print(problem)
                continue
        return answer


def ask_secret(message: str) -> str:
    return getpass.getpass(f"{message}: ").strip()


class TerminalUI:
    """Interactive selection and confirmation on the real terminal."""

    def select_many(self, message: str, options: Sequence[Option]) -> List[str]:
        return tui.select_many(message, options)

    def select_one(self, message: str, options: Sequence[Option]) -> Optional[str]:
        return tui.select_one(message, options)

    def confirm(self, message: str, default: bool = False) -> bool:
        return confirm(message, default)

    def ask(self, message: str, default: str = "", validate: Optional[Validator] = None) -> str:
        return ask(message, default, validate)

    def ask_secret(self, message: str) -> str:
        return ask_secret(message)
