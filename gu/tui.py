"""
TUI Layer - curses pickers for choosing branches and commands.

Disabled options are drawn but can never be checked or chosen.
"""

from __future__ import annotations

import curses
from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class Option:
    label: str
    value: str
    hint: str = ""
    disabled: Optional[str] = None


def filter_options(options: Sequence[Option], query: str) -> List[int]:
    """Indexes of options whose label, value or hint contain ``query``."""
    if not query:
        return list(range(len(options)))
    q = query.lower()
    return [
        i
        for i, opt in enumerate(options)
        if q in opt.label.lower() or q in opt.value.lower() or q in opt.hint.lower()
    ]


def format_option(opt: Option, checked: Optional[bool]) -> str:
    box = ""
    if checked is not None:
        box = "[x] " if checked else "[ ] "
    line = f"{box}{opt.label}"
    if opt.hint:
        line += f"  {opt.hint}"
    if opt.disabled:
        line += f"  ({opt.disabled})"
    return line


def _draw(stdscr, message: str, options: Sequence[Option], visible: List[int], cursor: int,
          top: int, checked: Optional[set], status: str, query: str) -> None:
    stdscr.erase()
    height, width = stdscr.getmaxyx()
    stdscr.addnstr(0, 0, message, width - 1, curses.A_BOLD)
    rows = max(1, height - 3)
    for i in range(rows):
        pos = top + i
        if pos >= len(visible):
            break
        opt = options[visible[pos]]
        mark = None if checked is None else visible[pos] in checked
        attr = curses.A_DIM if opt.disabled else curses.A_NORMAL
        if pos == cursor:
            attr |= curses.A_REVERSE
        stdscr.addnstr(i + 1, 0, format_option(opt, mark), width - 1, attr)
    stdscr.addnstr(height - 2, 0, status, width - 1)
    stdscr.addnstr(height - 1, 0, f"Filter: {query}", width - 1)
    stdscr.refresh()


def _pick(message: str, options: Sequence[Option], multi: bool) -> Optional[List[str]]:
    def _main(stdscr) -> Optional[List[str]]:
        curses.curs_set(0)
        stdscr.keypad(True)

        query = ""
        visible = filter_options(options, query)
        cursor = 0
        top = 0
        checked: Optional[set] = set() if multi else None
        default_status = (
            "space: toggle  enter: confirm  /: search  q: quit"
            if multi
            else "enter: choose  /: search  q: quit"
        )
        status = default_status

        while True:
            height, width = stdscr.getmaxyx()
            rows = max(1, height - 3)
            _draw(stdscr, message, options, visible, cursor, top, checked, status, query)

            ch = stdscr.getch()
            if ch in (ord("q"), 27):
                return None
            if ch in (curses.KEY_UP, ord("k")):
                if cursor > 0:
                    cursor -= 1
                if cursor < top:
                    top = cursor
            elif ch in (curses.KEY_DOWN, ord("j")):
                if cursor < len(visible) - 1:
                    cursor += 1
                if cursor >= top + rows:
                    top = cursor - rows + 1
            elif ch in (curses.KEY_HOME, ):
                cursor = 0
                top = 0
            elif ch in (curses.KEY_END, ):
                cursor = max(0, len(visible) - 1)
                top = max(0, cursor - rows + 1)
            elif ch == ord("/"):
                stdscr.addnstr(height - 2, 0, "Enter search query: ", width - 1)
                stdscr.refresh()
                curses.echo()
                query = stdscr.getstr(height - 1, 8, width - 9).decode("utf-8")
                curses.noecho()
                visible = filter_options(options, query)
                cursor = 0
                top = 0
                status = default_status
            elif ch == ord(" ") and multi and visible:
                idx = visible[cursor]
                if options[idx].disabled:
                    status = f"{options[idx].value}: {options[idx].disabled}"
                    continue
                checked ^= {idx}
                status = default_status
            elif ch in (curses.KEY_ENTER, 10, 13):
                if multi:
                    return [options[i].value for i in sorted(checked)]
                if not visible:
                    continue
                opt = options[visible[cursor]]
                if opt.disabled:
                    status = f"{opt.value}: {opt.disabled}"
                    continue
                return [opt.value]

    return curses.wrapper(_main)


def select_many(message: str, options: Sequence[Option]) -> List[str]:
    """Checkbox picker. Returns chosen values; quitting returns []."""
    if not options:
        return []
    return _pick(message, options, multi=True) or []


def select_one(message: str, options: Sequence[Option]) -> Optional[str]:
    if not options:
        return None
    picked = _pick(message, options, multi=False)
    return picked[0] if picked else None
