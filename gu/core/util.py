from __future__ import annotations

import json
import os
import re
import subprocess
from dataclasses import dataclass


@dataclass(frozen=True)
class CmdResult:
    code: int
    stdout: str
    stderr: str


def run(cmd: list[str], cwd: str | None = None) -> CmdResult:
    proc = subprocess.run(
        cmd,
        cwd=cwd,
        text=True,
        capture_output=True,
        check=False,
    )
    return CmdResult(proc.returncode, proc.stdout.rstrip(), proc.stderr.strip())


def slugify(text: str, max_len: int | None = None) -> str:
    cleaned = re.sub(r"[^a-z0-9]+", "-", text.strip().lower()).strip("-")
    if max_len is not None:
        cleaned = cleaned[:max_len].rstrip("-")
    return cleaned


def read_json(path: str) -> dict | None:
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read().strip()
    if not raw:
        return None
    return json.loads(raw)


def write_json(path: str, data: dict) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        f.write("\n")


def mask_secret(value: str) -> str:
    if len(value) <= 8:
        return "********"
    return f"{value[:3]}…{value[-3:]}"


def split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]
