from __future__ import annotations

import os
import sys
from typing import Mapping, Optional

from .util import run


def git_root(cwd: str) -> Optional[str]:
    try:
        res = run(["git", "rev-parse", "--show-toplevel"], cwd=cwd)
    except FileNotFoundError:
        return None
    if res.code != 0:
        return None
    return res.stdout.strip()


def home_dir(env: Mapping[str, str]) -> str:
    for key in ("HOME", "USERPROFILE"):
        value = env.get(key)
        if value:
            return value
    raise RuntimeError("Cannot determine home directory (HOME/USERPROFILE not set).")


def config_dir(env: Mapping[str, str], platform: str = sys.platform) -> str:
    override = env.get("GU_CONFIG_HOME")
    if override:
        return os.path.abspath(override)
    xdg = env.get("XDG_CONFIG_HOME")
    if xdg:
        return os.path.join(xdg, "gu")
    home = home_dir(env)
    if platform == "darwin":
        return os.path.join(home, "Library", "Application Support", "gu")
    return os.path.join(home, ".config", "gu")


def config_path(env: Mapping[str, str], platform: str = sys.platform) -> str:
    return os.path.join(config_dir(env, platform), "config.json")
