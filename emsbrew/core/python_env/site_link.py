"""Bridging the private env into the main site-packages.

A ``.pth`` file in the main site-packages lists the private env's
site-packages, so modules installed there are importable without
activating the env.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

_log = logging.getLogger("emsbrew.python")

PTH_NAME = "homebrew-openems-dependencies.pth"


def link_environment(main_site: Path, target_site: Path, *, name: str = PTH_NAME) -> Path:
    """Write ``<main_site>/<name>`` containing exactly one line: ``target_site``.

    Rewrites the file if it already exists, so repeated installs converge on
    the same content.
    """
    main_site.mkdir(parents=True, exist_ok=True)
    pth = main_site / name
    pth.write_text(f"{target_site}\n", encoding="utf-8")
    _log.info("Linked %s -> %s", pth, target_site)
    return pth


def read_link(pth: Path) -> Optional[Path]:
    if not pth.exists():
        return None
    lines = [ln.strip() for ln in pth.read_text(encoding="utf-8").splitlines() if ln.strip()]
    if not lines:
        return None
    return Path(lines[0])
