"""Discover application names from the layer's own log file.

The name an application passes to OpenXR rarely matches its program name. The
layer logs every name it sees while looking up its configuration, so the log is
the reliable place to find it.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path

from core import config

LOG = logging.getLogger(__name__)

_CONFIG_LINE = re.compile(r'(?:Could not load|Loading) config for "([^"]*)"')


def parse_application_names(text: str) -> list[str]:
    """Return distinct names in first-seen order."""
    seen: set[str] = set()
    names: list[str] = []
    for line in text.splitlines():
        match = _CONFIG_LINE.search(line)
        if not match:
            continue
        name = match.group(1).strip()
        if not name or name in seen:
            continue
        seen.add(name)
        names.append(name)
    return names


def discover_application_names(log_path: str | Path | None = None) -> list[str]:
    path = Path(log_path) if log_path else config.layer_log_path()
    if not path.is_file():
        return []
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        LOG.warning("Could not read layer log %s", path, exc_info=True)
        return []
    return parse_application_names(text)
