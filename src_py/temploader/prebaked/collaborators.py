"""Default implementations of the collaborators the loading pipeline
calls through: reading files, parsing front matter, and expanding glob
patterns. Any of these can be swapped out through the loader config.
"""
from __future__ import annotations

import glob
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_FRONT_MATTER_FENCE = '---'
_FRONT_MATTER_CLOSERS = frozenset({'---', '...'})


@dataclass(frozen=True, slots=True)
class ParsedContent:
    content: str
    data: Mapping[str, Any] = field(default_factory=dict)


def read_file(path: str | os.PathLike[str]) -> str | None:
    """Reads the file at ``path`` as UTF-8 text. Missing or unreadable
    files are not an error; they simply result in ``None``.
    """
    try:
        return Path(path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug('Could not read %s: %s', path, exc)
        return None


def parse_front_matter(raw: str) -> ParsedContent:
    """Splits a leading YAML front matter block from the body of the
    string. The block must start on the very first line with ``---``
    and be closed by either ``---`` or ``...``. If there is no such
    block, or if it doesn't contain a YAML mapping, the whole string is
    returned as the content.
    """
    candidate = raw.lstrip('\ufeff')
    lines = candidate.splitlines(keepends=True)
    if not lines or lines[0].strip() != _FRONT_MATTER_FENCE:
        return ParsedContent(content=raw)

    # Sliced from the original string; line endings in the body are kept
    # exactly as they were.
    offset = len(lines[0])
    front_matter_lines: list[str] = []
    body_start: int | None = None
    for line in lines[1:]:
        offset += len(line)
        if line.strip() in _FRONT_MATTER_CLOSERS:
            body_start = offset
            break
        front_matter_lines.append(line)

    if body_start is None:
        return ParsedContent(content=raw)

    try:
        data = yaml.safe_load(''.join(front_matter_lines)) or {}
    except yaml.YAMLError as exc:
        logger.debug('Ignoring malformed front matter', exc_info=exc)
        return ParsedContent(content=raw)

    if not isinstance(data, dict):
        return ParsedContent(content=raw)

    return ParsedContent(content=candidate[body_start:], data=data)


def expand_glob(
        pattern: str,
        cwd: str | os.PathLike[str] | None = None
        ) -> list[str]:
    """Expands ``pattern`` into a sorted list of matching file paths.
    If ``cwd`` is given, the pattern is matched relative to it, and the
    returned paths are likewise relative to it. Directories are never
    included in the result.
    """
    matches = glob.glob(pattern, root_dir=cwd, recursive=True)
    if cwd is None:
        files = [match for match in matches if os.path.isfile(match)]
    else:
        files = [
            match for match in matches
            if os.path.isfile(os.path.join(cwd, match))]

    logger.debug('Expanded %r to %d files', pattern, len(files))
    return sorted(files)
