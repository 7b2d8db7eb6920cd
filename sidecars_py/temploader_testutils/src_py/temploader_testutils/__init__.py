from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from unittest.mock import Mock

from temploader.config import LoaderConfig
from temploader.prebaked.collaborators import parse_front_matter


def _read_signature(path: str) -> str | None: ...


def _glob_signature(pattern: str, cwd: str | None) -> list[str]: ...


def fake_loader_config(
        files: Mapping[str, str] | None = None,
        globs: Mapping[str, Sequence[str]] | None = None,
        **config_kwargs: Any
        ) -> LoaderConfig:
    """Creates a loader config backed by an in-memory filesystem, so
    that tests don't need to touch the disk. Both the reader and the
    glob expander are mocks (wrapping the in-memory lookups), so calls
    can be asserted against.
    """
    files = dict(files or {})
    globs = dict(globs or {})
    config_kwargs.setdefault(
        'read', Mock(spec=_read_signature, side_effect=files.get))
    config_kwargs.setdefault(
        'glob',
        Mock(
            spec=_glob_signature,
            side_effect=lambda pattern, cwd: list(globs.get(pattern, ()))))
    config_kwargs.setdefault('parse', Mock(wraps=parse_front_matter))
    return LoaderConfig(**config_kwargs)


def front_matter_file(body: str, **data: str) -> str:
    """Renders a (very simple) front matter file, for use as the
    contents of a fake file.
    """
    if not data:
        return body

    lines = ['---', *(f'{key}: {value}' for key, value in data.items())]
    return '\n'.join([*lines, '---', body])


def read_fixture(path: str | Path) -> str:
    return Path(path).read_text(encoding='utf-8')
