from __future__ import annotations

import os
import posixpath

from temploader.config import LoaderConfig
from temploader.templates import NormalizedTemplate


def derive_key(template: NormalizedTemplate, config: LoaderConfig) -> str:
    """Computes the cache key for a normalized template. This is a pure
    function of its arguments; any configuration declared in the
    template's own options is layered over ``config`` first, so that a
    single template can override the key renamer.

    Without a ``rename_key`` function, the key is the template path,
    minus its extension if ``with_ext`` is false.
    """
    config = config.merged(template.options)

    if config.rename_key is None:
        key = template.path
        if not config.with_ext:
            key = strip_ext(key)

    else:
        key = config.rename_key(template, config)
        if not isinstance(key, str):
            raise TypeError('rename_key must return a string!', key)

    return key


def strip_ext(path: str) -> str:
    stem, _ = posixpath.splitext(path)
    return stem


def rename_to_basename(
        template: NormalizedTemplate,
        config: LoaderConfig
        ) -> str:
    """Prebaked ``rename_key`` function that keys templates by file
    name, ex ``a/b/c.md`` becomes ``c.md``.
    """
    if config.with_ext:
        return template.basename
    return template.stem


def rename_to_stem(
        template: NormalizedTemplate,
        config: LoaderConfig
        ) -> str:
    """Prebaked ``rename_key`` function that keys templates by file
    name, without extension, ex ``a/b/c.md`` becomes ``c``.
    """
    return template.stem


def resolve_from_cwd(path: str, config: LoaderConfig) -> str:
    """Prebaked ``resolve`` function that makes template paths absolute,
    relative to the configured ``cwd`` (or the process working directory
    if there isn't one).
    """
    base = os.getcwd() if config.cwd is None else os.fspath(config.cwd)
    return os.path.normpath(os.path.join(os.path.abspath(base), path))
