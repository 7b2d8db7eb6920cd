from __future__ import annotations

import dataclasses
import os
import typing
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated
from typing import Any
from typing import Protocol

from docnote import ClcNote

from temploader._types import ROOT_KEYS
from temploader.prebaked.collaborators import ParsedContent
from temploader.prebaked.collaborators import expand_glob
from temploader.prebaked.collaborators import parse_front_matter
from temploader.prebaked.collaborators import read_file

if typing.TYPE_CHECKING:
    from temploader.templates import NormalizedTemplate


class TemplateReader(Protocol):

    def __call__(self, path: str) -> str | None:
        """Readers accept a single positional argument: the path of the
        file to read. They return the raw contents of the file, or
        ``None`` if the file is missing or unreadable. Readers should
        not raise for missing files.
        """
        ...


class FrontMatterParser(Protocol):

    def __call__(self, raw: str) -> ParsedContent:
        """Parsers split the raw contents of a file into the template
        body (``content``) and any metadata declared in front matter
        (``data``).
        """
        ...


class GlobExpander(Protocol):

    def __call__(
            self,
            pattern: str,
            cwd: str | os.PathLike[str] | None
            ) -> list[str]:
        """Glob expanders return the concrete file paths matching the
        pattern, relative to ``cwd`` if one was given.
        """
        ...


class KeyRenamer(Protocol):

    def __call__(
            self,
            template: NormalizedTemplate,
            config: LoaderConfig
            ) -> str:
        """Key renamers compute the cache key for a normalized template.
        They must be pure functions of their arguments.
        """
        ...


class PathResolver(Protocol):

    def __call__(self, path: str, config: LoaderConfig) -> str:
        """Path resolvers rewrite the path of file-backed templates, ex
        to make them absolute. They receive the path exactly as it was
        given (or as the glob expander returned it), and their result
        becomes both the template path and the basis of its default key.
        """
        ...


class LoadHook(Protocol):

    def __call__(self, template: NormalizedTemplate) -> None:
        """Load hooks are called once per successfully normalized
        template, before it is cached. They may mutate the template in
        place.
        """
        ...


@dataclass(frozen=True, slots=True)
class LoaderConfig:
    cwd: Annotated[
        str | os.PathLike[str] | None,
        ClcNote(
            '''The base directory used when reading relative paths and
            expanding glob patterns. Note that template paths are not
            rewritten; they stay exactly as they were given (or as the
            glob expander returned them).
            ''')] = None
    root_keys: Annotated[
        frozenset[str],
        ClcNote(
            '''The recognized root keys of a template. Every other
            property found on a template is folded into its locals. An
            empty set means that even normally protected properties, like
            ``data``, become locals. ``path``, ``content``, ``locals``,
            and ``options`` always keep their meaning, regardless of
            this setting.
            ''')] = ROOT_KEYS
    rename_key: Annotated[
        KeyRenamer | None,
        ClcNote(
            '''Computes the cache key of each template. If omitted, the
            template path is used.
            ''')] = None
    read: TemplateReader = read_file
    parse: FrontMatterParser = parse_front_matter
    glob: GlobExpander = expand_glob
    resolve: Annotated[
        PathResolver | None,
        ClcNote(
            '''Rewrites the path of every template whose content is
            read from a file. Reading itself always uses the original
            path. If omitted, paths stay exactly as given.
            ''')] = None
    on_load: LoadHook | None = None
    with_ext: Annotated[
        bool,
        ClcNote(
            '''If false, the file extension is stripped from the default
            (path-derived) key. Has no effect on custom ``rename_key``
            functions.
            ''')] = True
    vinyl_mode: Annotated[
        bool,
        ClcNote(
            '''Produce ``VinylTemplate`` records, which also carry the
            encoded ``contents`` and the file ``stat``.
            ''')] = False
    noparse: Annotated[
        bool,
        ClcNote(
            '''Skip front matter (and JSON) parsing of files, passing
            their contents through untouched.
            ''')] = False
    strict: Annotated[
        bool,
        ClcNote(
            '''Treat glob patterns that don't match any files as an
            error instead of silently loading nothing.
            ''')] = False
    isolate_errors: Annotated[
        bool,
        ClcNote(
            '''By default, a single bad item aborts the whole load call
            without touching the cache. With isolation, failing items
            are skipped and recorded instead.
            ''')] = False
    call_with_options: Annotated[
        bool,
        ClcNote(
            '''Function sources are called without arguments by default.
            If this is set, they're called with the aggregated options
            mapping instead.
            ''')] = False

    def merged(self, overrides: Mapping[str, Any] | None) -> LoaderConfig:
        """Layers any recognized configuration keys from ``overrides``
        on top of the current config, returning a new config. Unknown
        keys are ignored, since the same mappings also carry arbitrary
        template options.
        """
        if not overrides:
            return self

        changes = {}
        for name, value in overrides.items():
            validator = _VALIDATORS.get(name)
            if validator is not None:
                changes[name] = validator(name, value)

        if not changes:
            return self

        return dataclasses.replace(self, **changes)


def _check_callable(name: str, value: object) -> object:
    if not callable(value):
        raise TypeError(f'Config value for {name} must be callable!', value)
    return value


def _check_optional_callable(name: str, value: object) -> object:
    if value is None:
        return None
    return _check_callable(name, value)


def _check_bool(name: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f'Config value for {name} must be a bool!', value)
    return value


def _check_cwd(name: str, value: object) -> object:
    if value is not None and not isinstance(value, (str, os.PathLike)):
        raise TypeError(f'Config value for {name} must be a path!', value)
    return value


def _check_root_keys(name: str, value: object) -> frozenset[str]:
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise TypeError(
            f'Config value for {name} must be a collection of strings!',
            value)

    root_keys = frozenset(value)
    if not all(isinstance(key, str) for key in root_keys):
        raise TypeError(
            f'Config value for {name} must be a collection of strings!',
            value)
    return root_keys


_VALIDATORS = {
    'cwd': _check_cwd,
    'root_keys': _check_root_keys,
    'rename_key': _check_optional_callable,
    'read': _check_callable,
    'parse': _check_callable,
    'glob': _check_callable,
    'on_load': _check_optional_callable,
    'resolve': _check_optional_callable,
    'with_ext': _check_bool,
    'vinyl_mode': _check_bool,
    'noparse': _check_bool,
    'strict': _check_bool,
    'isolate_errors': _check_bool,
    'call_with_options': _check_bool,
}

CONFIG_KEYS: frozenset[str] = frozenset(_VALIDATORS)
