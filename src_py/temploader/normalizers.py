from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from functools import partial
from functools import singledispatch
from typing import Any

from temploader._flattening import flatten_template
from temploader._flattening import template_as_raw
from temploader._sifting import SiftedRoles
from temploader._sifting import sift_roles
from temploader._types import NESTING_KEYS
from temploader._types import RawInput
from temploader._types import effective_root_keys
from temploader._types import is_glob
from temploader._types import is_mapping
from temploader._types import is_template_like
from temploader.config import LoaderConfig
from temploader.exceptions import AmbiguousContentError
from temploader.exceptions import InvalidInputError
from temploader.exceptions import LoadFailure
from temploader.exceptions import NoGlobMatchesError
from temploader.keys import derive_key
from temploader.prebaked.collaborators import ParsedContent
from temploader.templates import NormalizedTemplate
from temploader.templates import VinylTemplate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoadContext:
    """Everything the pipeline needs to know about a single load call.
    This is resolved exactly once per call (see ``LoadContext.resolve``)
    and then passed explicitly through every normalizer, so that nothing
    downstream ever needs to reach back into loader state.
    """
    config: LoaderConfig
    call_roles: SiftedRoles
    base_locals: Mapping[str, Any] = field(default_factory=dict)
    base_options: Mapping[str, Any] = field(default_factory=dict)
    # None means that errors propagate immediately. Otherwise, failing items
    # are recorded here and skipped.
    failures: list[LoadFailure] | None = None

    @classmethod
    def resolve(
            cls,
            config: LoaderConfig,
            rest: Sequence[object],
            *,
            base_locals: Mapping[str, Any] | None = None,
            base_options: Mapping[str, Any] | None = None
            ) -> LoadContext:
        """Layers the configuration for a single call: the passed
        config, then any config keys in the global options, then any
        config keys in the call-level options.

        Note that root keys can themselves be overridden per call, so
        if they change, we need to sift the call arguments a second time
        with the final root key set.
        """
        base_config = config.merged(base_options)
        call_roles = sift_roles(rest, base_config.root_keys)
        call_config = base_config.merged(call_roles.options)
        if call_config.root_keys != base_config.root_keys:
            call_roles = sift_roles(rest, call_config.root_keys)

        return cls(
            config=call_config,
            call_roles=call_roles,
            base_locals=dict(base_locals or {}),
            base_options=dict(base_options or {}),
            failures=[] if call_config.isolate_errors else None)

    def aggregate_options(self) -> dict[str, Any]:
        return {**self.base_options, **self.call_roles.options}


def normalize(
        source: RawInput,
        *rest: object,
        config: LoaderConfig | None = None,
        locals: Mapping[str, Any] | None = None,  # noqa: A002
        options: Mapping[str, Any] | None = None
        ) -> dict[str, NormalizedTemplate]:
    """Normalizes any supported input shape into a mapping of derived
    key to normalized template. This is the stateless version of
    ``Loader.load``: it runs the entire pipeline, but doesn't cache
    anything, nor does it call the ``on_load`` hook.

    The trailing arguments are sifted into locals and options; see
    ``sift_roles`` for the rules.
    """
    if config is None:
        config = LoaderConfig()

    context = LoadContext.resolve(
        config, rest, base_locals=locals, base_options=options)
    # Later entries win on key collisions
    return {
        derive_key(template, context.config): template
        for template in collect_templates(source, rest, context)}


def collect_templates(
        source: RawInput,
        rest: Sequence[object],
        context: LoadContext
        ) -> list[NormalizedTemplate]:
    """Runs the dispatcher on ``source`` and collects its results,
    honoring error isolation for the source as a whole.
    """
    return _isolated(
        partial(_dispatch, source, rest, context), source, context)


def _isolated(
        produce: Callable[[], Iterable[NormalizedTemplate]],
        source: object,
        context: LoadContext
        ) -> list[NormalizedTemplate]:
    if context.failures is None:
        return list(produce())

    try:
        return list(produce())
    except Exception as exc:
        logger.info(
            'Skipping item that failed to load: %r', source, exc_info=exc)
        context.failures.append(LoadFailure(source=source, exc=exc))
        return []


@singledispatch
def _dispatch(
        source: object,
        rest: Sequence[object],
        context: LoadContext
        ) -> Iterator[NormalizedTemplate]:
    """The dispatcher classifies the shape of the source and routes it
    to the matching normalizer. This is the fallback for anything we
    don't support.
    """
    raise InvalidInputError(
        f'Unsupported input shape: {type(source).__name__}', source)


@_dispatch.register
def _(
        source: bytes | bytearray,
        rest: Sequence[object],
        context: LoadContext
        ) -> Iterator[NormalizedTemplate]:
    # Bytes would otherwise be caught by the sequence normalizer
    raise InvalidInputError(
        f'Unsupported input shape: {type(source).__name__}', source)


@_dispatch.register
def _(
        source: str,
        rest: Sequence[object],
        context: LoadContext
        ) -> Iterator[NormalizedTemplate]:
    """Strings are either glob patterns, or the key (and default path)
    of a single template.
    """
    if not is_glob(source):
        yield _string_template(source, rest, context)
        return

    if rest and isinstance(rest[0], str):
        raise AmbiguousContentError(
            'Glob patterns cannot have literal string content!',
            source, rest[0])

    config = context.config
    paths = config.glob(source, config.cwd)
    logger.debug('Glob %r matched %d files', source, len(paths))
    if not paths and config.strict:
        raise NoGlobMatchesError(
            'Glob pattern did not match any files!', source, config.cwd)

    for path in paths:
        yield from _isolated(
            partial(_single, _string_template, path, rest, context),
            path,
            context)


@_dispatch.register
def _(
        source: Sequence,
        rest: Sequence[object],
        context: LoadContext
        ) -> Iterator[NormalizedTemplate]:
    """Each element is normalized independently with the same trailing
    arguments. Later elements win on key collisions, which falls out
    naturally from the order we yield them in.
    """
    for element in source:
        yield from _isolated(
            partial(_dispatch, element, rest, context), element, context)


@_dispatch.register
def _(
        source: Mapping,
        rest: Sequence[object],
        context: LoadContext
        ) -> Iterator[NormalizedTemplate]:
    """A mapping with a path or content directly on it is a single
    template. Otherwise, it's a key/value mapping of templates.
    """
    if is_template_like(source):
        yield _read_if_needed(dict(source), context)
        return

    for key, value in source.items():
        yield from _isolated(
            partial(_keyed_value, key, value, rest, context),
            {key: value},
            context)


@_dispatch.register
def _(
        source: NormalizedTemplate,
        rest: Sequence[object],
        context: LoadContext
        ) -> Iterator[NormalizedTemplate]:
    yield _prebuilt_template(source, None, context)


@_dispatch.register
def _(
        source: Callable,
        rest: Sequence[object],
        context: LoadContext
        ) -> Iterator[NormalizedTemplate]:
    if context.config.call_with_options:
        produced = source(context.aggregate_options())
    else:
        produced = source()

    logger.debug(
        'Function source %r produced %s', source, type(produced).__name__)
    yield from _dispatch(produced, rest, context)


def _single(
        build: Callable[..., NormalizedTemplate],
        *args
        ) -> tuple[NormalizedTemplate]:
    return (build(*args),)


def _keyed_value(
        key: str,
        value: object,
        rest: Sequence[object],
        context: LoadContext
        ) -> Iterator[NormalizedTemplate]:
    """Normalizes a single entry from a key/value mapping of templates.
    The key fills in a missing path.
    """
    if isinstance(value, str):
        yield _finish({'path': key, 'content': value}, context)

    elif isinstance(value, NormalizedTemplate):
        yield _prebuilt_template(value, key, context)

    elif is_mapping(value):
        path = value.get('path') or key
        yield from _dispatch({**value, 'path': path}, rest, context)

    else:
        raise TypeError(
            f'Unsupported template value for key {key!r}: '
            + type(value).__name__,
            value)


def _string_template(
        key: str,
        rest: Sequence[object],
        context: LoadContext
        ) -> NormalizedTemplate:
    """A literal string second argument is always the content, and
    short-circuits any file reads. Otherwise, a mapping second argument
    can declare any of the root properties (including a ``path`` that
    overrides the key). If we still don't have content, we fall back to
    reading the file.
    """
    value = rest[0] if rest else None
    raw: dict[str, Any] = {'path': key}

    if isinstance(value, str):
        raw['content'] = value
        return _finish(raw, context)

    if is_mapping(value):
        declarable = (
            effective_root_keys(context.config.root_keys) - NESTING_KEYS)
        raw.update(
            (name, member) for name, member in value.items()
            if name in declarable)

    return _read_if_needed(raw, context)


def _prebuilt_template(
        template: NormalizedTemplate,
        key: str | None,
        context: LoadContext
        ) -> NormalizedTemplate:
    """Prebuilt templates only need minimal normalization: a missing
    path gets filled in from the key, and the call-level locals and
    options get applied.
    """
    raw = template_as_raw(template)
    if not raw['path'] and key is not None:
        raw['path'] = key

    if isinstance(template, VinylTemplate):
        return _finish(raw, context, stat=template.stat, vinyl=True)
    return _finish(raw, context)


def _read_if_needed(
        raw: dict[str, Any],
        context: LoadContext
        ) -> NormalizedTemplate:
    path = raw.get('path')
    if 'content' in raw or path is None:
        return _finish(raw, context)

    if not isinstance(path, (str, os.PathLike)):
        raise TypeError('Template paths must be strings!', path)

    source_file = _resolve_path(os.fspath(path), context.config)
    # Anything declared explicitly takes precedence over the file
    return _finish(
        {
            **_read_template_file(source_file, context.config),
            **raw,
            'path': _rewrite_path(os.fspath(path), context.config)},
        context,
        source_file=source_file)


def _read_template_file(
        source_file: str,
        config: LoaderConfig
        ) -> dict[str, Any]:
    """Reads the file and returns its root properties. Missing files
    result in ``None`` content; this is explicitly not an error.
    """
    raw_text = config.read(source_file)
    if raw_text is None:
        logger.debug(
            'No readable file at %s; content will be None', source_file)
        return {'content': None}

    if config.noparse:
        return {'content': raw_text}

    if source_file.endswith('.json'):
        return _decode_json_template(source_file, raw_text)

    parsed = config.parse(raw_text)
    if isinstance(parsed, ParsedContent):
        content, data = parsed.content, parsed.data
    elif is_mapping(parsed):
        content, data = parsed.get('content'), parsed.get('data')
    else:
        raise TypeError(
            'Parsers must return ParsedContent or a mapping!', parsed)

    fields: dict[str, Any] = {'content': content, 'orig': raw_text}
    if data:
        fields['data'] = data
    return fields


def _decode_json_template(source_file: str, raw_text: str) -> dict[str, Any]:
    """JSON files are themselves raw templates. Their path always comes
    from the file, not from the JSON.
    """
    try:
        decoded = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        logger.debug(
            'Treating malformed JSON in %s as plain content',
            source_file, exc_info=exc)
        return {'content': raw_text, 'orig': raw_text}

    if not is_mapping(decoded):
        return {'content': None, 'orig': raw_text}

    fields = {key: value for key, value in decoded.items() if key != 'path'}
    fields.setdefault('content', None)
    fields['orig'] = raw_text
    return fields


def _finish(
        raw: Mapping[str, Any],
        context: LoadContext,
        *,
        source_file: str | None = None,
        stat: os.stat_result | None = None,
        vinyl: bool = False
        ) -> NormalizedTemplate:
    template = flatten_template(
        raw,
        root_keys=context.config.root_keys,
        call_roles=context.call_roles,
        base_locals=context.base_locals,
        base_options=context.base_options)

    if context.config.vinyl_mode or vinyl:
        if stat is None and source_file is not None:
            stat = _stat(source_file)
        template = VinylTemplate.from_template(template, stat)

    return template


def _rewrite_path(path: str, config: LoaderConfig) -> str:
    if config.resolve is None:
        return path

    resolved = config.resolve(path, config)
    if not isinstance(resolved, str):
        raise TypeError('resolve must return a string!', resolved)
    return resolved


def _resolve_path(path: str, config: LoaderConfig) -> str:
    if config.cwd is None or os.path.isabs(path):
        return path
    return os.path.join(config.cwd, path)


def _stat(source_file: str) -> os.stat_result | None:
    try:
        return os.stat(source_file)
    except OSError:
        return None
