from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from temploader._sifting import SiftedRoles
from temploader._sifting import extract_nested
from temploader._sifting import omit_keys
from temploader._types import PROTECTED_KEYS
from temploader._types import ROOT_KEYS
from temploader._types import effective_root_keys
from temploader.exceptions import MissingContentError
from temploader.exceptions import MissingPathError
from temploader.templates import NormalizedTemplate

_EMPTY_ROLES = SiftedRoles(locals={}, options={})


def flatten_template(
        raw: Mapping[str, Any],
        *,
        root_keys: frozenset[str] = ROOT_KEYS,
        call_roles: SiftedRoles = _EMPTY_ROLES,
        base_locals: Mapping[str, Any] | None = None,
        base_options: Mapping[str, Any] | None = None,
        ) -> NormalizedTemplate:
    """Converts a single raw template into a normalized one.

    Root properties are kept on the template; everything else is folded
    into the locals. Nested ``locals`` and ``options`` are flattened
    into single mappings, layered (from lowest to highest precedence)
    as follows:
    ++  locals: ``base_locals``, extra properties on the raw template,
        the raw template's nested ``locals``, then the call-level
        locals
    ++  options: ``base_options``, the raw template's nested
        ``options``, then the call-level options

    Empty locals or options are omitted entirely. Protected properties
    (``ext``, ``data``, ``orig``, ``value``) are passed through as-is,
    as long as they're part of the root key set.
    """
    if 'content' not in raw:
        raise MissingContentError(
            'expects templates to have a content property', raw)

    path = raw.get('path')
    if path is None:
        raise MissingPathError(
            'expects templates to have a path property', raw)

    root = effective_root_keys(root_keys)
    template_locals = {
        **omit_keys(base_locals or {}, root),
        **omit_keys(raw, root),
        **extract_nested(raw, 'locals', root),
        **omit_keys(call_roles.locals, root)}
    template_options = {
        **omit_keys(base_options or {}, root),
        **extract_nested(raw, 'options', root),
        **omit_keys(call_roles.options, root)}
    protected = {
        key: raw[key] for key in PROTECTED_KEYS if key in root and key in raw}

    return NormalizedTemplate(
        path=_coerce_path(path),
        content=_coerce_content(raw['content']),
        locals=template_locals or None,
        options=template_options or None,
        **protected)


def template_as_raw(template: NormalizedTemplate) -> dict[str, Any]:
    """The inverse of flattening, at least as far as the root keys go.
    Used to push prebuilt templates back through the pipeline.
    """
    raw: dict[str, Any] = {'path': template.path, 'content': template.content}
    for key in (*PROTECTED_KEYS, 'locals', 'options'):
        value = getattr(template, key)
        if value is not None:
            raw[key] = value

    return raw


def _coerce_path(path: object) -> str:
    if isinstance(path, str):
        return path
    elif isinstance(path, os.PathLike):
        return os.fspath(path)
    else:
        raise TypeError('Template paths must be strings!', path)


def _coerce_content(content: object) -> str | None:
    if content is None or isinstance(content, str):
        return content
    elif isinstance(content, (bytes, bytearray)):
        return bytes(content).decode('utf-8')
    else:
        raise TypeError('Template content must be a string!', content)
