"""The role sifter decides which of the trailing arguments of a load
call are locals and which are options. The rules, applied left to
right across all mapping arguments:

++  a nested ``options`` mapping always contributes to the options
++  a nested ``locals`` mapping always contributes to the locals
++  the first mapping with anything left over (ie, not fully consumed
    by nesting or root keys) is the primary locals source
++  the last such mapping, if it isn't the primary locals source and
    doesn't itself carry nested options, is the primary options source.
    A single mapping is therefore always locals-only.
++  anything in between is merged into the locals

Non-mapping arguments (literal content strings, flags, etc) are
ignored entirely. Nested declarations override flat ones on key
collision.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from temploader._types import ROOT_KEYS
from temploader._types import effective_root_keys
from temploader._types import is_mapping

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SiftedRoles:
    locals: dict[str, Any]
    options: dict[str, Any]


def sift_roles(
        rest: Sequence[object],
        root_keys: frozenset[str] = ROOT_KEYS
        ) -> SiftedRoles:
    """Partitions the trailing arguments of a load call into a single
    flat locals mapping and a single flat options mapping. Root keys
    never make it into either.
    """
    root = effective_root_keys(root_keys)
    nested_locals: dict[str, Any] = {}
    nested_options: dict[str, Any] = {}
    candidates: list[Mapping[str, Any]] = []

    for arg in rest:
        if not is_mapping(arg):
            continue

        nested_locals.update(extract_nested(arg, 'locals', root))
        nested_options.update(extract_nested(arg, 'options', root))
        if any(key not in root for key in arg):
            candidates.append(arg)

    options_index = None
    if len(candidates) > 1 and 'options' not in candidates[-1]:
        options_index = len(candidates) - 1

    flat_locals: dict[str, Any] = {}
    flat_options: dict[str, Any] = {}
    for index, candidate in enumerate(candidates):
        if index == options_index:
            flat_options.update(omit_keys(candidate, root))
        else:
            flat_locals.update(omit_keys(candidate, root))

    logger.debug(
        'Sifted %d candidate mappings; options source index: %s',
        len(candidates), options_index)
    return SiftedRoles(
        locals={**flat_locals, **nested_locals},
        options={**flat_options, **nested_options})


def extract_nested(
        value: Mapping[str, Any],
        key: str,
        root: frozenset[str]
        ) -> dict[str, Any]:
    """Returns the contents of the nested mapping at ``key``, minus any
    root keys, or an empty dict if there isn't one.
    """
    nested = value.get(key)
    if nested is None:
        return {}

    if not is_mapping(nested):
        raise TypeError(
            f'Nested {key} must be a mapping!', nested)

    return omit_keys(nested, root)


def omit_keys(
        value: Mapping[str, Any],
        keys: frozenset[str]
        ) -> dict[str, Any]:
    return {
        name: member for name, member in value.items() if name not in keys}


def sift_explicit(
        locals: Mapping[str, Any] | None,  # noqa: A002
        options: Mapping[str, Any] | None,
        root_keys: frozenset[str] = ROOT_KEYS
        ) -> SiftedRoles:
    """Like ``sift_roles``, but for when the roles are already known
    positionally, and therefore don't need any guessing. Nested
    declarations inside either mapping are still honored.
    """
    root = effective_root_keys(root_keys)
    locals = locals or {}  # noqa: A001
    options = options or {}
    return SiftedRoles(
        locals={
            **omit_keys(locals, root),
            **extract_nested(locals, 'locals', root),
            **extract_nested(options, 'locals', root)},
        options={
            **omit_keys(options, root),
            **extract_nested(locals, 'options', root),
            **extract_nested(options, 'options', root)})
