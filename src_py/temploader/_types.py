from __future__ import annotations

import re
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from typing_extensions import TypeIs

type RawTemplate = Mapping[str, Any]
type RawInput = (
    str
    | Sequence[RawInput]
    | Mapping[str, RawTemplate | str | RawInput]
    | Callable[..., RawInput])

# These are the fields we recognize on a raw template. Anything else found on
# the template gets folded into its locals.
ROOT_KEYS: frozenset[str] = frozenset({
    'path',
    'ext',
    'content',
    'locals',
    'data',
    'orig',
    'options',
    'value'})
# Regardless of any custom root key set, these always keep their structural
# meaning. Otherwise we couldn't ever establish a path or content, nor find
# nested declarations.
STRUCTURAL_KEYS: frozenset[str] = frozenset({
    'path', 'content', 'locals', 'options'})
NESTING_KEYS: frozenset[str] = frozenset({'locals', 'options'})
# Root keys that pass through flattening untouched when present on the raw
# template. Note that we never descend into ``data``.
PROTECTED_KEYS: tuple[str, ...] = ('ext', 'data', 'orig', 'value')

# Same magic characters as the stdlib glob module.
_GLOB_MAGIC = re.compile(r'[*?[]')


def effective_root_keys(root_keys: frozenset[str]) -> frozenset[str]:
    return root_keys | STRUCTURAL_KEYS


def is_glob(value: str) -> bool:
    """Glob detection is purely syntactic: anything containing a glob
    metacharacter is treated as a pattern, whether or not it matches
    any files.

    Only the metacharacters understood by the stdlib glob module count.
    Brace expansion (``{a,b}``) and extglobs (``!(x)``, ``+(x)``) are
    not supported by the default expander, so keys using them are
    treated as literal paths.
    """
    return _GLOB_MAGIC.search(value) is not None


def is_mapping(value: object) -> TypeIs[Mapping[str, Any]]:
    return isinstance(value, Mapping)


def is_template_like(value: object) -> TypeIs[Mapping[str, Any]]:
    """A mapping is a single raw template (rather than a key/value
    collection of templates) if it declares a path or content directly
    on itself.
    """
    return is_mapping(value) and ('path' in value or 'content' in value)
