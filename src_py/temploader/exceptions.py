from __future__ import annotations

from dataclasses import dataclass


class TemplateLoadError(Exception):
    """Base class for all temploader errors. Note that these are always
    deterministic problems with the shape of the arguments; retrying
    the same call will always fail the same way.
    """


class InvalidInputError(TemplateLoadError, TypeError):
    """Raised when the source passed to ``load`` or ``normalize`` is not
    a string, sequence, mapping, function, or prebuilt template.
    """


class AmbiguousContentError(TemplateLoadError, ValueError):
    """Raised when a glob pattern is paired with a literal string as
    its second argument. A glob can match any number of files, so it
    cannot have literal content.
    """


class NoGlobMatchesError(TemplateLoadError, LookupError):
    """Raised in strict mode when a glob pattern doesn't match any
    files.
    """


class InvalidTemplateError(TemplateLoadError, ValueError):
    """Raised when a template cannot establish both a path and a
    content property after all fallbacks have been exhausted.
    """


class MissingContentError(InvalidTemplateError):
    """Content is checked first, so this is what you get when both
    properties are missing.
    """


class MissingPathError(InvalidTemplateError):
    pass


@dataclass(frozen=True, slots=True)
class LoadFailure:
    """Records a single item that was skipped while loading with error
    isolation enabled. ``source`` is whatever raw input the failing
    item came from.
    """
    source: object
    exc: Exception
