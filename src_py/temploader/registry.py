from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from temploader._types import RawInput
from temploader.config import LoaderConfig
from temploader.loader import Loader
from temploader.templates import NormalizedTemplate

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Collection:
    """A named collection of templates, for example ``pages`` or
    ``layouts``. Every collection owns its own loader, and therefore its
    own, independent store.
    """
    singular: str
    plural: str
    loader: Loader

    @property
    def store(self) -> dict[str, NormalizedTemplate]:
        return self.loader.cache


class TemplateRegistry:
    """The registry maps collection names to collections. Collections
    can be looked up by either their singular or their plural name, so
    ``registry.add('page', ...)`` and ``registry.add('pages', ...)`` are
    equivalent.
    """
    _collections: dict[str, Collection]

    def __init__(
            self,
            config: LoaderConfig | None = None,
            /, *,
            locals: Mapping[str, Any] | None = None,  # noqa: A002
            options: Mapping[str, Any] | None = None):
        if config is None:
            config = LoaderConfig()

        self._config = config
        self._locals = dict(locals or {})
        self._options = dict(options or {})
        self._collections = {}

    def __contains__(self, name: str) -> bool:
        return name in self._collections

    def create(
            self,
            plural: str,
            *,
            singular: str | None = None,
            config: LoaderConfig | None = None
            ) -> Collection:
        """Creates a new collection. If no singular name is given, it's
        naively derived from the plural by removing a trailing ``s``.
        The collection uses the registry config unless it's given one
        of its own.
        """
        if singular is None:
            singular = plural.removesuffix('s') or plural

        for name in {plural, singular}:
            if name in self._collections:
                raise ValueError('Duplicate collection name!', name)

        collection = Collection(
            singular=singular,
            plural=plural,
            loader=Loader(
                self._config if config is None else config,
                locals=self._locals,
                options=self._options))
        self._collections[plural] = collection
        self._collections[singular] = collection
        logger.debug('Created collection %s (%s)', plural, singular)
        return collection

    def collection(self, name: str) -> Collection:
        try:
            return self._collections[name]
        except KeyError as exc:
            raise KeyError('Unknown collection!', name) from exc

    def add(
            self,
            name: str,
            source: RawInput,
            *rest: object
            ) -> dict[str, NormalizedTemplate]:
        """Loads templates into the named collection. Accepts all of
        the same arguments as ``Loader.load``.
        """
        return self.collection(name).loader.load(source, *rest)

    def get(self, name: str, key: str) -> NormalizedTemplate | None:
        return self.collection(name).loader.get(key)
