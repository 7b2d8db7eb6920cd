from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from temploader._flattening import flatten_template
from temploader._sifting import sift_explicit
from temploader._types import RawInput
from temploader._types import is_mapping
from temploader.config import LoaderConfig
from temploader.exceptions import LoadFailure
from temploader.keys import derive_key
from temploader.normalizers import LoadContext
from temploader.normalizers import collect_templates
from temploader.templates import NormalizedTemplate
from temploader.templates import VinylTemplate

logger = logging.getLogger(__name__)


class Loader:
    """Loaders tie the whole pipeline together and own a persistent
    cache of normalized templates, keyed by their derived keys.

    The constructor ``locals`` and ``options`` are the base layer for
    every template loaded by this instance; call-level declarations
    override them. Configuration keys (see ``LoaderConfig``) found in
    the global options are applied to the config as well.

    Loaders are not threadsafe. If you need concurrent access, either
    serialize it externally or use separate loader instances.
    """
    config: LoaderConfig
    locals: dict[str, Any]
    options: dict[str, Any]
    cache: dict[str, NormalizedTemplate]
    # Only ever populated when loading with error isolation. Reset on every
    # call to load.
    failures: list[LoadFailure]

    def __init__(
            self,
            config: LoaderConfig | None = None,
            /, *,
            locals: Mapping[str, Any] | None = None,  # noqa: A002
            options: Mapping[str, Any] | None = None):
        if config is None:
            config = LoaderConfig()

        self.config = config
        self.locals = dict(locals or {})
        self.options = dict(options or {})
        self.cache = {}
        self.failures = []

    def load(
            self,
            source: RawInput,
            *rest: object
            ) -> dict[str, NormalizedTemplate]:
        """Normalizes the source (along with any trailing locals and
        options) and merges the result into the cache. Returns only the
        templates produced by this call.

        Unless error isolation is configured, any failure aborts the
        whole call and leaves the cache untouched.
        """
        self.failures = []
        context = LoadContext.resolve(
            self.config,
            rest,
            base_locals=self.locals,
            base_options=self.options)

        loaded: dict[str, NormalizedTemplate] = {}
        for template in collect_templates(source, rest, context):
            try:
                key = self._finalize(template, context.config)
            except Exception as exc:
                if context.failures is None:
                    raise

                logger.info(
                    'Skipping template %s after failure',
                    template.path, exc_info=exc)
                context.failures.append(LoadFailure(source=template, exc=exc))
                continue

            # Last write wins, both within a single call and across calls
            loaded[key] = template

        self.failures = list(context.failures or ())
        self.cache.update(loaded)
        logger.debug('Cached %d templates: %s', len(loaded), list(loaded))
        return loaded

    def set(
            self,
            key: str,
            value: str | Mapping[str, Any],
            locals: Mapping[str, Any] | None = None,  # noqa: A002
            options: Mapping[str, Any] | None = None
            ) -> NormalizedTemplate:
        """Sets a single template directly in the cache, under exactly
        the given key. This bypasses reading, parsing, and key
        derivation, but the value still gets flattened, so that locals
        and options are separated the same way as for ``load``.
        """
        if isinstance(value, str):
            raw: dict[str, Any] = {'path': key, 'content': value}
        elif is_mapping(value):
            raw = {**value, 'path': value.get('path') or key}
        else:
            raise TypeError(
                'Template values must be strings or mappings!', value)

        base_config = self.config.merged(self.options)
        roles = sift_explicit(locals, options, base_config.root_keys)
        config = base_config.merged(roles.options)
        if config.root_keys != base_config.root_keys:
            roles = sift_explicit(locals, options, config.root_keys)

        template = flatten_template(
            raw,
            root_keys=config.root_keys,
            call_roles=roles,
            base_locals=self.locals,
            base_options=self.options)
        if config.vinyl_mode:
            template = VinylTemplate.from_template(template)

        self.cache[key] = template
        return template

    def get(self, key: str) -> NormalizedTemplate | None:
        return self.cache.get(key)

    def _finalize(
            self,
            template: NormalizedTemplate,
            config: LoaderConfig
            ) -> str:
        if config.on_load is not None:
            config.on_load(template)

        return derive_key(template, config)
