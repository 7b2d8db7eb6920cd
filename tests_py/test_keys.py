from __future__ import annotations

import os

import pytest

from temploader.config import LoaderConfig
from temploader.keys import derive_key
from temploader.keys import rename_to_basename
from temploader.keys import rename_to_stem
from temploader.keys import resolve_from_cwd
from temploader.keys import strip_ext
from temploader.templates import NormalizedTemplate


class TestDeriveKey:
    """derive_key()
    """

    def test_default_is_path(self):
        template = NormalizedTemplate(path='a/b/c.md', content='')
        assert derive_key(template, LoaderConfig()) == 'a/b/c.md'

    def test_without_ext(self):
        template = NormalizedTemplate(path='a/b/c.md', content='')
        config = LoaderConfig(with_ext=False)
        assert derive_key(template, config) == 'a/b/c'

    def test_custom_renamer(self):
        template = NormalizedTemplate(path='a/b/c.md', content='')
        config = LoaderConfig(
            rename_key=lambda template, config: template.path.upper())
        assert derive_key(template, config) == 'A/B/C.MD'

    def test_template_options_override(self):
        """Config declared in the template's own options must be
        applied before deriving the key.
        """
        template = NormalizedTemplate(
            path='a/b/c.md',
            content='',
            options={'rename_key': rename_to_basename, 'other': 1})
        assert derive_key(template, LoaderConfig()) == 'c.md'

    def test_renamer_receives_merged_config(self):
        seen = []

        def renamer(template, config):
            seen.append(config.with_ext)
            return template.path

        template = NormalizedTemplate(
            path='c.md', content='', options={'with_ext': False})
        derive_key(template, LoaderConfig(rename_key=renamer))
        assert seen == [False]

    def test_non_string_key(self):
        template = NormalizedTemplate(path='c.md', content='')
        config = LoaderConfig(rename_key=lambda template, config: 42)
        with pytest.raises(TypeError):
            derive_key(template, config)

    def test_deterministic(self):
        template = NormalizedTemplate(path='a/b/c.md', content='x')
        config = LoaderConfig(rename_key=rename_to_stem)
        assert derive_key(template, config) == derive_key(template, config)


class TestRenamers:

    def test_basename(self):
        template = NormalizedTemplate(path='a/b/c.md', content='')
        assert rename_to_basename(template, LoaderConfig()) == 'c.md'

    def test_basename_without_ext(self):
        template = NormalizedTemplate(path='a/b/c.md', content='')
        config = LoaderConfig(with_ext=False)
        assert rename_to_basename(template, config) == 'c'

    def test_stem(self):
        template = NormalizedTemplate(path='a/b/c.md', content='')
        assert rename_to_stem(template, LoaderConfig()) == 'c'

    @pytest.mark.parametrize(
        'path,expected',
        [
            ('a/b/c.md', 'a/b/c'),
            ('c', 'c'),
            ('a.b/c', 'a.b/c'),
            ('c.tar.gz', 'c.tar')])
    def test_strip_ext(self, path, expected):
        assert strip_ext(path) == expected


class TestResolveFromCwd:

    def test_with_cwd(self, tmp_path):
        config = LoaderConfig(cwd=tmp_path)
        assert resolve_from_cwd('a/../b.md', config) == str(tmp_path / 'b.md')

    def test_without_cwd(self):
        expected = os.path.join(os.getcwd(), 'b.md')
        assert resolve_from_cwd('b.md', LoaderConfig()) == expected
