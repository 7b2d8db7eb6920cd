from __future__ import annotations

from pathlib import Path

import pytest

from temploader._flattening import flatten_template
from temploader._flattening import template_as_raw
from temploader._sifting import SiftedRoles
from temploader.exceptions import InvalidTemplateError
from temploader.exceptions import MissingContentError
from temploader.exceptions import MissingPathError
from temploader.templates import NormalizedTemplate


class TestFlattenTemplate:
    """flatten_template()
    """

    def test_minimal(self):
        """A template with only a path and content must not get any
        locals nor options.
        """
        template = flatten_template({'path': 'a.md', 'content': 'x'})
        assert template == NormalizedTemplate(path='a.md', content='x')
        assert template.locals is None
        assert template.options is None

    def test_extra_props_become_locals(self):
        template = flatten_template(
            {'path': 'a.md', 'content': 'x', 'layout': 'b'})
        assert template.locals == {'layout': 'b'}

    def test_nested_locals_override_extras(self):
        template = flatten_template({
            'path': 'a.md',
            'content': 'x',
            'a': 'extra',
            'locals': {'a': 'nested', 'b': 1}})
        assert template.locals == {'a': 'nested', 'b': 1}

    def test_call_locals_override_template(self):
        template = flatten_template(
            {'path': 'a.md', 'content': 'x', 'locals': {'a': 'template'}},
            call_roles=SiftedRoles(locals={'a': 'call'}, options={}))
        assert template.locals == {'a': 'call'}

    def test_base_locals_are_lowest(self):
        template = flatten_template(
            {'path': 'a.md', 'content': 'x', 'a': 'extra'},
            base_locals={'a': 'base', 'z': 1})
        assert template.locals == {'a': 'extra', 'z': 1}

    def test_options_layering(self):
        template = flatten_template(
            {
                'path': 'a.md',
                'content': 'x',
                'options': {'y': 'z', 'shared': 'template'}},
            call_roles=SiftedRoles(
                locals={}, options={'e': 'f', 'shared': 'call'}),
            base_options={'g': 1, 'shared': 'base'})
        assert template.options == {
            'g': 1, 'y': 'z', 'e': 'f', 'shared': 'call'}

    def test_protected_fields_pass_through(self):
        """Protected fields must be passed through untouched; in
        particular, the data mapping must be the very same object.
        """
        data = {'title': 'AAA', 'locals': {'nope': True}}
        template = flatten_template({
            'path': 'a.md',
            'content': 'x',
            'data': data,
            'orig': 'raw',
            'ext': '.md'})
        assert template.data is data
        assert template.orig == 'raw'
        assert template.ext == '.md'
        assert template.locals is None

    def test_empty_root_keys(self):
        """With an empty root key set, even protected fields must be
        folded into the locals.
        """
        template = flatten_template(
            {'path': 'a.md', 'content': 'x', 'data': {'t': 1}},
            root_keys=frozenset())
        assert template.data is None
        assert template.locals == {'data': {'t': 1}}

    def test_root_keys_stripped_from_locals(self):
        template = flatten_template({
            'path': 'a.md',
            'content': 'x',
            'locals': {'path': 'nope', 'a': 1},
            'options': {'content': 'nope', 'b': 2}})
        assert template.locals == {'a': 1}
        assert template.options == {'b': 2}

    def test_missing_content(self):
        with pytest.raises(MissingContentError):
            flatten_template({'path': 'a.md'})

    def test_missing_both_reports_content(self):
        """Content must be checked before path."""
        with pytest.raises(
                MissingContentError, match='content property'):
            flatten_template({'name': 'Jon Schlinkert'})

    def test_missing_path(self):
        with pytest.raises(MissingPathError, match='path property'):
            flatten_template({'content': 'x'})

    def test_missing_errors_are_invalid_template_errors(self):
        with pytest.raises(InvalidTemplateError):
            flatten_template({'content': 'x'})

    def test_none_content_allowed(self):
        template = flatten_template({'path': 'a.md', 'content': None})
        assert template.content is None

    def test_pathlike_path(self):
        template = flatten_template({'path': Path('a.md'), 'content': 'x'})
        assert template.path == 'a.md'

    def test_bad_path_type(self):
        with pytest.raises(TypeError):
            flatten_template({'path': 3, 'content': 'x'})

    def test_bytes_content_decoded(self):
        template = flatten_template({'path': 'a.md', 'content': b'x'})
        assert template.content == 'x'


class TestTemplateAsRaw:
    """template_as_raw()
    """

    def test_reflattening_is_stable(self):
        """Converting a template back into a raw template and flattening
        it again must result in an equal template.
        """
        template = NormalizedTemplate(
            path='a.md',
            content='x',
            data={'t': 1},
            locals={'a': 1},
            options={'o': 2})
        assert flatten_template(template_as_raw(template)) == template
