from __future__ import annotations

import pytest

from temploader._sifting import SiftedRoles
from temploader._sifting import sift_explicit
from temploader._sifting import sift_roles


class TestSiftRoles:
    """sift_roles()
    """

    def test_nothing_to_sift(self):
        """With no trailing arguments, both roles must be empty."""
        roles = sift_roles([])
        assert roles == SiftedRoles(locals={}, options={})

    def test_single_mapping_is_locals(self):
        """A single trailing mapping must be treated as locals only,
        never as options.
        """
        roles = sift_roles([{'a': 'b'}])
        assert roles.locals == {'a': 'b'}
        assert roles.options == {}

    def test_last_mapping_is_options(self):
        """With two trailing mappings, the first must be the locals and
        the last must be the options.
        """
        roles = sift_roles([{'a': 'b'}, {'optA': 'a'}])
        assert roles.locals == {'a': 'b'}
        assert roles.options == {'optA': 'a'}

    def test_middle_mappings_are_locals(self):
        """Anything between the first and the last mapping must be
        merged into the locals.
        """
        roles = sift_roles([{'a': 1}, {'b': 2}, {'c': 3}])
        assert roles.locals == {'a': 1, 'b': 2}
        assert roles.options == {'c': 3}

    def test_nested_options_on_locals(self):
        """Options nested on the locals must be lifted into the options,
        and must not remain on the locals.
        """
        roles = sift_roles(['abc', {'a': 'b', 'options': {'optB': 'b'}}])
        assert roles.locals == {'a': 'b'}
        assert roles.options == {'optB': 'b'}

    def test_nested_options_tag_keeps_last_as_locals(self):
        """If the last mapping carries nested options, its remaining
        top-level properties must go to the locals instead of the
        options.
        """
        roles = sift_roles([{'a': 1}, {'b': 2, 'options': {'c': 3}}])
        assert roles.locals == {'a': 1, 'b': 2}
        assert roles.options == {'c': 3}

    def test_nested_locals(self):
        roles = sift_roles([{'locals': {'c': 'd'}}])
        assert roles.locals == {'c': 'd'}
        assert roles.options == {}

    def test_fully_consumed_mapping_not_a_candidate(self):
        """A mapping containing only nested declarations must not count
        as the primary locals source; the next mapping must.
        """
        roles = sift_roles([{'options': {'x': 1}}, {'a': 'b'}])
        assert roles.locals == {'a': 'b'}
        assert roles.options == {'x': 1}

    def test_nested_overrides_flat(self):
        """On key collisions within the same call, nested declarations
        must win over flat ones.
        """
        roles = sift_roles([
            {'a': 'flat', 'locals': {'a': 'nested'}},
            {'y': 'flat'},
            {'options': {'y': 'nested'}}])
        assert roles.locals == {'a': 'nested'}
        assert roles.options == {'y': 'nested'}

    def test_non_mappings_ignored(self):
        roles = sift_roles(['content', True, {'a': 'b'}, None])
        assert roles.locals == {'a': 'b'}
        assert roles.options == {}

    def test_root_keys_excluded(self):
        """Root keys must never end up in either role."""
        roles = sift_roles([
            {'content': 'x', 'path': 'p', 'data': {}, 'a': 'b'}])
        assert roles.locals == {'a': 'b'}

    def test_empty_root_keys(self):
        """With an empty root key set, normally protected properties
        must be treated like any other property.
        """
        roles = sift_roles([{'data': {'t': 1}, 'a': 1}], frozenset())
        assert roles.locals == {'data': {'t': 1}, 'a': 1}

    def test_nested_must_be_mapping(self):
        with pytest.raises(TypeError):
            sift_roles([{'locals': 'nope'}])


class TestSiftExplicit:
    """sift_explicit()
    """

    def test_options_only(self):
        """An options mapping without any locals must stay options."""
        roles = sift_explicit(None, {'o': 1})
        assert roles.locals == {}
        assert roles.options == {'o': 1}

    def test_nested_declarations_lifted(self):
        roles = sift_explicit(
            {'a': 1, 'options': {'o': 1}},
            {'p': 2, 'locals': {'b': 2}})
        assert roles.locals == {'a': 1, 'b': 2}
        assert roles.options == {'o': 1, 'p': 2}
