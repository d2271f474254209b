"""Tests for ordered lookup dispatch."""

import pytest

from warehouse.common.lookups import (
    NOT_AVAILABLE,
    clean_code,
    code_in,
    code_map,
    is_blank,
    lookup,
    trim,
)

GENDER_RULES = code_map({'F': 'Female', 'M': 'Male'})


class TestLookup:
    """Tests for lookup() and its predicates."""

    @pytest.mark.parametrize("raw,expected", [
        ('F', 'Female'),
        (' f ', 'Female'),
        ('m', 'Male'),
        ('X', NOT_AVAILABLE),
        ('', NOT_AVAILABLE),
        (None, NOT_AVAILABLE),
    ])
    def test_gender_codes(self, raw, expected):
        assert lookup(raw, GENDER_RULES) == expected

    def test_first_matching_rule_wins(self):
        rules = [(code_in('A'), 'first'), (code_in('A', 'B'), 'second')]
        assert lookup('a', rules) == 'first'
        assert lookup('b', rules) == 'second'

    def test_custom_default(self):
        assert lookup('France', GENDER_RULES, default='France') == 'France'

    def test_code_in_accepts_several_codes(self):
        predicate = code_in('F', 'FEMALE')
        assert predicate('female ')
        assert predicate('F')
        assert not predicate('fem')
        assert not predicate(None)


class TestTextHelpers:
    """Tests for trim/clean_code/is_blank."""

    def test_clean_code(self):
        assert clean_code('  m ') == 'M'
        assert clean_code(None) is None

    def test_trim(self):
        assert trim('  Jon ') == 'Jon'
        assert trim(None) is None

    @pytest.mark.parametrize("value,expected", [
        (None, True),
        ('', True),
        ('   ', True),
        ('DE', False),
    ])
    def test_is_blank(self, value, expected):
        assert is_blank(value) is expected
