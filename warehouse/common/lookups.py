"""
Lookup Table Dispatch

Categorical source codes are mapped to canonical values through ordered
rule lists. Each rule is a (predicate, canonical value) pair; rules are
evaluated top-to-bottom and the first matching predicate wins. When no rule
matches, the fallback is returned (the "n/a" sentinel unless told otherwise).

Key Concepts:
- Codes are compared trimmed and upper-cased: " f " matches "F"
- Null and blank values never match a code
- Order matters: earlier rules take precedence over later ones
"""

from typing import Any, Callable, Optional, Sequence

# Canonical marker for unknown or invalid categorical input
NOT_AVAILABLE = 'n/a'

Predicate = Callable[[Any], bool]
Rule = tuple[Predicate, str]


def clean_code(value: Any) -> Optional[str]:
    """
    Normalize a raw categorical code for comparison.

    Args:
        value: Raw code from a bronze record

    Returns:
        Trimmed, upper-cased string, or None if the value is null

    Examples:
        >>> clean_code("  m ")
        'M'
        >>> clean_code(None) is None
        True
    """
    if value is None:
        return None
    return str(value).strip().upper()


def trim(value: Any) -> Optional[str]:
    """Strip leading/trailing whitespace, keeping None as None."""
    if value is None:
        return None
    return str(value).strip()


def is_blank(value: Any) -> bool:
    """True for None or a string that is empty after trimming."""
    return value is None or str(value).strip() == ''


def code_in(*codes: str) -> Predicate:
    """
    Build a predicate matching any of the given codes.

    Matching is case-insensitive and ignores surrounding whitespace.

    Args:
        codes: Accepted codes, written upper-case (e.g. 'F', 'FEMALE')

    Returns:
        Predicate usable as the first element of a Rule
    """
    accepted = frozenset(codes)

    def predicate(value: Any) -> bool:
        return clean_code(value) in accepted

    return predicate


def lookup(value: Any, rules: Sequence[Rule], default: Any = NOT_AVAILABLE) -> Any:
    """
    Map a raw value through an ordered list of rules.

    Args:
        value: Raw value from a bronze record
        rules: Ordered (predicate, canonical value) pairs
        default: Value returned when no rule matches

    Returns:
        Canonical value of the first matching rule, else the default

    Example:
        >>> gender_rules = [(code_in('F'), 'Female'), (code_in('M'), 'Male')]
        >>> lookup(' f ', gender_rules)
        'Female'
        >>> lookup('X', gender_rules)
        'n/a'
    """
    for predicate, canonical in rules:
        if predicate(value):
            return canonical
    return default


def code_map(mapping: dict[str, str]) -> list[Rule]:
    """Build rules from a plain code -> canonical value mapping, keeping its order."""
    return [(code_in(code), canonical) for code, canonical in mapping.items()]
