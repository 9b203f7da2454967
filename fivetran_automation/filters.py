"""Compile flat equality filter specs into an item predicate.

A filter set is a list of clauses. Each clause is a mapping of field name to
expected value and matches an item when every field is equal; the filter set
matches when any non-empty clause does::

    [{"service": "email"}, {"service": "slack", "region": "us"}]

means ``service == "email" OR (service == "slack" AND region == "us")``.

Values are compared as strings. Booleans and ``None`` are rendered the way
JSON spells them so a filter given on the command line (``paused=false``)
matches the decoded API value (``False``).
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Mapping, NamedTuple, Optional

__all__ = [
    "Predicate",
    "CompiledFilter",
    "compile_filters",
    "stringify",
]

Predicate = Callable[[Any], bool]

_MISSING = object()


class CompiledFilter(NamedTuple):
    filter_required: bool
    predicate: Predicate


def stringify(value: Any) -> Optional[str]:
    """Return the comparison string for a scalar *value*, ``None`` otherwise."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _get_field(item: Any, field: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(field, _MISSING)
    return _MISSING


def _field_equals(field: str, expected: Any) -> Predicate:
    expected_text = stringify(expected)

    def check(item: Any) -> bool:
        if expected_text is None:
            return False
        value = _get_field(item, field)
        if value is _MISSING:
            return False
        return stringify(value) == expected_text

    return check


def _all_of(checks: List[Predicate]) -> Predicate:
    return lambda item: all(check(item) for check in checks)


def _any_of(clauses: List[Predicate]) -> Predicate:
    return lambda item: any(clause(item) for clause in clauses)


def _never(_item: Any) -> bool:
    return False


def _always(_item: Any) -> bool:
    return True


def compile_filters(specs: Optional[Iterable[Any]]) -> CompiledFilter:
    """Compile *specs* into a ``CompiledFilter``.

    ``filter_required`` is False when *specs* is empty or holds only empty
    clauses; the predicate then accepts every item. A clause that is not a
    mapping never matches. *specs* is only read.
    """
    clauses: List[Predicate] = []
    for spec in specs or ():
        if not isinstance(spec, Mapping):
            clauses.append(_never)
            continue
        if not spec:
            continue
        clauses.append(_all_of([_field_equals(str(k), v) for k, v in spec.items()]))

    if not clauses:
        return CompiledFilter(False, _always)
    return CompiledFilter(True, _any_of(clauses))
