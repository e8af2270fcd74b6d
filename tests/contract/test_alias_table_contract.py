from __future__ import annotations

import pytest

from ticket_ingest.normalize.fields import INCIDENT_SCHEMA, REQUEST_SCHEMA

"""Alias table contract: no header spelling may resolve to two canonical fields."""


@pytest.mark.parametrize("schema", [INCIDENT_SCHEMA, REQUEST_SCHEMA], ids=lambda s: s.kind.value)
def test_aliases_do_not_overlap_case_insensitively(schema):
    owner: dict[str, str] = {}
    for field_name, aliases in schema.aliases.items():
        for alias in aliases:
            key = alias.strip().casefold()
            assert owner.setdefault(key, field_name) == field_name, (
                f"{alias!r} is an alias of both {owner[key]} and {field_name}"
            )


@pytest.mark.parametrize("schema", [INCIDENT_SCHEMA, REQUEST_SCHEMA], ids=lambda s: s.kind.value)
def test_required_and_strict_fields_are_declared(schema):
    assert set(schema.required) <= set(schema.fields)
    assert schema.strict <= set(schema.fields)
    for aliases in schema.aliases.values():
        assert aliases, "every field needs at least one alias"
        assert len(set(aliases)) == len(aliases)
