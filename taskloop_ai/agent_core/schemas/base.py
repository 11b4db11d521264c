"""Pydantic base schemas for the loop's domain models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base Pydantic model for mutable records (messages, session records, run results).

    - ``populate_by_name=True``: allow initialization by alias or field name.
    - ``extra="forbid"``: reject unknown fields, so a stored record that does
      not match the current schema fails loudly on load.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
    )


class FrozenSchema(BaseSchema):
    """Immutable variant for values handed between loop stages (state, outcomes, directives)."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )
