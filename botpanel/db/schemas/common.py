"""Shared field types and base classes for form validation."""
from typing import Annotated, Any, ClassVar, FrozenSet

from pydantic import AliasChoices, BaseModel, Field, StringConstraints, model_validator

# Required text inputs: surrounding whitespace is ignored and blanks rejected.
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def metadata_field(**kwargs: Any):
    """JSON ``metadata`` field backed by the ORM attribute ``metadata_col``.

    Payloads may send either name; responses always use ``metadata``.
    """
    return Field(
        validation_alias=AliasChoices("metadata_col", "metadata"),
        serialization_alias="metadata",
        **kwargs,
    )


class PartialUpdate(BaseModel):
    """Base for PATCH payloads.

    Every field is optional, but fields listed in ``non_nullable`` may not be
    explicitly cleared with ``null``.
    """

    non_nullable: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_cleared_required_fields(self):
        cleared = sorted(
            name for name in self.model_fields_set
            if name in self.non_nullable and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Missing required fields: {', '.join(cleared)}")
        return self
