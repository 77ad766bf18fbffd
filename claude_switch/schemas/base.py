"""Pydantic base models."""

from __future__ import annotations

from typing import Any

import pydantic
import pydantic.alias_generators

__all__ = [
    'ClaudeCodeModel',
    'StrictModel',
]


class StrictModel(pydantic.BaseModel):
    """Base model for data we own.

    Config:
    - extra='forbid': Reject unknown fields (fail-fast)
    - strict=True: No implicit type coercion
    - frozen=True: Immutable after creation
    """

    model_config = pydantic.ConfigDict(
        extra='forbid',
        strict=True,
        frozen=True,
    )


class ClaudeCodeModel(pydantic.BaseModel):
    """Base model for data written by Claude Code (camelCase on disk).

    Unknown fields are kept so that whatever Claude Code adds in future
    versions survives a save/restore cycle through a profile.
    """

    model_config = pydantic.ConfigDict(
        extra='allow',
        frozen=True,
        alias_generator=pydantic.alias_generators.to_camel,
        populate_by_name=True,
    )

    @pydantic.model_serializer(mode='wrap')
    def omit_unset_fields(
        self, handler: pydantic.SerializerFunctionWrapHandler, info: pydantic.SerializationInfo
    ) -> dict[str, Any]:  # strict_typing_linter.py: loose-typing
        """Drop declared fields that are None; unknown keys are written back as read, nulls included."""
        data: dict[str, Any] = handler(self)
        for name, field in type(self).model_fields.items():
            if getattr(self, name) is None:
                data.pop(field.alias if info.by_alias and field.alias else name, None)
        return data

    def to_blob(self) -> dict[str, Any]:  # strict_typing_linter.py: loose-typing
        """Serialize to the camelCase shape Claude Code reads."""
        return self.model_dump(mode='json', by_alias=True)
