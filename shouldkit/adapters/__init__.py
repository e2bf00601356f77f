"""Adapters that make third-party types usable as validatable entities."""

from shouldkit.adapters.pydantic import PydanticEntity, pydantic_entity

__all__ = ["PydanticEntity", "pydantic_entity"]
