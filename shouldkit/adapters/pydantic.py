"""
Validatable entities backed by pydantic models.

Pydantic validates on construction, while the assertion protocol assigns
one attribute at a time and validates afterwards. ``pydantic_entity``
bridges the two: it builds a type whose instances buffer attribute values
and run ``model_validate`` on demand, collecting messages per field.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError


class PydanticEntity:
    """
    Attribute bag validated against ``model``.

    ``None`` means "not provided", so a required field set to ``None``
    reports pydantic's "Field required" message.
    """

    model: ClassVar[type[BaseModel]]

    def __init__(self, **values: Any) -> None:
        object.__setattr__(self, "_values", dict(values))
        object.__setattr__(self, "errors", {})

    def __getattr__(self, name: str) -> Any:
        values = self.__dict__.get("_values", {})
        if name in values:
            return values[name]
        if name in type(self).model.model_fields:
            return None
        raise AttributeError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        self._values[name] = value

    def is_valid(self) -> bool:
        """Validate the buffered values and record errors per field."""
        errors: dict[str, list[str]] = {}
        provided = {k: v for k, v in self._values.items() if v is not None}
        try:
            type(self).model.model_validate(provided)
        except ValidationError as e:
            for error in e.errors():
                field = str(error["loc"][0]) if error["loc"] else "__root__"
                errors.setdefault(field, []).append(error["msg"])
        object.__setattr__(self, "errors", errors)
        return not errors

    def errors_on(self, attribute: str) -> list[str]:
        return list(self.errors.get(attribute, []))

    def save(self) -> bool:
        return self.is_valid()

    def to_model(self) -> BaseModel:
        """Build the validated pydantic model. Raises ``ValidationError`` if invalid."""
        provided = {k: v for k, v in self._values.items() if v is not None}
        return type(self).model.model_validate(provided)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"


def pydantic_entity(model: type[BaseModel], **defaults: Any) -> type[PydanticEntity]:
    """
    Build a validatable entity type for a pydantic model.

    ``defaults`` seed every new instance, so a bare instance can start out
    valid apart from the attribute under test.

    Example:
        UserEntity = pydantic_entity(User, name="Ada", email="ada@example.com")
        user = ModelMacros(UserEntity, messages=ErrorMessages.preset("pydantic"))
    """

    def __init__(self: PydanticEntity, **values: Any) -> None:
        PydanticEntity.__init__(self, **{**defaults, **values})

    return type(
        f"{model.__name__}Entity",
        (PydanticEntity,),
        {"model": model, "__init__": __init__, "__doc__": f"Validatable entity for {model.__name__}."},
    )
