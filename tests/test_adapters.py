"""Tests for the pydantic entity adapter."""

import pytest
from pydantic import BaseModel, Field, ValidationError

from shouldkit.adapters.pydantic import PydanticEntity, pydantic_entity
from shouldkit.core.messages import ErrorMessages
from shouldkit.core.reflection import ValidatableEntity
from shouldkit.macros.models import ModelMacros


class Signup(BaseModel):
    """A sign-up form."""

    username: str = Field(..., min_length=3, max_length=12)
    age: int = Field(..., ge=13, le=120)
    pin: str = Field(default="0000", min_length=4, max_length=4)
    terms: bool = True


SignupEntity = pydantic_entity(Signup, username="ada", age=30)


class TestPydanticEntity:
    """Tests for PydanticEntity."""

    def test_generated_type(self):
        assert SignupEntity.__name__ == "SignupEntity"
        assert issubclass(SignupEntity, PydanticEntity)
        assert isinstance(SignupEntity(), ValidatableEntity)

    def test_defaults_make_a_valid_instance(self):
        entity = SignupEntity()

        assert entity.is_valid()
        assert entity.errors_on("username") == []

    def test_assign_then_validate(self):
        entity = SignupEntity()
        entity.username = "al"

        assert not entity.is_valid()
        assert entity.errors_on("username") == ["String should have at least 3 characters"]
        assert entity.errors_on("age") == []

    def test_none_means_missing(self):
        entity = SignupEntity(username=None)

        assert not entity.is_valid()
        assert entity.errors_on("username") == ["Field required"]

    def test_unknown_attribute(self):
        entity = SignupEntity()

        assert entity.pin is None
        with pytest.raises(AttributeError):
            entity.nickname  # noqa: B018

    def test_to_model(self):
        model = SignupEntity(age=40).to_model()

        assert isinstance(model, Signup)
        assert model.age == 40

    def test_to_model_invalid(self):
        with pytest.raises(ValidationError):
            SignupEntity(age=5).to_model()


class TestPydanticMacros:
    """Tests for running model macros against a pydantic model."""

    @pytest.fixture
    def signup(self):
        return ModelMacros(SignupEntity, messages=ErrorMessages.preset("pydantic"), description="Signup")

    def test_validation_suite(self, signup):
        signup.it_should_require_attributes("username", "age")
        signup.it_should_ensure_length_in_range("username", 3, 12)
        signup.it_should_ensure_length_is("pin", 4)
        signup.it_should_ensure_value_in_range("age", 13, 120)
        signup.it_should_only_allow_numeric_values_for("age")
        signup.it_should_allow_values_for("terms", True, False)

        results = signup.run()

        assert [r.description for r in results if not r.passed] == []

    def test_wrong_bounds_are_caught(self, signup):
        """Test that declaring a tighter range than the model enforces fails."""
        signup.it_should_ensure_length_in_range("username", 5, 12)

        failed = [r.description for r in signup.run() if not r.passed]

        assert failed
        assert all("less than 5 chars long" in d for d in failed)
