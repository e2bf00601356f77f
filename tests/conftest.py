"""Shared fixtures."""

import pytest
from fakes import Account, Comment, LaxUser, Post, Profile, Tag, User

MODELS = (User, LaxUser, Account, Post, Profile, Comment, Tag)


@pytest.fixture(autouse=True)
def clean_records():
    """Start every test with empty record stores."""
    for model in MODELS:
        model.records.clear()
    yield
    for model in MODELS:
        model.records.clear()


@pytest.fixture
def existing_user():
    """A saved user for uniqueness checks."""
    user = User(name="Ada", email="ada@example.com", account_id=1)
    assert user.save()
    return user
