"""
Pytest configuration and shared fixtures.
"""
import os

# 앱 모듈 import 전에 필수 설정을 채운다
os.environ.setdefault("RECIPES_COLLECTION", "recipes")
os.environ.setdefault("FIREBASE_PROJECT_ID", "recipe-mgmt-test")
os.environ.setdefault("RECIPE_STORE", "memory")

from datetime import datetime, timedelta, timezone
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from recipe_storage.core.config import Settings
from recipe_storage.db.memory import InMemoryRecipeStore
from recipe_storage.main import create_app
from recipe_storage.services.firebase import InvalidToken, Principal
from recipe_storage.services.recipes import RecipeService

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class StepClock:
    """Clock that advances a fixed step on every read."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class SequentialIds:
    def __init__(self, prefix: str = "recipe"):
        self.prefix = prefix
        self.n = 0

    def __call__(self) -> str:
        self.n += 1
        return f"{self.prefix}-{self.n:04d}"


class FakeVerifier:
    """Maps known tokens to principals; anything else is rejected."""

    def __init__(self, tokens: Dict[str, Principal]):
        self.tokens = tokens
        self.calls: List[str] = []

    async def verify(self, id_token: str) -> Principal:
        self.calls.append(id_token)
        try:
            return self.tokens[id_token]
        except KeyError:
            raise InvalidToken("unknown token")


def carbonara(**overrides) -> dict:
    payload = {
        "title": "Spaghetti Carbonara",
        "ingredients": ["400g spaghetti", "200g pancetta", "4 large eggs"],
        "instructions": ["Boil pasta", "Fry pancetta", "Mix"],
        "servings": 4,
        "source": "manual",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def store() -> InMemoryRecipeStore:
    return InMemoryRecipeStore()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def service(store, clock) -> RecipeService:
    return RecipeService(store, clock=clock, id_factory=SequentialIds())


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier({
        "token-u1": Principal(uid="u1", email="u1@example.com"),
        "token-u2": Principal(uid="u2", email="u2@example.com"),
    })


def make_settings(**overrides) -> Settings:
    values = {
        "RECIPES_COLLECTION": "recipes",
        "FIREBASE_PROJECT_ID": "recipe-mgmt-test",
        "RECIPE_STORE": "memory",
        "AUTH_ENABLED": True,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def client(store, clock, verifier) -> TestClient:
    app = create_app(
        settings=make_settings(),
        store=store,
        verifier=verifier,
        clock=clock,
        id_factory=SequentialIds(),
    )
    return TestClient(app)


U1 = {"Authorization": "Bearer token-u1"}
U2 = {"Authorization": "Bearer token-u2"}
