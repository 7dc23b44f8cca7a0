"""Shared fixtures: a state manager holding the sample actors and a scripted context."""

import pytest

from src.ed4e.config.settings import Settings
from src.ed4e.core import ChatLog, FixedEvaluator, ScriptedPrompt, StateManager, WorkflowContext
from src.ed4e.scenarios import create_test_character, create_test_opponent


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def state():
    return StateManager([create_test_character(), create_test_opponent()])


@pytest.fixture
def actor(state):
    return state.document("actor_aelin")


@pytest.fixture
def opponent(state):
    return state.document("actor_ork")


@pytest.fixture
def prompt():
    return ScriptedPrompt()


@pytest.fixture
def log():
    return ChatLog()


@pytest.fixture
def context(prompt, log, settings):
    """Context whose evaluator a test replaces with ``FixedEvaluator(...)``."""
    return WorkflowContext(prompt=prompt, evaluator=FixedEvaluator(), log=log, settings=settings)
