"""
Shared fixtures for the visa bot tests.
"""
from unittest.mock import AsyncMock

import pytest

from dialogs.detail_collection import DetailCollectionDialog
from dialogs.main_dialog import MainDialog
from models.conversation import ConversationState
from models.immigration import ClassifierResult, ExtractedEntities


def make_result(top_intent: str, text: str = "", **entities) -> ClassifierResult:
    """Build a ClassifierResult the way the recognizer would return it."""
    return ClassifierResult(
        text=text,
        top_intent=top_intent,
        intents={top_intent: 0.95},
        entities=ExtractedEntities(**entities),
    )


@pytest.fixture
def recognizer():
    """Configured classifier whose answer each test sets on classify.return_value"""
    mock = AsyncMock()
    mock.is_configured = True
    return mock


@pytest.fixture
def unconfigured_recognizer():
    mock = AsyncMock()
    mock.is_configured = False
    return mock


@pytest.fixture
def detail_dialog():
    return DetailCollectionDialog()


@pytest.fixture
def main_dialog(recognizer, detail_dialog):
    return MainDialog(recognizer, detail_dialog)


@pytest.fixture
def session():
    return ConversationState(session_id="test-session")
