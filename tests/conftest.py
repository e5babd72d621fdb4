"""Pytest configuration for tests.

Sets up Python path and fixtures for all tests.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add project root to Python path so imports work correctly
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from gemini_chat.config.chat_config import ChatConfig  # noqa: E402
from gemini_chat.entity.session import ChatSession  # noqa: E402
from gemini_chat.services.streaming.output import BufferSink  # noqa: E402


@pytest.fixture
def sink():
    """In-memory output sink."""
    return BufferSink()


@pytest.fixture
def session():
    return ChatSession()


@pytest.fixture
def api_config():
    """Configuration for the official API."""
    return ChatConfig(model_name="gemini-2.5-pro", api_key="test-key", free_mode=False)


@pytest.fixture
def free_config():
    """Configuration for the key-free endpoint."""
    return ChatConfig(model_name="gemini-2.5-flash", free_mode=True)


@pytest.fixture
def fake_sleep():
    """Replacement for asyncio.sleep that records delays without waiting."""
    return AsyncMock(return_value=None)
