import random
import pytest
from unittest.mock import AsyncMock, MagicMock
from app.services.chat_service import ChatService
from app.services.feed_service import FeedService
from app.services.match_service import MatchService
from fakes import InMemoryMatchStore, InMemoryMessageStore, InMemoryProfileStore

@pytest.fixture
def mock_session():
    session = AsyncMock()

    # Setup execute result
    mock_result = MagicMock()
    # Ensure scalar_one_or_none returns a value, not a coroutine
    mock_result.scalar_one_or_none.return_value = None
    mock_result.scalar.return_value = None
    mock_result.scalars.return_value.all.return_value = []
    mock_result.scalars.return_value.first.return_value = None
    mock_result.rowcount = 0

    # Configure session.execute to return this result when awaited
    session.execute.side_effect = None
    session.execute.return_value = mock_result

    # Configure session.get to return None by default
    session.get.return_value = None

    # Standard methods
    session.add = MagicMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()

    return session

@pytest.fixture
def match_store():
    return InMemoryMatchStore()

@pytest.fixture
def profiles():
    return InMemoryProfileStore()

@pytest.fixture
def message_store():
    return InMemoryMessageStore()

@pytest.fixture
def match_service(match_store, profiles, message_store):
    return MatchService(match_store, profiles, message_store)

@pytest.fixture
def feed_service(match_store, profiles):
    return FeedService(match_store, profiles, rng=random.Random(42), limit=10)

@pytest.fixture
def chat_service(match_store, profiles, message_store):
    return ChatService(match_store, profiles, message_store)

@pytest.fixture
def minecraft_pair(profiles):
    """Creator C1 (Minecraft, Fast-Paced) and editor E1 who edits Minecraft."""
    creator = profiles.add_creator("Minecraft", ["Fast-Paced"], display_name="C1")
    editor = profiles.add_editor(["Minecraft"], ["Fast-Paced"], anonymous_name="E1", real_name="Erin One")
    return creator, editor

@pytest.fixture
async def matched_request(match_service, minecraft_pair):
    creator, editor = minecraft_pair
    request = await match_service.create_request(creator.id, editor.id)
    await match_service.editor_accept(request.id, editor.id)
    await match_service.final_accept(request.id, editor.id)
    return request
