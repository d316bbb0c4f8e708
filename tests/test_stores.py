import uuid
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from app.core.exceptions import ConflictError, UnavailableError
from app.db.match_store import SqlMatchStore
from app.db.message_store import SqlMessageStore
from app.db.profile_store import SqlProfileStore
from app.models.match_request import MatchRequest, MatchStatus, FeedHistory, FeedAction


def _request():
    return MatchRequest(
        id=uuid.uuid4(),
        creator_id=uuid.uuid4(),
        editor_id=uuid.uuid4(),
        status=MatchStatus.PENDING.value,
    )


@pytest.mark.asyncio
async def test_compare_and_swap_reports_winner(mock_session):
    mock_session.execute.return_value.rowcount = 1
    store = SqlMatchStore(mock_session)

    swapped = await store.compare_and_swap(uuid.uuid4(), ["pending"], "accepted")

    assert swapped is True
    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_compare_and_swap_reports_loser(mock_session):
    mock_session.execute.return_value.rowcount = 0
    store = SqlMatchStore(mock_session)

    assert await store.compare_and_swap(uuid.uuid4(), ["accepted"], "matched") is False


@pytest.mark.asyncio
async def test_compare_and_swap_filters_on_expected_status(mock_session):
    mock_session.execute.return_value.rowcount = 1
    store = SqlMatchStore(mock_session)

    await store.compare_and_swap(uuid.uuid4(), ["pending", "accepted"], "passed")

    statement = mock_session.execute.call_args[0][0]
    compiled = str(statement.compile())
    assert "UPDATE match_requests" in compiled
    assert "match_requests.status IN" in compiled


@pytest.mark.asyncio
async def test_put_writes_request_and_history(mock_session):
    store = SqlMatchStore(mock_session)
    request = _request()
    history = FeedHistory(
        id=uuid.uuid4(),
        creator_id=request.creator_id,
        editor_id=request.editor_id,
        action=FeedAction.LIKED.value,
    )

    await store.put(request, history)

    added = [call.args[0] for call in mock_session.add.call_args_list]
    assert added == [request, history]
    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_put_duplicate_live_pair_is_conflict(mock_session):
    mock_session.commit.side_effect = IntegrityError("INSERT", {}, Exception("uq_match_requests_live_pair"))
    store = SqlMatchStore(mock_session)

    with pytest.raises(ConflictError):
        await store.put(_request())
    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_driver_failure_is_unavailable(mock_session):
    mock_session.execute.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))

    with pytest.raises(UnavailableError):
        await SqlMatchStore(mock_session).get(uuid.uuid4())
    with pytest.raises(UnavailableError):
        await SqlProfileStore(mock_session).get_tags(uuid.uuid4())
    with pytest.raises(UnavailableError):
        await SqlMessageStore(mock_session).unread_count(uuid.uuid4(), uuid.uuid4())
    assert mock_session.rollback.await_count == 3


@pytest.mark.asyncio
async def test_driver_failure_survives_failed_rollback(mock_session):
    mock_session.execute.side_effect = OperationalError("SELECT", {}, Exception("connection reset"))
    mock_session.rollback.side_effect = OperationalError("ROLLBACK", {}, Exception("connection reset"))

    with pytest.raises(UnavailableError) as exc_info:
        await SqlMatchStore(mock_session).get(uuid.uuid4())
    assert isinstance(exc_info.value.__cause__, OperationalError)
    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_touched_editor_ids(mock_session):
    ids = [uuid.uuid4(), uuid.uuid4()]
    mock_session.execute.return_value.scalars.return_value.all.return_value = ids

    assert await SqlMatchStore(mock_session).touched_editor_ids(uuid.uuid4()) == set(ids)


@pytest.mark.asyncio
async def test_mark_read_returns_rowcount(mock_session):
    mock_session.execute.return_value.rowcount = 3

    assert await SqlMessageStore(mock_session).mark_read(uuid.uuid4(), uuid.uuid4()) == 3
    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_unread_total_without_matches_skips_query(mock_session):
    assert await SqlMessageStore(mock_session).unread_total([], uuid.uuid4()) == 0
    mock_session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_grouped_lookups_skip_query_for_no_ids(mock_session):
    profiles = SqlProfileStore(mock_session)

    assert await profiles.get_tags_for([]) == {}
    assert await profiles.get_clips_for([]) == {}
    mock_session.execute.assert_not_called()
