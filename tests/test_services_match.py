import asyncio
import uuid
import pytest
from app.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.models.match_request import MatchStatus, FeedAction
from fakes import minutes_ago


@pytest.mark.asyncio
async def test_create_request_is_pending_and_logs_like(match_service, match_store, minecraft_pair):
    creator, editor = minecraft_pair

    request = await match_service.create_request(creator.id, editor.id)

    assert request.status == MatchStatus.PENDING.value
    assert request.creator_liked_at is not None
    assert request.editor_accepted_at is None
    assert len(match_store.history) == 1
    assert match_store.history[0].action == FeedAction.LIKED.value
    assert match_store.history[0].editor_id == editor.id


@pytest.mark.asyncio
async def test_create_request_with_clip(match_service, profiles, minecraft_pair):
    creator, editor = minecraft_pair
    clip = (await profiles.get_clips(editor.id))[0]

    request = await match_service.create_request(creator.id, editor.id, clip.id)

    assert request.clip_id == clip.id


@pytest.mark.asyncio
async def test_create_request_rejects_clip_of_other_editor(match_service, profiles, minecraft_pair):
    creator, editor = minecraft_pair
    other = profiles.add_editor(["Minecraft"])
    foreign_clip = (await profiles.get_clips(other.id))[0]

    with pytest.raises(NotFoundError):
        await match_service.create_request(creator.id, editor.id, foreign_clip.id)


@pytest.mark.asyncio
async def test_create_request_unknown_editor(match_service, minecraft_pair):
    creator, _ = minecraft_pair
    with pytest.raises(NotFoundError):
        await match_service.create_request(creator.id, uuid.uuid4())


@pytest.mark.asyncio
async def test_duplicate_like_conflicts(match_service, match_store, minecraft_pair):
    creator, editor = minecraft_pair
    await match_service.create_request(creator.id, editor.id)

    with pytest.raises(ConflictError):
        await match_service.create_request(creator.id, editor.id)
    assert len(match_store.requests) == 1


@pytest.mark.asyncio
async def test_like_allowed_again_after_pass(match_service, minecraft_pair):
    creator, editor = minecraft_pair
    first = await match_service.create_request(creator.id, editor.id)
    await match_service.editor_pass(first.id, editor.id)

    second = await match_service.create_request(creator.id, editor.id)

    assert second.id != first.id
    assert second.status == MatchStatus.PENDING.value


@pytest.mark.asyncio
async def test_concurrent_likes_leave_one_live_request(match_service, match_store, minecraft_pair):
    creator, editor = minecraft_pair

    results = await asyncio.gather(
        *[match_service.create_request(creator.id, editor.id) for _ in range(5)],
        return_exceptions=True,
    )

    created = [r for r in results if not isinstance(r, Exception)]
    assert len(created) == 1
    assert all(isinstance(r, ConflictError) for r in results if isinstance(r, Exception))
    assert len(match_store.requests) == 1


@pytest.mark.asyncio
async def test_full_lifecycle_stamps_timestamps(match_service, minecraft_pair):
    creator, editor = minecraft_pair
    request = await match_service.create_request(creator.id, editor.id)

    accepted = await match_service.editor_accept(request.id, editor.id)
    assert accepted.status == MatchStatus.ACCEPTED.value
    assert accepted.editor_accepted_at is not None
    assert accepted.final_matched_at is None

    matched = await match_service.final_accept(request.id, editor.id)
    assert matched.status == MatchStatus.MATCHED.value
    assert matched.id == request.id
    assert matched.final_matched_at is not None


@pytest.mark.asyncio
async def test_final_accept_from_pending_is_invalid(match_service, match_store, minecraft_pair):
    creator, editor = minecraft_pair
    request = await match_service.create_request(creator.id, editor.id)

    with pytest.raises(InvalidStateError) as exc:
        await match_service.final_accept(request.id, editor.id)

    assert exc.value.current == MatchStatus.PENDING.value
    assert match_store.requests[request.id].status == MatchStatus.PENDING.value


@pytest.mark.asyncio
async def test_creator_confirm_requires_accepted(match_service, minecraft_pair):
    creator, editor = minecraft_pair
    request = await match_service.create_request(creator.id, editor.id)

    with pytest.raises(InvalidStateError):
        await match_service.creator_confirm(request.id, creator.id)

    await match_service.editor_accept(request.id, editor.id)
    confirmed = await match_service.creator_confirm(request.id, creator.id)
    assert confirmed.status == MatchStatus.MATCHED.value


@pytest.mark.asyncio
async def test_creator_pass_from_pending_and_accepted(match_service, profiles, minecraft_pair):
    creator, editor = minecraft_pair
    other = profiles.add_editor(["Minecraft"])

    pending = await match_service.create_request(creator.id, editor.id)
    accepted = await match_service.create_request(creator.id, other.id)
    await match_service.editor_accept(accepted.id, other.id)

    assert (await match_service.creator_pass(pending.id, creator.id)).status == MatchStatus.PASSED.value
    assert (await match_service.creator_pass(accepted.id, creator.id)).status == MatchStatus.PASSED.value


@pytest.mark.asyncio
async def test_no_transition_out_of_passed(match_service, minecraft_pair):
    creator, editor = minecraft_pair
    request = await match_service.create_request(creator.id, editor.id)
    await match_service.editor_pass(request.id, editor.id)

    with pytest.raises(NotFoundError):
        await match_service.editor_accept(request.id, editor.id)
    with pytest.raises(InvalidStateError):
        await match_service.final_accept(request.id, editor.id)
    with pytest.raises(InvalidStateError):
        await match_service.creator_confirm(request.id, creator.id)
    with pytest.raises(InvalidStateError):
        await match_service.creator_pass(request.id, creator.id)


@pytest.mark.asyncio
async def test_no_transition_out_of_matched(match_service, match_store, matched_request, minecraft_pair):
    creator, editor = minecraft_pair

    with pytest.raises(NotFoundError):
        await match_service.editor_pass(matched_request.id, editor.id)
    with pytest.raises(InvalidStateError):
        await match_service.creator_pass(matched_request.id, creator.id)
    with pytest.raises(InvalidStateError):
        await match_service.final_accept(matched_request.id, editor.id)
    assert match_store.requests[matched_request.id].status == MatchStatus.MATCHED.value


@pytest.mark.asyncio
async def test_respond_rejects_unknown_action(match_service, minecraft_pair):
    creator, editor = minecraft_pair
    request = await match_service.create_request(creator.id, editor.id)

    with pytest.raises(ValidationError):
        await match_service.respond(request.id, editor.id, "maybe")


@pytest.mark.asyncio
async def test_respond_unknown_request(match_service, minecraft_pair):
    _, editor = minecraft_pair
    with pytest.raises(NotFoundError):
        await match_service.respond(uuid.uuid4(), editor.id, "accept")


@pytest.mark.asyncio
async def test_other_editor_is_forbidden(match_service, profiles, minecraft_pair):
    creator, editor = minecraft_pair
    intruder = profiles.add_editor(["Minecraft"])
    request = await match_service.create_request(creator.id, editor.id)

    with pytest.raises(ForbiddenError):
        await match_service.editor_accept(request.id, intruder.id)


@pytest.mark.asyncio
async def test_ownership_checked_before_state(match_service, profiles, minecraft_pair):
    creator, editor = minecraft_pair
    intruder = profiles.add_creator("Minecraft")
    request = await match_service.create_request(creator.id, editor.id)
    await match_service.editor_pass(request.id, editor.id)

    with pytest.raises(ForbiddenError):
        await match_service.creator_pass(request.id, intruder.id)


@pytest.mark.asyncio
async def test_concurrent_accept_and_pass_one_wins(match_service, match_store, minecraft_pair):
    creator, editor = minecraft_pair
    request = await match_service.create_request(creator.id, editor.id)

    results = await asyncio.gather(
        match_service.editor_accept(request.id, editor.id),
        match_service.editor_pass(request.id, editor.id),
        return_exceptions=True,
    )

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert isinstance(losers[0], NotFoundError)
    assert match_store.requests[request.id].status == winners[0].status


@pytest.mark.asyncio
async def test_concurrent_confirms_match_once(match_service, minecraft_pair):
    creator, editor = minecraft_pair
    request = await match_service.create_request(creator.id, editor.id)
    await match_service.editor_accept(request.id, editor.id)

    results = await asyncio.gather(
        match_service.final_accept(request.id, editor.id),
        match_service.creator_confirm(request.id, creator.id),
        match_service.creator_pass(request.id, creator.id),
        return_exceptions=True,
    )

    winners = [r for r in results if not isinstance(r, Exception)]
    assert len(winners) == 1
    assert all(isinstance(r, InvalidStateError) for r in results if isinstance(r, Exception))


@pytest.mark.asyncio
async def test_minecraft_scenario_end_to_end(match_service, feed_service, minecraft_pair):
    creator, editor = minecraft_pair
    assert [e["editor_id"] for e in await feed_service.get_feed(creator.id)] == [editor.id]

    request = await match_service.create_request(creator.id, editor.id)
    assert request.status == MatchStatus.PENDING.value
    assert (await match_service.respond(request.id, editor.id, "accept")).status == MatchStatus.ACCEPTED.value
    match = await match_service.final_accept(request.id, editor.id)

    assert match.status == MatchStatus.MATCHED.value
    assert match.id == request.id
    assert await feed_service.get_feed(creator.id) == []


@pytest.mark.asyncio
async def test_pass_editor_records_history_without_request(match_service, match_store, minecraft_pair):
    creator, editor = minecraft_pair

    entry = await match_service.pass_editor(creator.id, editor.id)

    assert entry.action == FeedAction.PASSED.value
    assert match_store.requests == {}
    assert editor.id in await match_store.touched_editor_ids(creator.id)


@pytest.mark.asyncio
async def test_listings_per_side(match_service, profiles, minecraft_pair):
    creator, editor = minecraft_pair
    other = profiles.add_editor(["Minecraft"], ["VFX"])
    first = await match_service.create_request(creator.id, editor.id)
    second = await match_service.create_request(creator.id, other.id)
    await match_service.editor_pass(second.id, other.id)

    sent = await match_service.list_sent_requests(creator.id)
    assert {r["request_id"] for r in sent} == {first.id, second.id}
    assert all("real_name" not in r for r in sent)

    incoming = await match_service.list_incoming_requests(editor.id)
    assert [r["request_id"] for r in incoming] == [first.id]
    assert incoming[0]["preferred_styles"] == ["Fast-Paced"]
    assert await match_service.list_incoming_requests(other.id) == []


@pytest.mark.asyncio
async def test_get_matches_reveals_counterpart(match_service, message_store, matched_request, minecraft_pair):
    creator, editor = minecraft_pair
    message_store.add_at(matched_request.id, editor.user_id, "hi", created_at=minutes_ago(1))

    creator_view = await match_service.get_matches(creator.user_id, "creator")
    assert len(creator_view) == 1
    assert creator_view[0]["match_id"] == matched_request.id
    assert creator_view[0]["counterpart"]["real_name"] == "Erin One"
    assert creator_view[0]["unread_count"] == 1

    editor_view = await match_service.get_matches(editor.user_id, "editor")
    assert editor_view[0]["counterpart"]["display_name"] == "C1"
    assert editor_view[0]["unread_count"] == 0


@pytest.mark.asyncio
async def test_match_details_only_for_participants(match_service, profiles, matched_request, minecraft_pair):
    creator, editor = minecraft_pair
    outsider = profiles.add_creator("Minecraft")

    details = await match_service.get_match_details(matched_request.id, creator.user_id, "creator")
    assert details["editor"]["real_name"] == "Erin One"
    assert details["creator"]["creator_id"] == creator.id

    with pytest.raises(ForbiddenError):
        await match_service.get_match_details(matched_request.id, outsider.user_id, "creator")


@pytest.mark.asyncio
async def test_match_details_hidden_until_matched(match_service, minecraft_pair):
    creator, editor = minecraft_pair
    request = await match_service.create_request(creator.id, editor.id)

    with pytest.raises(ForbiddenError):
        await match_service.get_match_details(request.id, creator.user_id, "creator")
    with pytest.raises(NotFoundError):
        await match_service.get_match_details(uuid.uuid4(), creator.user_id, "creator")


@pytest.mark.asyncio
async def test_stats_per_side(match_service, profiles, minecraft_pair):
    creator, editor = minecraft_pair
    other = profiles.add_editor(["Minecraft"])
    first = await match_service.create_request(creator.id, editor.id)
    await match_service.create_request(creator.id, other.id)
    await match_service.editor_accept(first.id, editor.id)

    assert await match_service.get_stats("creator", creator.id) == {
        "pending": 1, "accepted": 1, "matched": 0, "passed": 0,
    }
    assert await match_service.get_stats("editor", editor.id) == {
        "incoming_pending": 0, "accepted": 1, "matched": 0, "passed": 0,
    }
