import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import func, select

from kudos.models import Nomination, User, Vote
from kudos.services.errors import Conflict, Forbidden, InvalidInput, NotFound
from kudos.services.votes import cast_vote, remove_vote


@pytest.fixture
def nomination(people, make_nomination):
    """Alice nominating Bob."""
    return make_nomination(people["alice"], people["bob"], reason="Great teamwork")


def _stored_votes(db_session, nomination_id: str) -> int:
    return db_session.exec(
        select(func.count()).select_from(Vote).where(Vote.nomination_id == nomination_id)
    ).one()


def test_cast_vote_returns_refreshed_nomination(db_session, people, nomination) -> None:
    result = cast_vote(db_session, nomination_id=nomination.id, voter_id=people["carol"].id)

    assert result["id"] == nomination.id
    assert result["voteCount"] == 1
    assert result["hasVoted"] is True
    assert _stored_votes(db_session, nomination.id) == 1


def test_cast_vote_trims_nomination_id(db_session, people, nomination) -> None:
    result = cast_vote(db_session, nomination_id=f"  {nomination.id}  ", voter_id="carol")
    assert result["voteCount"] == 1


@pytest.mark.parametrize("nomination_id", ["", "   ", None, 42])
def test_cast_vote_requires_nomination_id(db_session, people, nomination_id) -> None:
    with pytest.raises(InvalidInput, match="Nomination id is required"):
        cast_vote(db_session, nomination_id=nomination_id, voter_id="carol")


def test_cast_vote_unknown_nomination(db_session, people) -> None:
    with pytest.raises(NotFound, match="Nomination not found"):
        cast_vote(db_session, nomination_id="missing", voter_id="carol")


@pytest.mark.parametrize("voter", ["alice", "bob"])
def test_cannot_vote_on_own_nomination(db_session, nomination, voter) -> None:
    with pytest.raises(Forbidden, match="You cannot vote on your own nomination"):
        cast_vote(db_session, nomination_id=nomination.id, voter_id=voter)
    assert _stored_votes(db_session, nomination.id) == 0


def test_second_cast_conflicts(db_session, people, nomination) -> None:
    cast_vote(db_session, nomination_id=nomination.id, voter_id="carol")

    with pytest.raises(Conflict, match="already voted"):
        cast_vote(db_session, nomination_id=nomination.id, voter_id="carol")

    assert _stored_votes(db_session, nomination.id) == 1
    # The session is still usable after the failed insert.
    assert cast_vote(db_session, nomination_id=nomination.id, voter_id="dave")["voteCount"] == 2


def test_foreign_key_failure_is_not_a_conflict(strict_session) -> None:
    strict_session.add_all([User(id="alice"), User(id="bob")])
    strict_session.commit()
    nomination = Nomination(nominator_id="alice", nominee_id="bob")
    strict_session.add(nomination)
    strict_session.commit()

    # "ghost" has no user row, so the insert trips the voter foreign key.
    with pytest.raises(IntegrityError, match="FOREIGN KEY"):
        cast_vote(strict_session, nomination_id=nomination.id, voter_id="ghost")

    assert _stored_votes(strict_session, nomination.id) == 0


def test_remove_vote_is_idempotent(db_session, people, nomination) -> None:
    cast_vote(db_session, nomination_id=nomination.id, voter_id="carol")
    cast_vote(db_session, nomination_id=nomination.id, voter_id="dave")

    first = remove_vote(db_session, nomination_id=nomination.id, voter_id="carol")
    second = remove_vote(db_session, nomination_id=nomination.id, voter_id="carol")

    assert first["voteCount"] == 1
    assert first["hasVoted"] is False
    assert second == first
    assert _stored_votes(db_session, nomination.id) == 1


def test_remove_without_prior_vote_leaves_count(db_session, people, nomination, make_vote) -> None:
    make_vote(nomination, people["dave"])

    result = remove_vote(db_session, nomination_id=nomination.id, voter_id="carol")

    assert result["voteCount"] == 1
    assert result["hasVoted"] is False


def test_remove_vote_requires_nomination_id(db_session) -> None:
    with pytest.raises(InvalidInput):
        remove_vote(db_session, nomination_id="  ", voter_id="carol")


def test_remove_vote_on_unknown_nomination_returns_none(db_session, people) -> None:
    assert remove_vote(db_session, nomination_id="missing", voter_id="carol") is None


def test_vote_count_tracks_vote_rows(db_session, people, nomination) -> None:
    for voter in ("carol", "dave"):
        result = cast_vote(db_session, nomination_id=nomination.id, voter_id=voter)
        assert result["voteCount"] == _stored_votes(db_session, nomination.id)
    result = remove_vote(db_session, nomination_id=nomination.id, voter_id="dave")
    assert result["voteCount"] == _stored_votes(db_session, nomination.id) == 1
