from __future__ import annotations

from typing import List, Optional

from loguru import logger
from sqlalchemy import func

from ..errors import DuplicateParticipant, InvalidCredentials
from ..models import Assignment, Participant
from ..security import hash_password, verify_password
from ..store import transaction


def list_participants(scope: str) -> List[Participant]:
    return Participant.query.filter_by(family_code=scope).order_by(Participant.name.asc()).all()


def name_taken(name: str, scope: str) -> bool:
    return Participant.query.filter_by(name=name, family_code=scope).first() is not None


def add_participant(name: str, password: str, scope: str) -> Participant:
    # Pre-check gives a clean conflict; the unique constraint still catches races.
    if name_taken(name, scope):
        raise DuplicateParticipant()

    with transaction(on_conflict=DuplicateParticipant) as session:
        p = Participant(name=name, password_hash=hash_password(password), family_code=scope)
        session.add(p)

    logger.info("added participant {name!r} to scope {scope!r}", name=name, scope=scope)
    return p


def remove_participant(name: str, scope: str) -> None:
    """Delete a participant plus every assignment naming them as giver or receiver."""
    with transaction():
        Assignment.query.filter(
            Assignment.family_code == scope,
            (Assignment.giver == name) | (Assignment.receiver == name),
        ).delete(synchronize_session="fetch")
        Participant.query.filter_by(name=name, family_code=scope).delete(synchronize_session="fetch")

    logger.info("removed participant {name!r} from scope {scope!r}", name=name, scope=scope)


def authenticate(name: str, password: str, scope: Optional[str] = None) -> Participant:
    """Case-insensitive name lookup; the first candidate whose password verifies wins."""
    q = Participant.query.filter(func.lower(Participant.name) == name.lower())
    if scope is not None:
        q = q.filter(Participant.family_code == scope)

    for candidate in q.order_by(Participant.id.asc()).all():
        if verify_password(password, candidate.password_hash):
            return candidate

    logger.info("failed login for {name!r}", name=name)
    raise InvalidCredentials()
