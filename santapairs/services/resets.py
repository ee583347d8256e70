from loguru import logger

from ..models import Assignment, Participant, Setting
from ..store import transaction
from .assignments import flag_row


def reset_scope(scope: str) -> None:
    """Delete the scope's assignments, participants and settings in one transaction."""
    with transaction():
        # same lock as generate_assignments, so a reset never interleaves with a generate
        flag_row(scope, lock=True)
        assignments = Assignment.query.filter_by(family_code=scope).delete(synchronize_session="fetch")
        participants = Participant.query.filter_by(family_code=scope).delete(synchronize_session="fetch")
        Setting.query.filter_by(family_code=scope).delete(synchronize_session="fetch")

    logger.info(
        "reset scope {scope!r}: removed {participants} participants, {assignments} assignments",
        scope=scope,
        participants=participants,
        assignments=assignments,
    )
