from __future__ import annotations

from typing import List, Optional, Tuple

from flask import current_app
from loguru import logger

from ..errors import InsufficientParticipants, NotFound, NotReady
from ..extensions import db
from ..models import GENERATED_KEY, Assignment, Participant, Setting
from ..store import transaction
from .derangement import generate_derangement


def flag_row(scope: str, lock: bool = False) -> Optional[Setting]:
    q = Setting.query.filter_by(key=GENERATED_KEY, family_code=scope)
    if lock:
        q = q.with_for_update()
    return q.first()


def assignments_generated(scope: str) -> bool:
    flag = flag_row(scope)
    return flag is not None and flag.value == "true"


def generate_assignments(scope: str, *, seed: Optional[int] = None) -> List[Tuple[str, str]]:
    """
    Replace the scope's assignments with a fresh derangement and mark it generated.

    Runs as one transaction: the flag row is locked first so concurrent runs for
    the same scope serialize, then old pairs are deleted, new pairs inserted and
    the flag set. Any failure leaves the previous assignments in place.
    """
    with transaction() as session:
        flag = flag_row(scope, lock=True)
        if flag is None:
            flag = Setting(key=GENERATED_KEY, value="false", family_code=scope)
            session.add(flag)
            session.flush()

        names = [
            p.name
            for p in Participant.query.filter_by(family_code=scope).order_by(Participant.name.asc())
        ]
        if len(names) < 2:
            raise InsufficientParticipants()

        pairs = generate_derangement(
            names,
            seed=seed,
            max_attempts=current_app.config.get("SANTA_MAX_SHUFFLE_ATTEMPTS", 100),
            fallback=current_app.config.get("SANTA_DERANGEMENT_FALLBACK", "raise"),
        )

        Assignment.query.filter_by(family_code=scope).delete(synchronize_session="fetch")
        session.add_all(
            Assignment(giver=giver, receiver=receiver, family_code=scope)
            for giver, receiver in pairs
        )
        flag.value = "true"

    logger.info("generated {n} assignments for scope {scope!r}", n=len(pairs), scope=scope)
    return pairs


def get_assignment(name: str, scope: str) -> str:
    if not assignments_generated(scope):
        raise NotReady()

    row = Assignment.query.filter_by(giver=name, family_code=scope).first()
    if row is None:
        raise NotFound()
    return row.receiver


def count_assignments(scope: str) -> int:
    return db.session.query(Assignment).filter_by(family_code=scope).count()
