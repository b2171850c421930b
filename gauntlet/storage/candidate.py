from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from gauntlet.core import di
from gauntlet.lib import NotSet
from gauntlet.model import Candidate, CandidateID, GauntletState, LogEntry

from . import Session
from .table import candidates


def get(
    candidate_id: CandidateID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Candidate | None:
    """Get a candidate by ID."""
    stmt = sqla.select(candidates.__table__).where(candidates.candidate_id == candidate_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Candidate(**row) if row else None


def find(
    *,
    archived: bool | None = None,
    min_score: int | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Candidate, ...]:
    """Find candidates matching criteria, oldest first."""
    stmt = sqla.select(candidates.__table__)
    if archived is not None:
        stmt = stmt.where(candidates.archived == archived)
    if min_score is not None:
        stmt = stmt.where(candidates.ai_initial_score >= min_score)
    stmt = stmt.order_by(candidates.create_time, candidates.candidate_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(Candidate(**row) for row in rows)


def create(
    *,
    name: str,
    role: str,
    role_description: str = "",
    skills: list[str] | None = None,
    narrative: str = "",
    ai_initial_score: int | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Candidate:
    """Create a new candidate."""
    candidate_id = CandidateID()
    stmt = sqla.insert(candidates).values(
        candidate_id=candidate_id,
        name=name,
        role=role,
        role_description=role_description,
        skills=skills if skills is not None else [],
        narrative=narrative,
        ai_initial_score=ai_initial_score,
        log=[],
    )
    session.execute(stmt)
    session.flush()
    obj = get(candidate_id, session=session)
    assert obj is not None
    return obj


def update(
    candidate_id: CandidateID,
    *,
    name: str | NotSet = NotSet(),
    role: str | NotSet = NotSet(),
    role_description: str | NotSet = NotSet(),
    skills: list[str] | NotSet = NotSet(),
    narrative: str | NotSet = NotSet(),
    ai_initial_score: int | None | NotSet = NotSet(),
    archived: bool | NotSet = NotSet(),
    communication_sent: bool | NotSet = NotSet(),
    gauntlet_start_date: datetime.datetime | None | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> Candidate:
    """Update a candidate's record fields.

    The gauntlet snapshot and the log have their own writers, see
    `write_gauntlet_state` and `append_log`.

    Raises:
        KeyError: If candidate_id does not correspond to a candidate
    """
    values: dict[str, t.Any] = {}
    if not isinstance(name, NotSet):
        values["name"] = name
    if not isinstance(role, NotSet):
        values["role"] = role
    if not isinstance(role_description, NotSet):
        values["role_description"] = role_description
    if not isinstance(skills, NotSet):
        values["skills"] = skills
    if not isinstance(narrative, NotSet):
        values["narrative"] = narrative
    if not isinstance(ai_initial_score, NotSet):
        values["ai_initial_score"] = ai_initial_score
    if not isinstance(archived, NotSet):
        values["archived"] = archived
    if not isinstance(communication_sent, NotSet):
        values["communication_sent"] = communication_sent
    if not isinstance(gauntlet_start_date, NotSet):
        values["gauntlet_start_date"] = gauntlet_start_date

    if values:
        stmt = sqla.update(candidates).where(candidates.candidate_id == candidate_id).values(**values)
    else:
        # No-op update to verify candidate exists
        stmt = sqla.update(candidates).where(candidates.candidate_id == candidate_id).values(candidate_id=candidate_id)

    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Candidate {candidate_id} not found")

    session.flush()
    obj = get(candidate_id, session=session)
    assert obj is not None
    return obj


def delete(
    candidate_id: CandidateID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Delete a candidate record.

    Returns:
        True if deleted, False if not found
    """
    stmt = sqla.delete(candidates).where(candidates.candidate_id == candidate_id)
    result = session.execute(stmt)
    return bool(result.rowcount)  # pyright: ignore[reportAttributeAccessIssue, reportUnknownArgumentType]


def write_gauntlet_state(
    candidate_id: CandidateID,
    state: GauntletState | None,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Replace the whole gauntlet snapshot.

    Returns:
        False if the candidate no longer exists
    """
    value = state.model_dump(mode="json") if state is not None else None
    stmt = sqla.update(candidates).where(candidates.candidate_id == candidate_id).values(gauntlet_state=value)
    result = session.execute(stmt)
    return bool(result.rowcount)  # pyright: ignore[reportAttributeAccessIssue, reportUnknownArgumentType]


def append_log(
    candidate_id: CandidateID,
    entries: t.Sequence[LogEntry],
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Append entries to the candidate's log, skipping ones already present.

    Entries are matched on entry_id, so replaying a batch leaves the log as
    it was after the first write.

    Returns:
        False if the candidate no longer exists
    """
    stmt = sqla.select(candidates.log).where(candidates.candidate_id == candidate_id).with_for_update()
    existing = session.execute(stmt).scalar_one_or_none()
    if existing is None:
        return False

    seen = {e.get("entry_id") for e in existing}
    additions: list[dict[str, t.Any]] = []
    for entry in entries:
        if str(entry.entry_id) in seen:
            continue
        seen.add(str(entry.entry_id))
        additions.append(entry.model_dump(mode="json"))
    if not additions:
        return True

    stmt = sqla.update(candidates).where(candidates.candidate_id == candidate_id).values(log=[*existing, *additions])
    session.execute(stmt)
    return True
