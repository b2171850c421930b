import datetime
import typing as t

from sqlalchemy import func, JSON, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass

from gauntlet.model import CandidateID

from .type import ShortUUIDKeyType, UTCDateTime

metadata = MetaData()


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        CandidateID: ShortUUIDKeyType(CandidateID),
        datetime.datetime: UTCDateTime(),
        list[str]: JSON,
        list[dict[str, t.Any]]: JSON,
        dict[str, t.Any]: JSON,
    }


class candidates(base):
    __tablename__ = "candidates"

    candidate_id: Mapped[CandidateID] = mapped_column(primary_key=True)
    name: Mapped[str]
    role: Mapped[str]
    role_description: Mapped[str] = mapped_column(default="")
    skills: Mapped[list[str]] = mapped_column(default_factory=list)
    narrative: Mapped[str] = mapped_column(default="")
    ai_initial_score: Mapped[int | None] = mapped_column(default=None)
    archived: Mapped[bool] = mapped_column(default=False)
    communication_sent: Mapped[bool] = mapped_column(default=False)
    # whole-document snapshot of gauntlet.model.GauntletState
    gauntlet_state: Mapped[dict[str, t.Any] | None] = mapped_column(default=None)
    gauntlet_start_date: Mapped[datetime.datetime | None] = mapped_column(default=None)
    # append-only, entries unique by entry_id
    log: Mapped[list[dict[str, t.Any]]] = mapped_column(default_factory=list)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())
