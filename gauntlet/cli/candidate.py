"""CLI commands for managing candidates and their gauntlets."""

from __future__ import annotations

import asyncio
from pathlib import Path

from sqlalchemy.orm import Session

import gauntlet.lib.cli as click
from gauntlet.assessment import CandidateNotFound, InvalidOperation, records
from gauntlet.assessment.phase import is_terminal
from gauntlet.assessment.report import compile_grand_report, report_filename
from gauntlet.assessment.status import status_of
from gauntlet.core import di, TimestampProvider
from gauntlet.core.config import GauntletSettings
from gauntlet.llm import Collaborators
from gauntlet.model import CandidateID, Phase
from gauntlet.storage import candidate as candidate_storage


@click.group("candidate")
def candidate():
    """Manage candidates."""
    ...


@candidate.command("create")
@click.argument("name")
@click.argument("role")
@click.option("--skill", "-k", "skills", multiple=True, help="A skill to assess; repeat for more")
@click.option("--role-description", "-d", default="", help="Description of the role")
@click.option("--narrative", "-n", default="", help="Free-text background on the candidate")
@click.option("--score", type=click.IntRange(0, 100), default=None, help="Initial screening score")
@di.inject
def candidate_create(
    name: str,
    role: str,
    skills: tuple[str, ...],
    role_description: str,
    narrative: str,
    score: int | None,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Create a new candidate.

    NAME is the candidate's full name.
    ROLE is the title of the role they are applying for.
    """
    with session.begin():
        obj = candidate_storage.create(
            name=name,
            role=role,
            role_description=role_description,
            skills=list(skills),
            narrative=narrative,
            ai_initial_score=score,
            session=session,
        )

    click.echo(f"Created candidate: {obj.name} ({obj.candidate_id})")


@candidate.command("list")
@click.option("--all", "-a", "show_all", is_flag=True, default=False, help="Include archived and unscreened candidates")
@di.inject
def candidate_list(
    show_all: bool,
    session: Session = di.Provide["storage.persistent.session"],
    settings: GauntletSettings = di.Provide["config.gauntlet", di.as_(GauntletSettings)],  # noqa: B008
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> None:
    """List candidates with their gauntlet status."""
    with session.begin():
        if show_all:
            candidates = candidate_storage.find(session=session)
        else:
            candidates = candidate_storage.find(archived=False, min_score=settings.monitor_min_score, session=session)

    if not candidates:
        click.echo("No candidates found.", err=True)
        return

    now = utcnow()
    for c in candidates:
        status = status_of(c, now, window_days=settings.window_days, urgent_days=settings.urgent_days)
        flags = " [archived]" if c.archived else ""
        click.echo(
            f"{c.candidate_id}  {c.name:<24} {status.phase.value:<20} "
            f"{status.progress:>3}%  {status.deadline.label}{flags}"
        )


@candidate.command("open")
@click.argument("candidate_id", type=click.CandidateIDParamType())
@di.inject
def candidate_open(
    candidate_id: CandidateID,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> None:
    """Open the gauntlet for a candidate, starting their assessment window."""
    try:
        with session.begin():
            obj = records.open_gauntlet(candidate_id, utcnow(), session=session)
    except (CandidateNotFound, InvalidOperation) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None

    click.echo(f"Opened gauntlet for {obj.name} at {obj.gauntlet_start_date}")


@candidate.command("archive")
@click.argument("candidate_id", type=click.CandidateIDParamType())
@di.inject
def candidate_archive(
    candidate_id: CandidateID,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> None:
    """Archive a candidate."""
    try:
        with session.begin():
            obj = records.archive(candidate_id, utcnow(), session=session)
    except CandidateNotFound as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None

    click.echo(f"Archived candidate: {obj.name}")


@candidate.command("delete")
@click.argument("candidate_id", type=click.CandidateIDParamType())
@click.confirmation_option(prompt="Delete this candidate and their gauntlet record?")
@di.inject
def candidate_delete(
    candidate_id: CandidateID,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Delete a candidate record."""
    with session.begin():
        deleted = candidate_storage.delete(candidate_id, session=session)

    if not deleted:
        click.echo(f"Error: candidate {candidate_id} not found", err=True)
        raise SystemExit(1)
    click.echo(f"Deleted candidate {candidate_id}")


@candidate.command("report")
@click.argument("candidate_id", type=click.CandidateIDParamType())
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write the report into this directory instead of standard output",
)
@di.inject
def candidate_report(
    candidate_id: CandidateID,
    output_dir: Path | None,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Print or save the grand report of a finished gauntlet."""
    with session.begin():
        obj = candidate_storage.get(candidate_id, session=session)

    if obj is None:
        click.echo(f"Error: candidate {candidate_id} not found", err=True)
        raise SystemExit(1)

    phase = obj.gauntlet_state.phase if obj.gauntlet_state else Phase.Locked
    if not is_terminal(phase):
        click.echo(f"Error: the gauntlet is not over (currently {phase.value})", err=True)
        raise SystemExit(1)

    text = compile_grand_report(obj.name, obj.gauntlet_state)
    if output_dir is None:
        click.echo(text)
        return

    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / report_filename(obj.name)
    path.write_text(text)
    click.echo(f"Wrote {path}", err=True)


@candidate.command("communicate")
@di.inject
def candidate_communicate(
    session: Session = di.Provide["storage.persistent.session"],
    collaborators: Collaborators = di.Provide["assessment.collaborators"],
    settings: GauntletSettings = di.Provide["config.gauntlet", di.as_(GauntletSettings)],  # noqa: B008
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> None:
    """Draft offer and rejection emails for candidates who completed the gauntlet."""
    outcome = asyncio.run(
        records.send_communications(
            collaborators,
            utcnow(),
            company_name=settings.company_name,
            recruiter_name=settings.recruiter_name,
            session=session,
        )
    )

    if not outcome.sent and not outcome.failed:
        click.echo("No candidates awaiting communication.", err=True)
        return
    click.echo(f"Drafted {len(outcome.offers)} offer(s) and {len(outcome.rejections)} rejection(s).")
    for candidate_id in outcome.failed:
        click.echo(f"Error: could not draft an email for {candidate_id}", err=True)
    if outcome.failed:
        raise SystemExit(1)
