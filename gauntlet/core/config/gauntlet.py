import typing as t

import annotated_types as ant

from .base import BaseSettings

DEFAULT_FINAL_INTERVIEW_PROMPT = (
    "Describe a project where you had to make a difficult technical trade-off under time pressure. "
    "What options did you consider, what did you choose, and what would you do differently now?"
)


class GauntletSettings(BaseSettings):
    """Assessment policy knobs.

    `persistence_debounce_seconds` is how long the per-candidate writer waits
    after a mutation before writing, so that bursts coalesce into one write.
    `session_idle_seconds` is how long a live session may go untouched before
    the web process lets go of it.
    """

    window_days: t.Annotated[int, ant.Gt(0)] = 7
    urgent_days: t.Annotated[int, ant.Ge(0)] = 3
    technical_question_count: t.Annotated[int, ant.Gt(0)] = 3
    pass_score: t.Annotated[int, ant.Ge(0), ant.Le(100)] = 70
    monitor_min_score: t.Annotated[int, ant.Ge(0), ant.Le(100)] = 70
    require_media_permission: bool = True
    persistence_debounce_seconds: t.Annotated[float, ant.Ge(0)] = 0.5
    session_idle_seconds: t.Annotated[float, ant.Gt(0)] = 1800
    final_interview_prompt: str = DEFAULT_FINAL_INTERVIEW_PROMPT
    company_name: str = "Our Company"
    recruiter_name: str = "The Recruiting Team"
