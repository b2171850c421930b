"""Integrity evidence for one stage attempt.

A `ProctoringMonitor` lives for exactly one attempt at one question. It is
fed by an `EvidenceSource` (the client's visibility, speech-to-text and media
permission events, relayed through the web API) and owns an `AmbientCapture`
that only accepts transcript segments while a question is on screen.
"""

from __future__ import annotations

import enum
import typing as t
from abc import ABC, abstractmethod

from gauntlet.core import get_logger, TimestampProvider
from gauntlet.model import EvidenceEntry, ProctoringEvidence

from .errors import InvalidOperation, PermissionRequired

logger = get_logger()


class VisibilityState(enum.Enum):
    Visible = "visible"
    Hidden = "hidden"


class AmbientCapture(object):
    """Scoped speech-to-text buffer.

    Only finalized segments received between `start()` and `stop()` are kept.
    Usable as a context manager so that capture is released on every exit path.
    """

    def __init__(self) -> None:
        self._segments: list[str] = []
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        self._active = True

    def stop(self) -> None:
        self._active = False

    def accept(self, text: str, *, final: bool) -> bool:
        if not (self._active and final):
            return False
        text = text.strip()
        if not text:
            return False
        self._segments.append(text)
        return True

    @property
    def transcript(self) -> str | None:
        return " ".join(self._segments) if self._segments else None

    def __enter__(self) -> t.Self:
        self.start()
        return self

    def __exit__(self, *_: t.Any) -> None:
        self.stop()


class EvidenceSink(t.Protocol):
    def visibility_changed(self, state: VisibilityState) -> None: ...

    def transcript_segment(self, text: str, final: bool) -> None: ...

    def permission_changed(self, granted: bool) -> None: ...


class EvidenceSource(ABC):
    """Where evidence events come from. A monitor attaches on creation and detaches when closed."""

    @abstractmethod
    def connect(self, sink: EvidenceSink) -> None: ...

    @abstractmethod
    def disconnect(self, sink: EvidenceSink) -> None: ...


class EvidenceChannel(EvidenceSource):
    """Relays client-reported events to whichever monitor is currently attached.

    Permission state outlives individual monitors, since the browser grants it
    once per session rather than per question.
    """

    def __init__(self) -> None:
        self._sink: EvidenceSink | None = None
        self.permission: bool | None = None

    def connect(self, sink: EvidenceSink) -> None:
        self._sink = sink
        if self.permission is not None:
            sink.permission_changed(self.permission)

    def disconnect(self, sink: EvidenceSink) -> None:
        if self._sink is sink:
            self._sink = None

    @property
    def attached(self) -> bool:
        return self._sink is not None

    def report_visibility(self, state: VisibilityState) -> None:
        if self._sink is not None:
            self._sink.visibility_changed(state)

    def report_transcript(self, text: str, *, final: bool) -> None:
        if self._sink is not None:
            self._sink.transcript_segment(text, final)

    def report_permission(self, granted: bool) -> None:
        self.permission = granted
        if self._sink is not None:
            self._sink.permission_changed(granted)


class ProctoringMonitor(object):
    def __init__(
        self,
        source: EvidenceSource,
        *,
        now: TimestampProvider,
        capture_supported: bool = True,
    ) -> None:
        self.source = source
        self.now = now
        self.capture = AmbientCapture() if capture_supported else None
        self._entries: list[EvidenceEntry] = []
        self._visibility = VisibilityState.Visible
        self._permission: bool | None = None
        self._sealed = False
        self._closed = False
        source.connect(self)

    # EvidenceSink

    def visibility_changed(self, state: VisibilityState) -> None:
        if self._sealed:
            return
        previous, self._visibility = self._visibility, state
        logger.trace("visibility changed", extra={"from": previous.value, "to": state.value})
        if previous is VisibilityState.Visible and state is VisibilityState.Hidden:
            self._entries.append(
                EvidenceEntry(timestamp=self.now(), description="User switched tabs or minimized the window.")
            )

    def transcript_segment(self, text: str, final: bool) -> None:
        if self.capture is not None and not self._sealed:
            accepted = self.capture.accept(text, final=final)
            logger.trace("transcript segment", extra={"final": final, "accepted": accepted, "chars": len(text)})

    def permission_changed(self, granted: bool) -> None:
        self._permission = granted

    # lifecycle

    def present_question(self) -> None:
        if self._closed:
            raise InvalidOperation("proctoring monitor is closed")
        if self.capture is not None:
            self.capture.start()

    def require_permission(self) -> None:
        """
        Raises:
            PermissionRequired: unless camera and microphone access were granted
        """
        if self._permission is not True:
            raise PermissionRequired("camera and microphone permission is required to submit an answer")

    def seal(self) -> ProctoringEvidence:
        """Stop capture and freeze the evidence gathered so far."""
        if self.capture is not None:
            self.capture.stop()
        self._sealed = True
        evidence = ProctoringEvidence(
            entries=list(self._entries),
            ambient_transcript=self.capture.transcript if self.capture is not None else None,
        )
        logger.debug(
            "evidence sealed",
            extra={"entries": len(evidence.entries), "transcript": evidence.ambient_transcript is not None},
        )
        return evidence

    def close(self) -> None:
        if self._closed:
            return
        if self.capture is not None:
            self.capture.stop()
        self.source.disconnect(self)
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> t.Self:
        return self

    def __exit__(self, *_: t.Any) -> None:
        self.close()
