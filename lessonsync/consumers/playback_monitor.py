"""Pause triggering at fragment boundaries during interactive playback."""
import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, List, NamedTuple, Optional, Set, Tuple, Union

from lessonsync.core.models.enums import LanguageTag, ScreenRole
from lessonsync.core.models.timeline import SynchronizedTimeline

logger = logging.getLogger(__name__)

PositionSource = Callable[[], Union[Optional[float], Awaitable[Optional[float]]]]


class FragmentBoundary(NamedTuple):
    """End of one pausable fragment on the lesson's absolute timeline."""
    entry_index: int
    fragment_index: int
    absolute_end: float


@dataclass(frozen=True)
class PauseEvent:
    boundary: FragmentBoundary
    position: float
    triggered_at: float
    content: str
    auxiliary_translation: Optional[str] = None


class PlaybackMonitor:
    """Fires a pause event when playback reaches the end of a practice phrase.

    Boundaries are the ends of fragments in ``pause_language`` inside
    entries with ``pause_role``. A boundary fires once playback is within
    ``epsilon`` seconds of it. Each boundary fires at most once until
    ``reset``; the most recently fired boundary additionally cannot fire
    again within ``cooldown`` seconds, even across a reset.
    """

    def __init__(
        self,
        timeline: SynchronizedTimeline,
        epsilon: float = 0.15,
        cooldown: float = 1.0,
        pause_role: ScreenRole = ScreenRole.PRACTICE_CARD,
        pause_language: LanguageTag = LanguageTag.L2,
    ) -> None:
        self.timeline = timeline
        self.epsilon = epsilon
        self.cooldown = cooldown
        self.pause_role = pause_role
        self.pause_language = pause_language
        self._boundaries = self._collect_boundaries()
        self._triggered: Set[Tuple[int, int]] = set()
        self._last_triggered: Optional[Tuple[int, int]] = None
        self._last_triggered_at: Optional[float] = None

    def _collect_boundaries(self) -> List[FragmentBoundary]:
        boundaries = []
        for entry_index, entry in enumerate(self.timeline.entries):
            if entry.screen_role != self.pause_role:
                continue
            for fragment_index, timing in enumerate(entry.fragment_timings or []):
                if timing.language_tag != self.pause_language:
                    continue
                boundaries.append(FragmentBoundary(
                    entry_index=entry_index,
                    fragment_index=fragment_index,
                    absolute_end=entry.start_time + timing.end_offset,
                ))
        boundaries.sort(key=lambda b: b.absolute_end)
        return boundaries

    @property
    def boundaries(self) -> List[FragmentBoundary]:
        return list(self._boundaries)

    def _in_cooldown(self, key: Tuple[int, int], now: float) -> bool:
        return (
            key == self._last_triggered
            and self._last_triggered_at is not None
            and now - self._last_triggered_at < self.cooldown
        )

    def poll(self, position: float, now: Optional[float] = None) -> List[PauseEvent]:
        """Compare a playback position against the boundaries.

        Args:
            position: Playback position in seconds
            now: Wall-clock time in seconds; defaults to ``time.monotonic()``

        Returns:
            Events for every boundary crossed since the last poll
        """
        if now is None:
            now = time.monotonic()

        events: List[PauseEvent] = []
        for boundary in self._boundaries:
            if position < boundary.absolute_end - self.epsilon:
                break
            key = (boundary.entry_index, boundary.fragment_index)
            if key in self._triggered or self._in_cooldown(key, now):
                continue

            self._triggered.add(key)
            self._last_triggered = key
            self._last_triggered_at = now
            timing = self.timeline.entries[boundary.entry_index].fragment_timings[boundary.fragment_index]
            logger.debug("Pause at %.3fs (boundary %.3fs)", position, boundary.absolute_end)
            events.append(PauseEvent(
                boundary=boundary,
                position=position,
                triggered_at=now,
                content=timing.content,
                auxiliary_translation=timing.auxiliary_translation,
            ))
        return events

    def reset(self, position: Optional[float] = None) -> None:
        """Forget triggered boundaries, e.g. after seeking backwards.

        Args:
            position: If given, only boundaries after this position are forgotten
        """
        if position is None:
            self._triggered.clear()
            return
        self._triggered = {
            (b.entry_index, b.fragment_index)
            for b in self._boundaries
            if (b.entry_index, b.fragment_index) in self._triggered
            and position >= b.absolute_end - self.epsilon
        }

    async def watch(
        self,
        position_source: PositionSource,
        poll_interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ) -> AsyncIterator[PauseEvent]:
        """Poll a playback position until the source returns None.

        The source may be a plain or an async callable. Seeking backwards
        re-arms the boundaries after the new position.
        """
        previous: Optional[float] = None
        while True:
            position = position_source()
            if inspect.isawaitable(position):
                position = await position
            if position is None:
                return
            if previous is not None and position < previous:
                self.reset(position)
            previous = position

            for event in self.poll(position, clock()):
                yield event
            await asyncio.sleep(poll_interval)
