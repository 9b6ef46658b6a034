"""
Playback Module - Timed Session Replay
======================================
Replays a finalized session's gestures and generations to a callback,
in timestamp order, at recorded timing scaled by a speed multiplier.

Each pending delivery is one ScheduledTask on the injected Scheduler.
Pausing cancels the pending tasks and remembers the simulated position;
resuming schedules the remaining events again from that position, so the
pause length never counts towards simulated time.
"""

import math
from typing import Optional, List, Callable
from enum import Enum, auto

from .errors import RecorderResult, ErrorKind
from .scheduler import Scheduler, ScheduledTask
from .session import (
    RecordingSession, PlaybackState, PlaybackEvent, PlaybackEventType, merge_events
)


PlaybackCallback = Callable[[PlaybackEvent], None]


class PlaybackStatus(Enum):
    IDLE = auto()
    PLAYING = auto()
    PAUSED = auto()


class PlaybackEngine:
    """
    Plays back recorded sessions.

    State machine: IDLE -> PLAYING <-> PAUSED, and back to IDLE on
    stop_playback() or when the session finishes. A COMPLETE event is
    delivered after the last recorded event, at the session's duration.

    Errors raised by the callback propagate to whoever is driving the
    scheduler; the remaining deliveries stay scheduled.
    """

    def __init__(self, scheduler: Scheduler, verbose: bool = False):
        self.scheduler = scheduler
        self.verbose = verbose

        self._status = PlaybackStatus.IDLE
        self._session: Optional[RecordingSession] = None
        self._callback: Optional[PlaybackCallback] = None
        self._events: List[PlaybackEvent] = []
        self._next_index = 0
        self._handles: List[ScheduledTask] = []
        self._speed = 1.0

        # Incremented on every start/stop so stale tasks can tell they are stale
        self._run_id = 0

        # Simulated position `_anchor_sim` corresponds to clock time `_anchor_clock`
        self._anchor_sim = 0.0
        self._anchor_clock = 0.0

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    def start_playback(
        self,
        session: RecordingSession,
        callback: PlaybackCallback,
        speed: float = 1.0
    ) -> RecorderResult:
        """
        Start playing back a recorded session.

        Any playback already running is stopped first; none of its pending
        events will reach either callback.

        Args:
            session: A stopped RecordingSession
            callback: Receives each PlaybackEvent
            speed: Playback speed multiplier (2.0 = twice as fast)

        Returns:
            RecorderResult with the initial PlaybackState, or an
            INVALID_ARGUMENT failure
        """
        if not isinstance(session, RecordingSession) or not session.is_stopped:
            return RecorderResult.fail(
                ErrorKind.INVALID_ARGUMENT, "Only stopped sessions can be played back"
            )
        if not callable(callback):
            return RecorderResult.fail(ErrorKind.INVALID_ARGUMENT, "Playback callback must be callable")
        if (isinstance(speed, bool) or not isinstance(speed, (int, float))
                or not math.isfinite(speed) or speed <= 0):
            return RecorderResult.fail(
                ErrorKind.INVALID_ARGUMENT, f"Playback speed must be a positive number, got {speed!r}"
            )

        if self._status is not PlaybackStatus.IDLE:
            self.stop_playback()

        self._run_id += 1
        self._session = session
        self._callback = callback
        self._events = merge_events(session)
        self._next_index = 0
        self._speed = float(speed)
        self._anchor_sim = 0.0
        self._anchor_clock = self.scheduler.now_ms()
        self._status = PlaybackStatus.PLAYING
        self._schedule_remaining()

        if self.verbose:
            print(f"[INFO] Started playback of {session.id}: {len(self._events)} events, "
                  f"{session.duration:.0f}ms at {self._speed}x")
        return RecorderResult.ok(self.get_playback_state())

    def pause_playback(self):
        """Pause playback, keeping the position. No-op unless playing."""
        if self._status is not PlaybackStatus.PLAYING:
            return
        self._anchor_sim = self._simulated_now()
        self._cancel_handles()
        self._status = PlaybackStatus.PAUSED

    def resume_playback(self):
        """Resume a paused playback. No-op unless paused."""
        if self._status is not PlaybackStatus.PAUSED:
            return
        self._anchor_clock = self.scheduler.now_ms()
        self._status = PlaybackStatus.PLAYING
        self._schedule_remaining()

    def stop_playback(self):
        """Stop playback. Safe to call at any time."""
        if self._status is PlaybackStatus.IDLE:
            return
        if self._status is PlaybackStatus.PLAYING:
            self._anchor_sim = self._simulated_now()
        self._cancel_handles()
        self._run_id += 1
        self._status = PlaybackStatus.IDLE
        self._callback = None

        if self.verbose:
            print("[INFO] Stopped playback")

    def get_playback_state(self) -> PlaybackState:
        """Get a snapshot of the playback state."""
        current = self._simulated_now() if self._status is PlaybackStatus.PLAYING else self._anchor_sim
        return PlaybackState(
            is_playing=self._status is not PlaybackStatus.IDLE,
            is_paused=self._status is PlaybackStatus.PAUSED,
            current_time=current,
            speed=self._speed,
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _simulated_now(self) -> float:
        elapsed = (self.scheduler.now_ms() - self._anchor_clock) * self._speed
        position = self._anchor_sim + max(0.0, elapsed)
        if self._session is not None:
            position = min(position, self._session.duration)
        return position

    def _due_at(self, timestamp_ms: float) -> float:
        return self._anchor_clock + max(0.0, timestamp_ms - self._anchor_sim) / self._speed

    def _schedule_remaining(self):
        run_id = self._run_id
        for index in range(self._next_index, len(self._events)):
            due = self._due_at(self._events[index].timestamp_ms)
            self._handles.append(self.scheduler.call_at(due, self._deliver, run_id, index))
        self._handles.append(
            self.scheduler.call_at(self._due_at(self._session.duration), self._complete, run_id)
        )

    def _cancel_handles(self):
        for handle in self._handles:
            handle.cancel()
        self._handles = []

    def _deliver(self, run_id: int, index: int):
        if run_id != self._run_id or self._status is not PlaybackStatus.PLAYING:
            return
        if index != self._next_index:
            return
        self._next_index = index + 1
        self._callback(self._events[index])

    def _complete(self, run_id: int):
        if run_id != self._run_id or self._status is not PlaybackStatus.PLAYING:
            return
        duration = self._session.duration
        callback = self._callback
        self._anchor_sim = duration
        self._handles = []
        self._run_id += 1
        self._status = PlaybackStatus.IDLE
        self._callback = None

        if self.verbose:
            print("[INFO] Playback complete")
        callback(PlaybackEvent(PlaybackEventType.COMPLETE, None, duration))
