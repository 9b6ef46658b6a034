"""
Recorder Module - Session Capture
=================================
Captures gesture and generation events with timestamps relative to the
start of a recording session, and finalizes them into a frozen
RecordingSession.

Capture calls are made from the live tracking loop and from generation
callbacks, so they never raise and hold the lock only long enough to
append one event.
"""

import threading
import time
from typing import Optional, List, Dict, Any, Callable, Tuple

from .errors import RecorderResult, ErrorKind, NOT_RECORDING_MESSAGE
from .gesture_logic import GestureType
from .hand_tracking import Landmark, LandmarkInput, coerce_landmarks, normalize_handedness
from .image_generator import GenerationResult, PromptSnapshot
from .playback import PlaybackEngine, PlaybackCallback
from .scheduler import Clock, MonotonicClock, Scheduler
from .session import (
    RecordedGesture, RecordedGeneration, RecordingSession, SessionMetadata,
    SessionState, PlaybackState, default_client_info, generate_session_id, json_safe
)


def _epoch_ms() -> float:
    return time.time() * 1000.0


def prepare_gesture(
    gesture_type,
    landmarks: LandmarkInput,
    handedness: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Tuple[GestureType, Tuple[Landmark, ...], Optional[str], Dict[str, Any]]:
    """
    Copy one gesture's inputs into the values a RecordedGesture stores.

    Raises:
        ValueError, TypeError: for input that cannot be recorded
    """
    return (
        GestureType.parse(gesture_type),
        tuple(coerce_landmarks(landmarks)),
        normalize_handedness(handedness),
        json_safe(dict(metadata)) if metadata else {},
    )


def prepare_generation(
    result: GenerationResult
) -> Tuple[str, PromptSnapshot, Optional[int], Optional[str]]:
    """
    Copy a generation result into the values a RecordedGeneration stores.

    Raises:
        AttributeError, TypeError, ValueError: for results that cannot be recorded
    """
    prompt = json_safe(result.prompt)
    if prompt is not None and not isinstance(prompt, (dict, str)):
        raise TypeError("Prompt must be a dict, a string or None")
    seed = json_safe(result.seed)
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise TypeError("Seed must be an integer")
    request_id = result.request_id
    return str(result.image_url), prompt, seed, None if request_id is None else str(request_id)


class SessionRecorder:
    """
    Records one gesture sculpting session at a time and plays sessions back.

    Usage:
        recorder = SessionRecorder()
        recorder.start_recording()
        # From the tracking loop and generation callbacks:
        recorder.record_gesture(GestureType.PINCH, hand.landmarks, hand.handedness)
        recorder.record_generation(result)
        # When done:
        session = recorder.stop_recording().unwrap()
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        scheduler: Optional[Scheduler] = None,
        client_info: Optional[str] = None,
        wall_clock: Callable[[], float] = _epoch_ms,
        verbose: bool = False
    ):
        """
        Initialize the recorder.

        Args:
            clock: Monotonic clock for relative timestamps
            scheduler: Scheduler for playback; shares `clock` when omitted
            client_info: Client descriptor stored in session metadata
            wall_clock: Epoch-milliseconds source for absolute timestamps
            verbose: Print [INFO] lines for lifecycle changes
        """
        if scheduler is not None and clock is None:
            clock = scheduler.clock
        self.clock = clock or MonotonicClock()
        self.scheduler = scheduler or Scheduler(self.clock)
        self.client_info = client_info or default_client_info()
        self.verbose = verbose
        self._wall_clock = wall_clock

        # Active recording state, guarded by _lock
        self._lock = threading.Lock()
        self._recording = False
        self._session_id = ''
        self._start_instant = 0.0
        self._start_time = 0.0
        self._gestures: List[RecordedGesture] = []
        self._generations: List[RecordedGeneration] = []

        # Last finalized session
        self._current_session: Optional[RecordingSession] = None

        self.playback = PlaybackEngine(self.scheduler, verbose=verbose)

    # ------------------------------------------------------------------ #
    # Recording lifecycle
    # ------------------------------------------------------------------ #

    def start_recording(self):
        """Start recording a new session. Does nothing if already recording."""
        with self._lock:
            if self._recording:
                if self.verbose:
                    print("[WARNING] Recording already in progress")
                return
            self._session_id = generate_session_id()
            self._start_instant = self.clock.now_ms()
            self._start_time = self._wall_clock()
            self._gestures = []
            self._generations = []
            self._recording = True

        if self.verbose:
            print(f"[INFO] Started recording session {self._session_id}")

    def stop_recording(self) -> RecorderResult:
        """
        Stop recording and finalize the session.

        Returns:
            RecorderResult holding the RecordingSession, or an INVALID_STATE
            failure when no recording is in progress
        """
        with self._lock:
            if not self._recording:
                return RecorderResult.fail(ErrorKind.INVALID_STATE, NOT_RECORDING_MESSAGE)

            duration = self.clock.now_ms() - self._start_instant
            session = RecordingSession(
                id=self._session_id,
                gestures=tuple(self._gestures),
                generations=tuple(self._generations),
                metadata=SessionMetadata.create(self.client_info, self._start_time),
                duration=duration,
                state=SessionState.STOPPED,
                start_time=self._start_time,
                end_time=self._start_time + duration,
            )
            self._recording = False
            self._gestures = []
            self._generations = []
            self._current_session = session

        if self.verbose:
            print(f"[INFO] Stopped recording: {duration:.0f}ms, "
                  f"{len(session.gestures)} gestures, {len(session.generations)} generations")
        return RecorderResult.ok(session)

    def is_recording_active(self) -> bool:
        """Check if currently recording."""
        return self._recording

    def get_current_session(self) -> Optional[RecordingSession]:
        """Get the most recently finalized session."""
        return self._current_session

    def get_active_session(self) -> Optional[RecordingSession]:
        """Snapshot of the session being recorded, or None."""
        with self._lock:
            if not self._recording:
                return None
            elapsed = self.clock.now_ms() - self._start_instant
            return RecordingSession(
                id=self._session_id,
                gestures=tuple(self._gestures),
                generations=tuple(self._generations),
                metadata=SessionMetadata.create(self.client_info, self._start_time),
                duration=elapsed,
                state=SessionState.RECORDING,
                start_time=self._start_time,
                end_time=self._start_time + elapsed,
            )

    # ------------------------------------------------------------------ #
    # Capture
    # ------------------------------------------------------------------ #

    def record_gesture(
        self,
        gesture_type,
        landmarks: LandmarkInput,
        handedness: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Optional[RecordedGesture]:
        """
        Record a gesture event.

        Ignored when not recording, or when the gesture type, landmarks or
        metadata cannot be read.

        Args:
            gesture_type: GestureType or its string value
            landmarks: Hand landmarks (any count is accepted)
            handedness: 'Left', 'Right' or None
            metadata: Additional metadata, copied into plain JSON values

        Returns:
            The RecordedGesture that was stored, or None
        """
        if not self._recording:
            return None
        try:
            kind, points, hand, extra = prepare_gesture(gesture_type, landmarks, handedness, metadata)
        except (ValueError, TypeError):
            return None

        with self._lock:
            if not self._recording:
                return None
            gesture = RecordedGesture(
                type=kind,
                landmarks=points,
                timestamp_ms=self.clock.now_ms() - self._start_instant,
                absolute_timestamp_ms=self._wall_clock(),
                handedness=hand,
                metadata=extra,
            )
            self._gestures.append(gesture)
        return gesture

    def record_generation(self, result: GenerationResult) -> Optional[RecordedGeneration]:
        """
        Record a generation event.

        Args:
            result: Completed generation from the image-generation client

        Returns:
            The RecordedGeneration that was stored, or None
        """
        if not self._recording:
            return None
        try:
            image_url, prompt, seed, request_id = prepare_generation(result)
        except (AttributeError, TypeError, ValueError):
            return None

        with self._lock:
            if not self._recording:
                return None
            generation = RecordedGeneration(
                image_url=image_url,
                prompt_snapshot=prompt,
                timestamp_ms=self.clock.now_ms() - self._start_instant,
                absolute_timestamp_ms=self._wall_clock(),
                seed=seed,
                request_id=request_id,
            )
            self._generations.append(generation)

        if self.verbose:
            print(f"[INFO] Recorded generation {request_id} at {generation.timestamp_ms:.0f}ms")
        return generation

    # ------------------------------------------------------------------ #
    # Playback
    # ------------------------------------------------------------------ #

    def start_playback(
        self,
        session: RecordingSession,
        callback: PlaybackCallback,
        speed: float = 1.0
    ) -> RecorderResult:
        """Play back a recorded session. See PlaybackEngine.start_playback."""
        return self.playback.start_playback(session, callback, speed)

    def pause_playback(self):
        self.playback.pause_playback()

    def resume_playback(self):
        self.playback.resume_playback()

    def stop_playback(self):
        self.playback.stop_playback()

    def get_playback_state(self) -> PlaybackState:
        return self.playback.get_playback_state()
