"""
Session Module - Recorded Events and Sessions
=============================================
Value objects for a recorded session: gestures, generations, session
metadata and playback state. Finalized sessions are frozen; the serializer
rebuilds new objects rather than mutating them.

Dict conversion uses the camelCase keys of the export format.
"""

import copy
import math
import platform
import time
import uuid
from typing import Optional, Tuple, Dict, Any, List
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

import numpy as np

from . import __version__
from .gesture_logic import GestureType
from .hand_tracking import Landmark, normalize_handedness
from .image_generator import PromptSnapshot


# Export format version; bump the major number on incompatible changes
RECORDING_VERSION = '1.0.0'


class SessionState(Enum):
    RECORDING = 'recording'
    STOPPED = 'stopped'


def generate_session_id() -> str:
    """Generate a unique session id."""
    return f"session-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def _require_number(data: Dict[str, Any], key: str) -> float:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number")
    return float(value)


def json_safe(value: Any) -> Any:
    """
    Copy a captured value into plain JSON types.

    Tuples become lists and numpy scalars and arrays become Python values,
    so the copy exports and imports back unchanged.

    Raises:
        TypeError: for values JSON cannot hold, or non-string dict keys
        ValueError: for NaN or infinite floats
    """
    if isinstance(value, np.ndarray):
        return json_safe(value.tolist())
    if isinstance(value, np.generic):
        return json_safe(value.item())
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Cannot store non-finite number {value!r}")
        return value
    if isinstance(value, dict):
        safe = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Keys must be strings, got {key!r}")
            safe[key] = json_safe(item)
        return safe
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    raise TypeError(f"Cannot store value of type {type(value).__name__}")


def _check_timeline(timestamps: List[float]):
    """Timestamps must be non-negative and non-decreasing."""
    previous = 0.0
    for ts in timestamps:
        if ts < previous:
            raise ValueError("Event timestamps must be non-negative and in order")
        previous = ts


@dataclass(frozen=True)
class RecordedGesture:
    """
    A gesture captured during a session.

    Attributes:
        type: Classified gesture
        landmarks: Hand landmarks at the time of the gesture
        timestamp_ms: Milliseconds since the session started
        absolute_timestamp_ms: Epoch milliseconds when it was captured
        handedness: 'Left', 'Right' or None when unknown
        metadata: Classifier extras (confidence, angles, ...)
    """
    type: GestureType
    landmarks: Tuple[Landmark, ...]
    timestamp_ms: float
    absolute_timestamp_ms: float = 0.0
    handedness: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'landmarks': [lm.to_dict() for lm in self.landmarks],
            'timestamp': self.timestamp_ms,
            'absoluteTimestamp': self.absolute_timestamp_ms,
            'handedness': self.handedness,
            'metadata': copy.deepcopy(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecordedGesture':
        """
        Raises:
            ValueError, KeyError, TypeError: for malformed entries
        """
        landmarks = data['landmarks']
        if not isinstance(landmarks, list):
            raise ValueError("'landmarks' must be a list")
        metadata = data.get('metadata') or {}
        if not isinstance(metadata, dict):
            raise ValueError("'metadata' must be an object")
        handedness = data.get('handedness')
        if handedness is not None and normalize_handedness(handedness) is None:
            raise ValueError(f"Unknown handedness {handedness!r}")
        return cls(
            type=GestureType.parse(data['type']),
            landmarks=tuple(Landmark.from_value(lm) for lm in landmarks),
            timestamp_ms=_require_number(data, 'timestamp'),
            absolute_timestamp_ms=float(data.get('absoluteTimestamp', 0)),
            handedness=normalize_handedness(handedness),
            metadata=metadata,
        )


@dataclass(frozen=True)
class RecordedGeneration:
    """A completed generation captured during a session."""
    image_url: str
    prompt_snapshot: PromptSnapshot
    timestamp_ms: float
    absolute_timestamp_ms: float = 0.0
    seed: Optional[int] = None
    request_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'imageUrl': self.image_url,
            'prompt': copy.deepcopy(self.prompt_snapshot),
            'timestamp': self.timestamp_ms,
            'absoluteTimestamp': self.absolute_timestamp_ms,
            'seed': self.seed,
            'requestId': self.request_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecordedGeneration':
        image_url = data['imageUrl']
        if not isinstance(image_url, str):
            raise ValueError("'imageUrl' must be a string")
        prompt = data.get('prompt', '')
        if prompt is not None and not isinstance(prompt, (dict, str)):
            raise ValueError("'prompt' must be an object, string or null")
        seed = data.get('seed')
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise ValueError("'seed' must be an integer")
        return cls(
            image_url=image_url,
            prompt_snapshot=prompt,
            timestamp_ms=_require_number(data, 'timestamp'),
            absolute_timestamp_ms=float(data.get('absoluteTimestamp', 0)),
            seed=seed,
            request_id=data.get('requestId'),
        )


@dataclass(frozen=True)
class SessionMetadata:
    version: str
    client_info: str
    recorded_at: str  # ISO-8601 start time

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'userAgent': self.client_info,
            'recordedAt': self.recorded_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionMetadata':
        return cls(
            version=str(data.get('version', RECORDING_VERSION)),
            client_info=str(data.get('userAgent', 'unknown')),
            recorded_at=str(data.get('recordedAt', '')),
        )

    @classmethod
    def create(cls, client_info: str, start_time_ms: float) -> 'SessionMetadata':
        recorded_at = datetime.fromtimestamp(start_time_ms / 1000.0, tz=timezone.utc)
        return cls(
            version=RECORDING_VERSION,
            client_info=client_info,
            recorded_at=recorded_at.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
        )


def default_client_info() -> str:
    """Client descriptor stored as the session's userAgent."""
    return f"SculptNet/{__version__} (Python {platform.python_version()}; {platform.system()})"


@dataclass(frozen=True)
class RecordingSession:
    """
    A bounded capture of gesture and generation events.

    Attributes:
        id: Unique session id, fixed at start
        gestures: Gestures in capture order
        generations: Generations in capture order
        metadata: Version, client descriptor and start time
        duration: Length of the session in milliseconds
        state: RECORDING for live snapshots, STOPPED once finalized
        start_time: Epoch milliseconds when recording started
        end_time: Epoch milliseconds when recording stopped
    """
    id: str
    gestures: Tuple[RecordedGesture, ...]
    generations: Tuple[RecordedGeneration, ...]
    metadata: SessionMetadata
    duration: float
    state: SessionState = SessionState.STOPPED
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def is_stopped(self) -> bool:
        return self.state is SessionState.STOPPED

    @property
    def event_count(self) -> int:
        return len(self.gestures) + len(self.generations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'duration': self.duration,
            'gestures': [g.to_dict() for g in self.gestures],
            'generations': [g.to_dict() for g in self.generations],
            'metadata': self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecordingSession':
        """
        Rebuild a stopped session from its exported dict.

        Raises:
            ValueError, KeyError, TypeError, OverflowError: for malformed input
        """
        session_id = data.get('id')
        if not isinstance(session_id, str) or not session_id:
            raise ValueError("'id' must be a non-empty string")
        gestures = data.get('gestures')
        generations = data.get('generations')
        if not isinstance(gestures, list) or not isinstance(generations, list):
            raise ValueError("'gestures' and 'generations' must be lists")
        metadata = data.get('metadata') or {}
        if not isinstance(metadata, dict):
            raise ValueError("'metadata' must be an object")

        recorded_gestures = tuple(RecordedGesture.from_dict(g) for g in gestures)
        recorded_generations = tuple(RecordedGeneration.from_dict(g) for g in generations)

        for stream in (recorded_gestures, recorded_generations):
            _check_timeline([event.timestamp_ms for event in stream])

        last_event = max(
            [g.timestamp_ms for g in recorded_gestures] +
            [g.timestamp_ms for g in recorded_generations],
            default=0.0
        )
        duration = _require_number(data, 'duration') if 'duration' in data else last_event
        if duration < last_event:
            raise ValueError("Events extend past the session duration")
        start_time = float(data.get('startTime', 0))

        return cls(
            id=session_id,
            gestures=recorded_gestures,
            generations=recorded_generations,
            metadata=SessionMetadata.from_dict(metadata),
            duration=duration,
            state=SessionState.STOPPED,
            start_time=start_time,
            end_time=float(data.get('endTime', start_time + duration)),
        )


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of the playback engine."""
    is_playing: bool = False
    is_paused: bool = False
    current_time: float = 0.0  # Simulated elapsed milliseconds
    speed: float = 1.0


class PlaybackEventType(Enum):
    GESTURE = 'gesture'
    GENERATION = 'generation'
    COMPLETE = 'complete'


@dataclass(frozen=True)
class PlaybackEvent:
    """
    One event handed to a playback or live-feed consumer.

    `data` is None for COMPLETE events.
    """
    type: PlaybackEventType
    data: Optional[Any]
    timestamp_ms: float


def merge_events(session: RecordingSession) -> List[PlaybackEvent]:
    """
    Interleave gestures and generations by timestamp.

    The sort is stable, so on equal timestamps gestures come before
    generations and each stream keeps its capture order.
    """
    events = [PlaybackEvent(PlaybackEventType.GESTURE, g, g.timestamp_ms) for g in session.gestures]
    events.extend(
        PlaybackEvent(PlaybackEventType.GENERATION, g, g.timestamp_ms) for g in session.generations
    )
    events.sort(key=lambda event: event.timestamp_ms)
    return events
