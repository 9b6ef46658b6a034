# SculptNet - Gesture Session Recording and Playback
# Author: SculptNet Team
# Version: 1.0.0

"""
Core modules for recording and replaying gesture sculpting sessions:
- hand_tracking: Landmark types shared with the hand tracker
- gesture_logic: Gesture vocabulary and detections
- image_generator: Generation results from the image client
- session: Recorded events, sessions and playback state
- scheduler: Clocks and cancellable scheduled callbacks
- recorder: Session capture
- playback: Timed session replay
- serializer: JSON export/import and session files
- registry: Shared and isolated recorder instances
- event_feed: Live events in the same shape as playback events
- config: Environment configuration
- ui: Command-line interface
"""

__version__ = "1.0.0"
__author__ = "SculptNet Team"

from .errors import ErrorKind, RecorderError, RecorderResult
from .gesture_logic import GestureType, GestureDetection
from .hand_tracking import HandData, HandLandmark, Landmark
from .image_generator import GenerationResult
from .session import (
    RecordedGesture, RecordedGeneration, RecordingSession, SessionMetadata,
    SessionState, PlaybackState, PlaybackEvent, PlaybackEventType
)
from .scheduler import Clock, MonotonicClock, ManualClock, Scheduler, ScheduledTask
from .playback import PlaybackEngine, PlaybackStatus
from .recorder import SessionRecorder
from .serializer import export_session_json, import_session_json, save_session, load_session
from .registry import SessionRegistry, get_session_recorder, create_session_recorder
from .event_feed import LiveEventFeed
