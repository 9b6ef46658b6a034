"""
Live event feed.

Wraps the live hand-tracking and generation callbacks so downstream code
receives the same PlaybackEvent objects it gets during playback. Events
are recorded into the recorder on the way through when a recording is
active.
"""

import time
from typing import Optional

from .gesture_logic import GestureDetection
from .image_generator import GenerationResult
from .playback import PlaybackCallback
from .recorder import SessionRecorder, prepare_gesture, prepare_generation
from .session import (
    PlaybackEvent, PlaybackEventType, RecordedGesture, RecordedGeneration
)


class LiveEventFeed:
    """
    Forward live detections to a consumer and a recorder.

    Usage:
        feed = LiveEventFeed(recorder, scene.apply_event)
        # In the tracking loop:
        feed.on_gesture(detection)
        # From the generation client:
        feed.on_generation(result)

    While a recording is active the consumer receives the recorded event
    itself, timestamped from the recording's start. Otherwise timestamps
    are milliseconds since the feed was created. Input the recorder would
    drop is not forwarded either.
    """

    def __init__(self, recorder: SessionRecorder, consumer: Optional[PlaybackCallback] = None):
        self.recorder = recorder
        self.consumer = consumer
        self._origin_ms = recorder.clock.now_ms()

    def set_consumer(self, consumer: Optional[PlaybackCallback]):
        self.consumer = consumer

    def _elapsed_ms(self) -> float:
        return self.recorder.clock.now_ms() - self._origin_ms

    def on_gesture(self, detection: GestureDetection):
        """Handle one classified gesture from the tracking loop."""
        hand = detection.hand
        metadata = detection.recorded_metadata()
        gesture = self.recorder.record_gesture(detection.gesture, hand.landmarks, hand.handedness, metadata)
        if self.consumer is None:
            return
        if gesture is None:
            try:
                kind, points, handedness, extra = prepare_gesture(
                    detection.gesture, hand.landmarks, hand.handedness, metadata
                )
            except (ValueError, TypeError):
                return
            gesture = RecordedGesture(
                type=kind,
                landmarks=points,
                timestamp_ms=self._elapsed_ms(),
                absolute_timestamp_ms=time.time() * 1000.0,
                handedness=handedness,
                metadata=extra,
            )
        self.consumer(PlaybackEvent(PlaybackEventType.GESTURE, gesture, gesture.timestamp_ms))

    def on_generation(self, result: GenerationResult):
        """Handle one completed generation."""
        generation = self.recorder.record_generation(result)
        if self.consumer is None:
            return
        if generation is None:
            try:
                image_url, prompt, seed, request_id = prepare_generation(result)
                absolute_ms = float(result.timestamp)
            except (AttributeError, TypeError, ValueError):
                return
            generation = RecordedGeneration(
                image_url=image_url,
                prompt_snapshot=prompt,
                timestamp_ms=self._elapsed_ms(),
                absolute_timestamp_ms=absolute_ms,
                seed=seed,
                request_id=request_id,
            )
        self.consumer(PlaybackEvent(PlaybackEventType.GENERATION, generation, generation.timestamp_ms))
