"""
Gesture Logic Module - Gesture Vocabulary
=========================================
Gesture kinds reported by the classifier and the detection record that
reaches the recorder for each recognized gesture.
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass, field
from enum import Enum

from .hand_tracking import HandData


class GestureType(Enum):
    """Gestures the classifier can report."""
    PINCH = 'pinch'                           # Thumb + index pinch
    WRIST_ROTATION = 'wrist_rotation'         # Rotating the wrist
    VERTICAL_MOVEMENT = 'vertical_movement'   # Hand moving up or down
    TWO_HAND_FRAME = 'two_hand_frame'         # Both hands framing a region
    FIST_TO_OPEN = 'fist_to_open'             # Closed fist opening
    HAND_DETECTED = 'hand_detected'
    HAND_LOST = 'hand_lost'

    @classmethod
    def parse(cls, value: Any) -> 'GestureType':
        """
        Resolve a GestureType from an enum member or its string value.

        Raises:
            ValueError: for unknown gesture names
        """
        if isinstance(value, cls):
            return value
        return cls(str(value))


@dataclass
class GestureDetection:
    """
    A classified gesture for one hand in one frame.

    Attributes:
        gesture: The classified gesture
        hand: Landmarks and handedness for the hand
        confidence: Classifier confidence (0-1)
        metadata: Extra values from the classifier (rotation angle, etc.)
    """
    gesture: GestureType
    hand: HandData
    confidence: float = 1.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def recorded_metadata(self) -> Optional[Dict[str, Any]]:
        """Metadata stored with the recorded gesture, confidence included."""
        merged = dict(self.metadata)
        merged.setdefault('confidence', self.confidence)
        return merged
