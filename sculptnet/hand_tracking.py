"""
Hand Tracking Module - Landmark Types
=====================================
Data types shared with the hand-tracking collaborator.
A detected hand carries 21 normalized 3D landmarks and a handedness label.

Landmark extraction itself happens upstream; this module only describes
what arrives and converts between landmark lists and numpy arrays.
"""

import numpy as np
from typing import Optional, List, Dict, Any, Sequence, Union
from dataclasses import dataclass
from enum import IntEnum


# Number of landmarks the tracker reports per hand
LANDMARK_COUNT = 21

# Handedness labels reported by the tracker
LEFT = 'Left'
RIGHT = 'Right'
HANDEDNESS_VALUES = (LEFT, RIGHT)


class HandLandmark(IntEnum):
    """
    MediaPipe hand landmark indices.
    Reference: https://mediapipe.dev/images/mobile/hand_landmarks.png
    """
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


@dataclass(frozen=True)
class Landmark:
    """A single normalized 3D landmark."""
    x: float  # Normalized x (0-1 by image width)
    y: float  # Normalized y (0-1 by image height)
    z: float  # Depth relative to wrist

    def distance_to(self, other: 'Landmark') -> float:
        """Calculate Euclidean distance to another landmark."""
        return float(np.linalg.norm(
            np.array([self.x - other.x, self.y - other.y, self.z - other.z])
        ))

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'z': self.z}

    @classmethod
    def from_value(cls, value: Any) -> 'Landmark':
        """
        Build a landmark from any of the shapes collaborators hand us.

        Accepts a Landmark, a mapping with x/y/z keys, or an (x, y, z) sequence.

        Raises:
            ValueError: if the value cannot be read as a 3D point
        """
        if isinstance(value, Landmark):
            return value
        if isinstance(value, dict):
            try:
                return cls(float(value['x']), float(value['y']), float(value['z']))
            except KeyError as e:
                raise ValueError(f"Landmark missing coordinate {e}") from e
        try:
            coords = [float(c) for c in value]
        except TypeError as e:
            raise ValueError(f"Not a landmark: {value!r}") from e
        if len(coords) != 3:
            raise ValueError(f"Landmark needs 3 coordinates, got {len(coords)}")
        return cls(coords[0], coords[1], coords[2])


LandmarkInput = Union[np.ndarray, Sequence[Any]]


@dataclass
class HandData:
    """
    Contains all data for a detected hand.

    Attributes:
        landmarks: Ordered landmarks, indexed by HandLandmark
        handedness: 'Left', 'Right' or None when unknown
        confidence: Detection confidence score
    """
    landmarks: List[Landmark]
    handedness: Optional[str] = None
    confidence: float = 1.0

    def get_landmark(self, landmark: HandLandmark) -> Optional[Landmark]:
        """Get a specific landmark point."""
        if 0 <= landmark < len(self.landmarks):
            return self.landmarks[landmark]
        return None

    def get_fingertip(self, finger: str) -> Optional[Landmark]:
        """
        Get fingertip point by finger name.

        Args:
            finger: One of 'thumb', 'index', 'middle', 'ring', 'pinky'
        """
        finger_map = {
            'thumb': HandLandmark.THUMB_TIP,
            'index': HandLandmark.INDEX_TIP,
            'middle': HandLandmark.MIDDLE_TIP,
            'ring': HandLandmark.RING_TIP,
            'pinky': HandLandmark.PINKY_TIP
        }
        landmark = finger_map.get(finger.lower())
        return self.get_landmark(landmark) if landmark is not None else None

    def is_complete(self) -> bool:
        """True when the tracker delivered the full landmark set."""
        return len(self.landmarks) == LANDMARK_COUNT


def normalize_handedness(value: Optional[str]) -> Optional[str]:
    """Map a handedness label to 'Left', 'Right' or None (unknown)."""
    if value is None:
        return None
    label = str(value).strip().capitalize()
    return label if label in HANDEDNESS_VALUES else None


def coerce_landmarks(landmarks: LandmarkInput) -> List[Landmark]:
    """
    Copy landmarks from whatever the tracker produced into a list.

    The landmark count is passed through as given.

    Raises:
        ValueError: if any entry is not a 3D point
    """
    if isinstance(landmarks, np.ndarray):
        return landmarks_from_array(landmarks)
    return [Landmark.from_value(lm) for lm in landmarks]


def landmarks_to_array(landmarks: Sequence[Landmark]) -> np.ndarray:
    """Stack landmarks into an (N, 3) float array."""
    if not landmarks:
        return np.zeros((0, 3), dtype=np.float64)
    return np.array([[lm.x, lm.y, lm.z] for lm in landmarks], dtype=np.float64)


def landmarks_from_array(array: np.ndarray) -> List[Landmark]:
    """
    Convert an (N, 3) array into landmarks.

    Raises:
        ValueError: if the array is not two-dimensional with 3 columns
    """
    points = np.asarray(array, dtype=np.float64)
    if points.size == 0:
        return []
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Expected an (N, 3) array, got shape {points.shape}")
    return [Landmark(float(x), float(y), float(z)) for x, y, z in points]
