"""
Image Generator Module - Generation Results
===========================================
Shape of a completed generation as delivered by the image-generation client.
The client itself lives outside this package.
"""

from typing import Optional, Dict, Any, Union
from dataclasses import dataclass


PromptSnapshot = Optional[Union[Dict[str, Any], str]]


@dataclass
class GenerationResult:
    """Result of a completed generation request."""
    image_url: str
    prompt: PromptSnapshot   # Structured prompt, plain text, or None when unknown
    timestamp: float         # Epoch milliseconds when the result arrived
    seed: Optional[int] = None
    request_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GenerationResult':
        """Build a result from the client's camelCase payload."""
        return cls(
            image_url=data['imageUrl'],
            prompt=data.get('prompt', ''),
            timestamp=float(data.get('timestamp', 0)),
            seed=data.get('seed'),
            request_id=data.get('requestId')
        )
