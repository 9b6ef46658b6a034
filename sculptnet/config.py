"""
Configuration for the recorder and its command-line tools.

Values come from environment variables, optionally loaded from a .env file.

Environment Variables:
    SCULPTNET_CLIENT_INFO: Client descriptor stored in exported sessions
    SCULPTNET_EXPORT_DIR: Directory for saved sessions (default: output)
    SCULPTNET_PLAYBACK_SPEED: Default replay speed (default: 1.0)
    SCULPTNET_VERBOSE: Print [INFO] status lines (default: 1)
"""

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from .session import default_client_info


DEFAULT_EXPORT_DIR = 'output'
DEFAULT_PLAYBACK_SPEED = 1.0


@dataclass
class RecorderConfig:
    client_info: str
    export_dir: Path
    playback_speed: float = DEFAULT_PLAYBACK_SPEED
    verbose: bool = True


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _parse_speed(value: Optional[str]) -> float:
    if not value:
        return DEFAULT_PLAYBACK_SPEED
    try:
        speed = float(value)
    except ValueError:
        speed = float('nan')
    if not math.isfinite(speed) or speed <= 0:
        print(f"[WARNING] Ignoring invalid SCULPTNET_PLAYBACK_SPEED={value!r}, using {DEFAULT_PLAYBACK_SPEED}")
        return DEFAULT_PLAYBACK_SPEED
    return speed


def load_config(env_file: Optional[Union[str, Path]] = None) -> RecorderConfig:
    """
    Build the configuration from the environment.

    Args:
        env_file: Optional .env file to load first; existing environment
            variables take precedence over values in the file
    """
    if env_file is not None:
        load_dotenv(env_file)

    return RecorderConfig(
        client_info=os.environ.get('SCULPTNET_CLIENT_INFO') or default_client_info(),
        export_dir=Path(os.environ.get('SCULPTNET_EXPORT_DIR') or DEFAULT_EXPORT_DIR),
        playback_speed=_parse_speed(os.environ.get('SCULPTNET_PLAYBACK_SPEED')),
        verbose=_parse_bool(os.environ.get('SCULPTNET_VERBOSE', '1')),
    )
