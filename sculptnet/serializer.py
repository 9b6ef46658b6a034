"""
Serializer Module - Session Export and Import
=============================================
Converts sessions to JSON text and back, and saves/loads session files.

Import never raises for bad input: every failure is returned as an
IMPORT_FAILED RecorderResult whose message starts with
"Failed to import session".
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .errors import RecorderResult, ErrorKind, IMPORT_FAILED_MESSAGE
from .session import RecordingSession, RECORDING_VERSION


def _major(version: str) -> int:
    return int(str(version).split('.')[0])


SUPPORTED_MAJOR_VERSION = _major(RECORDING_VERSION)


def export_session_json(session: RecordingSession) -> str:
    """
    Export a session as JSON.

    The key order is fixed, so the same session always produces the same text.
    """
    return json.dumps(session.to_dict(), indent=2, ensure_ascii=False)


def _import_failed(reason: str) -> RecorderResult:
    return RecorderResult.fail(ErrorKind.IMPORT_FAILED, f"{IMPORT_FAILED_MESSAGE}: {reason}")


def import_session_json(text: Union[str, bytes]) -> RecorderResult:
    """
    Import a session from JSON.

    Args:
        text: JSON produced by export_session_json

    Returns:
        RecorderResult holding a stopped RecordingSession
    """
    try:
        data = json.loads(text)
    except (ValueError, TypeError, RecursionError) as e:
        return _import_failed(f"invalid JSON ({e})")

    if not isinstance(data, dict):
        return _import_failed("expected a JSON object")
    if not data.get('id') or 'gestures' not in data or 'generations' not in data:
        return _import_failed("invalid session structure")

    metadata = data.get('metadata')
    if isinstance(metadata, dict) and 'version' in metadata:
        try:
            major = _major(metadata['version'])
        except ValueError:
            return _import_failed(f"unreadable version {metadata['version']!r}")
        if major > SUPPORTED_MAJOR_VERSION:
            return _import_failed(f"unsupported recording version {metadata['version']}")

    try:
        session = RecordingSession.from_dict(data)
    except (ValueError, KeyError, TypeError, OverflowError) as e:
        return _import_failed(f"invalid session structure ({e})")
    return RecorderResult.ok(session)


def generate_filename(session: RecordingSession, extension: str = 'json') -> str:
    """Filename for a session export, stamped with the session's local start time."""
    started = datetime.fromtimestamp(session.start_time / 1000.0)
    return f"sculptnet-session-{started.strftime('%Y-%m-%d-%H-%M-%S')}.{extension}"


def save_session(
    session: RecordingSession,
    directory: Union[str, Path] = 'output',
    filename: Optional[str] = None
) -> Path:
    """
    Write a session export to disk.

    Args:
        session: Session to save
        directory: Target directory, created if missing
        filename: Optional filename (default: generate_filename(session))

    Returns:
        Path of the written file
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (filename or generate_filename(session))
    path.write_text(export_session_json(session), encoding='utf-8')
    return path


def load_session(path: Union[str, Path]) -> RecorderResult:
    """Read and import a session file."""
    try:
        text = Path(path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        return _import_failed(f"cannot read {path} ({e})")
    return import_session_json(text)
