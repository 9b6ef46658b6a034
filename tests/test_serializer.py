"""Tests for session export/import."""
import json

import numpy as np
import pytest

from sculptnet.errors import ErrorKind, RecorderError
from sculptnet.gesture_logic import GestureType
from sculptnet.serializer import (
    export_session_json, import_session_json, generate_filename, save_session, load_session
)
from sculptnet.session import SessionState


@pytest.fixture
def session(recorder, clock, landmarks, make_generation):
    recorder.start_recording()
    clock.advance(12.5)
    recorder.record_gesture(GestureType.PINCH, landmarks, 'Right', {'confidence': 0.93, 'tags': ['a', 'b']})
    clock.advance(40)
    recorder.record_generation(make_generation(7, seed=42))
    clock.advance(7.25)
    recorder.record_gesture(GestureType.HAND_LOST, [], None)
    clock.advance(100)
    return recorder.stop_recording().unwrap()


def test_export_is_json_with_expected_keys(session):
    parsed = json.loads(export_session_json(session))

    assert parsed['id'] == session.id
    assert set(parsed) == {'id', 'startTime', 'endTime', 'duration', 'gestures', 'generations', 'metadata'}
    assert parsed['duration'] == session.duration
    assert parsed['metadata'] == {
        'version': '1.0.0', 'userAgent': 'SculptNet/test', 'recordedAt': session.metadata.recorded_at
    }
    gesture = parsed['gestures'][0]
    assert gesture['type'] == 'pinch'
    assert gesture['timestamp'] == 12.5
    assert len(gesture['landmarks']) == 21
    assert gesture['landmarks'][1] == {'x': 0.05, 'y': 0.05, 'z': 0.0}
    generation = parsed['generations'][0]
    assert generation['imageUrl'] == 'https://example.com/image-7.png'
    assert generation['prompt'] == {'short_description': 'test', 'lighting': {'mood': 'warm'}}
    assert generation['seed'] == 42
    assert generation['requestId'] == 'req-7'


def test_export_is_deterministic(session):
    assert export_session_json(session) == export_session_json(session)


def test_round_trip_preserves_session(session):
    result = import_session_json(export_session_json(session))

    assert result.success
    imported = result.value
    assert imported is not session
    assert imported.id == session.id
    assert imported.gestures == session.gestures
    assert imported.generations == session.generations
    assert imported == session
    assert imported.state is SessionState.STOPPED


def test_round_trip_of_empty_session(recorder):
    recorder.start_recording()
    session = recorder.stop_recording().unwrap()

    imported = import_session_json(export_session_json(session)).unwrap()
    assert imported == session


@pytest.mark.parametrize("text", [
    "invalid json",
    '{"foo":"bar"}',
    '[]',
    '"session"',
    '{"id": "", "gestures": [], "generations": []}',
    '{"id": "s1", "gestures": {}, "generations": []}',
    '{"id": "s1", "gestures": [], "generations": null}',
    '{"id": 7, "gestures": [], "generations": []}',
    '{"id": "s1", "gestures": [{"type": "moonwalk", "landmarks": [], "timestamp": 1}], "generations": []}',
    '{"id": "s1", "gestures": [{"type": "pinch", "landmarks": [[1, 2]], "timestamp": 1}], "generations": []}',
    '{"id": "s1", "gestures": [{"type": "pinch", "landmarks": []}], "generations": []}',
    '{"id": "s1", "gestures": [], "generations": [{"prompt": "x", "timestamp": 1}]}',
    '{"id": "s1", "gestures": [], "generations": [{"imageUrl": "u", "timestamp": "soon"}]}',
])
def test_malformed_input_fails_to_import(text):
    result = import_session_json(text)

    assert not result.success
    assert result.error_kind is ErrorKind.IMPORT_FAILED
    assert result.error.startswith("Failed to import session")
    with pytest.raises(RecorderError, match="Failed to import session"):
        result.unwrap()


HUGE_NUMBER = '1' + '0' * 400


@pytest.mark.parametrize("text", [
    '{"id": "s1", "gestures": [], "generations": [], "metadata": ' + '[' * 100000 + ']' * 100000 + '}',
    '{"id": "s1", "gestures": [], "generations": [], "startTime": ' + HUGE_NUMBER + '}',
    '{"id": "s1", "gestures": [], "generations": [], "duration": ' + HUGE_NUMBER + '}',
    '{"id": "s1", "gestures": [{"type": "pinch", "landmarks": [], "timestamp": ' + HUGE_NUMBER + '}],'
    ' "generations": []}',
    '{"id": "s1", "gestures": [], "generations": [{"imageUrl": "u", "timestamp": 1,'
    ' "absoluteTimestamp": ' + HUGE_NUMBER + '}]}',
], ids=['deeply-nested', 'huge-start-time', 'huge-duration', 'huge-timestamp', 'huge-absolute-timestamp'])
def test_pathological_input_fails_to_import(text):
    result = import_session_json(text)

    assert result.error_kind is ErrorKind.IMPORT_FAILED
    assert result.error.startswith("Failed to import session")


def test_round_trip_with_missing_prompt(recorder, make_generation):
    generation = make_generation(2)
    generation.prompt = None
    recorder.start_recording()
    recorder.record_generation(generation)
    session = recorder.stop_recording().unwrap()

    assert json.loads(export_session_json(session))['generations'][0]['prompt'] is None
    imported = import_session_json(export_session_json(session)).unwrap()
    assert imported == session
    assert imported.generations[0].prompt_snapshot is None


def test_round_trip_with_tuple_and_numpy_metadata(recorder, clock, landmarks):
    recorder.start_recording()
    clock.advance(5)
    recorder.record_gesture('pinch', landmarks, 'Left', {
        'bbox': (1, 2),
        'confidence': np.float32(0.5),
        'angles': np.array([0.25, 0.75]),
        'open': np.bool_(True),
    })
    session = recorder.stop_recording().unwrap()

    assert session.gestures[0].metadata == {'bbox': [1, 2], 'confidence': 0.5, 'angles': [0.25, 0.75], 'open': True}
    imported = import_session_json(export_session_json(session)).unwrap()
    assert imported.gestures == session.gestures


def test_out_of_order_events_are_rejected():
    text = json.dumps({
        'id': 's1',
        'duration': 100,
        'gestures': [
            {'type': 'pinch', 'landmarks': [], 'timestamp': 50},
            {'type': 'pinch', 'landmarks': [], 'timestamp': 20},
        ],
        'generations': [],
    })
    assert import_session_json(text).error_kind is ErrorKind.IMPORT_FAILED


def test_events_past_duration_are_rejected():
    text = json.dumps({
        'id': 's1',
        'duration': 10,
        'gestures': [{'type': 'pinch', 'landmarks': [], 'timestamp': 50}],
        'generations': [],
    })
    assert import_session_json(text).error_kind is ErrorKind.IMPORT_FAILED


def test_newer_major_version_is_rejected(session):
    data = json.loads(export_session_json(session))
    data['metadata']['version'] = '2.0.0'

    result = import_session_json(json.dumps(data))
    assert result.error_kind is ErrorKind.IMPORT_FAILED
    assert 'unsupported recording version' in result.error


def test_minor_version_bump_is_accepted(session):
    data = json.loads(export_session_json(session))
    data['metadata']['version'] = '1.3.0'

    assert import_session_json(json.dumps(data)).unwrap().metadata.version == '1.3.0'


def test_minimal_session_gets_defaults():
    text = json.dumps({
        'id': 'session-minimal',
        'gestures': [{'type': 'pinch', 'landmarks': [{'x': 0.1, 'y': 0.2, 'z': 0.3}], 'timestamp': 30}],
        'generations': [],
    })
    session = import_session_json(text).unwrap()

    assert session.duration == 30.0
    assert session.metadata.version == '1.0.0'
    assert session.gestures[0].handedness is None
    assert session.gestures[0].metadata == {}


def test_generate_filename(session):
    name = generate_filename(session, 'json')

    assert name.startswith('sculptnet-session-')
    assert name.endswith('.json')
    assert len(name) == len('sculptnet-session-2023-11-14-22-13-20.json')


def test_save_and_load(session, tmp_path):
    path = save_session(session, tmp_path / 'exports')

    assert path.parent == tmp_path / 'exports'
    assert path.read_text(encoding='utf-8') == export_session_json(session)
    assert load_session(path).unwrap() == session


def test_save_with_explicit_filename(session, tmp_path):
    path = save_session(session, tmp_path, filename='mine.json')
    assert path == tmp_path / 'mine.json'


def test_load_missing_file_fails(tmp_path):
    result = load_session(tmp_path / 'missing.json')

    assert result.error_kind is ErrorKind.IMPORT_FAILED
    assert result.error.startswith("Failed to import session")
