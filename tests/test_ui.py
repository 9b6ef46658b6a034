"""Tests for the command-line interface."""
import json

import pytest

from sculptnet import ui
from sculptnet.config import RecorderConfig
from sculptnet.registry import SessionRegistry
from sculptnet.serializer import save_session
from sculptnet.session import PlaybackEvent, PlaybackEventType


@pytest.fixture
def saved_session(recorder, clock, landmarks, make_generation, tmp_path):
    recorder.start_recording()
    clock.advance(5)
    recorder.record_gesture('pinch', landmarks, 'Right')
    clock.advance(5)
    recorder.record_generation(make_generation(1))
    clock.advance(5)
    session = recorder.stop_recording().unwrap()
    return session, save_session(session, tmp_path)


def test_info_command(saved_session, capsys):
    session, path = saved_session

    assert ui.main(['info', str(path)]) == 0
    output = capsys.readouterr().out
    assert session.id in output
    assert 'Gestures:    1' in output
    assert 'Generations: 1' in output


def test_replay_command(saved_session, capsys):
    _, path = saved_session

    assert ui.main(['replay', str(path), '--speed', '10']) == 0
    output = capsys.readouterr().out
    assert 'gesture    pinch' in output
    assert 'generation req-1' in output
    assert 'complete' in output


def test_replay_rejects_bad_speed(saved_session, capsys):
    _, path = saved_session

    assert ui.main(['replay', str(path), '--speed', '0']) == 1
    assert '[ERROR]' in capsys.readouterr().out


def test_import_failure_exits_with_error(tmp_path, capsys):
    bad = tmp_path / 'bad.json'
    bad.write_text(json.dumps({'foo': 'bar'}))

    assert ui.main(['info', str(bad)]) == 1
    assert 'Failed to import session' in capsys.readouterr().out


def test_demo_records_and_saves(tmp_path, capsys):
    config = RecorderConfig(client_info='SculptNet/demo', export_dir=tmp_path, verbose=False)
    registry = SessionRegistry(client_info=config.client_info)

    session = ui.run_demo(config, registry, steps=4, interval=0.0)

    assert len(session.gestures) == 4
    assert len(session.generations) == 1
    assert len(list(tmp_path.glob('sculptnet-session-*.json'))) == 1
    assert 'Session saved' in capsys.readouterr().out


def test_describe_complete_event():
    line = ui.describe_event(PlaybackEvent(PlaybackEventType.COMPLETE, None, 1500.0))
    assert line == '[   1.500s] complete'
