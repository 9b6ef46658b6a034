"""Tests for shared and isolated recorders."""
from sculptnet import registry as registry_module
from sculptnet.recorder import SessionRecorder
from sculptnet.registry import SessionRegistry, create_session_recorder, get_session_recorder
from sculptnet.scheduler import ManualClock


def test_get_session_recorder_returns_same_instance():
    first = get_session_recorder()
    second = get_session_recorder()

    assert first is second
    assert registry_module.default_registry().has_shared_recorder()


def test_create_session_recorder_returns_new_instances():
    first = create_session_recorder()
    second = create_session_recorder()

    assert first is not second
    assert first is not get_session_recorder()


def test_created_recorders_are_independent():
    first = create_session_recorder()
    second = create_session_recorder()

    first.start_recording()
    assert first.is_recording_active()
    assert not second.is_recording_active()

    second.start_recording()
    first_session = first.stop_recording().unwrap()
    assert second.is_recording_active()
    second_session = second.stop_recording().unwrap()
    assert first_session.id != second_session.id


def test_registry_passes_recorder_options():
    clock = ManualClock(1000)
    registry = SessionRegistry(clock=clock, client_info='SculptNet/registry')

    shared = registry.get_session_recorder()
    isolated = registry.create_session_recorder()

    assert shared.clock is clock
    assert isolated.clock is clock
    assert isolated is not shared
    assert registry.get_session_recorder() is shared
    assert shared.client_info == 'SculptNet/registry'


def test_registries_do_not_share_recorders():
    first = SessionRegistry()
    second = SessionRegistry()

    assert not first.has_shared_recorder()
    assert first.get_session_recorder() is not second.get_session_recorder()


def test_custom_factory():
    built = []

    def factory(**kwargs):
        recorder = SessionRecorder(**kwargs)
        built.append(recorder)
        return recorder

    registry = SessionRegistry(factory=factory, verbose=False)
    registry.get_session_recorder()
    registry.get_session_recorder()
    registry.create_session_recorder()

    assert len(built) == 2
