"""
UI Module - Command-Line Interface
==================================
Record a demo session, replay a saved session in real time, or print a
session summary.

Usage:
    python main.py demo
    python main.py replay output/sculptnet-session-....json --speed 2
    python main.py info output/sculptnet-session-....json
"""

import argparse
import math
import sys
import time
from typing import Optional, List

import numpy as np

from .config import RecorderConfig, load_config
from .gesture_logic import GestureType, GestureDetection
from .hand_tracking import HandData, landmarks_from_array, LANDMARK_COUNT, RIGHT
from .image_generator import GenerationResult
from .event_feed import LiveEventFeed
from .registry import SessionRegistry
from .serializer import load_session, save_session
from .session import PlaybackEvent, PlaybackEventType, RecordingSession


def describe_event(event: PlaybackEvent) -> str:
    """One console line for a playback event."""
    stamp = f"[{event.timestamp_ms / 1000.0:8.3f}s]"
    if event.type is PlaybackEventType.GESTURE:
        gesture = event.data
        hand = gesture.handedness or 'unknown'
        return f"{stamp} gesture    {gesture.type.value:<18} {hand:<7} {len(gesture.landmarks)} landmarks"
    if event.type is PlaybackEventType.GENERATION:
        generation = event.data
        return f"{stamp} generation {generation.request_id or '-':<18} seed={generation.seed} {generation.image_url}"
    return f"{stamp} complete"


def describe_session(session: RecordingSession) -> List[str]:
    return [
        f"Session:     {session.id}",
        f"Recorded at: {session.metadata.recorded_at}",
        f"Client:      {session.metadata.client_info}",
        f"Version:     {session.metadata.version}",
        f"Duration:    {session.duration / 1000.0:.2f}s",
        f"Gestures:    {len(session.gestures)}",
        f"Generations: {len(session.generations)}",
    ]


def _synthetic_hand(step: int) -> HandData:
    """A fake right hand that drifts a little each step."""
    angles = np.linspace(0, np.pi, LANDMARK_COUNT)
    points = np.stack([
        0.5 + 0.2 * np.cos(angles + step * 0.1),
        0.5 + 0.2 * np.sin(angles + step * 0.1),
        np.zeros(LANDMARK_COUNT)
    ], axis=1)
    return HandData(landmarks=landmarks_from_array(points), handedness=RIGHT, confidence=0.9)


def run_demo(config: RecorderConfig, registry: SessionRegistry, steps: int = 8, interval: float = 0.1) -> RecordingSession:
    """Record a short synthetic session through the live feed and save it."""
    recorder = registry.get_session_recorder()
    feed = LiveEventFeed(recorder, lambda event: print(describe_event(event)))
    gestures = [GestureType.HAND_DETECTED, GestureType.PINCH, GestureType.WRIST_ROTATION,
                GestureType.VERTICAL_MOVEMENT]

    recorder.start_recording()
    for step in range(steps):
        feed.on_gesture(GestureDetection(
            gesture=gestures[step % len(gestures)],
            hand=_synthetic_hand(step),
            confidence=0.9,
        ))
        if step % 4 == 3:
            feed.on_generation(GenerationResult(
                image_url=f"https://example.com/generated/{step}.png",
                prompt={'short_description': 'a clay sculpture', 'step': step},
                timestamp=time.time() * 1000.0,
                seed=1000 + step,
                request_id=f"demo-{step}",
            ))
        time.sleep(interval)

    session = recorder.stop_recording().unwrap()
    path = save_session(session, config.export_dir)
    print(f"[INFO] Session saved to {path}")
    return session


def run_replay(registry: SessionRegistry, session: RecordingSession, speed: float) -> int:
    """Replay a session in real time, printing each event."""
    recorder = registry.get_session_recorder()
    result = recorder.start_playback(session, lambda event: print(describe_event(event)), speed)
    if not result.success:
        print(f"[ERROR] {result.error}")
        return 1
    try:
        recorder.scheduler.run_until_idle()
    except KeyboardInterrupt:
        recorder.stop_playback()
        print("\n[INFO] Playback interrupted")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    config = load_config()

    parser = argparse.ArgumentParser(description="SculptNet - Record and replay gesture sessions")
    subparsers = parser.add_subparsers(dest='command', required=True)

    demo = subparsers.add_parser('demo', help='Record a short synthetic session')
    demo.add_argument('--steps', type=int, default=8, help='Number of gestures to record')

    replay = subparsers.add_parser('replay', help='Replay a saved session')
    replay.add_argument('path', help='Session JSON file')
    replay.add_argument('--speed', type=float, default=config.playback_speed, help='Playback speed multiplier')

    info = subparsers.add_parser('info', help='Print a session summary')
    info.add_argument('path', help='Session JSON file')

    args = parser.parse_args(argv)
    registry = SessionRegistry(client_info=config.client_info, verbose=config.verbose)

    if args.command == 'demo':
        run_demo(config, registry, steps=args.steps)
        return 0

    result = load_session(args.path)
    if not result.success:
        print(f"[ERROR] {result.error}")
        return 1
    session = result.value

    if args.command == 'info':
        print("\n".join(describe_session(session)))
        return 0

    if not math.isfinite(args.speed) or args.speed <= 0:
        print(f"[ERROR] Playback speed must be positive, got {args.speed}")
        return 1
    return run_replay(registry, session, args.speed)


if __name__ == "__main__":
    sys.exit(main())
