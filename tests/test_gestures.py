"""Tests for tap, long-press and pan disambiguation."""

from __future__ import annotations

import pytest

from playdeck.backend.common.types import JumpDirection, Orientation
from playdeck.backend.player.gestures import GestureKind, InputDisambiguator
from playdeck.backend.player.models import IndicatorPhase, PanFeedback, ViewGeometry
from playdeck.config.settings.player import PlayerOptions

GEOMETRY = ViewGeometry(width=400, height=225, seek_bar_width=300)


@pytest.fixture
def gestures(ready_controller) -> InputDisambiguator:
    return InputDisambiguator(ready_controller, GEOMETRY)


class TestTaps:

    def test_single_tap_waits_for_hold_off(self, gestures, ready_controller, scheduler) -> None:
        gestures.tap(100, 50)
        assert not ready_controller.snapshot.controls_hidden
        scheduler.advance(0.1)
        assert ready_controller.snapshot.controls_hidden

    def test_double_tap_jumps_without_toggling(self, gestures, ready_controller, scheduler, driver) -> None:
        gestures.tap(300, 50)
        scheduler.advance(0.05)
        gestures.tap(300, 50)
        scheduler.advance(0.5)
        assert driver.seeks() == [10]
        assert not ready_controller.snapshot.controls_hidden

    def test_left_side_jumps_back(self, gestures, ready_controller, driver) -> None:
        ready_controller.report_position(100)
        gestures.tap(50)
        gestures.tap(50)
        assert driver.seeks() == [90]

    def test_slow_taps_toggle_twice(self, gestures, ready_controller, scheduler, driver) -> None:
        gestures.tap(300)
        scheduler.advance(0.2)
        gestures.tap(300)
        scheduler.advance(0.2)
        assert not ready_controller.snapshot.controls_hidden
        assert driver.seeks() == []

    def test_indicator_phases(self, gestures, scheduler) -> None:
        phases = []
        gestures.jump_indicator.subscribe(phases.append)
        gestures.tap(300)
        gestures.tap(300)
        assert [p.phase for p in phases] == [IndicatorPhase.FADE_IN]
        scheduler.advance(0.9)
        assert phases[-1].phase is IndicatorPhase.FADE_OUT
        scheduler.advance(0.4)
        assert [p.phase for p in phases] == [
            IndicatorPhase.FADE_IN,
            IndicatorPhase.FADE_OUT,
            IndicatorPhase.HIDDEN,
        ]
        assert all(p.direction is JumpDirection.FORWARD for p in phases)

    def test_controls_forced_hidden_during_indicator(self, make_controller, scheduler) -> None:
        controller = make_controller(PlayerOptions(hide_controls_during_jump_indicator=True))
        controller.load({"source_url": "https://cdn.example.com/a.mp4"})
        controller.media_ready(600)
        gestures = InputDisambiguator(controller, GEOMETRY)
        gestures.tap(300)
        gestures.tap(300)
        assert controller.snapshot.controls_hidden
        scheduler.advance(1.3)
        assert not controller.snapshot.controls_hidden


class TestLongPress:

    def test_drag_previews_then_commits_one_seek(self, gestures, ready_controller, driver) -> None:
        ready_controller.report_position(150)
        gestures.long_press_began(100, 10)
        assert gestures.session.kind is GestureKind.LONG_PRESS
        assert gestures.session.initial_slider_value == 0.25

        gestures.long_press_changed(175)
        gestures.long_press_changed(250)
        assert ready_controller.snapshot.scrub_position == pytest.approx(0.75)
        assert driver.seeks() == []

        assert gestures.long_press_ended(250) == pytest.approx(450)
        assert driver.seeks() == [pytest.approx(450)]
        assert gestures.session is None

    def test_drag_is_clamped(self, gestures, ready_controller) -> None:
        gestures.long_press_began(100)
        gestures.long_press_changed(5000)
        assert ready_controller.snapshot.scrub_position == 1.0
        gestures.long_press_changed(-5000)
        assert ready_controller.snapshot.scrub_position == 0.0

    def test_long_press_swallows_pending_tap(self, gestures, ready_controller, scheduler) -> None:
        gestures.tap(100)
        gestures.long_press_began(100)
        scheduler.advance(0.5)
        assert not ready_controller.snapshot.controls_hidden

    def test_cancel_restores_playback(self, gestures, ready_controller, driver) -> None:
        gestures.long_press_began(100)
        gestures.long_press_cancelled()
        assert ready_controller.snapshot.is_playing
        assert driver.seeks() == []

    def test_orphaned_events_are_ignored(self, gestures, ready_controller, driver) -> None:
        gestures.long_press_changed(200)
        assert gestures.long_press_ended(200) is None
        gestures.long_press_cancelled()
        assert driver.calls == []
        assert not ready_controller.snapshot.scrubbing

    def test_taps_ignored_while_pressing(self, gestures, ready_controller, scheduler, driver) -> None:
        gestures.long_press_began(100)
        gestures.tap(300)
        gestures.tap(300)
        scheduler.advance(0.5)
        assert driver.seeks() == []


class TestPan:

    def test_upward_pan_in_portrait_zooms_then_rotates(self, gestures, geometry) -> None:
        feedback = []
        gestures.pan_feedback.subscribe(feedback.append)
        gestures.pan_began()
        gestures.pan_changed(5, -40)
        gestures.pan_changed(5, -100)
        assert feedback[0].scale == pytest.approx(1.2)
        assert feedback[1].scale == pytest.approx(1.3)

        assert gestures.pan_ended(5, -100) is Orientation.LANDSCAPE_RIGHT
        assert feedback[-1] == PanFeedback()
        assert geometry.requests == [Orientation.LANDSCAPE_RIGHT]

    def test_downward_pan_in_landscape_drags_then_rotates(self, gestures, ready_controller, geometry) -> None:
        ready_controller.set_orientation(Orientation.LANDSCAPE_LEFT)
        feedback = []
        gestures.pan_feedback.subscribe(feedback.append)
        gestures.pan_began()
        gestures.pan_changed(0, 80)
        assert feedback[0].offset_y == 40
        assert gestures.pan_ended(0, 80) is Orientation.PORTRAIT
        assert geometry.requests == [Orientation.PORTRAIT]

    def test_horizontal_pan_is_not_interpreted(self, gestures, geometry) -> None:
        feedback = []
        gestures.pan_feedback.subscribe(feedback.append)
        gestures.pan_began()
        gestures.pan_changed(100, -20)
        assert gestures.pan_ended(100, -20) is None
        assert feedback == [PanFeedback()]
        assert geometry.requests == []

    def test_upward_pan_in_landscape_does_nothing(self, gestures, ready_controller, geometry) -> None:
        ready_controller.set_orientation(Orientation.LANDSCAPE_RIGHT)
        gestures.pan_began()
        assert gestures.pan_ended(0, -120) is None
        assert geometry.requests == []

    def test_pan_and_long_press_are_exclusive(self, gestures, ready_controller, geometry) -> None:
        gestures.long_press_began(100)
        gestures.pan_began()
        assert gestures.session.kind is GestureKind.LONG_PRESS
        assert gestures.pan_ended(0, -100) is None
        assert geometry.requests == []

        gestures.long_press_ended(100)
        gestures.pan_began()
        gestures.long_press_began(100)
        assert gestures.session.kind is GestureKind.PAN
        assert not ready_controller.snapshot.scrubbing

    def test_reset_closes_open_scrub(self, gestures, ready_controller) -> None:
        gestures.long_press_began(100)
        gestures.reset()
        assert gestures.session is None
        assert not ready_controller.snapshot.scrubbing
        assert ready_controller.snapshot.is_playing
