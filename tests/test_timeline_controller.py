"""
Tests for TimelineController

Covers seek/play/pause/complete transitions, schedule rebuilds, edit
coalescing and engine lifecycle. The engine is the RecordingEngine double
from conftest, so no clock runs.
"""
import math
from unittest.mock import MagicMock

import pytest

from tweenr.core.properties import PropertyId
from tweenr.core.scene import Scene
from tweenr.core.timeline_controller import PlayState, TimelineController


@pytest.fixture
def box(controller):
    layer = controller.add_layer("Box", "rectangle", {"x": 100})
    controller.flush()
    return layer


class TestSeek:
    def test_seek_sets_time_and_reconciles(self, controller, box):
        controller.add_keyframe(box.id, "x", 0.0, 100.0)
        controller.add_keyframe(box.id, "x", 2.0, 300.0)
        assert controller.seek(1.0)
        assert controller.current_time == 1.0
        assert controller.resolved[box.id].x == pytest.approx(200.0)

    def test_removing_keyframe_reverts_to_constant(self, controller, box):
        controller.add_keyframe(box.id, "x", 0.0, 100.0)
        controller.add_keyframe(box.id, "x", 2.0, 300.0)
        controller.seek(1.0)
        controller.remove_keyframe(box.id, "x", 1)
        assert controller.resolved[box.id].x == pytest.approx(100.0)

    @pytest.mark.parametrize("t, expected", [(-3.0, 0.0), (7.5, 5.0), (2.25, 2.25)])
    def test_seek_clamps(self, controller, t, expected):
        controller.seek(t)
        assert controller.current_time == expected

    @pytest.mark.parametrize("bad", [math.nan, math.inf, "later", None, True])
    def test_seek_rejects_invalid(self, controller, bad):
        controller.seek(2.0)
        assert controller.seek(bad) is False
        assert controller.current_time == 2.0

    def test_seek_while_playing_keeps_playing(self, controller, engine):
        controller.play()
        controller.seek(3.0)
        assert controller.is_playing
        assert ("seek", 3.0) in engine.calls
        assert "pause" not in engine.names()

    def test_seek_does_not_rebuild(self, controller, engine):
        engine.calls.clear()
        controller.seek(1.0)
        assert "clear" not in engine.names()

    def test_seek_emits_time(self, controller):
        seen = []
        controller.timeChanged.connect(seen.append)
        controller.seek(1.5)
        assert seen == [1.5]


class TestPlayback:
    def test_play_update_complete(self, controller):
        controller.play()
        controller.on_engine_time_update(2.5)
        assert controller.current_time == 2.5
        assert controller.state is PlayState.PLAYING
        controller.on_engine_complete()
        assert controller.current_time == 0.0
        assert controller.state is PlayState.IDLE

    def test_play_starts_engine_from_current_time(self, controller, engine):
        controller.seek(1.25)
        controller.play()
        assert engine.calls[-1] == ("play", 1.25)

    def test_play_twice_is_noop(self, controller, engine):
        controller.play()
        controller.play()
        assert engine.names().count("play") == 1

    def test_play_from_end_restarts(self, controller, engine):
        controller.go_to_end()
        controller.play()
        assert engine.calls[-1] == ("play", 0.0)

    def test_pause_preserves_time(self, controller, engine):
        controller.play()
        controller.on_engine_time_update(1.75)
        controller.pause()
        assert not controller.is_playing
        assert controller.current_time == 1.75
        assert engine.calls[-1] == ("pause",)

    def test_pause_when_idle_is_noop(self, controller, engine):
        engine.calls.clear()
        controller.pause()
        assert engine.calls == []

    def test_engine_updates_ignored_when_idle(self, controller):
        controller.on_engine_time_update(3.0)
        assert controller.current_time == 0.0

    def test_engine_updates_are_clamped(self, controller):
        controller.play()
        controller.on_engine_time_update(9.0)
        assert controller.current_time == 5.0

    def test_engine_signal_drives_time(self, controller, engine):
        controller.play()
        engine.time_changed.emit(0.5)
        assert controller.current_time == 0.5
        engine.completed.emit()
        assert controller.state is PlayState.IDLE

    def test_play_state_signal(self, controller):
        seen = []
        controller.playStateChanged.connect(seen.append)
        controller.toggle_play()
        controller.toggle_play()
        assert seen == [True, False]

    def test_reentrant_tick_is_dropped(self, controller, box):
        controller.play()
        ticks = []

        def reenter(_resolved):
            ticks.append(controller.current_time)
            controller.on_engine_time_update(4.0)

        controller.resolvedChanged.connect(reenter)
        controller.on_engine_time_update(1.0)
        assert controller.current_time == 1.0
        assert ticks == [1.0]

    def test_play_flushes_pending_rebuild(self, controller, engine, box):
        controller.add_keyframe(box.id, "x", 0.0, 0.0)
        controller.add_keyframe(box.id, "x", 1.0, 10.0)
        engine.calls.clear()
        assert controller.schedule_dirty
        controller.play()
        names = engine.names()
        assert names.index("clear") < names.index("play")
        assert not controller.schedule_dirty


class TestTransportHelpers:
    def test_go_to_start_and_end(self, controller):
        controller.go_to_end()
        assert controller.current_time == 5.0
        controller.go_to_start()
        assert controller.current_time == 0.0

    def test_step_frame(self, controller):
        controller.step_frame(1)
        assert controller.current_time == pytest.approx(1 / 30)
        controller.step_frame(-1)
        controller.step_frame(-1)
        assert controller.current_time == 0.0

    def test_timecode(self, controller):
        controller.seek(2.5)
        assert controller.timecode() == "00:02:15"


class TestDuration:
    @pytest.mark.parametrize("bad", [0, -1.0, math.nan, "long"])
    def test_rejects_invalid_duration(self, controller, bad):
        assert controller.set_duration(bad) is False
        assert controller.duration_s == 5.0

    def test_shrinking_clamps_time(self, controller):
        controller.seek(4.0)
        controller.set_duration(2.0)
        assert controller.current_time == 2.0

    def test_duration_change_rebuilds(self, controller, engine):
        controller.set_duration(8.0)
        assert controller.schedule_dirty
        controller.flush()
        assert engine.duration == 8.0


class TestSchedule:
    def test_rebuild_clears_then_schedules(self, controller, engine, box):
        controller.add_keyframe(box.id, "x", 0.0, 0.0)
        controller.add_keyframe(box.id, "x", 1.0, 10.0)
        controller.add_keyframe(box.id, "x", 2.0, 0.0)
        engine.calls.clear()
        segments = controller.rebuild_schedule()
        assert engine.names() == ["clear", "schedule", "schedule", "set_duration"]
        assert engine.segments == segments

    def test_hide_and_show_layer(self, controller, engine, box):
        controller.add_keyframe(box.id, "x", 0.0, 0.0)
        controller.add_keyframe(box.id, "x", 2.0, 10.0)
        before = controller.rebuild_schedule()
        assert before

        controller.set_layer_visible(box.id, False)
        controller.rebuild_schedule()
        assert all(s.layer_id != box.id for s in engine.segments)

        controller.toggle_layer_visible(box.id)
        after = controller.rebuild_schedule()
        assert after == before

    def test_hidden_layer_keeps_tracks_and_leaves_resolution(self, controller, box):
        controller.add_keyframe(box.id, "x", 0.0, 0.0)
        controller.set_layer_visible(box.id, False)
        assert box.id not in controller.resolved
        assert len(box.track("x")) == 1

    def test_batch_coalesces_edits(self, controller, engine, box):
        engine.calls.clear()
        with controller.batch():
            controller.add_keyframe(box.id, "x", 0.0, 0.0)
            controller.add_keyframe(box.id, "x", 1.0, 1.0)
            controller.add_keyframe(box.id, "y", 0.0, 0.0)
            controller.add_keyframe(box.id, "y", 1.0, 1.0)
            assert "clear" not in engine.names()
        assert engine.names().count("clear") == 1
        assert len(engine.segments) == 2

    def test_edits_mark_dirty_until_flush(self, controller, box):
        controller.add_keyframe(box.id, "x", 0.0, 0.0)
        assert controller.schedule_dirty
        controller.flush()
        assert not controller.schedule_dirty

    def test_static_edit_does_not_dirty(self, controller, box):
        controller.set_property(box.id, "x", 50)
        assert not controller.schedule_dirty
        assert controller.resolved[box.id].x == 50.0

    def test_auto_flush_runs_on_event_loop(self, qapp, engine):
        ctl = TimelineController(engine=engine, auto_flush=True)
        try:
            layer = ctl.add_layer("Auto")
            ctl.add_keyframe(layer.id, "x", 0.0, 0.0)
            ctl.add_keyframe(layer.id, "x", 1.0, 1.0)
            assert ctl.schedule_dirty
            qapp.processEvents()
            assert not ctl.schedule_dirty
            assert len(engine.segments) == 1
        finally:
            ctl.close()


class TestLayers:
    def test_add_layer_selects_it(self, controller):
        layer = controller.add_layer("New")
        assert controller.selected_layer() is layer

    def test_remove_selected_layer_clears_selection(self, controller, box):
        seen = []
        controller.selectionChanged.connect(seen.append)
        assert controller.remove_layer(box.id)
        assert controller.selected_layer() is None
        assert seen == [None]

    def test_remove_unknown_layer(self, controller):
        assert controller.remove_layer("nope") is False

    def test_missing_layer_resolves_to_none(self, controller):
        assert controller.resolved_properties("gone") is None

    def test_select_unknown_layer(self, controller, box):
        assert controller.select_layer("nope") is False
        assert controller.selected_layer() is box

    def test_rename_and_lock(self, controller, box):
        assert controller.rename_layer(box.id, "Hero")
        assert controller.set_layer_locked(box.id, True)
        assert box.name == "Hero" and box.locked

    def test_add_keyframe_at_current_time_uses_resolved_value(self, controller, box):
        controller.add_keyframe(box.id, "x", 0.0, 0.0)
        controller.add_keyframe(box.id, "x", 2.0, 100.0)
        controller.seek(1.0)
        assert controller.add_keyframe_at_current_time(box.id, "x")
        keys = box.track("x").keyframes()
        assert [k.time for k in keys] == [0.0, 1.0, 2.0]
        assert keys[1].value == pytest.approx(50.0)

    def test_add_keyframe_at_current_time_unanimated_uses_static(self, controller, box):
        controller.seek(0.5)
        controller.add_keyframe_at_current_time(box.id, PropertyId.X)
        assert box.track("x").keyframes()[0].value == 100.0

    def test_unknown_property_keyframe_ignored(self, controller, box):
        assert controller.add_keyframe(box.id, "wobble", 0.0, 1.0) is False
        assert controller.add_keyframe_at_current_time(box.id, "wobble") is False

    def test_key_selected_layer_keys_displayed_values_in_one_rebuild(self, controller, engine, box):
        engine.calls.clear()
        count = controller.key_selected_layer()
        numeric_and_color = [p for p in PropertyId if p is not PropertyId.TEXT]
        assert count == len(numeric_and_color)
        assert set(box.animated_properties()) == set(numeric_and_color)
        assert box.track("x").keyframes()[0].value == 100.0
        assert engine.names().count("clear") == 1

    def test_key_selected_layer_without_selection(self, controller, box):
        controller.select_layer(None)
        assert controller.key_selected_layer() == 0
        assert not box.has_keyframes()

    def test_seeded_scene(self, engine):
        scene = Scene.from_seed([
            {"name": "Rectangle 1", "shape": "rectangle", "properties": {"x": 100}},
            {"name": "Circle 1", "shape": "circle", "properties": {"x": 300}},
        ])
        with TimelineController(engine=engine, scene=scene, auto_flush=False) as ctl:
            assert [l.name for l in ctl.scene] == ["Rectangle 1", "Circle 1"]
            assert ctl.selected_layer().name == "Rectangle 1"


class TestLifecycle:
    def test_close_releases_engine_once(self, engine):
        ctl = TimelineController(engine=engine, auto_flush=False)
        ctl.close()
        ctl.close()
        assert engine.names().count("release") == 1
        assert ctl.closed

    def test_no_callbacks_after_close(self, engine):
        ctl = TimelineController(engine=engine, auto_flush=False)
        ctl.play()
        ctl.close()
        engine.time_changed.emit(2.0)
        assert ctl.current_time == 0.0
        assert ctl.seek(1.0) is False
        assert not ctl.is_playing

    def test_close_releases_even_if_pause_fails(self, engine):
        ctl = TimelineController(engine=engine, auto_flush=False)
        engine.pause = MagicMock(side_effect=RuntimeError("boom"))
        ctl.close()
        assert engine.released

    def test_context_manager(self, engine):
        with TimelineController(engine=engine, auto_flush=False) as ctl:
            ctl.play()
        assert engine.released

    def test_engine_failure_does_not_crash_playback(self, controller, engine):
        engine.seek = MagicMock(side_effect=RuntimeError("engine gone"))
        assert controller.seek(2.0)
        assert controller.current_time == 2.0

    def test_layer_edits_rejected_after_close(self, engine):
        ctl = TimelineController(engine=engine, auto_flush=False)
        layer = ctl.add_layer("Box")
        ctl.close()
        seen = []
        ctl.layersChanged.connect(lambda: seen.append(True))
        assert ctl.rename_layer(layer.id, "Hero") is False
        assert ctl.toggle_layer_visible(layer.id) is False
        assert ctl.set_layer_locked(layer.id, True) is False
        assert layer.name == "Box" and layer.visible and not layer.locked
        assert seen == []
