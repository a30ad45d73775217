import logging

import pytest

from erdlayout.apply import LayoutApplier, LayoutInProgress
from erdlayout.graph import Point


@pytest.fixture
def current():
    return {"a": Point(0, 0), "b": Point(100, 100), "c": Point(5, 5)}


@pytest.fixture
def target():
    return {"a": Point(400, 0), "b": Point(0, 300)}


class TestFrames:
    def test_step_count(self, current, target):
        applier = LayoutApplier(lambda frame: None)
        assert applier.steps == 40
        assert len(list(applier.frames(current, target))) == 40

    def test_linear_interpolation(self, current, target):
        applier = LayoutApplier(lambda frame: None, duration_ms=100, step_ms=25)
        frames = list(applier.frames(current, target))
        assert len(frames) == 4
        assert frames[1]["a"] == Point(200, 0)
        assert frames[1]["b"] == Point(50, 200)
        assert frames[-1]["a"] == Point(400, 0)

    def test_missing_target_stays_put(self, current, target):
        applier = LayoutApplier(lambda frame: None)
        for frame in applier.frames(current, target):
            assert frame["c"] == Point(5, 5)

    def test_invalid_timing(self):
        with pytest.raises(ValueError):
            LayoutApplier(lambda frame: None, step_ms=0)
        with pytest.raises(ValueError):
            LayoutApplier(lambda frame: None, duration_ms=10, step_ms=20)


class TestApply:
    def test_final_frame_is_exact(self, current, target):
        seen = []
        applier = LayoutApplier(seen.append, duration_ms=90, step_ms=30)
        report = applier.apply(current, target)

        assert report.frames == 4
        assert len(seen) == 4
        assert seen[-1] == {"a": Point(400, 0), "b": Point(0, 300), "c": Point(5, 5)}

    def test_persists_moved_nodes_in_order(self, current, target):
        saved = []
        applier = LayoutApplier(lambda frame: None, persist=lambda nid, p: saved.append((nid, p)))
        report = applier.apply(current, target)

        assert saved == [("a", Point(400, 0)), ("b", Point(0, 300))]
        assert report.persisted == ["a", "b"]
        assert report.failed == []

    def test_persist_failure_logged_and_swallowed(self, current, target, caplog):
        def persist(nid, point):
            if nid == "a":
                raise ConnectionError("store unavailable")

        applier = LayoutApplier(lambda frame: None, persist=persist)
        with caplog.at_level(logging.ERROR, logger="erdlayout.apply"):
            report = applier.apply(current, target)

        assert report.failed == ["a"]
        assert report.persisted == ["b"]
        assert "Failed to persist position of a" in caplog.text

    def test_reentrant_apply_rejected(self, current, target):
        rejected = []
        applier = None

        def on_frame(frame):
            try:
                applier.apply(current, target)
            except LayoutInProgress:
                rejected.append(True)

        applier = LayoutApplier(on_frame, duration_ms=40, step_ms=20)
        applier.apply(current, target)

        assert len(rejected) == 3
        assert not applier.busy

    def test_guard_released_after_error(self, current, target):
        def on_frame(frame):
            raise RuntimeError("renderer crashed")

        applier = LayoutApplier(on_frame)
        with pytest.raises(RuntimeError):
            applier.apply(current, target)
        assert not applier.busy

        applier.on_frame = lambda frame: None
        assert applier.apply(current, target).frames == 41
