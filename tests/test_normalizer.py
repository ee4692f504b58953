"""Tests for normalize_frame."""

import pytest

from pose_modules import EngineConfig, normalize_frame
from pose_modules.keypoints import LEFT_HIP, LEFT_SHOULDER, RIGHT_HIP, RIGHT_SHOULDER, TORSO_LANDMARKS

from pose_fixtures import MOUNTAIN, make_frame


def _coords(frame):
    return [(kp.x, kp.y) if kp is not None else None for kp in frame]


class TestTorsoNormalization:
    def test_torso_centroid_maps_to_center(self):
        norm = normalize_frame(make_frame(MOUNTAIN))
        cx = sum(norm[i].x for i in TORSO_LANDMARKS) / 4
        cy = sum(norm[i].y for i in TORSO_LANDMARKS) / 4
        assert cx == pytest.approx(0.5)
        assert cy == pytest.approx(0.5)

    def test_scale_uses_largest_torso_span(self):
        """Torso height (160px) dominates, so scale = 160 * 2.5 = 400px."""
        norm = normalize_frame(make_frame(MOUNTAIN))
        height = norm[LEFT_HIP].y - norm[LEFT_SHOULDER].y
        assert height == pytest.approx(160 / 400)

    @pytest.mark.parametrize("scale", [0.25, 1.7, 3.0])
    def test_scale_invariance(self, scale):
        """Uniformly scaled input normalizes to the same frame."""
        base = normalize_frame(make_frame(MOUNTAIN))
        scaled = normalize_frame(make_frame(MOUNTAIN, scale=scale))
        for a, b in zip(_coords(base), _coords(scaled)):
            assert a == pytest.approx(b, abs=1e-9)

    def test_translation_invariance(self):
        base = normalize_frame(make_frame(MOUNTAIN))
        moved = normalize_frame(make_frame(MOUNTAIN, dx=-120.0, dy=45.5))
        for a, b in zip(_coords(base), _coords(moved)):
            assert a == pytest.approx(b, abs=1e-9)

    def test_confidence_passes_through(self):
        frame = make_frame(MOUNTAIN, confidence=0.8, overrides={"Nose": 0.1})
        norm = normalize_frame(frame)
        assert [kp.confidence for kp in norm] == [kp.confidence for kp in frame]

    def test_input_not_mutated(self):
        frame = make_frame(MOUNTAIN)
        before = _coords(frame)
        norm = normalize_frame(frame)
        assert norm is not frame
        assert _coords(frame) == before

    def test_missing_landmarks_stay_missing(self):
        frame = make_frame(MOUNTAIN, overrides={"Left Wrist": None})
        norm = normalize_frame(frame)
        assert norm.get("Left Wrist") is None
        assert len(norm) == len(frame)

    def test_custom_scale_factor(self):
        config = EngineConfig(normalization_scale_factor=5.0)
        norm = normalize_frame(make_frame(MOUNTAIN), config)
        assert norm[LEFT_HIP].y - norm[LEFT_SHOULDER].y == pytest.approx(160 / 800)


class TestFallback:
    def test_low_confidence_torso_uses_min_max(self):
        frame = make_frame(MOUNTAIN, overrides={"Left Hip": 0.2})
        norm = normalize_frame(frame)
        visible = [kp for kp in norm if kp is not None and kp.confidence > 0.3]
        xs = [kp.x for kp in visible]
        ys = [kp.y for kp in visible]
        assert min(xs) == pytest.approx(0.0)
        assert max(xs) == pytest.approx(1.0)
        assert min(ys) == pytest.approx(0.0)
        assert max(ys) == pytest.approx(1.0)

    def test_missing_torso_uses_min_max(self):
        frame = make_frame(MOUNTAIN, overrides={"Right Shoulder": None})
        norm = normalize_frame(frame)
        assert norm.get("Right Shoulder") is None
        assert min(kp.y for kp in norm if kp is not None) == pytest.approx(0.0)

    def test_coincident_torso_falls_back(self):
        """All torso points on one spot give scale 0 and must not divide by zero."""
        points = dict(MOUNTAIN)
        for name in ("Left Shoulder", "Right Shoulder", "Left Hip", "Right Hip"):
            points[name] = (300, 300)
        norm = normalize_frame(make_frame(points))
        assert all(0.0 <= kp.x <= 1.0 and 0.0 <= kp.y <= 1.0 for kp in norm if kp is not None)

    def test_zero_extent_axis_is_centered(self):
        points = {name: (100, y) for name, (_, y) in MOUNTAIN.items()}
        frame = make_frame(points, overrides={"Left Hip": 0.1})
        norm = normalize_frame(frame)
        assert all(kp.x == pytest.approx(0.5) for kp in norm if kp is not None)

    def test_nothing_visible_returns_copy(self):
        frame = make_frame(MOUNTAIN, confidence=0.1)
        norm = normalize_frame(frame)
        assert _coords(norm) == _coords(frame)

    def test_empty_frame(self):
        frame = make_frame({})
        assert len(normalize_frame(frame)) == len(frame)
        assert normalize_frame(frame)[RIGHT_HIP] is None
        assert normalize_frame(frame)[RIGHT_SHOULDER] is None
