"""Tests for Frame construction and access."""

import numpy as np

from pose_modules import UNKNOWN, ClassificationResult, Frame


class TestFromDicts:
    def test_confidence_keys(self):
        frame = Frame.from_dicts([
            {"x": 1, "y": 2, "confidence": 0.9},
            {"x": 3, "y": 4, "score": 0.8},
            {"x": 5, "y": 6, "visibility": 0.7},
        ])
        assert [frame.confidence(i) for i in range(3)] == [0.9, 0.8, 0.7]
        assert frame[0].name == "Nose"

    def test_missing_entries(self):
        frame = Frame.from_dicts([None, {"x": 1, "y": 2}])
        assert len(frame) == 2
        assert frame[0] is None
        assert frame[1] is None
        assert frame.confidence(1) == 0.0

    def test_missing_coordinate_is_missing_landmark(self):
        frame = Frame.from_dicts([{"y": 2, "score": 0.9}, {"x": 1, "y": None, "score": 0.9}])
        assert frame[0] is None
        assert frame[1] is None

    def test_named_lookup(self):
        points = [{"x": float(i), "y": 0.0, "score": 1.0} for i in range(33)]
        frame = Frame.from_dicts(points)
        assert frame.get("Left Shoulder").x == 11.0
        assert frame.get("Tail") is None


class TestArrays:
    def test_nan_rows_are_missing(self):
        arr = np.array([[1.0, 2.0, 0.9], [np.nan, np.nan, np.nan]])
        frame = Frame.from_array(arr)
        assert frame[0].x == 1.0
        assert frame[1] is None

    def test_to_array(self):
        frame = Frame.from_array([[1.0, 2.0, 0.9], [np.nan, 0.0, 0.0]])
        arr = frame.to_array()
        assert arr.shape == (2, 3)
        assert arr[0].tolist() == [1.0, 2.0, 0.9]
        assert np.isnan(arr[1]).all()


class TestAccess:
    def test_out_of_range_is_missing(self):
        frame = Frame.from_dicts([{"x": 1, "y": 2, "score": 0.9}])
        assert frame[5] is None
        assert not frame.is_visible(5, 0.3)

    def test_visibility_is_strict(self):
        frame = Frame.from_dicts([{"x": 1, "y": 2, "score": 0.3}])
        assert not frame.is_visible(0, 0.3)
        assert frame.is_visible(0, 0.29)


def test_unknown_result():
    assert UNKNOWN.is_unknown
    assert UNKNOWN.confidence == 0.0
    assert not ClassificationResult("Tree Pose", 0.8).is_unknown
