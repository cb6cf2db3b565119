"""Tests for movement feedback and advisory metrics."""

import pytest

from vertimotion.config import EstimatorConfig
from vertimotion.quality import (
    MovementQualityEstimator,
    angular_difference_deg,
    heading_deg,
    quality_tier,
    validate_movement,
)
from vertimotion.types import Direction, MovementFeedback, MovementQuality


class TestValidateMovement:
    def test_correct(self):
        feedback, accuracy = validate_movement(3.0, 0.0, Direction.UP, 5.0, 8.0)
        assert feedback is MovementFeedback.CORRECT
        assert accuracy == pytest.approx(40.0)

    def test_borderline(self):
        feedback, accuracy = validate_movement(0.0, -6.0, Direction.RIGHT, 5.0, 8.0)
        assert feedback is MovementFeedback.BORDERLINE
        assert accuracy == 0.0

    def test_beyond_warning_is_incorrect(self):
        feedback, _ = validate_movement(0.0, 10.0, Direction.LEFT, 5.0, 8.0)
        assert feedback is MovementFeedback.INCORRECT

    def test_wrong_dominant_axis(self):
        """pitch=20, yaw=25 against UP: yaw dominates, so INCORRECT."""
        feedback, accuracy = validate_movement(20.0, 25.0, Direction.UP, 5.0, 8.0)
        assert feedback is MovementFeedback.INCORRECT
        assert accuracy == 0.0

    def test_centered_is_not_on_axis(self):
        feedback, accuracy = validate_movement(0.0, 0.0, Direction.DOWN, 5.0, 8.0)
        assert feedback is MovementFeedback.INCORRECT
        assert accuracy == 0.0

    @pytest.mark.parametrize("pitch", [-90.0, -12.0, -4.9, -0.5, 0.5, 4.9, 12.0, 90.0])
    @pytest.mark.parametrize("yaw", [-45.0, -1.0, 0.0, 1.0, 45.0])
    @pytest.mark.parametrize("target", list(Direction))
    def test_accuracy_bounded(self, pitch, yaw, target):
        _, accuracy = validate_movement(pitch, yaw, target, 5.0, 8.0)
        assert 0.0 <= accuracy <= 100.0


class TestHelpers:
    @pytest.mark.parametrize("pitch, yaw, expected", [
        (10.0, 0.0, 90.0),
        (-10.0, 0.0, -90.0),
        (0.0, 10.0, 180.0),
        (0.0, -10.0, 0.0),
    ])
    def test_heading_matches_ideal_axes(self, pitch, yaw, expected):
        assert heading_deg(pitch, yaw) == pytest.approx(expected)

    def test_angular_difference_wraps(self):
        assert angular_difference_deg(170.0, -170.0) == pytest.approx(20.0)
        assert angular_difference_deg(-180.0, 180.0) == pytest.approx(0.0)

    @pytest.mark.parametrize("score, expected", [
        (100.0, MovementQuality.EXCELLENT),
        (90.0, MovementQuality.EXCELLENT),
        (89.9, MovementQuality.GOOD),
        (70.0, MovementQuality.GOOD),
        (50.0, MovementQuality.NEEDS_WORK),
        (49.9, MovementQuality.INCORRECT),
    ])
    def test_quality_tier(self, score, expected):
        assert quality_tier(score) is expected


class TestEstimator:
    def test_no_target(self, make_sample):
        update = MovementQualityEstimator().estimate(make_sample(10.0, 0.0), None)
        assert update.feedback is MovementFeedback.NONE
        assert update.accuracy == 0.0
        assert update.metrics is None

    def test_invalid_sample(self, make_sample):
        update = MovementQualityEstimator().estimate(make_sample(float("nan"), 0.0), Direction.UP)
        assert update.feedback is MovementFeedback.NONE
        assert update.accuracy == 0.0

    def test_feedback_carries_target_and_time(self, make_sample):
        update = MovementQualityEstimator().estimate(make_sample(3.0, 0.0, 1.5), Direction.UP)
        assert update.feedback is MovementFeedback.CORRECT
        assert update.target is Direction.UP
        assert update.t_ns == 1_500_000_000

    def test_first_sample_has_no_speed(self, make_sample):
        update = MovementQualityEstimator().estimate(make_sample(10.0, 0.0), Direction.UP)
        assert update.metrics.speed_deg_per_sec == 0.0
        assert update.metrics.interval_sec == 0.0
        assert update.metrics.precision == pytest.approx(100.0)
        assert update.metrics.stability == 0.0
        assert update.metrics.quality is MovementQuality.NEEDS_WORK

    def test_ideal_movement_is_excellent(self, make_sample):
        estimator = MovementQualityEstimator()
        estimator.estimate(make_sample(0.0, 0.0, 0.0), Direction.UP)
        update = estimator.estimate(make_sample(10.0, 0.0, 0.5), Direction.UP)

        assert update.metrics.speed_deg_per_sec == pytest.approx(20.0)
        assert update.metrics.interval_sec == pytest.approx(0.5)
        assert update.metrics.stability == 100.0
        assert update.metrics.quality is MovementQuality.EXCELLENT

    def test_prior_seeds_speed_window(self, make_sample):
        estimator = MovementQualityEstimator()
        update = estimator.estimate(
            make_sample(0.0, -10.0, 1.0), Direction.RIGHT, prior=make_sample(0.0, 0.0, 0.5),
        )
        assert update.metrics.speed_deg_per_sec == pytest.approx(20.0)
        assert update.metrics.precision == pytest.approx(100.0)

    @pytest.mark.parametrize("step_deg, expected", [
        (2.5, 50.0),     # 5 deg/s, below range
        (22.5, 50.0),    # 45 deg/s, above range
        (30.0, 0.0),     # 60 deg/s
    ])
    def test_stability_outside_ideal_range(self, make_sample, step_deg, expected):
        estimator = MovementQualityEstimator()
        estimator.estimate(make_sample(0.0, 0.0, 0.0), Direction.UP)
        update = estimator.estimate(make_sample(step_deg, 0.0, 0.5), Direction.UP)
        assert update.metrics.stability == pytest.approx(expected)

    def test_duplicate_timestamps_do_not_divide_by_zero(self, make_sample):
        estimator = MovementQualityEstimator()
        estimator.estimate(make_sample(0.0, 0.0, 1.0), Direction.UP)
        update = estimator.estimate(make_sample(10.0, 0.0, 1.0), Direction.UP)
        assert update.metrics.speed_deg_per_sec == 0.0

    def test_looking_away(self, make_sample):
        estimator = MovementQualityEstimator()
        assert estimator.estimate(make_sample(16.0, 0.0), Direction.UP).looking_away
        assert not estimator.estimate(make_sample(14.0, 0.0, 0.1), Direction.UP).looking_away

    def test_metrics_do_not_change_feedback(self, make_sample):
        estimator = MovementQualityEstimator()
        for i in range(10):
            update = estimator.estimate(make_sample(3.0 + 40 * (i % 2), 0.0, 0.01 * i), Direction.UP)
        assert update.feedback is MovementFeedback.INCORRECT
        update = estimator.estimate(make_sample(3.0, 0.0, 0.2), Direction.UP)
        assert update.feedback is MovementFeedback.CORRECT

    def test_reset(self, make_sample):
        estimator = MovementQualityEstimator(EstimatorConfig(history_size=3))
        estimator.estimate(make_sample(0.0, 0.0, 0.0), Direction.UP)
        estimator.reset()
        update = estimator.estimate(make_sample(10.0, 0.0, 0.5), Direction.UP)
        assert update.metrics.speed_deg_per_sec == 0.0
