"""Unit tests for forecast evaluation metrics."""

import pytest
import numpy as np
import pandas as pd

from auracast.ensemble.types import EnsembleResult, ModelPrediction
from auracast.evaluation.metrics import (
    rmse, mae, bias, interval_coverage, evaluate, evaluate_by_segment,
    evaluate_forecasts, forecast_frame,
)


def result(hour, predicted, lo, hi):
    return EnsembleResult(
        predicted=predicted, confidence=0.8, uncertainty=5.0,
        confidence_interval=(lo, hi), hour_offset=hour,
        members=(ModelPrediction(model="lstm", prediction=predicted, confidence=0.8, uncertainty=5.0),),
    )


class TestScalarMetrics:
    def test_rmse_perfect(self):
        y = np.array([1.0, 2.0, 3.0])
        assert rmse(y, y) == 0.0

    def test_rmse_known(self):
        assert rmse(np.array([1.0, 2.0, 3.0]), np.array([2.0, 3.0, 4.0])) == 1.0

    def test_mae_known(self):
        assert mae(np.array([1.0, 2.0, 3.0]), np.array([2.0, 4.0, 6.0])) == 2.0

    def test_bias_sign(self):
        y_true = np.array([1.0, 2.0, 3.0])
        assert bias(y_true, y_true + 1) == 1.0
        assert bias(y_true, y_true - 1) == -1.0

    def test_coverage(self):
        y = np.array([5.0, 15.0, 25.0, 35.0])
        assert interval_coverage(y, np.full(4, 10.0), np.full(4, 30.0)) == 0.5

    def test_evaluate_keys(self):
        y = np.array([1.0, 2.0])
        assert set(evaluate(y, y)) == {"rmse", "mae", "bias"}


class TestForecastEvaluation:
    def test_evaluate_forecasts(self):
        results = [result(1, 50, 40, 60), result(2, 60, 55, 65)]
        metrics = evaluate_forecasts(results, [52, 70])
        assert metrics["coverage"] == 0.5
        assert metrics["mae"] == pytest.approx(6.0)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            evaluate_forecasts([result(1, 50, 40, 60)], [1, 2])

    def test_forecast_frame(self):
        df = forecast_frame([result(1, 50, 40, 60), result(2, 60, 55, 65)], zone_id="z1")
        assert len(df) == 4
        assert set(df["model"]) == {"ensemble", "lstm"}
        assert (df["zone_id"] == "z1").all()


class TestSegmentEvaluation:
    def test_segment_breakdown(self):
        df = pd.DataFrame({
            "actual": [1, 2, 3, 4, 5, 6],
            "predicted": [1.1, 2.1, 3.1, 4.5, 5.5, 6.5],
            "zone_id": ["A", "A", "A", "B", "B", "B"],
        })
        result = evaluate_by_segment(df, "actual", "predicted", "zone_id")
        assert len(result) == 2
        assert list(result["zone_id"]) == ["B", "A"]
        assert "n" in result.columns
