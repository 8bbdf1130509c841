from __future__ import annotations

import math

import pytest

from price_api.app.compute.weights import normalize_weights, parse_ratios
from price_api.app.errors import InvalidInput


@pytest.mark.parametrize(
    "raw",
    [
        [60, 40],
        [0.6, 0.4],
        [0.3, 0.3],
        [1, 1, 1],
        [33.3, 33.3, 33.4],
        [0.1, 0.2, 0.3, 0.4],
        [7],
    ],
)
def test_normalized_weights_sum_to_one(raw) -> None:
    weights = normalize_weights(raw)
    assert abs(math.fsum(weights.weights) - 1.0) <= 1e-9


def test_integer_percentages_are_detected_and_scaled() -> None:
    weights = normalize_weights([60, 40])
    assert weights.integer_form is True
    assert weights.weights == pytest.approx((0.6, 0.4))
    assert weights.raw == (60.0, 40.0)


def test_fractional_weights_are_not_integer_form() -> None:
    weights = normalize_weights([0.25, 0.75])
    assert weights.integer_form is False
    assert weights.weights == pytest.approx((0.25, 0.75))


def test_normalization_divides_by_raw_sum() -> None:
    weights = normalize_weights([1, 1, 2])
    assert weights.weights == (0.25, 0.25, 0.5)


def test_zero_weight_is_allowed_when_others_are_positive() -> None:
    weights = normalize_weights([0, 5])
    assert weights.weights == (0.0, 1.0)


def test_length_mismatch_is_rejected() -> None:
    with pytest.raises(InvalidInput, match="must match"):
        normalize_weights([0.5], expected=2)


@pytest.mark.parametrize("raw", [[-1, 2], [float("nan"), 1], [float("inf")], [0, 0], [], ["abc"], [True]])
def test_invalid_weights_are_rejected(raw) -> None:
    with pytest.raises(InvalidInput):
        normalize_weights(raw)


def test_parse_ratios_accepts_spaces() -> None:
    assert parse_ratios("60, 40") == [60.0, 40.0]


@pytest.mark.parametrize("raw", [None, "", "   ", "0.5,abc", "1,,2"])
def test_parse_ratios_rejects_bad_input(raw) -> None:
    with pytest.raises(InvalidInput):
        parse_ratios(raw)
