import pytest

from basketball_fusion.analytics.confidence import Signal, combine, scaled


def test_weights_are_normalized():
    result = combine([Signal("a", 0.5, 2.0), Signal("b", 1.0, 2.0)])
    # One strong signal only: no bonus
    assert result == pytest.approx(0.75)


def test_bonus_for_two_strong_signals():
    result = combine([Signal("a", 0.8, 0.5), Signal("b", 0.7, 0.5)])
    assert result == pytest.approx(0.75 + 0.08)


def test_bonus_requires_strictly_greater_than_threshold():
    result = combine([Signal("a", 0.6, 1.0), Signal("b", 0.9, 1.0)])
    assert result == pytest.approx(0.75)


def test_custom_bonus():
    result = combine([Signal("pose", 0.9, 0.65), Signal("ball", 0.8, 0.35)], bonus=0.1)
    assert result == pytest.approx(0.9 * 0.65 + 0.8 * 0.35 + 0.1)


def test_result_is_clamped():
    assert combine([Signal("a", 1.0, 1.0), Signal("b", 1.0, 1.0)]) == 1.0
    assert combine([Signal("a", 5.0, 1.0)]) == 1.0


def test_empty_and_weightless_input():
    assert combine([]) == 0.0
    assert combine([Signal("a", 0.9, 0.0)]) == 0.0


def test_scaled():
    assert scaled(0.8, 0.85) == pytest.approx(0.68)
    assert scaled(0.1, 0.5, floor=0.3) == pytest.approx(0.3)
    assert scaled(0.9, 2.0) == 1.0
