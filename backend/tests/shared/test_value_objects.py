"""Tests for effect bundles and clamping helpers."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from basement_backend.shared.value_objects import EffectBundle, EffectTarget, clamp


def test_clamp_limits_value_to_range() -> None:
    assert clamp(150, 0, 100) == 100
    assert clamp(-5, 0, 100) == 0
    assert clamp(42, 0, 100) == 42


def test_clamp_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError, match="Invalid clamp bounds"):
        clamp(1, 10, 0)


def test_neutral_bundle_leaves_values_unchanged() -> None:
    bundle = EffectBundle.neutral()

    assert bundle.is_neutral()
    assert bundle.apply(EffectTarget.ATTENDANCE, 80) == 80


def test_multipliers_apply_before_additives() -> None:
    bundle = EffectBundle(
        multipliers={EffectTarget.REPUTATION: 2.0},
        additives={EffectTarget.REPUTATION: 3.0},
    )

    assert bundle.apply(EffectTarget.REPUTATION, 10) == 23


def test_combine_multiplies_factors_and_sums_deltas() -> None:
    first = EffectBundle(
        multipliers={EffectTarget.ATTENDANCE: 1.5},
        additives={EffectTarget.STRESS: 5},
    )
    second = EffectBundle(
        multipliers={EffectTarget.ATTENDANCE: 2.0, EffectTarget.FANS: 0.5},
        additives={EffectTarget.STRESS: -2},
    )

    combined = first.combine(second)

    assert combined.multiplier(EffectTarget.ATTENDANCE) == pytest.approx(3.0)
    assert combined.multiplier(EffectTarget.FANS) == pytest.approx(0.5)
    assert combined.additive(EffectTarget.STRESS) == pytest.approx(3)


def test_composition_order_does_not_change_result() -> None:
    bundles = [
        EffectBundle(
            multipliers={EffectTarget.ATTENDANCE: 1.3},
            additives={EffectTarget.REPUTATION: 4},
        ),
        EffectBundle(multipliers={EffectTarget.ATTENDANCE: 0.7}),
        EffectBundle(
            multipliers={EffectTarget.REPUTATION: 1.1},
            additives={EffectTarget.REPUTATION: -1},
        ),
    ]

    forward = EffectBundle.compose(bundles)
    backward = EffectBundle.compose(reversed(bundles))

    for target in (EffectTarget.ATTENDANCE, EffectTarget.REPUTATION):
        assert forward.apply(target, 57) == pytest.approx(backward.apply(target, 57))


def test_apply_clamps_to_bounds() -> None:
    bundle = EffectBundle(multipliers={EffectTarget.ATTENDANCE: 10.0})

    assert bundle.apply(EffectTarget.ATTENDANCE, 50, upper=100) == 100
    assert bundle.apply(EffectTarget.ATTENDANCE, -5, lower=0) == 0


@pytest.mark.parametrize("factor", [-0.5, math.inf, math.nan])
def test_invalid_multipliers_are_rejected(factor: float) -> None:
    with pytest.raises(ValidationError):
        EffectBundle(multipliers={EffectTarget.FANS: factor})


def test_unknown_effect_key_is_rejected() -> None:
    with pytest.raises(ValidationError):
        EffectBundle(multipliers={"charisma": 1.2})


def test_scale_and_add_return_new_bundles() -> None:
    base = EffectBundle.neutral()

    scaled = base.scale(EffectTarget.REVENUE, 1.2).add(EffectTarget.REVENUE, 10)

    assert base.is_neutral()
    assert scaled.apply(EffectTarget.REVENUE, 100) == pytest.approx(130)
