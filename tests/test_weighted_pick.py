from __future__ import annotations

import random
from collections import Counter

import pytest

from conftest import ScriptedRng
from scanloot.game.weighted import weighted_pick


def test_heavier_option_wins_about_four_times_as_often():
    rng = random.Random(1234)
    counts = Counter(weighted_pick(["a", "b"], lambda o: 0.8 if o == "a" else 0.2, rng) for _ in range(100_000))
    ratio = counts["a"] / counts["b"]
    assert 3.8 <= ratio <= 4.2


def test_draw_walks_the_cumulative_weights_in_order():
    opts = ["x", "y", "z"]
    weights = {"x": 1.0, "y": 2.0, "z": 1.0}
    assert weighted_pick(opts, weights.get, ScriptedRng(0.1)) == "x"
    assert weighted_pick(opts, weights.get, ScriptedRng(0.25)) == "x"
    assert weighted_pick(opts, weights.get, ScriptedRng(0.5)) == "y"
    assert weighted_pick(opts, weights.get, ScriptedRng(0.99)) == "z"


def test_zero_weight_options_are_never_picked():
    opts = ["zero", "one", "zero2"]
    weights = {"zero": 0.0, "one": 1.0, "zero2": 0.0}
    assert weighted_pick(opts, weights.get, ScriptedRng(0.0)) == "one"
    assert weighted_pick(opts, weights.get, ScriptedRng(0.999999)) == "one"


@pytest.mark.parametrize(
    "options,weights",
    [
        ([], {}),
        (["a"], {"a": 0.0}),
        (["a", "b"], {"a": 1.0, "b": -0.5}),
    ],
)
def test_invalid_inputs_raise(options, weights):
    with pytest.raises(ValueError):
        weighted_pick(options, weights.get, ScriptedRng(0.5))
