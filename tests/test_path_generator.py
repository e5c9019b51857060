"""
Tests for the GBM path generator.
"""

import pytest
import numpy as np
from gbmgame.simulation.path_generator import (
    INITIAL_PRICE,
    NUM_STEPS,
    STEP_SIZE,
    PathGenerator,
    SimulationParameters,
    generate_path,
)


class ScriptedUniform:
    """Uniform source returning a fixed sequence of values."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        self.calls += 1
        return self.values.pop(0)


class TestSimulationParameters:
    """Test suite for parameter validation."""

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            (dict(num_steps=0, step_size=0.1, drift=0.0, volatility=0.2), "num_steps"),
            (dict(num_steps=10, step_size=0.0, drift=0.0, volatility=0.2), "step_size"),
            (dict(num_steps=10, step_size=0.1, drift=0.0, volatility=-0.1), "volatility"),
        ],
    )
    def test_invalid_parameters(self, kwargs, message):
        """Test that out-of-range parameters fail fast."""
        with pytest.raises(ValueError, match=message):
            SimulationParameters(**kwargs)

    def test_negative_drift_is_allowed(self):
        params = SimulationParameters(num_steps=5, step_size=0.1, drift=-0.5, volatility=0.0)
        assert params.drift == -0.5


class TestPathGenerator:
    """Test suite for the PathGenerator class."""

    @pytest.fixture
    def params(self):
        return SimulationParameters(
            num_steps=NUM_STEPS,
            step_size=STEP_SIZE,
            drift=np.log(1.3),
            volatility=0.2,
        )

    def test_path_shape_and_positivity(self, params):
        """Test path length, starting price and positive prices."""
        path = PathGenerator(seed=42).generate_path(params)

        assert len(path) == params.num_steps + 1
        assert path[0] == INITIAL_PRICE
        assert np.all(path > 0)

    def test_high_volatility_paths_stay_positive(self):
        params = SimulationParameters(num_steps=100, step_size=0.1, drift=-2.0, volatility=1.0)
        path = PathGenerator(seed=1).generate_path(params)

        assert np.all(path > 0)

    def test_reproducibility(self, params):
        """Test that paths are reproducible with the same seed."""
        path1 = PathGenerator(seed=7).generate_path(params)
        path2 = PathGenerator(seed=7).generate_path(params)

        np.testing.assert_array_equal(path1, path2)

    def test_different_seeds_differ(self, params):
        path1 = PathGenerator(seed=1).generate_path(params)
        path2 = PathGenerator(seed=2).generate_path(params)

        assert not np.array_equal(path1, path2)

    def test_zero_volatility_flat_path(self):
        """Test that zero drift and volatility give a flat path."""
        params = SimulationParameters(num_steps=252, step_size=1 / 252, drift=0.0, volatility=0.0)
        path = PathGenerator(seed=3).generate_path(params)

        np.testing.assert_array_equal(path, np.full(253, INITIAL_PRICE))

    def test_path_is_read_only(self, params):
        path = PathGenerator(seed=0).generate_path(params)

        with pytest.raises(ValueError):
            path[1] = 0.0

    def test_seed_only_seeds_default_source(self):
        """Test that the seed lives in the uniform source, not the generator."""
        generator = PathGenerator(seed=3)

        assert not hasattr(generator, "seed")
        assert generator.rng.random() == np.random.default_rng(3).random()

    def test_custom_initial_price(self, params):
        path = PathGenerator(initial_price=50.0, seed=0).generate_path(params)

        assert path[0] == 50.0

    def test_random_normal_box_muller(self):
        """Test the Box-Muller transform on known uniforms."""
        generator = PathGenerator(rng=ScriptedUniform([0.5, 0.5]))

        z = generator.random_normal()

        assert z == pytest.approx(-np.sqrt(2 * np.log(2)))

    def test_random_normal_resamples_zero(self):
        """Test that a zero first uniform is redrawn before taking the log."""
        rng = ScriptedUniform([0.0, 0.0, 0.5, 0.0])
        generator = PathGenerator(rng=rng)

        z = generator.random_normal()

        assert z == pytest.approx(np.sqrt(2 * np.log(2)))
        assert rng.calls == 4

    def test_single_step_update(self):
        """Test the discretized GBM update against the closed form."""
        drift, volatility, dt = 0.1, 0.2, 1 / 252
        params = SimulationParameters(num_steps=1, step_size=dt, drift=drift, volatility=volatility)
        generator = PathGenerator(rng=ScriptedUniform([0.5, 0.0]))

        path = generator.generate_path(params)

        z = np.sqrt(2 * np.log(2))
        expected = 100.0 * np.exp((drift - 0.5 * volatility ** 2) * dt + volatility * np.sqrt(dt) * z)
        assert path[1] == pytest.approx(expected)

    def test_collapsing_drift_goes_to_zero(self):
        params = SimulationParameters(num_steps=3, step_size=1 / 252, drift=float("-inf"), volatility=0.2)
        generator = PathGenerator(rng=ScriptedUniform([0.5, 0.1] * 3))

        path = generator.generate_path(params)

        np.testing.assert_array_equal(path, [100.0, 0.0, 0.0, 0.0])


class TestDrift:
    """Test suite for the coin-flipped drift."""

    def test_up_branch(self):
        generator = PathGenerator(rng=ScriptedUniform([0.7]))
        assert generator.random_drift(0.3) == pytest.approx(np.log(1.3))

    def test_down_branch(self):
        generator = PathGenerator(rng=ScriptedUniform([0.3]))
        assert generator.random_drift(0.3) == pytest.approx(np.log(0.7))

    def test_full_collapse(self):
        generator = PathGenerator(rng=ScriptedUniform([0.2]))
        assert generator.random_drift(1.0) == float("-inf")

    def test_zero_a_parameter_gives_zero_drift(self):
        generator = PathGenerator(rng=ScriptedUniform([0.9]))
        assert generator.random_drift(0.0) == 0.0

    @pytest.mark.parametrize("a_parameter", [-0.1, 1.1])
    def test_invalid_a_parameter(self, a_parameter):
        with pytest.raises(ValueError, match="a_parameter"):
            PathGenerator(seed=0).random_drift(a_parameter)

    def test_draw_parameters(self):
        """Test that round parameters use the fixed step grid."""
        generator = PathGenerator(rng=ScriptedUniform([0.9]))

        params = generator.draw_parameters(volatility=0.25, a_parameter=0.3)

        assert params.num_steps == 252
        assert params.step_size == pytest.approx(1 / 252)
        assert params.volatility == 0.25
        assert params.drift == pytest.approx(np.log(1.3))

    def test_draw_parameters_invalid_volatility(self):
        with pytest.raises(ValueError, match="volatility"):
            PathGenerator(seed=0).draw_parameters(volatility=1.5, a_parameter=0.3)


class TestGeneratePath:
    """Test suite for the module-level generate_path function."""

    def test_generate_path(self):
        path = generate_path(252, 1 / 252, 0.05, 0.3, rng=np.random.default_rng(11))

        assert len(path) == 253
        assert path[0] == 100.0
        assert np.all(path > 0)

    def test_generate_path_deterministic_with_injected_source(self):
        path1 = generate_path(20, 0.01, 0.0, 0.5, rng=np.random.default_rng(5))
        path2 = generate_path(20, 0.01, 0.0, 0.5, rng=np.random.default_rng(5))

        np.testing.assert_array_equal(path1, path2)

    def test_generate_path_invalid(self):
        with pytest.raises(ValueError):
            generate_path(0, 1 / 252, 0.0, 0.2)
