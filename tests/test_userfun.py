"""Tests for the solver-facing evaluation."""

from concurrent.futures import ThreadPoolExecutor
import logging
import numpy as np
import pytest

from brachnlp.core.errors import ConfigurationError, DegenerateStepError
from brachnlp.problem.setup import brachistochrone
from brachnlp.transcription.jacobian import dense_jacobian
from brachnlp.transcription.residuals import constraint_vector
from brachnlp.transcription.userfun import EvaluationStatus, evaluate, user_function


def _random_point(config, seed=0):
    rng = np.random.default_rng(seed)
    N = config.N
    states = rng.uniform(0.1, 2.0, size=(3, N + 1))
    theta = rng.uniform(-np.pi, np.pi, size=(1, N))
    return config.layout.pack(states, theta, config.t0 + rng.uniform(0.5, 3.0))


def test_evaluate_outputs():
    config = brachistochrone(5, kFr=0.2)
    z = _random_point(config)

    result = evaluate(z, config)

    assert np.array_equal(result.F, constraint_vector(z, config))
    dense = dense_jacobian(z, config)
    pattern = config.sparsity
    assert np.array_equal(result.G, dense[pattern.rows, pattern.cols])


def test_validate_path_matches_triplet_path():
    """Dense-then-mask extraction and direct triplet scatter agree."""
    config = brachistochrone(6, kFr=0.7)
    z = _random_point(config, seed=3)

    fast = evaluate(z, config)
    checked = evaluate(z, config, validate=True)

    assert np.array_equal(fast.F, checked.F)
    assert np.allclose(fast.G, checked.G, rtol=0.0, atol=1e-15)


def test_repeat_calls_bit_identical():
    config = brachistochrone(8, kFr=0.1)
    z = _random_point(config, seed=5)

    a = evaluate(z, config)
    b = evaluate(z, config)

    assert np.array_equal(a.F, b.F)
    assert np.array_equal(a.G, b.G)


def test_concurrent_calls_do_not_interfere():
    config = brachistochrone(10, kFr=0.25)
    points = [_random_point(config, seed) for seed in range(16)]
    sequential = [evaluate(z, config) for z in points]

    with ThreadPoolExecutor(max_workers=4) as pool:
        parallel = list(pool.map(lambda z: evaluate(z, config), points))

    for s, p in zip(sequential, parallel):
        assert np.array_equal(s.F, p.F)
        assert np.array_equal(s.G, p.G)


def test_user_function_ok():
    config = brachistochrone(3)
    z = _random_point(config)

    result = user_function(z, config)

    assert result.ok
    assert result.status == EvaluationStatus.OK
    assert np.array_equal(result.F, evaluate(z, config).F)


@pytest.mark.parametrize("tf", [0.0, -0.5, np.nan])
def test_user_function_reports_degenerate_step(tf, caplog):
    """tf <= t0 gives a negative status, no NaN residuals."""
    config = brachistochrone(3)
    z = _random_point(config)
    z[-1] = tf

    with caplog.at_level(logging.WARNING, logger="brachnlp.transcription.userfun"):
        result = user_function(z, config)

    assert not result.ok
    assert result.status == EvaluationStatus.UNDEFINED
    assert int(result.status) < 0
    assert result.F is None and result.G is None
    assert "Undefined trial point" in caplog.text

    with pytest.raises(DegenerateStepError):
        evaluate(z, config)


def test_user_function_raises_configuration_defects():
    config = brachistochrone(3)
    with pytest.raises(ConfigurationError):
        user_function(np.zeros(7), config)
