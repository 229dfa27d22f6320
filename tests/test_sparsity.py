"""Tests for the sparsity pattern and value extraction."""

import numpy as np
import pytest
import scipy.sparse

from brachnlp.core.errors import ConfigurationError, StructureMismatchError
from brachnlp.core.pattern import SparsityPattern
from brachnlp.problem.setup import brachistochrone
from brachnlp.transcription.jacobian import dense_jacobian
from brachnlp.transcription.sparsity import extract, scatter
from brachnlp.transcription.userfun import evaluate


def _random_point(config, seed=0):
    rng = np.random.default_rng(seed)
    N = config.N
    states = rng.uniform(0.1, 2.0, size=(3, N + 1))
    theta = rng.uniform(-np.pi, np.pi, size=(1, N))
    return config.layout.pack(states, theta, config.t0 + rng.uniform(0.5, 3.0))


@pytest.mark.parametrize("N", [1, 2, 8])
@pytest.mark.parametrize("kFr", [0.0, 0.5])
def test_default_pattern_size(N, kFr):
    """1 + 5N + 5N + 4N + 5 structural entries, friction shares D's diagonal."""
    config = brachistochrone(N, kFr=kFr)
    assert len(config.sparsity) == 14 * N + 6


def test_builder_nonzeros_are_declared():
    """Every nonzero of the dense Jacobian appears in the pattern."""
    config = brachistochrone(3, kFr=0.4)
    dense = dense_jacobian(_random_point(config), config)

    declared = np.zeros(config.jacobian_shape, dtype=bool)
    declared[config.sparsity.rows, config.sparsity.cols] = True
    assert not np.any((dense != 0.0) & ~declared)


def test_extraction_follows_pattern_order():
    """A permuted mask yields the same values in the permuted order."""
    config = brachistochrone(4, kFr=0.3)
    z = _random_point(config, seed=1)
    G = evaluate(z, config).G

    perm = np.random.default_rng(7).permutation(len(config.sparsity))
    permuted = brachistochrone(4, kFr=0.3, pattern=config.sparsity.permuted(perm))
    G_perm = evaluate(z, permuted).G

    assert np.array_equal(G_perm, G[perm])


def test_reversed_mask_order():
    config = brachistochrone(2)
    z = _random_point(config)
    n = len(config.sparsity)
    reversed_config = brachistochrone(2, pattern=config.sparsity.permuted(np.arange(n)[::-1]))

    assert np.array_equal(evaluate(z, reversed_config).G, evaluate(z, config).G[::-1])


def test_column_major_linear_index():
    """MATLAB-style linear indices reproduce the same coordinates."""
    config = brachistochrone(3)
    pattern = config.sparsity
    index = pattern.linear_index(order="F")

    rebuilt = SparsityPattern.from_linear_index(index, pattern.shape, order="F")

    assert np.array_equal(rebuilt.rows, pattern.rows)
    assert np.array_equal(rebuilt.cols, pattern.cols)
    m = pattern.shape[0]
    assert np.array_equal(index, pattern.rows + m * pattern.cols)


def test_superset_pattern_gives_zeros():
    """Declared entries with no analytic term are reported as exact zeros."""
    config = brachistochrone(3, kFr=0.2)
    pattern = config.sparsity
    # ∂dyn_x/∂y_0 is structurally zero
    extra_row, extra_col = 1, config.layout.state_offset(1)
    superset = SparsityPattern(
        rows=np.append(pattern.rows, extra_row),
        cols=np.append(pattern.cols, extra_col),
        shape=pattern.shape,
    )
    z = _random_point(config)

    G = evaluate(z, brachistochrone(3, kFr=0.2, pattern=superset)).G

    assert G[-1] == 0.0
    assert np.array_equal(G[:-1], evaluate(z, config).G)


def test_missing_entry_is_detected():
    """A pattern lacking a structural entry fails at configuration time."""
    config = brachistochrone(3, kFr=0.2)
    pattern = config.sparsity
    dropped = 5
    keep = np.arange(len(pattern)) != dropped
    partial = SparsityPattern(rows=pattern.rows[keep], cols=pattern.cols[keep], shape=pattern.shape)

    with pytest.raises(StructureMismatchError) as excinfo:
        brachistochrone(3, kFr=0.2, pattern=partial)
    assert (int(pattern.rows[dropped]), int(pattern.cols[dropped])) in excinfo.value.positions


def test_pattern_shape_must_match():
    config = brachistochrone(3)
    pattern = config.sparsity
    wrong = SparsityPattern(rows=pattern.rows, cols=pattern.cols, shape=(100, 100))
    with pytest.raises(ConfigurationError):
        brachistochrone(3, pattern=wrong)


def test_pattern_outside_jacobian():
    with pytest.raises(ConfigurationError):
        SparsityPattern(rows=np.array([0, 3]), cols=np.array([0, 1]), shape=(3, 3))
    with pytest.raises(ConfigurationError):
        SparsityPattern(rows=np.array([0, -1]), cols=np.array([0, 1]), shape=(3, 3))
    with pytest.raises(ConfigurationError):
        SparsityPattern.from_linear_index(np.array([0, 9]), (3, 3))


def test_pattern_duplicates_rejected():
    with pytest.raises(ConfigurationError):
        SparsityPattern(rows=np.array([1, 1]), cols=np.array([2, 2]), shape=(3, 3))


def test_pattern_non_integer_rejected():
    with pytest.raises(ConfigurationError):
        SparsityPattern(rows=np.array([0.5]), cols=np.array([1.0]), shape=(3, 3))


def test_permuted_requires_permutation():
    pattern = SparsityPattern(rows=np.array([0, 1]), cols=np.array([0, 1]), shape=(2, 2))
    with pytest.raises(ConfigurationError):
        pattern.permuted(np.array([0, 0]))


def test_extract_dense_and_sparse_agree():
    dense = np.array([[1.0, 0.0, 2.0], [0.0, 3.0, 0.0]])
    pattern = SparsityPattern(rows=np.array([1, 0, 0]), cols=np.array([1, 2, 0]), shape=(2, 3))

    expected = np.array([3.0, 2.0, 1.0])
    assert np.array_equal(extract(dense, pattern, validate=True), expected)
    assert np.array_equal(extract(scipy.sparse.csr_matrix(dense), pattern, validate=True), expected)


def test_extract_validate_detects_undeclared_nonzero():
    dense = np.array([[1.0, 5.0], [0.0, 3.0]])
    pattern = SparsityPattern(rows=np.array([0, 1]), cols=np.array([0, 1]), shape=(2, 2))

    # silently dropped without validation
    assert np.array_equal(extract(dense, pattern), [1.0, 3.0])

    with pytest.raises(StructureMismatchError) as excinfo:
        extract(dense, pattern, validate=True)
    assert excinfo.value.positions == [(0, 1)]

    with pytest.raises(StructureMismatchError):
        extract(scipy.sparse.coo_matrix(dense), pattern, validate=True)


def test_extract_shape_mismatch():
    pattern = SparsityPattern(rows=np.array([0]), cols=np.array([0]), shape=(2, 2))
    with pytest.raises(ConfigurationError):
        extract(np.zeros((3, 2)), pattern)


def test_scatter_sums_shared_slots():
    G = scatter(np.array([1.0, 2.0, 4.0]), np.array([2, 0, 2]), 4)
    assert np.array_equal(G, [2.0, 0.0, 5.0, 0.0])


def test_to_matrix_round_trip():
    pattern = SparsityPattern(rows=np.array([1, 0]), cols=np.array([0, 2]), shape=(2, 3))
    matrix = pattern.to_matrix(np.array([7.0, 8.0]))
    assert np.array_equal(extract(matrix, pattern), [7.0, 8.0])
