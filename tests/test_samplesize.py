"""Effective sample size by Robbins-Monro on log(N)."""

from __future__ import annotations

import logging
import time

import numpy as np
import pytest
from scipy.stats import entropy

from pottsmsa.config import Options
from pottsmsa.marginals import CountMarginals
from pottsmsa.samplesize import (
    AverageMutualInformation,
    EstimateSampleSize,
    InverseCDF,
    SampleCategoricalDistribution,
    SampleTrialMI,
    StochasticRound,
    TableMutualInformation,
)

from conftest import make_alignment


def _prepared(seed=0, nbrseq=30, nbrpos=6, gap_reduce=False):
    rng = np.random.default_rng(seed)
    ali = make_alignment(rng.integers(0, 3, size=(nbrseq, nbrpos)))
    CountMarginals(ali, Options(alphabet="-AC", gap_reduce=gap_reduce))
    return ali


def _options(**kwargs):
    defaults = dict(alphabet="-AC", sample_rounds=20, sample_batch=10, seed=7)
    defaults.update(kwargs)
    return Options(**defaults)


def test_mutual_information_of_independent_sites_is_zero() -> None:
    fi = np.array([[0.5, 0.5], [0.25, 0.75]])
    fij = np.outer(fi[0], fi[1])[None, :, :]
    assert AverageMutualInformation(fi, fij) == pytest.approx(0.0, abs=1e-12)
    assert TableMutualInformation(fij[0]) == pytest.approx(0.0, abs=1e-12)


def test_mutual_information_of_copied_sites() -> None:
    fi = np.array([[0.5, 0.5], [0.5, 0.5]])
    fij = np.array([[[0.5, 0.0], [0.0, 0.5]]])
    assert AverageMutualInformation(fi, fij) == pytest.approx(np.log(2))
    assert TableMutualInformation(fij[0]) == pytest.approx(np.log(2))


def test_average_mutual_information_without_pairs() -> None:
    assert AverageMutualInformation(np.ones((1, 3)) / 3, np.zeros((0, 3, 3))) == 0.0


def test_sampled_distribution_is_normalized() -> None:
    rng = np.random.default_rng(1)
    p = SampleCategoricalDistribution(np.array([5.0, 0.0, 2.0]), rng)
    assert p.shape == (3,)
    assert np.all(p > 0)
    assert p.sum() == pytest.approx(1.0)


def test_stochastic_round() -> None:
    rng = np.random.default_rng(2)
    assert StochasticRound(4.0, rng) == 4
    draws = {StochasticRound(2.3, rng) for _ in range(200)}
    assert draws <= {2, 3}
    assert draws == {2, 3}


def test_inverse_cdf() -> None:
    cdf = np.array([0.2, 0.5, 1.0])
    assert [InverseCDF(cdf, u) for u in (0.1, 0.2, 0.3, 0.99)] == [0, 0, 1, 2]
    # Rounding can leave the last CDF entry just below one
    assert InverseCDF(np.array([0.5, 0.9999]), 1.0) == 1


def test_table_mutual_information_matches_entropies() -> None:
    rng = np.random.default_rng(4)
    F = rng.random((4, 3))
    expected = entropy(F.sum(axis=1)) + entropy(F.sum(axis=0)) - entropy(F.ravel())
    assert TableMutualInformation(F) == pytest.approx(expected)
    assert TableMutualInformation(np.zeros((2, 2))) == 0.0


def test_empty_trial_has_no_information() -> None:
    rng = np.random.default_rng(0)
    fi = np.full((2, 3), 1 / 3)
    assert SampleTrialMI(fi, 0, 1, 0, rng) == 0.0
    assert SampleTrialMI(fi, 0, 1, 50, rng) >= 0.0


def test_estimate_is_reproducible_with_a_seed() -> None:
    first = _prepared()
    second = _prepared()
    EstimateSampleSize(first, _options())
    EstimateSampleSize(second, _options())
    assert first.nEff == second.nEff
    np.testing.assert_array_equal(first.weights, second.weights)


def test_weights_are_rescaled_to_new_sample_size() -> None:
    ali = _prepared()
    before = ali.weights.copy()
    nEff = EstimateSampleSize(ali, _options())
    assert nEff > 0
    assert ali.nEff == nEff
    assert ali.weights.sum() == pytest.approx(nEff)
    ratio = ali.history["sample_size_ratio"]
    np.testing.assert_allclose(ali.weights, before * ratio)
    assert ali.history["average_MI"] >= 0.0


def test_gap_conditioned_estimate_runs() -> None:
    ali = _prepared(gap_reduce=True)
    nEff = EstimateSampleSize(ali, _options(gap_reduce=True))
    assert np.isfinite(nEff)
    assert nEff > 0


def test_single_site_keeps_sample_size(caplog) -> None:
    ali = _prepared(nbrpos=1)
    with caplog.at_level(logging.WARNING):
        nEff = EstimateSampleSize(ali, _options())
    assert nEff == ali.nEff == 30.0
    assert "at least two sites" in caplog.text


def test_default_schedule_finishes_quickly() -> None:
    rng = np.random.default_rng(5)
    ali = make_alignment(rng.integers(0, 3, size=(300, 40)))
    CountMarginals(ali)
    start = time.perf_counter()
    EstimateSampleSize(ali, Options(alphabet="-AC"))
    # Generous bound, includes kernel compilation when run on its own
    assert time.perf_counter() - start < 30.0
    assert np.isfinite(ali.nEff)
