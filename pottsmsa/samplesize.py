#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Estimate the effective sample size by a stochastic optimization procedure
based on Miller-Maddow scaling: find N such that synthetic alignments of N
sequences, drawn from the site-wise marginals, reproduce the average pairwise
mutual information of the data.
"""
import logging

import numpy as np
from numba import jit
from tqdm import tqdm

from .config import Options
from .indexing import PairIndex, PairSites

LOGGER = logging.getLogger(__name__)


def AverageMutualInformation(fi, fij):
    ''' Mutual information of every pair i<j from the marginals, averaged
    over all pairs. Only terms with fij, fi, fj > 0 are summed. '''
    nbrpairs = fij.shape[0]
    if nbrpairs == 0:
        return 0.0
    I, J = PairSites(fi.shape[0])
    fi_pair = np.broadcast_to(fi[I][:, :, None], fij.shape)
    fj_pair = np.broadcast_to(fi[J][:, None, :], fij.shape)
    ok = (fij > 0) & (fi_pair > 0) & (fj_pair > 0)
    MI = np.sum(fij[ok] * (np.log(fij[ok]) - np.log(fi_pair[ok]) - np.log(fj_pair[ok])))
    return float(MI / nbrpairs)


###############################################################################
##  TRIAL KERNELS
###############################################################################

@jit(nopython=True)
def TableMutualInformation(F):
    ''' MI of a joint frequency table, H(rows) + H(cols) - H(joint) '''
    total = F.sum()
    if total <= 0:
        return 0.0
    P = F / total
    prow = P.sum(axis=1)
    pcol = P.sum(axis=0)
    MI = 0.0
    for a in range(0, P.shape[0]):
        for b in range(0, P.shape[1]):
            if P[a, b] > 0:
                MI += P[a, b] * (np.log(P[a, b]) - np.log(prow[a]) - np.log(pcol[b]))
    return MI


@jit(nopython=True)
def SampleCategoricalDistribution(counts, rng, pseudo_count=1.0):
    ''' Draw a probability vector from the Dirichlet posterior of categorical
    counts, rather than returning the empirical frequencies. '''
    p = np.empty(counts.shape[0])
    for a in range(0, counts.shape[0]):
        p[a] = rng.standard_gamma(counts[a] + pseudo_count)
    return p / p.sum()


@jit(nopython=True)
def StochasticRound(x, rng):
    base = np.floor(x)
    if rng.random() < x - base:
        base += 1.0
    return int(base)


@jit(nopython=True)
def InverseCDF(cdf, u):
    ''' Smallest code whose CDF is >= u '''
    for a in range(0, cdf.shape[0]):
        if u <= cdf[a]:
            return a
    return cdf.shape[0] - 1


@jit(nopython=True)
def SampleTrialMI(fi, i, j, nbrsamples, rng, pseudo_count=1.0):
    """Mutual information of nbrsamples independent draws of (Ai, Aj)."""
    if nbrsamples <= 0:
        return 0.0
    nbrcodes = fi.shape[1]

    # Single-site pseudo-counts, rounded half up
    iC = np.floor(nbrsamples * fi[i] + 0.5)
    jC = np.floor(nbrsamples * fi[j] + 0.5)

    # Sample null distribution given single-site counts
    iCDF = np.cumsum(SampleCategoricalDistribution(iC, rng, pseudo_count))
    jCDF = np.cumsum(SampleCategoricalDistribution(jC, rng, pseudo_count))

    # Sample {Ai,Aj} nbrsamples times
    F = np.zeros((nbrcodes, nbrcodes))
    for n in range(0, nbrsamples):
        a = InverseCDF(iCDF, rng.random())
        b = InverseCDF(jCDF, rng.random())
        F[a, b] += 1.0
    return TableMutualInformation(F)


@jit(nopython=True)
def SampleBatchMI(fi, ungapij, Neff, batchsize, rng, pseudo_count):
    ''' Average MI over batchsize trials on random pairs i != j. The local
    sample size of a pair is Neff scaled by ungapij. '''
    nbrpos = fi.shape[0]
    sampleMI = 0.0
    for _ in range(0, batchsize):
        # Pick random i != j
        i = rng.integers(0, nbrpos)
        j = i
        while j == i:
            j = rng.integers(0, nbrpos)

        # Adjust local effective sample size given gap statistics
        NeffLocal = Neff * ungapij[PairIndex(i, j, nbrpos)]
        Nint = StochasticRound(NeffLocal, rng)

        sampleMI += SampleTrialMI(fi, i, j, Nint, rng, pseudo_count) / batchsize
    return sampleMI


###############################################################################
##  ROBBINS-MONRO
###############################################################################

def EstimateSampleSize(ali, options=None, logger=None):
    """
    Recalibrate ali.nEff and ali.weights by Robbins-Monro root finding on
    log(N) for <MI(sample of size N)> - <MI(data)> = 0.

    Runs exactly options.sample_rounds rounds of options.sample_batch trials,
    with a generator seeded by options.seed. Returns the new nEff.
    """
    options = options if options is not None else Options()
    logger = logger or LOGGER
    nbrpos = ali.nSites
    if nbrpos < 2:
        logger.warning("Need at least two sites to estimate sample size")
        return ali.nEff

    # Average MI of the data distribution
    avgMI = AverageMutualInformation(ali.fi, ali.fij)

    # Without gap conditioning every pair sees the full sample
    if options.gap_reduce and ali.ungapij is not None:
        ungapij = np.ascontiguousarray(ali.ungapij, dtype=np.float64)
    else:
        ungapij = np.ones(ali.nPairs)
    fi = np.ascontiguousarray(ali.fi, dtype=np.float64)

    # Stochastic optimization of log(N)
    rng = np.random.default_rng(options.seed)
    uncN = np.log(ali.nEff)
    learningrate = options.learning_rate

    rounds = range(0, options.sample_rounds)
    if options.progress:
        rounds = tqdm(rounds, desc="sample size")
    for t in rounds:
        Neff = np.exp(uncN)
        sampleMI = SampleBatchMI(fi, ungapij, Neff, options.sample_batch, rng,
                                 float(options.pseudo_count))

        if t % 50 == 49:
            logger.debug("%8d\t%8.3f\t%8.2f", t + 1, sampleMI, Neff)

        # Robbins-Monro step
        uncN += (sampleMI - avgMI) * (learningrate / (t + 1))

    ratio = np.exp(uncN) / ali.nEff
    ali.weights = ali.weights * ratio
    ali.nEff = float(np.exp(uncN))
    ali.history['sample_size_ratio'] = float(ratio)
    ali.history['average_MI'] = avgMI
    logger.info(
        "Effective sample size: %.1f\t(%.0f%% identical neighborhood = %.3f "
        "samples)", ali.nEff, 100 * (1 - options.theta), ratio * options.scale)
    return ali.nEff
