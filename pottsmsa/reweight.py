#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Reweight sequences by their inverse neighborhood size. Each sequence's weight
is the inverse of the number of sequences (itself included) with at most
theta divergence from it.
"""
import logging

import numba as nb
import numpy as np
from numba import jit

LOGGER = logging.getLogger(__name__)


@jit(nopython=True)
def NeighborCountsSymmetric(msa, theta):
    ''' Half matrix scan, both counters of a neighboring pair are incremented.
    Single thread only. '''
    nbrseq, nbrpos = msa.shape
    threshold = (1 - theta) * nbrpos
    counts = np.ones(nbrseq)
    for s in range(0, nbrseq - 1):
        for t in range(s + 1, nbrseq):
            identity = 0
            for n in range(0, nbrpos):
                if msa[s, n] == msa[t, n]:
                    identity += 1
            if identity >= threshold:
                counts[s] += 1.0
                counts[t] += 1.0
    return counts


@nb.njit(parallel=True)
def NeighborCountsParallel(msa, theta):
    ''' All ordered pairs, so that a worker only writes counts[s] for the
    rows s it was given. '''
    nbrseq, nbrpos = msa.shape
    threshold = (1 - theta) * nbrpos
    counts = np.ones(nbrseq)
    for s in nb.prange(nbrseq):
        for t in range(0, nbrseq):
            if s != t:
                identity = 0
                for n in range(0, nbrpos):
                    if msa[s, n] == msa[t, n]:
                        identity += 1
                if identity >= threshold:
                    counts[s] += 1.0
    return counts


def SetThreads(ncores):
    maxthreads = nb.config.NUMBA_NUM_THREADS
    nthreads = max(1, min(int(ncores), maxthreads))
    if nthreads < ncores:
        LOGGER.warning(
            "More threads requested than available. Using %d of %d threads",
            nthreads, maxthreads)
    nb.set_num_threads(nthreads)
    return nthreads


def NeighborCounts(msa, theta, ncores=1):
    if ncores > 1:
        SetThreads(ncores)
        return NeighborCountsParallel(msa, float(theta))
    return NeighborCountsSymmetric(msa, float(theta))


def ReweightSequences(ali, theta, scale, ncores=1, logger=None):
    """
    Set ali.weights to scale / (neighborhood size) and ali.nEff to their sum.

    theta outside [0,1] skips the neighborhood computation, all weights are
    then equal to `scale`.
    """
    logger = logger or LOGGER
    weights = np.ones(ali.nSeqs)

    # Only apply reweighting if theta is on [0,1]
    if 0 <= theta <= 1:
        counts = NeighborCounts(ali.sequences, theta, ncores)
        weights = 1.0 / counts

    # Scale sets the effective number of samples per neighborhood
    ali.weights = weights * scale
    ali.UpdateEffectiveSize()
    ali.history['neighborhood_nEff'] = ali.nEff

    if 0 <= theta <= 1:
        logger.info(
            "Neighborhood sample size: %.1f\t(%.0f%% identical neighborhood "
            "= %.3f samples)", ali.nEff, 100 * (1 - theta), scale)
    else:
        logger.warning(
            "Theta not between 0 and 1, no sequence reweighting applied")
