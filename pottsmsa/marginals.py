#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Weighted first and second order marginals of an encoded alignment
"""
import logging

import numpy as np
from numba import jit

from .indexing import PairCount

LOGGER = logging.getLogger(__name__)


@jit(nopython=True)
def CountSiteFrequencies(msa, weights, nbrcodes):
    nbrseq, nbrpos = msa.shape
    fi = np.zeros((nbrpos, nbrcodes))
    for s in range(0, nbrseq):
        for i in range(0, nbrpos):
            a = msa[s, i]
            if a < 0:
                a += nbrcodes
            fi[i, a] += weights[s]
    return fi


@jit(nopython=True)
def CountPairFrequencies(msa, weights, nbrcodes):
    nbrseq, nbrpos = msa.shape
    fij = np.zeros((PairCount(nbrpos), nbrcodes, nbrcodes))
    for s in range(0, nbrseq):
        p = 0
        for i in range(0, nbrpos - 1):
            a = msa[s, i]
            if a < 0:
                a += nbrcodes
            for j in range(i + 1, nbrpos):
                b = msa[s, j]
                if b < 0:
                    b += nbrcodes
                fij[p, a, b] += weights[s]
                p += 1
    return fij


@jit(nopython=True)
def CountUngappedFrequencies(msa, weights, nbrcodes):
    ''' Weighted counts over residues only (code > 0, shifted down by one),
    plus the gap and doubly ungapped weights. nbrcodes excludes the gap. '''
    nbrseq, nbrpos = msa.shape
    nbrpairs = PairCount(nbrpos)
    gapi = np.zeros(nbrpos)
    ungapij = np.zeros(nbrpairs)
    fi = np.zeros((nbrpos, nbrcodes))
    fij = np.zeros((nbrpairs, nbrcodes, nbrcodes))
    for s in range(0, nbrseq):
        w = weights[s]
        for i in range(0, nbrpos):
            if msa[s, i] == 0:
                gapi[i] += w
            elif msa[s, i] > 0:
                fi[i, msa[s, i] - 1] += w
        p = 0
        for i in range(0, nbrpos - 1):
            for j in range(i + 1, nbrpos):
                if msa[s, i] > 0 and msa[s, j] > 0:
                    ungapij[p] += w
                    fij[p, msa[s, i] - 1, msa[s, j] - 1] += w
                p += 1
    return fi, fij, gapi, ungapij


def NormalizeBlocks(counts):
    ''' Normalize every leading-axis slice to sum to one. Slices without any
    weight are set to the uniform distribution. Returns the number of such
    slices. '''
    nbrblocks = counts.shape[0]
    flat = counts.reshape(nbrblocks, int(np.prod(counts.shape[1:])))
    sums = flat.sum(axis=1)
    empty = sums <= 0
    flat[~empty] /= sums[~empty, None]
    flat[empty] = 1.0 / flat.shape[1]
    return int(np.count_nonzero(empty))


def CountMarginals(ali, options=None, logger=None):
    """
    Fill ali.fi (nSites, nCodes) and ali.fij (nPairs, nCodes, nCodes).

    With options.gap_reduce the gap is dropped from the alphabet
    (ali.nCodes = len(alphabet) - 1), ali.gapi / ali.ungapij hold the
    weighted gap and doubly ungapped fractions, and fi / fij are the
    distributions conditioned on residues being present.
    """
    logger = logger or LOGGER
    gap_reduce = options.gap_reduce if options is not None else False
    Zinv = 1.0 / ali.nEff

    if gap_reduce:
        # Condition the marginals on ungapped
        ali.nCodes = len(ali.alphabet) - 1
        fi, fij, gapi, ungapij = CountUngappedFrequencies(
            ali.sequences, ali.weights, ali.nCodes)
        ali.gapi = gapi * Zinv
        ali.ungapij = ungapij * Zinv

        # Normalize conditional distributions
        emptysites = NormalizeBlocks(fi)
        emptypairs = NormalizeBlocks(fij)
        if emptysites or emptypairs:
            logger.warning(
                "%d sites and %d pairs have no ungapped weight, using uniform "
                "conditional marginals for them", emptysites, emptypairs)
        ali.fi = fi
        ali.fij = fij
    else:
        ali.nCodes = len(ali.alphabet)
        ali.fi = CountSiteFrequencies(ali.sequences, ali.weights, ali.nCodes) * Zinv
        ali.fij = CountPairFrequencies(ali.sequences, ali.weights, ali.nCodes) * Zinv
        ali.gapi = None
        ali.ungapij = None
    return ali.fi, ali.fij
