#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Flattened indexing of site x code and pair x code x code arrays.

Pairs (i < j) are stored row-major, in the same order as
np.triu_indices(nbrsites, k=1). Parameter vectors hold the fields
(nbrsites x nbrcodes) first, followed by the couplings
(nbrpairs x nbrcodes x nbrcodes).
"""
import numpy as np
from numba import jit


@jit(nopython=True)
def PairCount(nbrsites):
    return nbrsites * (nbrsites - 1) // 2


@jit(nopython=True)
def PairIndex(i, j, nbrsites):
    if i > j:
        i, j = j, i
    return i * (2 * nbrsites - i - 1) // 2 + (j - i - 1)


def PairSites(nbrsites):
    return np.triu_indices(nbrsites, k=1)


@jit(nopython=True)
def FieldIndex(i, a, nbrcodes):
    return i * nbrcodes + a


@jit(nopython=True)
def CouplingIndex(i, j, a, b, nbrsites, nbrcodes):
    return (nbrsites * nbrcodes
            + PairIndex(i, j, nbrsites) * nbrcodes * nbrcodes
            + a * nbrcodes + b)


def SplitParameters(x, nbrsites, nbrcodes):
    ''' View a flat parameter vector as fields (nbrsites, nbrcodes) and
    couplings (nbrpairs, nbrcodes, nbrcodes). '''
    nbrfields = nbrsites * nbrcodes
    nbrpairs = PairCount(nbrsites)
    expected = nbrfields + nbrpairs * nbrcodes * nbrcodes
    x = np.asarray(x)
    if x.shape[0] != expected:
        raise ValueError(
            f"parameter vector has {x.shape[0]} entries, expected {expected}")
    hi = x[:nbrfields].reshape(nbrsites, nbrcodes)
    eij = x[nbrfields:].reshape(nbrpairs, nbrcodes, nbrcodes)
    return hi, eij
