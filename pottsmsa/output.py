#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Writers for estimated parameters, coupling scores and alignment statistics
"""
import h5py
import numpy as np
import pandas as pd

from .indexing import PairCount, PairSites, SplitParameters

OUTPUT_PRECISION = np.float32


###############################################################################
##  PARAMETER LAYOUT
###############################################################################

def CountParameters(ali, estimator="plm"):
    ''' Length of the parameter vector the estimator has to return. Sets
    ali.nParams to the size of the field + coupling block. '''
    nbrpairs = PairCount(ali.nSites)
    ali.nParams = ali.nSites * ali.nCodes + nbrpairs * ali.nCodes * ali.nCodes
    if estimator == "vbayes":
        return 2 * (ali.nParams + 2 + ali.nSites + nbrpairs)
    return ali.nParams


def SplitVBayes(x, ali):
    ''' Means and standard deviations of a variational posterior vector:
    two global scales, per-site and per-pair relevances, then the
    fields and couplings. '''
    nbrpairs = PairCount(ali.nSites)
    offset = 2 + ali.nSites + nbrpairs
    n = ali.nSites * ali.nCodes + nbrpairs * ali.nCodes * ali.nCodes + offset
    x = np.asarray(x, dtype=float)
    if x.shape[0] != 2 * n:
        raise ValueError(
            f"parameter vector has {x.shape[0]} entries, expected {2 * n}")
    parts = {}
    for key, v in (("mu", x[:n]), ("sigma", x[n:])):
        hi, eij = SplitParameters(v[offset:], ali.nSites, ali.nCodes)
        parts[key] = {
            "scales": v[:2],
            "lambda_h": v[2:2 + ali.nSites],
            "lambda_e": v[2 + ali.nSites:offset],
            "hi": hi,
            "eij": eij,
        }
    return parts["mu"], parts["sigma"]


###############################################################################
##  COUPLING SCORES
###############################################################################

def APC(scores, nbrsites):
    ''' Average product correction of pair scores stored in pair order '''
    I, J = PairSites(nbrsites)
    nbrpairs = scores.shape[0]
    C_pos_avg = np.zeros(nbrsites)
    np.add.at(C_pos_avg, I, scores)
    np.add.at(C_pos_avg, J, scores)
    C_pos_avg /= (nbrsites - 1)
    C_avg = scores.sum() / nbrpairs
    if C_avg == 0:
        return scores.copy()
    return scores - C_pos_avg[I] * C_pos_avg[J] / C_avg


def CouplingScores(eij, nbrsites, zero_apc=False):
    ''' Frobenius norm of each coupling block, APC corrected unless
    zero_apc. eij is (nbrpairs, nbrcodes, nbrcodes). '''
    norms = np.sqrt(np.sum(eij * eij, axis=(1, 2)))
    if zero_apc or norms.shape[0] == 0:
        return norms
    return APC(norms, nbrsites)


def CouplingTable(ali, x, options):
    if options.estimator == "vbayes":
        eij = SplitVBayes(x, ali)[0]["eij"]
    else:
        eij = SplitParameters(x, ali.nSites, ali.nCodes)[1]
    scores = CouplingScores(eij, ali.nSites, options.zero_apc)
    I, J = PairSites(ali.nSites)
    if ali.focus:
        numbers = ali.SiteNumbers()
        residues = np.array(ali.FocusResidues())
        return pd.DataFrame({
            "i": numbers[I], "A_i": residues[I],
            "j": numbers[J], "A_j": residues[J],
            "placeholder": 0, "score": scores})
    return pd.DataFrame({
        "i": I + 1, "A_i": "-", "j": J + 1, "A_j": "-",
        "placeholder": 0, "score": scores})


def WriteCouplingScores(path, ali, x, options):
    table = CouplingTable(ali, x, options)
    table.to_csv(path, sep=' ', header=False, index=False, float_format='%f')
    return table


###############################################################################
##  BINARY PARAMETER FILES
###############################################################################

def _WriteHeader(f, ali):
    np.array([ali.nSites, ali.nCodes], dtype=np.int32).tofile(f)
    residues = ''.join(ali.FocusResidues()).encode('ascii')
    f.write(residues)
    ali.SiteNumbers().astype(np.int32).tofile(f)


def _WritePairs(f, ali, blocks):
    I, J = PairSites(ali.nSites)
    for p in range(I.shape[0]):
        np.array([I[p] + 1, J[p] + 1], dtype=np.int32).tofile(f)
        for block in blocks:
            block[p].astype(OUTPUT_PRECISION).tofile(f)


def WriteParametersFull(path, x, ali):
    hi, eij = SplitParameters(x, ali.nSites, ali.nCodes)
    with open(path, 'wb') as f:
        _WriteHeader(f, ali)
        ali.fi.astype(OUTPUT_PRECISION).tofile(f)
        hi.astype(OUTPUT_PRECISION).tofile(f)
        _WritePairs(f, ali, (ali.fij, eij))


def WriteParametersVBayes(path, x, ali):
    ''' Gaussian approximation to the posterior over parameters and
    hyperparameters, means followed by standard deviations '''
    mu, sigma = SplitVBayes(x, ali)
    with open(path, 'wb') as f:
        _WriteHeader(f, ali)
        np.array([mu["scales"][0], sigma["scales"][0],
                  mu["scales"][1], sigma["scales"][1]],
                 dtype=OUTPUT_PRECISION).tofile(f)
        for key in ("lambda_h", "lambda_e"):
            mu[key].astype(OUTPUT_PRECISION).tofile(f)
            sigma[key].astype(OUTPUT_PRECISION).tofile(f)
        ali.fi.astype(OUTPUT_PRECISION).tofile(f)
        mu["hi"].astype(OUTPUT_PRECISION).tofile(f)
        sigma["hi"].astype(OUTPUT_PRECISION).tofile(f)
        _WritePairs(f, ali, (ali.fij, mu["eij"], sigma["eij"]))


def WriteParameters(path, x, ali, options):
    if options.estimator == "vbayes":
        WriteParametersVBayes(path, x, ali)
    else:
        WriteParametersFull(path, x, ali)


###############################################################################
##  STATISTICS
###############################################################################

def SaveStatistics(path, ali):
    with h5py.File(path, 'w') as hf:
        hf.attrs['nSeqs'] = ali.nSeqs
        hf.attrs['nSites'] = ali.nSites
        hf.attrs['nCodes'] = ali.nCodes
        hf.attrs['nEff'] = ali.nEff
        hf.attrs['alphabet'] = ali.alphabet
        hf.attrs['target'] = ali.target
        hf.create_dataset('sequences', data=ali.sequences)
        hf.create_dataset('weights', data=ali.weights)
        hf.create_dataset('names', data=np.array(ali.names, dtype=h5py.string_dtype()))
        for key in ('fi', 'fij', 'gapi', 'ungapij', 'offsets'):
            value = getattr(ali, key)
            if value is not None:
                hf.create_dataset(key, data=value)


def LoadStatistics(path):
    stats = {}
    with h5py.File(path, 'r') as hf:
        stats.update({k: hf.attrs[k] for k in hf.attrs})
        for key in hf.keys():
            stats[key] = hf[key][()]
    if 'names' in stats:
        stats['names'] = [n.decode() if isinstance(n, bytes) else n
                          for n in stats['names']]
    return stats
