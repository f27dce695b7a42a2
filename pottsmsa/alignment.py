#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Alignment record shared by the ingestor, reweighter, marginal and sample-size
estimators. Each stage owns the record while it runs and mutates it in place.
"""
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .alphabet import DecodeCode
from .indexing import PairCount


class AlignmentFormatError(ValueError):
    """Raised when an alignment file is not a rectangular FASTA block."""


@dataclass
class Alignment:
    """
    Encoded multiple sequence alignment with its sufficient statistics.

    Attributes
    ----------
    alphabet : str
        Symbols, position 0 is the gap / wildcard.
    sequences : np.ndarray
        (nSeqs, nSites) signed integer codes.
    names : list[str]
        Sequence identifiers, parallel to the rows of `sequences`.
    nCodes : int
        len(alphabet), or len(alphabet) - 1 once gap-conditioned marginals
        have been counted.
    weights : np.ndarray
        (nSeqs,) sequence weights, nEff is their sum.
    target : int
        Row of the focus sequence, -1 without focus.
    offsets : np.ndarray or None
        (nSites,) original residue numbering of each column (focus mode).
    fi, fij : np.ndarray or None
        (nSites, nCodes) and (nPairs, nCodes, nCodes) marginals.
    gapi, ungapij : np.ndarray or None
        (nSites,) gap fractions and (nPairs,) doubly ungapped fractions,
        gap-conditioned mode only.
    """
    alphabet: str
    sequences: np.ndarray
    names: List[str]
    nCodes: int
    weights: Optional[np.ndarray] = None
    nEff: float = 0.0
    target: int = -1
    offsets: Optional[np.ndarray] = None
    fi: Optional[np.ndarray] = None
    fij: Optional[np.ndarray] = None
    gapi: Optional[np.ndarray] = None
    ungapij: Optional[np.ndarray] = None
    nParams: int = 0
    history: dict = field(default_factory=dict)

    @property
    def nSeqs(self) -> int:
        return self.sequences.shape[0]

    @property
    def nSites(self) -> int:
        return self.sequences.shape[1]

    @property
    def nPairs(self) -> int:
        return PairCount(self.nSites)

    @property
    def focus(self) -> bool:
        return self.target >= 0

    def ResetWeights(self):
        self.weights = np.ones(self.nSeqs)
        self.nEff = float(self.nSeqs)

    def UpdateEffectiveSize(self):
        self.nEff = float(np.sum(self.weights))
        return self.nEff

    def Sequence(self, s):
        """Row s decoded back to characters (lowercase for masked codes)."""
        return ''.join(DecodeCode(int(c), self.alphabet) for c in self.sequences[s])

    def FocusResidues(self):
        ''' Focus residue letters per column, or alphabet[0] everywhere
        without a focus sequence. '''
        if self.focus:
            return [self.alphabet[c] for c in self.sequences[self.target]]
        return [self.alphabet[0]] * self.nSites

    def SiteNumbers(self):
        """Original numbering of each column, 1-based."""
        if self.focus and self.offsets is not None:
            return np.asarray(self.offsets, dtype=np.int32)
        return np.arange(1, self.nSites + 1, dtype=np.int32)
