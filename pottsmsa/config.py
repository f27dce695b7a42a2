#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Run options shared by every stage of the alignment pipeline
"""
from dataclasses import dataclass
from typing import Optional


# Reference amino acid indexing, position 0 is the gap
CODES_AA = "-ACDEFGHIKLMNPQRSTVWY"

REWEIGHTING_THETA = 0.20
REWEIGHTING_SCALE = 1.0

SAMPLESIZE_ROUNDS = 1000
SAMPLESIZE_BATCH = 100
SAMPLESIZE_LEARNING_RATE = 10.0
SAMPLESIZE_SEED = 42

ESTIMATORS = ("plm", "map", "bayes", "vbayes")


@dataclass
class Options:
    """
    Configuration consumed by the ingestor, reweighter, marginal and
    sample-size estimators.

    `estimator` is only read here to pick the parameter file layout;
    everything else about it belongs to the downstream engine.
    """
    theta: float = REWEIGHTING_THETA
    scale: float = REWEIGHTING_SCALE
    alphabet: str = CODES_AA
    target: Optional[str] = None
    gap_reduce: bool = False
    estimator: str = "plm"
    zero_apc: bool = False
    ncores: int = 1
    sample_rounds: int = SAMPLESIZE_ROUNDS
    sample_batch: int = SAMPLESIZE_BATCH
    learning_rate: float = SAMPLESIZE_LEARNING_RATE
    seed: int = SAMPLESIZE_SEED
    pseudo_count: float = 1.0
    progress: bool = False

    @property
    def reference_alphabet(self) -> bool:
        return self.alphabet == CODES_AA

    @property
    def reweighting(self) -> bool:
        """Neighborhood reweighting only applies for theta on [0,1]."""
        return 0 <= self.theta <= 1

    def validate(self) -> "Options":
        if not self.alphabet:
            raise ValueError("alphabet must contain at least one symbol")
        if self.scale <= 0:
            raise ValueError(f"scale must be > 0, got {self.scale}")
        if self.estimator not in ESTIMATORS:
            raise ValueError(
                f"unknown estimator {self.estimator!r}, expected one of {ESTIMATORS}")
        if self.ncores < 1:
            raise ValueError(f"ncores must be >= 1, got {self.ncores}")
        if self.sample_rounds < 1 or self.sample_batch < 1:
            raise ValueError("sample_rounds and sample_batch must be >= 1")
        if self.pseudo_count <= 0:
            raise ValueError(f"pseudo_count must be > 0, got {self.pseudo_count}")
        return self
