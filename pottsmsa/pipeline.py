#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Alignment -> sufficient statistics pipeline. Stages run strictly in order,
each one owning the Alignment while it runs:

    ReadAlignment -> ReweightSequences -> CountMarginals
        -> EstimateSampleSize -> (external) estimator
"""
import logging

import numpy as np

from .config import Options
from .ingest import ReadAlignment
from .marginals import CountMarginals
from .output import CountParameters
from .reweight import ReweightSequences
from .samplesize import EstimateSampleSize

LOGGER = logging.getLogger(__name__)


def PrepareAlignment(path, options=None, logger=None):
    options = (options if options is not None else Options()).validate()
    logger = logger or LOGGER

    # Read multiple sequence alignment
    ali = ReadAlignment(path, options, logger=logger)

    # Reweight sequences by inverse neighborhood density
    ReweightSequences(ali, options.theta, options.scale, options.ncores,
                      logger=logger)

    # Compute sitewise and pairwise marginal distributions
    CountMarginals(ali, options, logger=logger)

    # Estimate effective sample size
    if options.reweighting:
        EstimateSampleSize(ali, options, logger=logger)
    return ali


def RunPipeline(path, options=None, estimator=None, logger=None):
    """
    Prepare the alignment and, when an estimator is given, infer the model
    parameters with it.

    `estimator` is called as estimator(ali, options) and must return the flat
    parameter vector described by output.CountParameters.

    Returns
    -------
    ali : Alignment
    x : np.ndarray or None
    """
    options = (options if options is not None else Options()).validate()
    ali = PrepareAlignment(path, options, logger)
    expected = CountParameters(ali, options.estimator)
    if estimator is None:
        return ali, None

    x = np.asarray(estimator(ali, options), dtype=float)
    if x.shape != (expected,):
        raise ValueError(
            f"estimator returned {x.shape[0] if x.ndim else 0} parameters, "
            f"expected {expected}")
    return ali, x
