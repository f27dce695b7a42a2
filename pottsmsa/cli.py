#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
pottsmsa [options] alignmentfile

Reweights a FASTA alignment, counts its marginals and estimates its effective
sample size. Model parameters come from an external estimator (-x); given
those, estimated parameters (-o) and coupling scores (-c) are written.
"""
import argparse
import logging
import sys

import numba as nb
import numpy as np

from . import config
from .alignment import AlignmentFormatError
from .config import Options
from .output import SaveStatistics, WriteCouplingScores, WriteParameters
from .pipeline import RunPipeline

LOGGER = logging.getLogger("pottsmsa")


def _Cores(value):
    if value == "max":
        return nb.config.NUMBA_NUM_THREADS
    return int(value)


def BuildParser():
    parser = argparse.ArgumentParser(prog="pottsmsa", description=__doc__,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("alignmentfile", help="Multiple sequence alignment in FASTA format")

    out = parser.add_argument_group("output")
    out.add_argument("-c", "--couplings", help="Save coupling scores to file (text)")
    out.add_argument("-o", "--output", help="Save estimated parameters to file (binary)")
    out.add_argument("-x", "--params",
                     help="Parameter vector (.npy) produced by the external estimator")
    out.add_argument("--statistics", help="Save weights and marginals to an HDF5 file")

    proc = parser.add_argument_group("alignment processing")
    proc.add_argument("-s", "--scale", type=float, default=config.REWEIGHTING_SCALE,
                      help="Sequence weights: neighborhood weight [s > 0]")
    proc.add_argument("-t", "--theta", type=float, default=config.REWEIGHTING_THETA,
                      help="Sequence weights: neighborhood divergence [0 < t < 1]")

    est = parser.add_argument_group("estimator")
    sel = est.add_mutually_exclusive_group()
    sel.add_argument("-p", "--persist", dest="estimator", action="store_const", const="map")
    sel.add_argument("-b", "--bayes", dest="estimator", action="store_const", const="bayes")
    sel.add_argument("-v", "--variational", dest="estimator", action="store_const",
                     const="vbayes")
    est.add_argument("-ee", "--estimatele", dest="zero_apc", action="store_true",
                     help="Couplings lambdas estimated, no APC on coupling scores")

    gen = parser.add_argument_group("general")
    gen.add_argument("-a", "--alphabet", default=config.CODES_AA,
                     help="Alternative character set to use for analysis")
    gen.add_argument("-f", "--focus", dest="target",
                     help="Select only uppercase, non-gapped sites from a focus sequence")
    gen.add_argument("-g", "--gapignore", dest="gap_reduce", action="store_true",
                     help="Model sequence likelihoods only by coding, non-gapped portions")
    gen.add_argument("-n", "--ncores", type=_Cores, default=1,
                     help="Number of threads [<number>|max]")
    gen.add_argument("--rounds", type=int, default=config.SAMPLESIZE_ROUNDS,
                     help="Rounds of the sample size estimation")
    gen.add_argument("--batch", type=int, default=config.SAMPLESIZE_BATCH,
                     help="Trials per round of the sample size estimation")
    gen.add_argument("--seed", type=int, default=config.SAMPLESIZE_SEED)
    gen.add_argument("--progress", action="store_true")
    gen.add_argument("--log-level", default="INFO",
                     choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.set_defaults(estimator="plm")
    return parser


def OptionsFromArgs(args):
    return Options(
        theta=args.theta,
        scale=args.scale,
        alphabet=args.alphabet,
        target=args.target,
        gap_reduce=args.gap_reduce,
        estimator=args.estimator,
        zero_apc=args.zero_apc,
        ncores=args.ncores,
        sample_rounds=args.rounds,
        sample_batch=args.batch,
        seed=args.seed,
        progress=args.progress,
    )


def main(argv=None):
    parser = BuildParser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(levelname)s %(name)s: %(message)s",
                        stream=sys.stderr)

    if (args.output or args.couplings) and not args.params:
        parser.error("-o/--output and -c/--couplings need -x/--params")

    options = OptionsFromArgs(args)
    try:
        estimator = None
        if args.params:
            params = np.load(args.params)
            estimator = lambda ali, opts: params
        ali, x = RunPipeline(args.alignmentfile, options, estimator, logger=LOGGER)
        if args.statistics:
            SaveStatistics(args.statistics, ali)
        if args.output:
            WriteParameters(args.output, x, ali, options)
        if args.couplings:
            WriteCouplingScores(args.couplings, ali, x, options)
    except (AlignmentFormatError, ValueError, OSError) as err:
        LOGGER.error("%s", err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
