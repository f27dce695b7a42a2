"""
pottsmsa: sufficient statistics of multiple sequence alignments for
undirected graphical (Potts) models.

    ReadAlignment       -> encoded, focus-filtered Alignment
    ReweightSequences   -> inverse neighborhood weights, nEff
    CountMarginals      -> fi, fij (and gapi, ungapij)
    EstimateSampleSize  -> Miller-Maddow calibrated nEff
"""
from .alignment import Alignment, AlignmentFormatError
from .alphabet import ReadCode, CodeTable, EncodeSequence
from .config import CODES_AA, Options
from .ingest import ReadAlignment
from .marginals import CountMarginals
from .pipeline import PrepareAlignment, RunPipeline
from .reweight import ReweightSequences
from .samplesize import EstimateSampleSize

__all__ = [
    "Alignment", "AlignmentFormatError",
    "ReadCode", "CodeTable", "EncodeSequence",
    "CODES_AA", "Options",
    "ReadAlignment",
    "ReweightSequences",
    "CountMarginals",
    "EstimateSampleSize",
    "PrepareAlignment", "RunPipeline",
]
