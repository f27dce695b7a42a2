#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Read a FASTA alignment into an encoded Alignment record.

The file is read once into (name, sequence) records and validated, then
encoded. In focus mode only the columns where the focus sequence has an
uppercase residue are kept, and each kept column is mapped back to the
numbering of the focus sequence region (NAME/START-END).
"""
import logging
import os
import re

import numpy as np
from Bio.SeqIO.FastaIO import SimpleFastaParser

from .alignment import Alignment, AlignmentFormatError
from .alphabet import CodeTable, EncodeSequence
from .config import Options

LOGGER = logging.getLogger(__name__)

_REGION_START = re.compile(r'\d+')


###############################################################################
##  READING
###############################################################################

def LoadRecords(path):
    ''' First pass: parse name / sequence records (sequence lines are
    concatenated up to the next '>') and check that every sequence has the
    length of the first one. '''
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Error opening alignment file: {path}")

    # One character per byte, so that any byte outside of the alphabet
    # encodes to nCodes instead of failing to decode
    with open(path, 'r', encoding='latin-1') as handle:
        first = handle.readline()
        if not first.startswith('>'):
            raise AlignmentFormatError(
                "Error reading alignment: sequences should start with >")
        handle.seek(0)
        records = list(SimpleFastaParser(handle))

    nbrpos = len(records[0][1])
    for name, seq in records:
        if len(seq) != nbrpos:
            raise AlignmentFormatError(
                f"Incompatible sequence length ({len(seq)} should be {nbrpos}) "
                f"for {name}:\n{seq}")
    if nbrpos == 0:
        raise AlignmentFormatError(
            "Error reading alignment: empty alignment, no sequence data")
    return records


def EncodeRecords(records, alphabet, reference):
    ''' Second pass: allocate the full nbrseq x nbrpos block and encode it '''
    lut = CodeTable(alphabet, reference)
    nbrseq = len(records)
    nbrpos = len(records[0][1])
    msa = np.zeros((nbrseq, nbrpos), dtype=np.int16)
    for s, (_, seq) in enumerate(records):
        msa[s, :] = EncodeSequence(seq, lut)
    return msa


###############################################################################
##  FOCUS MODE
###############################################################################

def FindFocus(names, identifier, logger=LOGGER):
    target = -1
    for s, name in enumerate(names):
        if name.startswith(identifier):
            if target >= 0:
                logger.warning(
                    "Multiple sequences start with %s, keeping sequence %d "
                    "and ignoring sequence %d", identifier, target + 1, s + 1)
            else:
                target = s
    if target >= 0:
        logger.info("Found focus %s as sequence %d", identifier, target + 1)
    else:
        logger.warning(
            "Could not find %s, proceeding without focus sequence", identifier)
    return target


def ParseRegionStart(name, identifier, logger=LOGGER):
    ''' Region start of a focus name NAME/START-END, where NAME is the
    matched identifier. Returns None when the name carries no region. '''
    k = len(identifier)
    if len(name) > k + 1 and name[k] == '/':
        match = _REGION_START.match(name, k + 1)
        if match is not None:
            start = int(match.group())
            logger.info("Region starts at %d", start)
            return start
        logger.warning("Error parsing region, assuming start at 1")
    return None


def FocusSites(focusrow, reference, gap_reduce):
    sitevalid = np.ones(focusrow.shape[0], dtype=bool)
    # For proteins, remove lower case columns
    if reference:
        sitevalid &= focusrow >= 0
    # Discard gaps
    if reference or gap_reduce:
        sitevalid &= focusrow != 0
    return sitevalid


def MapOffsets(sitevalid, region_start=None):
    ''' Original numbering of the kept columns. With a region start the
    first kept column is numbered at the region start, and later columns
    keep their spacing in the full alignment. '''
    cols = np.flatnonzero(sitevalid)
    if region_start is None or cols.shape[0] == 0:
        return (cols + 1).astype(np.int32)
    return (cols - cols[0] + region_start).astype(np.int32)


###############################################################################
##  INGESTION
###############################################################################

def ReadAlignment(path, options=None, logger=None):
    """
    Read and encode a FASTA alignment.

    Rows with out-of-alphabet characters are always dropped. When
    `options.target` is set and found, columns are restricted to the focus
    sequence (no gaps, and for the reference amino acid alphabet no
    lowercase residues) and `offsets` maps them back to the focus numbering.

    Raises
    ------
    FileNotFoundError
        If the alignment file does not exist.
    AlignmentFormatError
        If the file does not start with '>', sequence lengths differ, or
        nothing is left after filtering.
    """
    options = options if options is not None else Options()
    logger = logger or LOGGER
    alphabet = options.alphabet
    reference = options.reference_alphabet
    nbrcodes = len(alphabet)

    records = LoadRecords(path)
    names = [name for name, _ in records]
    msa = EncodeRecords(records, alphabet, reference)
    nbrseq, nbrpos = msa.shape

    target = -1
    if options.target is not None:
        target = FindFocus(names, options.target, logger)

    # Always discard any sequences (rows) with out-of-alphabet characters
    seqvalid = np.all(msa != nbrcodes, axis=1)
    nbrvalidseq = int(np.count_nonzero(seqvalid))
    logger.info("%d valid sequences out of %d", nbrvalidseq, nbrseq)
    if target >= 0 and not seqvalid[target]:
        logger.warning(
            "Focus sequence %s has out-of-alphabet characters and was "
            "discarded, proceeding without focus sequence", names[target])
        target = -1

    sitevalid = np.ones(nbrpos, dtype=bool)
    offsets = None
    if target >= 0:
        sitevalid = FocusSites(msa[target], reference, options.gap_reduce)
        logger.info("%d sites out of %d", int(np.count_nonzero(sitevalid)), nbrpos)
        region_start = ParseRegionStart(names[target], options.target, logger)
        offsets = MapOffsets(sitevalid, region_start)
        # Reposition the target for the reduced alignment
        target = int(np.count_nonzero(seqvalid[:target + 1])) - 1
    else:
        logger.info("%d sites", nbrpos)

    if nbrvalidseq == 0:
        raise AlignmentFormatError("No valid sequences left in alignment")
    if not np.any(sitevalid):
        raise AlignmentFormatError("No valid sites left in focus sequence")

    # Copy only selected rows and columns
    if nbrvalidseq < nbrseq or not np.all(sitevalid):
        msa = msa[seqvalid][:, sitevalid].copy()
        names = [name for name, keep in zip(names, seqvalid) if keep]

    # Shift any lowercase codes back to uppercase
    if reference:
        msa[msa < 0] += nbrcodes

    ali = Alignment(alphabet=alphabet, sequences=msa, names=names,
                    nCodes=nbrcodes, target=target, offsets=offsets)
    ali.ResetWeights()
    return ali
