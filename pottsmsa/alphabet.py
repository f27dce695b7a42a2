#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Encode alignment characters as signed integer codes

    In alphabet:                     index k               [0, nCodes - 1]
    Lowercase version of alphabet:   k shifted by -nCodes  [-nCodes, -1]
    Out of alphabet:                 nCodes                [nCodes]
"""
import numpy as np

from .config import CODES_AA


def ReadCode(c, alphabet, reference=None):
    nbrcodes = len(alphabet)
    if reference is None:
        reference = alphabet == CODES_AA

    # Protein-specific treatment of '.'
    if reference and c == '.':
        c = '-'

    upper = c.upper()
    for k, symbol in enumerate(alphabet):
        if upper == symbol:
            if c != symbol:
                return k - nbrcodes
            return k
    return nbrcodes


def CodeTable(alphabet, reference=None):
    ''' Lookup table from byte value to code, used to encode whole sequences
    at once. Every byte outside of the alphabet maps to nCodes. '''
    lut = np.empty(256, dtype=np.int16)
    for b in range(256):
        lut[b] = ReadCode(chr(b), alphabet, reference)
    return lut


def EncodeSequence(seq, lut):
    ''' Encode one aligned sequence (str) with a table from CodeTable.
    Characters are taken as latin-1 bytes, anything wider is replaced by
    '?' before the lookup so it ends up out of alphabet. '''
    raw = np.frombuffer(seq.encode('latin-1', 'replace'), dtype=np.uint8)
    return lut[raw]


def DecodeCode(code, alphabet):
    nbrcodes = len(alphabet)
    if 0 <= code < nbrcodes:
        return alphabet[code]
    if -nbrcodes <= code < 0:
        return alphabet[code + nbrcodes].lower()
    return '_'
