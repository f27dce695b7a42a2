"""Shared fixtures: small FASTA alignments written to a temporary folder."""

from __future__ import annotations

import numpy as np
import pytest

from pottsmsa.alignment import Alignment


@pytest.fixture
def write_fasta(tmp_path):
    def _write(records, name="alignment.fa", wrap=None):
        path = tmp_path / name
        with open(path, "w") as f:
            for header, seq in records:
                f.write(">" + header + "\n")
                if wrap:
                    for k in range(0, len(seq), wrap):
                        f.write(seq[k:k + wrap] + "\n")
                else:
                    f.write(seq + "\n")
        return str(path)

    return _write


@pytest.fixture
def small_records():
    return [("s1", "AACA"), ("s2", "AACA"), ("s3", "CCAA")]


def make_alignment(rows, alphabet="-AC"):
    """Alignment built directly from code rows, weights set to one."""
    ali = Alignment(
        alphabet=alphabet,
        sequences=np.asarray(rows, dtype=np.int16),
        names=[f"seq{k}" for k in range(len(rows))],
        nCodes=len(alphabet),
    )
    ali.ResetWeights()
    return ali
