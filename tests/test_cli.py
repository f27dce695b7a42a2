"""Command line entry point."""

from __future__ import annotations

import numpy as np
import pytest

from pottsmsa.cli import BuildParser, OptionsFromArgs, main
from pottsmsa.output import LoadStatistics


def test_parser_defaults() -> None:
    args = BuildParser().parse_args(["alignment.fa"])
    options = OptionsFromArgs(args)
    assert options.theta == 0.2
    assert options.estimator == "plm"
    assert options.target is None
    assert not options.gap_reduce


def test_parser_estimator_flags() -> None:
    parser = BuildParser()
    assert parser.parse_args(["a.fa", "-v"]).estimator == "vbayes"
    assert parser.parse_args(["a.fa", "-p"]).estimator == "map"
    with pytest.raises(SystemExit):
        parser.parse_args(["a.fa", "-p", "-b"])


def test_statistics_run(write_fasta, small_records, tmp_path) -> None:
    stats = tmp_path / "stats.h5"
    code = main([write_fasta(small_records), "--alphabet=-AC", "-t", "0.2",
                 "--rounds", "5", "--batch", "5", "--statistics", str(stats)])
    assert code == 0
    loaded = LoadStatistics(str(stats))
    assert loaded["nSeqs"] == 3
    assert loaded["fi"].shape == (4, 3)


def test_parameters_and_couplings(write_fasta, small_records, tmp_path) -> None:
    x = tmp_path / "x.npy"
    np.save(x, np.zeros(66))
    couplings = tmp_path / "couplings.txt"
    output = tmp_path / "params.bin"
    code = main([write_fasta(small_records), "--alphabet=-AC", "-t", "2",
                 "-x", str(x), "-c", str(couplings), "-o", str(output)])
    assert code == 0
    assert len(couplings.read_text().splitlines()) == 6
    assert output.stat().st_size > 0


def test_wrong_parameter_length_fails(write_fasta, small_records, tmp_path) -> None:
    x = tmp_path / "x.npy"
    np.save(x, np.zeros(10))
    code = main([write_fasta(small_records), "--alphabet=-AC", "-t", "2",
                 "-x", str(x), "-c", str(tmp_path / "c.txt")])
    assert code == 1


def test_missing_alignment_fails(tmp_path) -> None:
    assert main([str(tmp_path / "missing.fa")]) == 1


def test_outputs_need_parameters(write_fasta, small_records) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([write_fasta(small_records), "-c", "couplings.txt"])
    assert excinfo.value.code == 2
