import math

import numpy
import pytest

from alignkit.core import profile
from alignkit.core.alignment import AlignmentError, make_aligned


def test_pssm_counts(dna_aln):
    got = dna_aln.pssm()
    assert list(got) == ["A", "C", "G", "T"]
    assert got["A"].tolist() == [2, 0, 0, 0, 1]
    assert got["C"].tolist() == [0, 3, 0, 0, 0]
    assert got["G"].tolist() == [1, 0, 0, 2, 0]
    assert got["T"].tolist() == [0, 0, 0, 1, 2]


def test_pssm_freq(dna_aln):
    got = dna_aln.pssm(normalization=profile.PSSM_NORM_FREQ)
    numpy.testing.assert_allclose(got["A"], [2 / 3, 0, 0, 0, 1 / 3])
    # a column of gaps has no frequency mass
    assert sum(got[c][2] for c in got) == 0
    assert sum(got[c][0] for c in got) == pytest.approx(1)


def test_pssm_pseudocount(dna_aln):
    got = dna_aln.pssm(pseudocount=1, normalization=profile.PSSM_NORM_FREQ)
    numpy.testing.assert_allclose(got["A"], numpy.array([3, 1, 1, 1, 2]) / 7)


def test_pssm_uniform(dna_aln):
    got = dna_aln.pssm(normalization=profile.PSSM_NORM_UNIFORM)
    numpy.testing.assert_allclose(got["C"], [0, 4, 0, 0, 0])


def test_pssm_log(dna_aln):
    got = dna_aln.pssm(log=True, normalization=profile.PSSM_NORM_FREQ)
    assert got["C"][1] == 0
    assert got["A"][0] == pytest.approx(math.log2(2 / 3))
    assert numpy.isneginf(got["A"][1])


def test_pssm_data(dna_aln):
    # every nucleotide has frequency 1/4 in the alignment
    data = dna_aln.pssm(normalization=profile.PSSM_NORM_DATA)
    uniform = dna_aln.pssm(normalization=profile.PSSM_NORM_UNIFORM)
    for char in data:
        numpy.testing.assert_allclose(data[char], uniform[char])


def test_pssm_data_missing_char():
    aln = make_aligned({"a": "ACG", "b": "ACC"}, alphabet="dna")
    with pytest.raises(profile.ProfileError):
        aln.pssm(normalization=profile.PSSM_NORM_DATA)


def test_pssm_logo(dna_aln):
    got = dna_aln.pssm(normalization=profile.PSSM_NORM_LOGO)
    entropy = -(2 / 3 * math.log2(2 / 3) + 1 / 3 * math.log2(1 / 3))
    assert got["A"][0] == pytest.approx(2 / 3 * (2 - entropy))
    assert got["C"][1] == pytest.approx(2)
    assert got["C"][2] == 0


def test_pssm_lower_case():
    aln = make_aligned({"a": "ac", "b": "AC"}, alphabet="dna")
    assert aln.pssm()["A"].tolist() == [2, 0]


def test_pssm_protein(protein_aln):
    got = protein_aln.pssm()
    assert len(got) == 20
    assert got["M"][0] == 4
    assert got["S"][1] == 3


def test_pssm_errors(dna_aln):
    with pytest.raises(profile.ProfileError):
        dna_aln.pssm(normalization="blah")
    empty = make_aligned({}, alphabet="dna")
    with pytest.raises(profile.ProfileError):
        empty.pssm()


def test_conservation_line(protein_aln):
    assert protein_aln.conservation_line() == "*: *:*:"


@pytest.mark.parametrize(
    "position,expect",
    [
        (0, profile.POSITION_IDENTICAL),
        (1, profile.POSITION_CONSERVED),
        (2, profile.POSITION_NOT_CONSERVED),
        (4, profile.POSITION_CONSERVED),
    ],
)
def test_site_conservation(protein_aln, position, expect):
    assert protein_aln.site_conservation(position) == expect


def test_semi_conserved():
    aln = make_aligned({"a": "SG", "b": "GG"}, alphabet="protein")
    assert aln.site_conservation(0) == profile.POSITION_SEMI_CONSERVED
    assert aln.conservation_line() == ".*"


def test_nucleotide_conservation(dna_aln):
    assert dna_aln.conservation_line() == " *   "


def test_site_conservation_function_out_of_range(dna_aln):
    with pytest.raises(AlignmentError):
        profile.site_conservation(dna_aln, 5)
