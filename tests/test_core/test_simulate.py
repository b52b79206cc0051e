import numpy
import pytest

from alignkit.core import alphabet
from alignkit.core.alignment import AlignmentError, make_aligned
from alignkit.core.simulate import random_alignment


@pytest.fixture
def rand_aln():
    return random_alignment(alphabet.NUCLEOTIDES, 20, 6, rng=7)


def sorted_columns(aln):
    return numpy.sort(aln.array_seqs, axis=0)


def test_random_alignment(rand_aln):
    assert rand_aln.num_seqs == 6
    assert rand_aln.length == 20
    assert rand_aln.names[:2] == ["Seq0000", "Seq0001"]
    assert set(rand_aln.array_seqs.flatten().tolist()) <= set("ACGT")


def test_random_alignment_seeded():
    a = random_alignment(alphabet.AMINOACIDS, 30, 3, rng=11)
    b = random_alignment(alphabet.AMINOACIDS, 30, 3, rng=11)
    assert a.to_dict() == b.to_dict()


def test_random_alignment_seed_from_environ(monkeypatch):
    monkeypatch.setenv("ALIGNKIT_RANDOM", "seed=5")
    a = random_alignment(alphabet.NUCLEOTIDES, 30, 3)
    b = random_alignment(alphabet.NUCLEOTIDES, 30, 3)
    assert a.to_dict() == b.to_dict()


def test_shuffle_sites_preserves_columns(rand_aln):
    expect = sorted_columns(rand_aln)
    rogues = rand_aln.shuffle_sites(0.5, rogue_rate=0.5, rng=1)
    assert len(rogues) == 3
    assert set(rogues) <= set(rand_aln.names)
    assert numpy.array_equal(sorted_columns(rand_aln), expect)


def test_shuffle_sites_reproducible(rand_aln):
    other = rand_aln.clone()
    assert rand_aln.shuffle_sites(0.3, 0.5, rng=2) == other.shuffle_sites(0.3, 0.5, rng=2)
    assert rand_aln.to_dict() == other.to_dict()


def test_shuffle_sites_rogue_quota_uses_rate(rand_aln):
    # rogue sites number int(rate * (1 - rate) * length), so with rate 0
    # rogues are drawn but no site is shuffled
    orig = rand_aln.to_dict()
    rogues = rand_aln.shuffle_sites(0.0, rogue_rate=1.0, rng=3)
    assert len(rogues) == rand_aln.num_seqs
    assert rand_aln.to_dict() == orig


def test_shuffle_sites_changed_columns_within_quota(rand_aln):
    orig = rand_aln.array_seqs
    rand_aln.shuffle_sites(0.5, rogue_rate=1.0, rng=4)
    changed = (rand_aln.array_seqs != orig).any(axis=0).sum()
    # 10 sites shuffled across all sequences, 5 across rogues
    assert changed <= 15


def test_shuffle_sites_rogues_first():
    short = random_alignment(alphabet.NUCLEOTIDES, 10, 6, rng=1)
    long = random_alignment(alphabet.NUCLEOTIDES, 40, 6, rng=2)
    got_short = short.shuffle_sites(0.5, 0.5, rand_rogue_first=True, rng=9)
    got_long = long.shuffle_sites(0.5, 0.5, rand_rogue_first=True, rng=9)
    assert got_short == got_long


@pytest.mark.parametrize("rate,rogue_rate", [(-0.1, 0.0), (1.1, 0.0), (0.5, 2.0)])
def test_shuffle_sites_invalid(rand_aln, rate, rogue_rate):
    with pytest.raises(AlignmentError):
        rand_aln.shuffle_sites(rate, rogue_rate, rng=1)


def test_swap_preserves_columns(rand_aln):
    expect = sorted_columns(rand_aln)
    rand_aln.swap(1.0, rng=5)
    assert rand_aln.length == 20
    assert numpy.array_equal(sorted_columns(rand_aln), expect)


@pytest.mark.parametrize("rate", [-1, 2])
def test_swap_invalid_rate_noop(rand_aln, rate):
    orig = rand_aln.to_dict()
    rand_aln.swap(rate, rng=5)
    assert rand_aln.to_dict() == orig


def test_recombine(rand_aln):
    orig = rand_aln.to_dict()
    rand_aln.recombine(0.5, 0.5, rng=6)
    assert rand_aln.length == 20
    changed = [n for n in orig if orig[n] != rand_aln.get_sequence(n)]
    assert len(changed) <= 3


@pytest.mark.parametrize("prop,len_prop", [(0.6, 0.5), (0.2, 1.5)])
def test_recombine_invalid_noop(rand_aln, prop, len_prop):
    orig = rand_aln.to_dict()
    rand_aln.recombine(prop, len_prop, rng=6)
    assert rand_aln.to_dict() == orig


def test_add_gaps(rand_aln):
    rand_aln.add_gaps(0.25, 1.0, rng=8)
    for seq in rand_aln:
        assert str(seq).count("-") == 5


def test_add_gaps_prop(rand_aln):
    rand_aln.add_gaps(0.5, 0.5, rng=8)
    gapped = [seq.name for seq in rand_aln if "-" in str(seq)]
    assert len(gapped) == 3


def test_mutate(dna_aln):
    dna_aln.mutate(1.0, rng=9)
    for seq in dna_aln:
        assert str(seq)[2] == "-"
        assert set(str(seq).replace("-", "")) <= set("ACGT")


def test_mutate_protein(protein_aln):
    protein_aln.mutate(2.0, rng=9)
    assert set("".join(protein_aln.to_dict().values())) <= set(alphabet.STD_AMINOACIDS + "-")


def test_mutate_zero_rate(dna_aln):
    orig = dna_aln.to_dict()
    dna_aln.mutate(0, rng=9)
    assert dna_aln.to_dict() == orig


def test_simulate_rogue(rand_aln):
    orig = rand_aln.to_dict()
    rogues, intact = rand_aln.simulate_rogue(0.5, 1.0, rng=10)
    assert len(rogues) == 3
    assert sorted(rogues + intact) == sorted(orig)
    for name in intact:
        assert rand_aln.get_sequence(name) == orig[name]
    for name in rogues:
        assert sorted(rand_aln.get_sequence(name)) == sorted(orig[name])


def test_simulate_rogue_no_length(rand_aln):
    rogues, intact = rand_aln.simulate_rogue(0.5, 0.0, rng=10)
    assert rogues == []
    assert len(intact) == 6


def test_simulate_rogue_invalid(rand_aln):
    assert rand_aln.simulate_rogue(1.5, 0.5, rng=10) == (None, None)


def test_build_bootstrap(rand_aln):
    boot = rand_aln.build_bootstrap(rng=12)
    assert boot.names == rand_aln.names
    assert boot.length == rand_aln.length
    columns = {"".join(c) for c in rand_aln.array_seqs.T.tolist()}
    assert {"".join(c) for c in boot.array_seqs.T.tolist()} <= columns


def test_sample(rand_aln):
    sub = rand_aln.sample(4, rng=13)
    assert sub.num_seqs == 4
    for name in sub.names:
        assert sub.get_sequence(name) == rand_aln.get_sequence(name)


@pytest.mark.parametrize("nb", [0, 7])
def test_sample_invalid(rand_aln, nb):
    with pytest.raises(AlignmentError):
        rand_aln.sample(nb, rng=13)


def test_rarefy(rand_aln):
    counts = {"Seq0000": 5, "Seq0001": 3, "Seq0002": 2}
    # only one individual remains undrawn
    got = rand_aln.rarefy(9, counts, rng=14)
    assert got.names == ["Seq0000", "Seq0001", "Seq0002"]


def test_rarefy_single_draw(rand_aln):
    counts = {"Seq0000": 5, "Seq0001": 3, "Seq0002": 2}
    got = rand_aln.rarefy(1, counts, rng=14)
    assert got.num_seqs == 1
    assert got.names[0] in counts


@pytest.mark.parametrize("nb", [10, 12])
def test_rarefy_too_many(rand_aln, nb):
    counts = {"Seq0000": 5, "Seq0001": 3, "Seq0002": 2}
    with pytest.raises(AlignmentError):
        rand_aln.rarefy(nb, counts, rng=14)


@pytest.mark.parametrize("counts", [{"Seq0000": 0, "Seq0001": 3}, {"zz": 3, "Seq0001": 3}])
def test_rarefy_invalid_counts(rand_aln, counts):
    with pytest.raises(AlignmentError):
        rand_aln.rarefy(1, counts, rng=14)


def test_operations_on_gapless_alignment():
    aln = make_aligned({"a": "ACGT", "b": "ACGA"}, alphabet="dna")
    boot = aln.build_bootstrap(rng=1)
    assert boot.num_seqs == 2
