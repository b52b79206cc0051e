import math

import numpy
import pytest

from alignkit.core import alphabet
from alignkit.core.alignment import make_aligned
from alignkit.core.simulate import random_alignment
from alignkit.evolve.fast_distance import (
    DistanceMatrix,
    JC69Model,
    K2PModel,
    PDistModel,
    available_models,
    get_distance_model,
    get_index_array,
    pairwise_distances,
    seq_to_indices,
)
from alignkit.evolve.pairwise_distance_numba import count_mutations


@pytest.fixture
def pair_aln():
    # one transition (A/G) and one transversion (A/T)
    return make_aligned({"a": "ACGTACGTAC", "b": "GCGTACGTTC"}, alphabet="dna")


def _dist(model, aln, weights=None):
    model.init_model(aln, weights=weights)
    seqs = [s.symbols for s in aln]
    return model.distance(seqs[0], seqs[1], weights=weights)


def test_get_index_array():
    index = get_index_array("ACGT", aliases={"U": "T"})
    assert seq_to_indices("ACGTUacgtN-", index).tolist() == [0, 1, 2, 3, 3, 0, 1, 2, 3, 4, 4]


def test_seq_to_indices_beyond_table():
    index = get_index_array("ACGT")
    assert seq_to_indices("Aé", index).tolist() == [0, 255]


def test_count_mutations():
    s1 = numpy.array([0, 1, 2, 3, 4], dtype=numpy.uint8)
    s2 = numpy.array([2, 1, 3, 3, 0], dtype=numpy.uint8)
    selected = numpy.ones(5, dtype=bool)
    weights = numpy.ones(5, dtype=numpy.float64)
    got = count_mutations(s1, s2, selected, weights, numpy.uint8(4))
    assert got.tolist() == [1, 1, 2, 4]


def test_k2p(pair_aln):
    expect = -0.5 * math.log(0.7) - 0.25 * math.log(0.8)
    assert _dist(K2PModel(), pair_aln) == pytest.approx(expect)


def test_jc69(pair_aln):
    expect = -0.75 * math.log(1 - 4 / 3 * 0.2)
    assert _dist(JC69Model(), pair_aln) == pytest.approx(expect)


def test_pdist(pair_aln):
    assert _dist(PDistModel(), pair_aln) == pytest.approx(0.2)


def test_pdist_protein(protein_aln):
    dists = pairwise_distances(protein_aln, model="pdist")
    assert dists["p1", "p2"] == pytest.approx(3 / 7)
    # the gap is not compared
    assert dists["p1", "p4"] == pytest.approx(1 / 6)


def test_identical_is_zero():
    aln = make_aligned({"a": "ACGU", "b": "ACGT"}, alphabet="dna")
    assert _dist(K2PModel(), aln) == 0


def test_saturated_is_zero():
    aln = make_aligned({"a": "AAAA", "b": "GGGG"}, alphabet="dna")
    assert _dist(K2PModel(), aln) == 0


def test_no_comparable_sites_is_zero():
    aln = make_aligned({"a": "NN--", "b": "ACGT"}, alphabet="dna")
    assert _dist(K2PModel(), aln) == 0


def test_ambiguous_skipped():
    aln = make_aligned({"a": "ACGTACGTACN", "b": "GCGTACGTTCA"}, alphabet="dna")
    expect = -0.5 * math.log(0.7) - 0.25 * math.log(0.8)
    assert _dist(K2PModel(), aln) == pytest.approx(expect)


def test_remove_gaps():
    aln = make_aligned(
        {"a": "ACGTACGTACGT", "b": "GCGTACGTTCGT", "c": "ACGTACGTAC--"},
        alphabet="dna",
    )
    model = K2PModel(remove_gaps=True)
    model.init_model(aln)
    assert model.num_sites == 10
    assert model.selected_sites.tolist()[-2:] == [False, False]
    seqs = [s.symbols for s in aln]
    expect = -0.5 * math.log(0.7) - 0.25 * math.log(0.8)
    assert model.distance(seqs[0], seqs[1]) == pytest.approx(expect)


def test_weights_match_compressed(pair_aln):
    expect = _dist(K2PModel(), pair_aln)
    compressed = pair_aln.clone()
    weights = compressed.compress()
    assert compressed.length < pair_aln.length
    assert _dist(K2PModel(), compressed, weights=weights) == pytest.approx(expect)


def test_weights_wrong_length(pair_aln):
    with pytest.raises(ValueError):
        _dist(K2PModel(), pair_aln, weights=[1, 2])


def test_distance_before_init():
    with pytest.raises(RuntimeError):
        K2PModel().distance("ACGT", "ACGT")


def test_get_distance_model():
    assert available_models() == ["k2p", "jc69", "pdist"]
    model = get_distance_model("K2P", remove_gaps=True)
    assert isinstance(model, K2PModel)
    assert model.remove_gaps
    with pytest.raises(ValueError):
        get_distance_model("tn93")


def test_pairwise_distances(dna_aln):
    dists = pairwise_distances(dna_aln, model="pdist")
    assert isinstance(dists, DistanceMatrix)
    assert dists.names == ["s1", "s2", "s3"]
    assert dists.shape == (3, 3)
    assert dists["s1", "s2"] == pytest.approx(1 / 4)
    assert dists["s2", "s1"] == dists["s1", "s2"]
    assert dists["s1", "s1"] == 0


def test_pairwise_distances_model_instance(dna_aln):
    dists = pairwise_distances(dna_aln, model=JC69Model(), show_progress=True)
    assert dists["s1", "s3"] > dists["s1", "s2"]


def test_distance_matrix():
    dists = DistanceMatrix(["a", "b", "c"], [[0, 1, 2], [1, 0, 3], [2, 3, 0]])
    assert dists.to_dict() == {
        ("a", "b"): 1,
        ("a", "c"): 2,
        ("b", "a"): 1,
        ("b", "c"): 3,
        ("c", "a"): 2,
        ("c", "b"): 3,
    }
    sub = dists.take_dists(["a", "c"])
    assert sub.names == ["a", "c"]
    assert sub["a", "c"] == 2
    assert dists.take_dists("b", negate=True).names == ["a", "c"]
    with pytest.raises(ValueError):
        DistanceMatrix(["a"], [[0, 1], [1, 0]])


@pytest.mark.slow
def test_pairwise_distances_large():
    aln = random_alignment(alphabet.NUCLEOTIDES, 2000, 40, rng=21)
    dists = pairwise_distances(aln, model="k2p")
    assert numpy.allclose(dists.array, dists.array.T)
    assert (numpy.diag(dists.array) == 0).all()
    # random sequences are beyond saturation for k2p or very distant
    assert (dists.array >= 0).all()


def test_k2p_infinite_is_zero():
    # 1 - 2P - Q == 0
    aln = make_aligned({"a": "AA", "b": "AG"}, alphabet="dna")
    got = _dist(K2PModel(), aln)
    assert got == 0
    assert math.isfinite(got)
