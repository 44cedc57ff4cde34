import itertools

from rawdna.strand import flip_genotype, genotypes_equivalent

BASES = "ACGT"
GENOTYPES = ["".join(p) for p in itertools.product(BASES, repeat=2)] + list(BASES)


def test_flip_map():
    assert flip_genotype("GT") == "CA"
    assert flip_genotype("AC") == "AC"


def test_equivalence_is_symmetric():
    for a, b in itertools.product(GENOTYPES, repeat=2):
        assert genotypes_equivalent(a, b) == genotypes_equivalent(b, a), (a, b)


def test_equivalent_to_own_flip():
    for g in GENOTYPES:
        assert genotypes_equivalent(g, flip_genotype(g)), g


def test_order_does_not_matter():
    assert genotypes_equivalent("AG", "GA")
    assert genotypes_equivalent("CT", "TC")


def test_haploid_matches_homozygous():
    assert genotypes_equivalent("A", "AA")
    assert genotypes_equivalent("G", "CC")
    assert not genotypes_equivalent("A", "AG")


def test_strand_flip_detected_as_same_call():
    assert genotypes_equivalent("AG", "AC")
    assert genotypes_equivalent("GG", "CC")
    assert genotypes_equivalent("TT", "AA")


def test_different_calls_conflict():
    assert not genotypes_equivalent("AG", "TC")
    assert not genotypes_equivalent("AA", "CC")
    assert not genotypes_equivalent("AG", "GG")
