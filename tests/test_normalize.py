import pytest

from rawdna.errors import FormatError
from rawdna.models import NO_CALL, SOURCE_23ANDME, SOURCE_ANCESTRY, SnpRecord
from rawdna.normalize import make_record, normalize_chromosome, normalize_genotype, normalize_position


def test_symbolic_chromosomes():
    assert normalize_chromosome("X") == 23
    assert normalize_chromosome("Y") == 24
    assert normalize_chromosome("XY") == 25
    assert normalize_chromosome("MT") == 26
    assert normalize_chromosome("chr7") == 7
    assert normalize_chromosome(" 22 ") == 22


def test_ancestry_numeric_sex_chromosomes():
    assert normalize_chromosome("23", SOURCE_ANCESTRY) == 23
    assert normalize_chromosome("24", SOURCE_ANCESTRY) == 24
    # pseudo-autosomal region is folded into X
    assert normalize_chromosome("25", SOURCE_ANCESTRY) == 23
    assert normalize_chromosome("26", SOURCE_ANCESTRY) == 26
    assert normalize_chromosome("25", SOURCE_23ANDME) == 25


@pytest.mark.parametrize("label", ["chrUn", "Z", "", "0", "27"])
def test_bad_chromosome_raises(label):
    with pytest.raises(FormatError):
        normalize_chromosome(label)


def test_genotype_canonical_order():
    assert normalize_genotype("CA") == "AC"
    assert normalize_genotype("GA") == "AG"
    assert normalize_genotype("GC") == "CG"
    assert normalize_genotype("TA") == "AT"
    assert normalize_genotype("TC") == "CT"
    assert normalize_genotype("TG") == "GT"
    assert normalize_genotype("ag") == "AG"
    assert normalize_genotype("AA") == "AA"


def test_genotype_from_two_alleles():
    assert normalize_genotype("T", "C") == "CT"
    assert normalize_genotype("G", "G") == "GG"
    assert normalize_genotype("0", "0") == NO_CALL


@pytest.mark.parametrize("raw", ["--", "---", "00", "??"])
def test_no_call_spellings(raw):
    assert normalize_genotype(raw) == NO_CALL


def test_haploid_call_is_doubled():
    assert normalize_genotype("A") == "AA"
    assert normalize_genotype("D") == "DD"


@pytest.mark.parametrize("raw", ["", "ACG", "AAAA", "ZZ", "12", "N/", "NN", "Z"])
def test_malformed_genotype_raises(raw):
    with pytest.raises(FormatError):
        normalize_genotype(raw)


def test_allele_pair_with_unknown_base_raises():
    with pytest.raises(FormatError):
        normalize_genotype("A", "N")


@pytest.mark.parametrize("first,second", [("A", "0"), ("0", "T"), ("A", "-"), ("-", "G")])
def test_half_call_is_no_call(first, second):
    assert normalize_genotype(first, second) == NO_CALL


def test_record_rejects_unknown_genotype_characters():
    with pytest.raises(FormatError):
        SnpRecord(id="rs1", chromosome=1, position=1, genotype="ZZ")
    with pytest.raises(FormatError):
        SnpRecord(id="rs1", chromosome=1, position=1, genotype="A0")


def test_make_record_rejects_junk_genotype():
    with pytest.raises(FormatError):
        make_record(["rs1", "1", "100", "ZZ"])


def test_position():
    assert normalize_position("752566") == 752566
    assert normalize_position(" 12 ") == 12
    assert normalize_position("0") == 0
    with pytest.raises(FormatError):
        normalize_position("abc")
    with pytest.raises(FormatError):
        normalize_position("-5")


@pytest.mark.parametrize("raw", ["1_000", "+5", "\u0661\u0662", "1.5", ""])
def test_position_requires_plain_ascii_digits(raw):
    with pytest.raises(FormatError):
        normalize_position(raw)


def test_make_record_23andme_layout():
    rec = make_record(["rs4477212", "1", "82154", "GA"], source=SOURCE_23ANDME, origin_file="a.txt")
    assert rec == SnpRecord(
        id="rs4477212",
        chromosome=1,
        position=82154,
        genotype="AG",
        source=SOURCE_23ANDME,
        origin_file="a.txt",
    )


def test_make_record_ancestry_layout():
    rec = make_record(["rs3131972", "25", "752721", "A", "G"], source=SOURCE_ANCESTRY)
    assert rec.chromosome == 23
    assert rec.genotype == "AG"
    assert rec.source == SOURCE_ANCESTRY


def test_make_record_missing_fields():
    with pytest.raises(FormatError):
        make_record(["rs1", "1", "100"])


def test_record_rejects_unnormalized_values():
    with pytest.raises(FormatError):
        SnpRecord(id="rs1", chromosome=1, position=1, genotype="A")
    with pytest.raises(FormatError):
        SnpRecord(id="rs1", chromosome=30, position=1, genotype="AA")
    with pytest.raises(FormatError):
        SnpRecord(id="", chromosome=1, position=1, genotype="AA")


def test_no_call_is_homozygous():
    rec = SnpRecord(id="rs1", chromosome=1, position=1, genotype=NO_CALL)
    assert rec.is_no_call
    assert rec.is_homozygous
