from __future__ import annotations

from dataclasses import dataclass

from .errors import FormatError

NO_CALL = "??"

# bases plus the insertion/deletion codes used on some arrays
GENOTYPE_ALPHABET = frozenset("ACGTID")

SOURCE_23ANDME = "23andMe"
SOURCE_ANCESTRY = "AncestryDNA"
SOURCE_GENES_FOR_GOOD = "Genes for Good"
SOURCE_OTHER = "other"

TRUSTED_SOURCES = frozenset({SOURCE_23ANDME, SOURCE_GENES_FOR_GOOD})

CHR_X = 23
CHR_Y = 24
CHR_XY = 25
CHR_MT = 26


@dataclass(frozen=True)
class SnpRecord:
    """One normalized genotype call from a raw data file.

    Attributes
    ----------
    id:
        Vendor reference id (e.g. ``rs4477212`` or ``i713426``); unique within a table.
    chromosome:
        1..22, or X=23, Y=24, XY=25, MT=26.
    position:
        Genomic coordinate on the chromosome.
    genotype:
        Two characters, order-canonicalized, or ``NO_CALL``.
    source:
        Vendor format the record came from (23andMe, AncestryDNA, Genes for Good, other).
    origin_file:
        File the record was read from; empty when not known.
    """

    id: str
    chromosome: int
    position: int
    genotype: str
    source: str = SOURCE_OTHER
    origin_file: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise FormatError("SNP id is empty")
        if not 1 <= self.chromosome <= CHR_MT:
            raise FormatError(f"Chromosome out of range: {self.chromosome}")
        if self.position < 0:
            raise FormatError(f"Negative position: {self.position}")
        if len(self.genotype) != 2:
            raise FormatError(f"Genotype is not normalized: {self.genotype!r}")
        if self.genotype != NO_CALL and not set(self.genotype) <= GENOTYPE_ALPHABET:
            raise FormatError(f"Unexpected genotype characters: {self.genotype!r}")

    @property
    def is_no_call(self) -> bool:
        return self.genotype == NO_CALL

    @property
    def is_homozygous(self) -> bool:
        # The no-call sentinel counts as homozygous.
        return self.genotype[0] == self.genotype[1]


@dataclass(frozen=True)
class RohRun:
    """A completed run that passed the reporting thresholds."""

    chromosome: int
    length: int
    start_position: int
    end_position: int
    heterozygous_count: int
    genotype: str

    @property
    def span(self) -> int:
        return self.end_position - self.start_position

    @property
    def span_mb(self) -> float:
        return self.span / 1_000_000

    @property
    def is_no_call(self) -> bool:
        return self.genotype == NO_CALL
