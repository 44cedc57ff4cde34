from __future__ import annotations

import logging
from typing import Optional, Sequence

from .errors import FormatError
from .models import (
    CHR_MT,
    CHR_X,
    CHR_XY,
    CHR_Y,
    GENOTYPE_ALPHABET,
    NO_CALL,
    SOURCE_ANCESTRY,
    SOURCE_OTHER,
    SnpRecord,
)

logger = logging.getLogger(__name__)


_NO_CALL_SPELLINGS = frozenset({"--", "---", "00", "-", "0", NO_CALL})

# Order-equivalent spellings collapse to one lexical order.
_CANONICAL_PAIRS = {
    "CA": "AC",
    "GA": "AG",
    "GC": "CG",
    "TA": "AT",
    "TC": "CT",
    "TG": "GT",
}

_SYMBOLIC_CHROMOSOMES = {
    "X": CHR_X,
    "Y": CHR_Y,
    "XY": CHR_XY,
    "MT": CHR_MT,
    "M": CHR_MT,
}

_CHR_PREFIX = "CHR"


def normalize_chromosome(label: str, source: str = SOURCE_OTHER) -> int:
    """Map a raw chromosome label to its integer code (X=23, Y=24, XY=25, MT=26).

    AncestryDNA files use numeric codes for the sex chromosomes; their pseudo-autosomal
    code 25 is folded into X.
    """
    value = label.strip().upper()
    if value.startswith(_CHR_PREFIX):
        value = value[len(_CHR_PREFIX) :]

    if value in _SYMBOLIC_CHROMOSOMES:
        return _SYMBOLIC_CHROMOSOMES[value]

    try:
        number = int(value)
    except ValueError:
        raise FormatError(f"Unrecognized chromosome label: {label!r}") from None

    if not 1 <= number <= CHR_MT:
        raise FormatError(f"Chromosome out of range: {label!r}")
    if source == SOURCE_ANCESTRY and number == CHR_XY:
        return CHR_X
    return number


def normalize_genotype(first: str, second: Optional[str] = None) -> str:
    """Return the canonical 2-character genotype, or ``NO_CALL``.

    ``first`` is either a full genotype (23andMe layout) or the first allele when
    ``second`` is given (AncestryDNA layout).
    """
    value = first.strip().upper()
    if second is not None:
        value += second.strip().upper()

    if value in _NO_CALL_SPELLINGS:
        return NO_CALL
    if len(value) == 1:
        # haploid call (X/Y/MT in males)
        value = value + value
    if len(value) != 2:
        raise FormatError(f"Malformed genotype: {value!r}")
    if "0" in value or "-" in value:
        # half-call: one allele not determined
        return NO_CALL
    if not set(value) <= GENOTYPE_ALPHABET:
        raise FormatError(f"Unexpected genotype characters: {value!r}")
    return _CANONICAL_PAIRS.get(value, value)


def normalize_position(raw: str) -> int:
    value = raw.strip()
    if not (value.isascii() and value.isdigit()):
        raise FormatError(f"Position is not a non-negative integer: {raw!r}")
    return int(value)


def make_record(fields: Sequence[str], *, source: str = SOURCE_OTHER, origin_file: str = "") -> SnpRecord:
    """Build a normalized SnpRecord from split raw fields.

    Expected layouts are ``id, chr, pos, genotype`` (23andMe / Genes for Good / CSV) and
    ``id, chr, pos, allele1, allele2`` (AncestryDNA).
    """
    if len(fields) < 4:
        raise FormatError(f"Expected at least 4 fields, got {len(fields)}")

    snp_id = fields[0].strip()
    if not snp_id:
        raise FormatError("Missing SNP id")

    if len(fields) >= 5 and fields[4].strip():
        genotype = normalize_genotype(fields[3], fields[4])
    else:
        genotype = normalize_genotype(fields[3])

    return SnpRecord(
        id=snp_id,
        chromosome=normalize_chromosome(fields[1], source),
        position=normalize_position(fields[2]),
        genotype=genotype,
        source=source,
        origin_file=origin_file,
    )
