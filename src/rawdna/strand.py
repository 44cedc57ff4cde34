"""Strand-aware genotype comparison.

Vendors do not agree on which DNA strand they report, so the same physical genotype
can be spelled differently in two files. Two genotypes are treated as the same call
when their unordered base pairs match either directly or after flipping the bases
of one side.
"""

from __future__ import annotations

from typing import List

# Only G and T are translated; A and C map to themselves.
_FLIP = {
    "G": "C",
    "T": "A",
}


def flip_base(base: str) -> str:
    return _FLIP.get(base, base)


def flip_genotype(genotype: str) -> str:
    return "".join(flip_base(b) for b in genotype)


def _as_pair(genotype: str) -> str:
    if len(genotype) == 1:
        return genotype + genotype
    return genotype


def _sorted_bases(genotype: str) -> List[str]:
    return sorted(genotype)


def genotypes_equivalent(first: str, second: str) -> bool:
    """Return True if two genotypes describe the same base pair, allowing a strand flip.

    1-character (haploid) values are compared as their homozygous 2-character form.
    """
    a = _as_pair(first)
    b = _as_pair(second)
    if _sorted_bases(a) == _sorted_bases(b):
        return True
    if _sorted_bases(flip_genotype(a)) == _sorted_bases(b):
        return True
    return _sorted_bases(a) == _sorted_bases(flip_genotype(b))
