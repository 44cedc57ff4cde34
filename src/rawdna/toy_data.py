from __future__ import annotations

import random
from pathlib import Path
from typing import Dict, List, Tuple

from .utils import ensure_outdir, write_json

_BASES = "ACGT"

_23ANDME_HEADER = """# This data file generated by 23andMe at: Thu Jan 01 00:00:00 2026
#
# Toy data for rawdna demos and tests. Not a real person.
#
# rsid\tchromosome\tposition\tgenotype
"""

_ANCESTRY_HEADER = """#AncestryDNA raw data download
#Toy data for rawdna demos and tests. Not a real person.
#THIS INFORMATION IS FOR YOUR PERSONAL USE AND IS INTENDED FOR GENEALOGICAL RESEARCH
rsid\tchromosome\tposition\tallele1\tallele2
"""

Snp = Tuple[str, str, int, str]  # id, chromosome, position, genotype


def _het(rng: random.Random) -> str:
    a, b = rng.sample(_BASES, 2)
    return a + b


def _hom(rng: random.Random) -> str:
    b = rng.choice(_BASES)
    return b + b


def _toy_snps(rng: random.Random) -> List[Snp]:
    snps: List[Snp] = []
    n = 0

    def add(chrom: str, genotype: str) -> None:
        nonlocal n
        n += 1
        snps.append((f"rs{1000 + n}", chrom, 100_000 + n * 1_000, genotype))

    # chromosome 1: heterozygous background around one long ROH with a tolerated het
    for i in range(40):
        add("1", _het(rng) if i % 2 == 0 else _hom(rng))
    for _ in range(160):
        add("1", _hom(rng))
    add("1", _het(rng))
    for _ in range(100):
        add("1", _hom(rng))
    for _ in range(20):
        add("1", _het(rng))

    # chromosome 2: a no-call stretch closed by heterozygous calls
    for _ in range(10):
        add("2", _het(rng))
    for _ in range(15):
        add("2", "--")
    for _ in range(10):
        add("2", _het(rng))

    # chromosome X: haploid calls
    for _ in range(20):
        add("X", rng.choice(_BASES))
    return snps


def _write_23andme(path: Path, snps: List[Snp]) -> None:
    lines = [f"{sid}\t{chrom}\t{pos}\t{gt}" for sid, chrom, pos, gt in snps]
    path.write_text(_23ANDME_HEADER + "\n".join(lines) + "\n", encoding="utf-8")


def _write_ancestry(path: Path, snps: List[Snp], rng: random.Random) -> None:
    chrom_codes = {"X": "23", "Y": "24", "MT": "26"}
    lines = []
    for i, (sid, chrom, pos, gt) in enumerate(snps):
        if gt == "--":
            a1, a2 = "0", "0"
        elif len(gt) == 1:
            a1, a2 = gt, gt
        else:
            a1, a2 = gt[0], gt[1]
        # a few discordant calls so the merge has conflicts to report
        if i % 25 == 0 and gt != "--":
            a1 = a2 = "T" if a1 != "T" else "G"
        lines.append(f"{sid}\t{chrom_codes.get(chrom, chrom)}\t{pos}\t{a1}\t{a2}")
    # SNPs only present on the AncestryDNA chip
    for k in range(5):
        lines.append(f"rs9{k:05d}\t3\t{500_000 + k * 1_000}\t{rng.choice(_BASES)}\t{rng.choice(_BASES)}")
    path.write_text(_ANCESTRY_HEADER + "\n".join(lines) + "\n", encoding="utf-8")


def make_toy_data(*, outdir: str | Path) -> Dict[str, str]:
    """Create small 23andMe and AncestryDNA raw files for quick demos/tests.

    The 23andMe file holds one reportable ROH on chromosome 1 (with one tolerated
    heterozygous SNP) and a no-call run on chromosome 2. The AncestryDNA file
    overlaps the first 100 SNPs with a few discordant calls.

    Returns
    -------
    dict
        Paths to the generated files.
    """
    outdir_p = ensure_outdir(outdir)
    rng = random.Random(7)

    snps = _toy_snps(rng)

    genome_23andme = outdir_p / "genome_toy_23andme.txt"
    _write_23andme(genome_23andme, snps)

    ancestry = outdir_p / "AncestryDNA_toy.txt"
    _write_ancestry(ancestry, snps[:100], rng)

    summary = {
        "genome_23andme": str(genome_23andme),
        "ancestry": str(ancestry),
        "outdir": str(outdir_p),
    }

    write_json(outdir_p / "toy_summary.json", summary)
    return summary
