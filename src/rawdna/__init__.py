"""rawdna: merge consumer DNA raw data files and scan them for runs of homozygosity.

Public API is intentionally small; most users should use the CLI:

    rawdna merge AncestryDNA.txt genome_John_Doe.txt > merged.txt
    rawdna roh --file merged.txt

"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
