"""Raw data file reading for the supported vendor layouts.

Supported inputs
----------------
- 23andMe / Genes for Good: ``rsid<TAB>chromosome<TAB>position<TAB>genotype``
- AncestryDNA: ``rsid<TAB>chromosome<TAB>position<TAB>allele1<TAB>allele2``
- Quoted CSV: ``"rsid","chromosome","position","genotype"``

Lines starting with ``#`` are comments; the vendor is recognized from them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import FormatError
from .models import SOURCE_23ANDME, SOURCE_ANCESTRY, SOURCE_GENES_FOR_GOOD, SOURCE_OTHER, SnpRecord
from .normalize import make_record
from .utils import open_textmaybe_gzip

logger = logging.getLogger(__name__)

# Checked in this order; a later marker on the same line wins.
_SOURCE_MARKERS = (
    ("AncestryDNA", SOURCE_ANCESTRY),
    ("23andMe", SOURCE_23ANDME),
    ("Genes for Good", SOURCE_GENES_FOR_GOOD),
)

_HEADER_TOKEN = "rsid"


def detect_source(lines: Iterable[str]) -> str:
    """Detect the vendor from ``#`` comment lines (case-insensitive); ``other`` if no marker is found."""
    source = SOURCE_OTHER
    for line in lines:
        if not line.strip().startswith("#"):
            continue
        lowered = line.lower()
        for marker, name in _SOURCE_MARKERS:
            if marker.lower() in lowered:
                source = name
    return source


def _unquote(field: str) -> str:
    field = field.strip()
    if len(field) >= 2 and field[0] == '"' and field[-1] == '"':
        return field[1:-1]
    return field


def parse_line(line: str) -> Optional[List[str]]:
    """Split one raw line into fields; None for blanks, comments and header lines."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    if stripped.startswith('"'):
        fields = [_unquote(f) for f in stripped.split(",")]
    elif "\t" in stripped:
        fields = [f.strip() for f in stripped.split("\t")]
    elif "," in stripped:
        fields = [f.strip() for f in stripped.split(",")]
    else:
        fields = stripped.split()

    if fields[0].lower() == _HEADER_TOKEN:
        return None
    return fields


def iter_raw_records(
    lines: Iterable[str],
    *,
    source: str = SOURCE_OTHER,
    origin_file: str = "",
) -> Iterator[SnpRecord]:
    """Yield normalized records; FormatError carries the 1-based line number."""
    for lineno, line in enumerate(lines, start=1):
        fields = parse_line(line)
        if fields is None:
            continue
        try:
            yield make_record(fields, source=source, origin_file=origin_file)
        except FormatError as e:
            raise FormatError(e.message, path=origin_file or None, line_number=lineno) from e


def read_raw_file(path: str | Path) -> Tuple[str, List[SnpRecord]]:
    """Read a raw data file (plain or .gz) and return ``(source, records)``."""
    with open_textmaybe_gzip(path, "rt") as fh:
        lines = fh.readlines()

    source = detect_source(lines)
    logger.debug("%s detected as %s", path, source)
    records = list(iter_raw_records(lines, source=source, origin_file=str(path)))
    return source, records
