from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from tqdm import tqdm

from .errors import ConflictWarning, FormatError
from .models import TRUSTED_SOURCES, SnpRecord
from .readers import read_raw_file
from .strand import genotypes_equivalent

logger = logging.getLogger(__name__)


@dataclass
class MergeState:
    """Accumulator threaded through ``merge_record``.

    ``records`` and ``counts`` keep first-seen insertion order, which is the output order.
    """

    records: Dict[str, SnpRecord] = field(default_factory=dict)
    counts: Dict[str, int] = field(default_factory=dict)
    intersections: int = 0
    conflicts: List[ConflictWarning] = field(default_factory=list)


@dataclass(frozen=True)
class MergeResult:
    records: Dict[str, SnpRecord]
    counts: Dict[str, int]
    intersections: int
    conflicts: List[ConflictWarning]
    failed_files: Dict[str, str]

    @property
    def total_records(self) -> int:
        return len(self.records)


def select_record(existing: SnpRecord, new: SnpRecord) -> SnpRecord:
    """Pick the record that survives a collision on the same id.

    Trusted sources (23andMe, Genes for Good) beat untrusted ones whatever the arrival
    order; otherwise the newer record wins.
    """
    existing_trusted = existing.source in TRUSTED_SOURCES
    new_trusted = new.source in TRUSTED_SOURCES

    if existing_trusted and not new_trusted:
        return existing
    return new


def merge_record(state: MergeState, record: SnpRecord) -> MergeState:
    """Fold one record into the merge table."""
    state.counts[record.origin_file] = state.counts.get(record.origin_file, 0) + 1

    existing = state.records.get(record.id)
    if existing is None:
        state.records[record.id] = record
        return state

    state.intersections += 1
    if not genotypes_equivalent(existing.genotype, record.genotype):
        conflict = ConflictWarning(
            snp_id=record.id,
            new_file=record.origin_file,
            existing_file=existing.origin_file,
            new_genotype=record.genotype,
            existing_genotype=existing.genotype,
        )
        state.conflicts.append(conflict)
        logger.warning("%s", conflict)

    state.records[record.id] = select_record(existing, record)
    return state


def merge_sources(
    sources: Iterable[Tuple[str, Iterable[SnpRecord]]],
    *,
    progress: bool = False,
) -> MergeState:
    """Merge ``(origin_file, records)`` pairs in the given order.

    No-call records are skipped: a void result in one file must not hide a call from another.
    """
    state = MergeState()
    for origin, records in sources:
        it: Iterable[SnpRecord] = records
        if progress:
            it = tqdm(it, unit="snp", desc=f"Merging {Path(origin).name}")
        for record in it:
            if record.is_no_call:
                continue
            state = merge_record(state, record)
    return state


def merge_files(paths: Sequence[str | Path], *, progress: bool = False) -> MergeResult:
    """Read and merge raw data files.

    A malformed file is skipped as a whole and listed in ``failed_files``; the other
    files are still merged.
    """
    loaded: List[Tuple[str, List[SnpRecord]]] = []
    failed: Dict[str, str] = {}

    for p in paths:
        origin = str(p)
        try:
            source, records = read_raw_file(p)
        except FormatError as e:
            logger.error("Skipping %s: %s", origin, e)
            failed[origin] = str(e)
            continue
        logger.info("Read %d records from %s (detected as %s)", len(records), origin, source)
        loaded.append((origin, records))

    state = merge_sources(loaded, progress=progress)
    logger.info("%d intersections found.", state.intersections)

    return MergeResult(
        records=state.records,
        counts=state.counts,
        intersections=state.intersections,
        conflicts=state.conflicts,
        failed_files=failed,
    )
