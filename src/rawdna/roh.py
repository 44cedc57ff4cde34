"""Runs of Homozygosity (ROH) detection.

The scan is a two-state machine (idle / in a run) driven by one record at a time.
All scan state lives in an explicit ``ScanState`` value: ``step`` takes the current
state and a record and returns the next state plus at most one completed run.

Rules, applied per record in the order presented:

1. A chromosome change closes the current run.
2. If no-calls are not treated as homozygous, a no-call closes a called run.
3. A homozygous record (the no-call sentinel included) opens a run if idle and is
   folded into it.
4. A heterozygous record inside a run is folded in as a tolerated exception when it
   is more than ``min_to_ignore_heterozygous`` SNPs away from the previous tolerated
   one (or from the run start); otherwise it closes the run.
5. A heterozygous record outside a run is ignored.

A closed run is reported only if it is a no-call run longer than
``no_call_threshold`` or any run longer than ``length_threshold``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Optional, Tuple

from tqdm import tqdm

from .config import RohConfig
from .errors import OrderingWarning
from .models import NO_CALL, RohRun, SnpRecord

logger = logging.getLogger(__name__)

# heterozygous_count of a fresh run; the first tolerated SNP brings it to 0
_NO_HETEROZYGOUS_YET = -1


@dataclass(frozen=True)
class RunState:
    """Bounds and counters of the candidate run; ``RunState()`` is the idle state."""

    active: bool = False
    chromosome: int = 0
    start_position: int = 0
    last_position: int = 0
    length: int = 0
    heterozygous_count: int = _NO_HETEROZYGOUS_YET
    last_heterozygous_offset: int = 0
    current_genotype: str = ""


@dataclass(frozen=True)
class ScanState:
    run: RunState = field(default_factory=RunState)
    previous_chromosome: Optional[int] = None
    previous_position: Optional[int] = None
    warnings: int = 0


def _open_run(record: SnpRecord) -> RunState:
    return RunState(
        active=True,
        chromosome=record.chromosome,
        start_position=record.position,
        last_position=record.position,
        length=0,
        heterozygous_count=_NO_HETEROZYGOUS_YET,
        last_heterozygous_offset=0,
        current_genotype=record.genotype,
    )


def close_run(run: RunState, config: RohConfig) -> Optional[RohRun]:
    """Apply the reporting thresholds to a finished run."""
    if not run.active:
        return None

    is_no_call = run.current_genotype == NO_CALL
    if not ((is_no_call and run.length > config.no_call_threshold) or run.length > config.length_threshold):
        logger.debug(
            "Discarding run of length %d on chromosome %d at %d",
            run.length,
            run.chromosome,
            run.start_position,
        )
        return None

    return RohRun(
        chromosome=run.chromosome,
        length=run.length,
        start_position=run.start_position,
        end_position=run.last_position,
        heterozygous_count=run.heterozygous_count,
        genotype=run.current_genotype,
    )


def _check_order(state: ScanState, record: SnpRecord) -> Optional[OrderingWarning]:
    prev_chr = state.previous_chromosome
    prev_pos = state.previous_position
    if prev_chr is None or prev_pos is None:
        return None
    if prev_chr > record.chromosome or (prev_chr == record.chromosome and prev_pos > record.position):
        return OrderingWarning(
            chromosome=record.chromosome,
            position=record.position,
            previous_chromosome=prev_chr,
            previous_position=prev_pos,
        )
    return None


def step(state: ScanState, record: SnpRecord, config: RohConfig) -> Tuple[ScanState, Optional[RohRun]]:
    """Consume one record; return the next state and the run it completed, if reported."""
    warnings = state.warnings
    disorder = _check_order(state, record)
    if disorder is not None:
        logger.warning("%s", disorder)
        warnings += 1

    run = state.run
    reported: Optional[RohRun] = None

    if run.active and run.chromosome != record.chromosome:
        reported = close_run(run, config)
        run = RunState()

    if (
        not config.treat_no_calls_as_homozygous
        and run.active
        and record.is_no_call
        and run.current_genotype != NO_CALL
    ):
        reported = close_run(run, config)
        run = RunState()

    if record.is_homozygous:
        if not run.active:
            run = _open_run(record)
        run = replace(
            run,
            current_genotype=record.genotype,
            length=run.length + 1,
            last_position=record.position,
        )
    elif run.active:
        if (run.length + 1) - run.last_heterozygous_offset > config.min_to_ignore_heterozygous:
            length = run.length + 1
            run = replace(
                run,
                length=length,
                last_heterozygous_offset=length,
                heterozygous_count=run.heterozygous_count + 1,
                last_position=record.position,
            )
        else:
            reported = close_run(run, config)
            run = RunState()

    next_state = ScanState(
        run=run,
        previous_chromosome=record.chromosome,
        previous_position=record.position,
        warnings=warnings,
    )
    return next_state, reported


def finish(state: ScanState, config: RohConfig) -> Tuple[ScanState, Optional[RohRun]]:
    """End of input: close a pending run."""
    reported = close_run(state.run, config)
    return replace(state, run=RunState()), reported


class RunDetector:
    """Incremental wrapper around ``step``/``finish`` for callers that push records."""

    def __init__(self, config: Optional[RohConfig] = None) -> None:
        self.config = config if config is not None else RohConfig()
        self.state = ScanState()

    def feed(self, record: SnpRecord) -> Optional[RohRun]:
        self.state, reported = step(self.state, record, self.config)
        return reported

    def close(self) -> Optional[RohRun]:
        self.state, reported = finish(self.state, self.config)
        return reported

    @property
    def warnings(self) -> int:
        return self.state.warnings


def scan_runs(
    records: Iterable[SnpRecord],
    config: Optional[RohConfig] = None,
    *,
    detector: Optional[RunDetector] = None,
    progress: bool = False,
) -> Iterator[RohRun]:
    """Yield every reported run of a position-sorted record sequence.

    Pass a fresh ``detector`` to inspect its state (e.g. warning count) afterwards.
    """
    if detector is None:
        detector = RunDetector(config)

    it: Iterable[SnpRecord] = records
    if progress:
        it = tqdm(it, unit="snp", desc="Scanning for ROH")

    for record in it:
        reported = detector.feed(record)
        if reported is not None:
            yield reported

    reported = detector.close()
    if reported is not None:
        yield reported

    if detector.warnings:
        logger.warning("%d ordering warning(s); run detection may be degraded.", detector.warnings)
