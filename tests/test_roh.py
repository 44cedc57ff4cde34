import logging
from typing import List

from rawdna.config import RohConfig
from rawdna.models import NO_CALL, SnpRecord
from rawdna.roh import RunDetector, RunState, ScanState, finish, scan_runs, step


def chrom_records(genotypes: List[str], chromosome: int = 1, start: int = 1000, stride: int = 1000) -> List[SnpRecord]:
    return [
        SnpRecord(id=f"rs{chromosome}_{i}", chromosome=chromosome, position=start + i * stride, genotype=g)
        for i, g in enumerate(genotypes)
    ]


def test_long_homozygous_stretch_is_reported():
    records = chrom_records(["AA"] * 250)
    runs = list(scan_runs(records, RohConfig()))

    assert len(runs) == 1
    run = runs[0]
    assert run.chromosome == 1
    assert run.length == 250
    assert run.start_position == 1000
    assert run.end_position == 250_000
    assert run.heterozygous_count == -1


def test_short_stretch_is_discarded():
    records = chrom_records(["CC"] * 200)
    assert list(scan_runs(records, RohConfig())) == []


def test_close_heterozygous_snp_breaks_run():
    # 50 homozygous, one heterozygous, 250 homozygous
    genotypes = ["GG"] * 50 + ["AG"] + ["GG"] * 250
    records = chrom_records(genotypes)

    runs = list(scan_runs(records, RohConfig(min_to_ignore_heterozygous=150)))

    assert len(runs) == 1
    assert runs[0].length == 250
    assert runs[0].start_position == records[51].position


def test_gap_must_exceed_tolerance():
    # gap of exactly 150 is not tolerated
    genotypes = ["AA"] * 149 + ["AC"] + ["AA"] * 100
    detector = RunDetector(RohConfig(length_threshold=10))
    runs = [r for r in (detector.feed(rec) for rec in chrom_records(genotypes)) if r is not None]
    tail = detector.close()

    assert [r.length for r in runs] == [149]
    assert tail is not None and tail.length == 100


def test_distant_heterozygous_snps_are_tolerated():
    genotypes = ["TT"] * 160 + ["CT"] + ["TT"] * 160 + ["AT"] + ["TT"] * 10
    runs = list(scan_runs(chrom_records(genotypes), RohConfig()))

    assert len(runs) == 1
    assert runs[0].length == 332
    # the first tolerated SNP only lifts the counter from its -1 start
    assert runs[0].heterozygous_count == 1


def test_break_reports_previous_position_as_end():
    genotypes = ["AA"] * 250 + ["AG", "AG"]
    records = chrom_records(genotypes)
    runs = list(scan_runs(records, RohConfig()))

    assert len(runs) == 1
    assert runs[0].length == 251
    assert runs[0].end_position == records[250].position


def test_chromosome_change_closes_run():
    records = chrom_records(["AA"] * 220, chromosome=1) + chrom_records(["CC"] * 230, chromosome=2)
    runs = list(scan_runs(records, RohConfig()))

    assert [(r.chromosome, r.length) for r in runs] == [(1, 220), (2, 230)]
    assert runs[0].end_position == records[219].position


def test_heterozygous_outside_run_is_ignored():
    state, reported = step(ScanState(), chrom_records(["AG"])[0], RohConfig())
    assert reported is None
    assert state.run == RunState()


def test_no_call_run_reported_above_threshold():
    records = chrom_records([NO_CALL] * 15)

    runs = list(scan_runs(records, RohConfig(no_call_threshold=10)))
    assert len(runs) == 1
    assert runs[0].is_no_call
    assert runs[0].length == 15

    assert list(scan_runs(records, RohConfig(no_call_threshold=20))) == []


def test_no_call_breaks_run_when_not_tolerated():
    genotypes = ["AA"] * 210 + [NO_CALL] * 15
    records = chrom_records(genotypes)

    strict = list(scan_runs(records, RohConfig(treat_no_calls_as_homozygous=False)))
    assert [(r.length, r.is_no_call) for r in strict] == [(210, False), (15, True)]

    lenient = list(scan_runs(records, RohConfig(treat_no_calls_as_homozygous=True)))
    assert [r.length for r in lenient] == [225]


def test_unsorted_input_warns_but_continues(caplog):
    records = chrom_records(["AA"] * 5, chromosome=2) + chrom_records(["AA"] * 5, chromosome=1)
    records.append(SnpRecord(id="rs_back", chromosome=1, position=10, genotype="AA"))

    detector = RunDetector(RohConfig())
    with caplog.at_level(logging.WARNING):
        runs = list(scan_runs(records, detector=detector))

    assert runs == []
    assert detector.warnings == 2
    assert "Chr 1 encountered after Chr 2" in caplog.text
    assert "position 10 encountered after position 5000" in caplog.text


def test_replay_is_identical():
    genotypes = (["AA"] * 230 + ["AG"] * 3 + [NO_CALL] * 12 + ["AC"] + ["GG"] * 300) * 2
    records = chrom_records(genotypes)
    config = RohConfig(length_threshold=100)

    assert list(scan_runs(records, config)) == list(scan_runs(records, config))


def test_finish_on_idle_state_reports_nothing():
    state, reported = finish(ScanState(), RohConfig())
    assert reported is None
    assert not state.run.active
