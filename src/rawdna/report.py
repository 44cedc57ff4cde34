from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, TextIO

from jinja2 import Template

from .models import CHR_MT, CHR_X, CHR_XY, CHR_Y, RohRun
from .merger import MergeResult

logger = logging.getLogger(__name__)


_RUN_LABELS = {
    CHR_X: "Chr X",
    CHR_Y: "Chr Y",
    CHR_XY: "Chr XY",
    CHR_MT: "mtDNA",
}

_MERGED_LABELS = {
    CHR_X: "X",
    CHR_Y: "Y",
    CHR_XY: "XY",
    CHR_MT: "MT",
}


def chromosome_label(chromosome: int) -> str:
    return _RUN_LABELS.get(chromosome, f"Chr {chromosome}")


def merged_chromosome(chromosome: int) -> str:
    """Chromosome column as written in 23andMe files."""
    return _MERGED_LABELS.get(chromosome, str(chromosome))


def format_run(run: RohRun) -> str:
    line = (
        f"{chromosome_label(run.chromosome)} has a ROH of length {run.length} "
        f"from position {run.start_position} to position {run.end_position} ({run.span_mb:.2f} Mb)"
    )
    if run.heterozygous_count > 0:
        line += f"\t({run.heterozygous_count} heterozygous SNPs treated as homozygous)"
    return line


def write_merged_table(result: MergeResult, out: TextIO) -> None:
    """Write a merge result in 23andMe raw data format."""
    out.write("#DNA raw data file merged from:\n")
    for origin, snp_count in result.counts.items():
        out.write(f"#    {origin} with {snp_count} SNPs\n")
    out.write(f"# {result.intersections} intersections were found among these files.\n")
    out.write("#\n")
    out.write("# rsid  chromosome      position        genotype\n")
    for snp_id, record in result.records.items():
        out.write(f"{snp_id}\t{merged_chromosome(record.chromosome)}\t{record.position}\t{record.genotype}\n")


def write_runs_tsv(runs: Iterable[RohRun], path: str | Path) -> Path:
    path = Path(path)
    with open(path, "wt", encoding="utf-8") as fh:
        fh.write("chromosome\tlength\tstart\tend\tspan_mb\theterozygous_snps\tgenotype\n")
        for run in runs:
            fh.write(
                f"{chromosome_label(run.chromosome)}\t{run.length}\t{run.start_position}\t"
                f"{run.end_position}\t{run.span_mb:.2f}\t{max(run.heterozygous_count, 0)}\t{run.genotype}\n"
            )
    return path


def run_to_dict(run: RohRun) -> Dict[str, Any]:
    return {
        "chromosome": chromosome_label(run.chromosome),
        "length": run.length,
        "start": run.start_position,
        "end": run.end_position,
        "span_mb": round(run.span_mb, 2),
        "heterozygous_snps": max(run.heterozygous_count, 0),
        "no_call": run.is_no_call,
    }


_REPORT_TEMPLATE = Template(
    """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>rawdna ROH Report</title>
  <style>
    body { font-family: Arial, Helvetica, sans-serif; margin: 24px; }
    code { background: #f6f8fa; padding: 2px 4px; border-radius: 4px; }
    table { border-collapse: collapse; margin-top: 0.6em; }
    th, td { border: 1px solid #ddd; padding: 8px; }
    th { background: #f2f2f2; text-align: left; }
    td.num { text-align: right; }
    .small { color: #666; font-size: 0.9em; }
  </style>
</head>
<body>

<h1>Runs of Homozygosity</h1>
<p class="small">Generated: {{ generated_at }}</p>

<h2>Input</h2>
<table>
  <tr><th>File</th><td><code>{{ input_file }}</code></td></tr>
  <tr><th>Detected format</th><td>{{ source }}</td></tr>
  <tr><th>SNPs scanned</th><td>{{ snps_scanned }}</td></tr>
  <tr><th>Ordering warnings</th><td>{{ ordering_warnings }}</td></tr>
</table>

<h2>Settings</h2>
<table>
  <tr><th>Min ROH length</th><td>{{ settings.length_threshold }}</td></tr>
  <tr><th>Min no-call run length</th><td>{{ settings.no_call_threshold }}</td></tr>
  <tr><th>No-calls treated as homozygous</th><td>{{ settings.treat_no_calls_as_homozygous }}</td></tr>
  <tr><th>Min distance to ignore a heterozygous SNP</th><td>{{ settings.min_to_ignore_heterozygous }}</td></tr>
</table>

<h2>Runs</h2>
{% if runs %}
<table>
  <tr>
    <th>Chromosome</th><th>Length (SNPs)</th><th>Start</th><th>End</th>
    <th>Span (Mb)</th><th>Heterozygous SNPs tolerated</th><th>Kind</th>
  </tr>
  {% for run in runs %}
  <tr>
    <td>{{ run.chromosome }}</td>
    <td class="num">{{ run.length }}</td>
    <td class="num">{{ run.start }}</td>
    <td class="num">{{ run.end }}</td>
    <td class="num">{{ "%.2f"|format(run.span_mb) }}</td>
    <td class="num">{{ run.heterozygous_snps }}</td>
    <td>{{ "no-call" if run.no_call else "ROH" }}</td>
  </tr>
  {% endfor %}
</table>
{% else %}
<p>No runs passed the reporting thresholds.</p>
{% endif %}

<h2>Interpretation notes</h2>
<ul>
  <li>Run length counts SNPs on the genotyping array, not bases.</li>
  <li>No-call runs often mark deletions or regions the array does not cover well.</li>
  <li>Unsorted input degrades run detection; sort by chromosome and position first.</li>
</ul>

<hr>
<p class="small">rawdna {{ version }}</p>
</body>
</html>"""
)


def render_report(
    *,
    outdir: str | Path,
    version: str,
    input_file: str,
    source: str,
    settings: Dict[str, Any],
    runs: List[RohRun],
    snps_scanned: int,
    ordering_warnings: int = 0,
) -> Path:
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    html = _REPORT_TEMPLATE.render(
        generated_at=_dt.datetime.now().isoformat(timespec="seconds"),
        version=version,
        input_file=input_file,
        source=source,
        settings=settings,
        runs=[run_to_dict(r) for r in runs],
        snps_scanned=snps_scanned,
        ordering_warnings=ordering_warnings,
    )

    out_path = outdir / "report.html"
    out_path.write_text(html, encoding="utf-8")
    logger.info("Report written: %s", out_path)
    return out_path
