from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Any, Dict

from jinja2 import Template

logger = logging.getLogger(__name__)


_REPORT_TEMPLATE = Template(
    """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>vcfmergeannot Report</title>
  <style>
    body { font-family: Arial, Helvetica, sans-serif; margin: 24px; }
    code, pre { background: #f6f8fa; padding: 2px 4px; border-radius: 4px; }
    h1, h2, h3 { margin-top: 1.2em; }
    table { border-collapse: collapse; margin-top: 0.6em; }
    th, td { border: 1px solid #ddd; padding: 8px; }
    th { background: #f2f2f2; text-align: left; }
    .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; }
    .card { border: 1px solid #ddd; border-radius: 8px; padding: 12px; }
    .small { color: #666; font-size: 0.9em; }
    img { max-width: 100%; height: auto; border: 1px solid #eee; border-radius: 6px; }
  </style>
</head>
<body>

<h1>vcfmergeannot Report</h1>
<p class="small">Generated: {{ generated_at }}</p>

<h2>Run summary</h2>
<table>
  <tr><th>Output</th><td><code>{{ run.output_path }}</code></td></tr>
  <tr><th>Primary records read</th><td>{{ run.primary_records }}</td></tr>
  <tr><th>Records written</th><td>{{ run.records_written }}</td></tr>
  <tr><th>Primary sources opened</th><td>{{ run.primary_sources_opened }} of {{ run.primary_paths|length }}</td></tr>
  <tr><th>Catch-up mode</th><td>{{ run.catch_up }}</td></tr>
  <tr><th>Annotated records (all sources)</th><td>{{ run.matched_total }}</td></tr>
  <tr><th>Runtime (s)</th><td>{{ "%.2f"|format(run.runtime_seconds) }}</td></tr>
</table>

<h2>Primary sources</h2>
<ol>
{% for p in run.primary_paths %}
  <li><code>{{ p }}</code></li>
{% endfor %}
</ol>

<h2>Annotation sources</h2>
{% if run.sources %}
<table>
  <tr><th>Source</th><th>Records read</th><th>Matched</th><th>Catch-up advances</th><th>Exhausted</th></tr>
{% for s in run.sources %}
  <tr>
    <td><code>{{ s.name }}</code></td>
    <td>{{ s.records_read }}</td>
    <td>{{ s.matched }}</td>
    <td>{{ s.caught_up }}</td>
    <td>{{ "yes" if s.exhausted else "no" }}</td>
  </tr>
{% endfor %}
</table>
{% else %}
<p>No annotation sources were given.</p>
{% endif %}

{% if plots %}
<h2>Plots</h2>
<div class="grid">
  <div class="card">
    <h3>Matches per source</h3>
    <img src="{{ plots.source_matches }}" alt="matches per source">
  </div>
  <div class="card">
    <h3>Source consumption</h3>
    <img src="{{ plots.source_progress }}" alt="source consumption">
  </div>
</div>
{% endif %}

<h2>Interpretation notes</h2>
<ul>
  <li>Records match only when contig, position and the full ordered allele list agree.</li>
  <li>The output header is the first primary source's header; headers of later sources are not merged.</li>
  {% if run.catch_up == "single" %}
  <li>Single-step catch-up: a source advances at most one lagging record per primary record,
      so matches directly after long runs of annotation-only loci can be missed.</li>
  {% endif %}
  <li>A source that is not exhausted at the end of the run had records beyond the last primary locus.</li>
</ul>

<hr>
<p class="small">vcfmergeannot {{ version }}</p>
</body>
</html>"""
)


def render_report(
    *,
    outdir: str | Path,
    version: str,
    run: Dict[str, Any],
    plots: Dict[str, str],
) -> Path:
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    html = _REPORT_TEMPLATE.render(
        generated_at=_dt.datetime.now().isoformat(timespec="seconds"),
        version=version,
        run=run,
        plots=plots,
    )

    out_path = outdir / "report.html"
    out_path.write_text(html, encoding="utf-8")
    logger.info("Report written: %s", out_path)
    return out_path
