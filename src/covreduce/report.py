from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Dict, List

from jinja2 import Template

from .models import CoverageResult, Region

logger = logging.getLogger(__name__)


_REPORT_TEMPLATE = Template(
    """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>CovReduce Report</title>
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

<h1>CovReduce Report</h1>
<p class="small">Generated: {{ generated_at }}</p>

<h2>Run summary</h2>
<div class="grid">
  <div class="card">
    <h3>Inputs</h3>
    <table>
      <tr><th>Source</th><td><code>{{ source }}</code></td></tr>
      <tr><th>Region</th><td><code>{{ region }}</code></td></tr>
      <tr><th>Max points</th><td>{{ stats.max_points }}</td></tr>
      <tr><th>Specific positions requested</th><td>{{ stats.keep_requested }}</td></tr>
    </table>
  </div>
  <div class="card">
    <h3>Reduction</h3>
    <table>
      <tr><th>Depth points read</th><td>{{ stats.points_in }}</td></tr>
      <tr><th>Specific points found</th><td>{{ stats.points_reserved }}</td></tr>
      <tr><th>Specific positions missing</th><td>{{ stats.keep_missing }}</td></tr>
      <tr><th>Zero-filled series length</th><td>{{ stats.dense_size }}</td></tr>
      {% if stats.passthrough %}
      <tr><th>Windowing</th><td>skipped (points passed through)</td></tr>
      {% else %}
      <tr><th>Window size</th><td>{{ stats.window_factor }} ({{ stats.window_modulo }} windows of {{ stats.window_factor + 1 }})</td></tr>
      {% endif %}
      <tr><th>Reduced points</th><td>{{ stats.reduced_points }}</td></tr>
    </table>
  </div>
</div>

<h2>Coverage</h2>
<div class="card">
  <img src="{{ plots.coverage }}" alt="coverage plot">
</div>

<h2>Specific points</h2>
{% if reserved %}
<table>
  <tr><th>Position</th><th>Depth</th></tr>
  {% for p in reserved %}
  <tr><td>{{ p.position }}</td><td>{{ p.depth }}</td></tr>
  {% endfor %}
</table>
{% else %}
<p>No specific positions were found in the input.</p>
{% endif %}

<h2>Outputs</h2>
<ul>
  {% for name in outputs %}
  <li><code>{{ name }}</code></li>
  {% endfor %}
</ul>

<h2>Interpretation notes</h2>
<ul>
  <li>Positions absent from the pileup are counted as zero depth before averaging.</li>
  <li>Each reduced point is the truncated mean depth of a window, placed at the window's first position.</li>
  <li>Specific positions are excluded from the windows and reported with their exact depth.</li>
</ul>

<hr>
<p class="small">CovReduce {{ version }}</p>
</body>
</html>"""
)


def render_report(
    *,
    outdir: str | Path,
    version: str,
    region: Region,
    result: CoverageResult,
    source: str,
    plots: Dict[str, str],
    outputs: List[str],
) -> Path:
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    html = _REPORT_TEMPLATE.render(
        generated_at=_dt.datetime.now().isoformat(timespec="seconds"),
        version=version,
        source=source,
        region=str(region),
        stats=result.stats,
        reserved=result.reserved,
        plots=plots,
        outputs=outputs,
    )

    out_path = outdir / "report.html"
    out_path.write_text(html, encoding="utf-8")
    return out_path
