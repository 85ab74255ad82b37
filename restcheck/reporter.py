# restcheck/reporter.py
"""
Reporter

✅ Console summary (one line per scenario + totals)
✅ Atomic JSON report
✅ JUnit XML export for CI/CD
✅ HTML report (Jinja2 templating)
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, Dict, Optional, Union
from xml.etree import ElementTree as ET

from jinja2 import BaseLoader, Environment, select_autoescape

from restcheck.types import RunSummary, ScenarioStatus

logger = logging.getLogger(__name__)

_ICONS = {
    ScenarioStatus.PASS: "✅",
    ScenarioStatus.FAIL: "❌",
    ScenarioStatus.ERROR: "🔴",
    ScenarioStatus.SKIPPED: "⏭️",
}

_HTML_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>restcheck: {{ run.run_id }}</title>
<meta name="viewport" content="width=device-width,initial-scale=1"/>
<style>
  :root { --bg:#f7fafc; --fg:#111; --muted:#666; --card:#fff; --ok:#1a7f37; --bad:#d00000; --warn:#f59e0b; }
  body { font-family: Inter, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--fg); margin: 0; padding: 20px; }
  .wrap { max-width: 1100px; margin: 0 auto; }
  .card { background: var(--card); border-radius: 12px; box-shadow: 0 4px 12px rgba(0,0,0,0.08); padding: 20px; margin-bottom: 16px; }
  .muted { color: var(--muted); font-size: 13px; }
  .badge { display: inline-block; padding: 4px 12px; border-radius: 6px; font-size: 12px; font-weight: 600; color: #fff; }
  .badge.PASS { background: var(--ok); }
  .badge.FAIL, .badge.ERROR { background: var(--bad); }
  .badge.SKIPPED { background: var(--warn); }
  table { width: 100%; border-collapse: collapse; font-size: 14px; }
  th, td { padding: 10px; border-bottom: 1px solid #eee; text-align: left; vertical-align: top; }
  th { background: #eef4ff; font-weight: 600; }
  ul { margin: 0; padding-left: 18px; }
</style>
</head>
<body>
<div class="wrap">
  <div class="card">
    <h1>restcheck report</h1>
    <div class="muted"><strong>{{ run.run_id }}</strong> • {{ now }} UTC • {{ run.duration_s }}s</div>
    <p>
      <span class="badge {{ 'PASS' if ok else 'FAIL' }}">{{ 'PASSED' if ok else 'FAILED' }}</span>
      {{ run.passed }} passed, {{ run.failed }} failed, {{ run.errors }} errors, {{ run.skipped }} skipped
    </p>
  </div>
  <div class="card">
    <table>
      <tr><th>Scenario</th><th>API</th><th>Request</th><th>Status</th><th>HTTP</th><th>ms</th><th>Details</th></tr>
      {% for r in run.results %}
      <tr>
        <td>{{ r.scenario }}</td>
        <td>{{ r.api }}</td>
        <td>{{ r.method }} {{ r.url }}</td>
        <td><span class="badge {{ r.status }}">{{ r.status }}</span></td>
        <td>{{ r.status_code if r.status_code is defined else '' }}</td>
        <td>{{ r.duration_ms }}</td>
        <td>
          {% if r.failures %}<ul>{% for f in r.failures %}<li>{{ f }}</li>{% endfor %}</ul>{% endif %}
          {% for k, v in r.extracted.items() %}<div class="muted">{{ k }} = {{ v }}</div>{% endfor %}
        </td>
      </tr>
      {% endfor %}
    </table>
  </div>
</div>
</body>
</html>
"""

_env = Environment(loader=BaseLoader(), autoescape=select_autoescape(["html", "xml"], default=True))


def format_summary(summary: RunSummary) -> str:
    """Human-readable per-scenario lines plus a totals line."""
    lines = []
    for r in summary.results:
        code = f" [{r.response.status_code}]" if r.response is not None else ""
        lines.append(
            f"{_ICONS[r.status]} {r.status.value:<7} {r.scenario:<28} {r.method} {r.url}{code} ({r.duration_ms:.0f}ms)"
        )
        for f in r.failures:
            lines.append(f"      - {f}")
    lines.append("")
    lines.append(
        f"{summary.total} scenario(s): {summary.passed} passed, {summary.failed} failed, "
        f"{summary.errors} errors, {summary.skipped} skipped in {summary.duration_s}s"
    )
    if summary.interrupted:
        lines.append("Run interrupted.")
    return "\n".join(lines)


def print_summary(summary: RunSummary, stream: Optional[IO[str]] = None) -> None:
    text = format_summary(summary)
    if stream is None:
        print(text)
    else:
        stream.write(text + "\n")


class Reporter:
    """Write run reports to a directory."""

    def __init__(self, reports_dir: Union[str, Path]):
        self.reports_dir = Path(reports_dir)
        self.reports_dir.mkdir(parents=True, exist_ok=True)

    def create_reports(self, summary: RunSummary) -> Dict[str, str]:
        """
        Generate reports in every format.

        Returns:
            Dict with paths: {"json", "junit", "html"}
        """
        data = summary.to_dict()
        rid = summary.run_id

        json_path = self.reports_dir / f"{rid}.json"
        junit_path = self.reports_dir / f"{rid}.junit.xml"
        html_path = self.reports_dir / f"{rid}.html"

        self._atomic_json_dump(json_path, data)
        logger.info(f"✅ JSON report → {json_path}")

        self._atomic_text_write(junit_path, self._generate_junit_xml(summary))
        logger.info(f"✅ JUnit XML → {junit_path}")

        html = _env.from_string(_HTML_TEMPLATE).render(
            run=data,
            ok=summary.ok,
            now=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
        )
        self._atomic_text_write(html_path, html)
        logger.info(f"✅ HTML report → {html_path}")

        return {"json": str(json_path), "junit": str(junit_path), "html": str(html_path)}

    @staticmethod
    def _generate_junit_xml(summary: RunSummary) -> str:
        """Generate JUnit XML for CI/CD integration"""
        root = ET.Element("testsuites", name=summary.run_id)
        suites: Dict[str, Any] = {}

        for r in summary.results:
            suite = suites.get(r.api)
            if suite is None:
                suite = suites[r.api] = ET.SubElement(root, "testsuite", name=r.api)
            case = ET.SubElement(
                suite,
                "testcase",
                classname=f"restcheck.{r.api}",
                name=r.scenario,
                time=f"{r.duration_ms / 1000:.3f}",
            )
            if r.status == ScenarioStatus.FAIL:
                el = ET.SubElement(case, "failure", message=r.error_kind or "assertion", type=r.error_kind or "assertion")
                el.text = "\n".join(r.failures)
            elif r.status == ScenarioStatus.ERROR:
                el = ET.SubElement(case, "error", message=r.error_kind or "error", type=r.error_kind or "error")
                el.text = "\n".join(r.failures)
            elif r.status == ScenarioStatus.SKIPPED:
                ET.SubElement(case, "skipped")

        for name, suite in suites.items():
            results = [r for r in summary.results if r.api == name]
            suite.set("tests", str(len(results)))
            suite.set("failures", str(sum(1 for r in results if r.status == ScenarioStatus.FAIL)))
            suite.set("errors", str(sum(1 for r in results if r.status == ScenarioStatus.ERROR)))
            suite.set("skipped", str(sum(1 for r in results if r.status == ScenarioStatus.SKIPPED)))

        return ET.tostring(root, encoding="unicode", method="xml")

    @staticmethod
    def _atomic_text_write(path: Path, text: str) -> None:
        """Atomic file write"""
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)

    @staticmethod
    def _atomic_json_dump(path: Path, data: Any) -> None:
        """Atomic JSON write"""
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
        tmp.replace(path)
