"""Run statistics and summary reports (JSON and HTML)."""

import html as html_lib
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from .config import EnvironmentConfig

logger = logging.getLogger(__name__)


class ScenarioStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class ScenarioResult(BaseModel):
    name: str
    status: ScenarioStatus
    duration_ms: float = 0
    error_message: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    screenshots: List[str] = Field(default_factory=list)
    traces: List[str] = Field(default_factory=list)


class RunStatistics(BaseModel):
    """Counters for the whole run. Written once per finished scenario."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    scenarios: List[ScenarioResult] = Field(default_factory=list)

    def start(self):
        self.start_time = datetime.now(timezone.utc)

    def finish(self):
        self.end_time = datetime.now(timezone.utc)

    def record(self, result: ScenarioResult):
        if result.status == ScenarioStatus.PASSED:
            self.passed += 1
        elif result.status == ScenarioStatus.FAILED:
            self.failed += 1
        else:
            self.skipped += 1
        self.scenarios.append(result)

    @property
    def duration_ms(self) -> int:
        if not self.start_time or not self.end_time:
            return 0
        return int((self.end_time - self.start_time).total_seconds() * 1000)

    @property
    def success_rate(self) -> float:
        return round(self.passed / self.total * 100, 2) if self.total > 0 else 0.0


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RunReporter:
    """Writes the machine-readable run summary and a browsable HTML table."""

    def __init__(self, report_dir: Path):
        self.report_dir = report_dir

    def build_summary(self, stats: RunStatistics, config: EnvironmentConfig) -> Dict[str, Any]:
        return {
            "executionSummary": {
                "startTime": _iso(stats.start_time),
                "endTime": _iso(stats.end_time),
                "duration": stats.duration_ms,
                "environment": config.name,
                "baseUrl": config.base_url,
                "browser": config.browser.engine.value,
                "headless": config.browser.headless,
                "viewport": config.browser.viewport.as_dict(),
            },
            "results": {
                "total": stats.total,
                "passed": stats.passed,
                "failed": stats.failed,
                "skipped": stats.skipped,
                "successRate": stats.success_rate,
            },
        }

    def save_summary(
        self, stats: RunStatistics, config: EnvironmentConfig, filename: str = "test-summary.json"
    ) -> Path:
        self.report_dir.mkdir(parents=True, exist_ok=True)
        path = self.report_dir / filename
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.build_summary(stats, config), f, indent=2)
        logger.info(f"Test summary report generated: {path}")
        return path

    def generate_html_report(self, stats: RunStatistics, filename: str = "report.html") -> Path:
        rows = []
        for s in stats.scenarios:
            status_color = {
                ScenarioStatus.PASSED: "#16a34a",
                ScenarioStatus.FAILED: "#dc2626",
                ScenarioStatus.SKIPPED: "#d97706",
            }[s.status]
            error = html_lib.escape(s.error_message or "")
            shots = "".join(
                f'<div><a href="{html_lib.escape(self._relative(p))}" target="_blank">screenshot</a></div>'
                for p in s.screenshots
            )
            rows.append(f"""
                    <tr>
                        <td>{html_lib.escape(s.name)}</td>
                        <td>{html_lib.escape(", ".join(s.tags))}</td>
                        <td style="color: {status_color}; font-weight: bold;">{s.status.value.upper()}</td>
                        <td>{round(s.duration_ms, 2)}ms</td>
                        <td><pre>{error}</pre>{shots}</td>
                    </tr>
                """)

        html_content = f"""
        <html>
            <body style="font-family: sans-serif; padding: 20px;">
                <h1>FRBSF E2E Report - {stats.success_rate}% Pass</h1>
                <p>Total: {stats.total} | Passed: {stats.passed} | Failed: {stats.failed} | Skipped: {stats.skipped}</p>
                <table border="1" style="width: 100%; border-collapse: collapse;">
                    <tr style="background: #eee;"><th>Scenario</th><th>Tags</th><th>Status</th><th>Duration</th><th>Details</th></tr>
                    {"".join(rows)}
                </table>
            </body>
        </html>
        """
        self.report_dir.mkdir(parents=True, exist_ok=True)
        path = self.report_dir / filename
        path.write_text(html_content, encoding="utf-8")
        logger.info(f"HTML report: {path}")
        return path

    def _relative(self, path: str) -> str:
        try:
            return Path(path).relative_to(self.report_dir).as_posix()
        except ValueError:
            return Path(path).as_posix()
