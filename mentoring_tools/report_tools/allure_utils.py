"""
================================================================================
Allure Report Utilities
================================================================================

Attachment helpers for scenarios and post-run processing of Allure results.

Features:
- Attachment helpers (JSON, text, files)
- Result parsing and run summary
- Markdown summary for CI job pages
- HTML report generation with history carry-over

================================================================================
"""

import json
import shutil
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach `data` as pretty-printed JSON (non-JSON values via str()).
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


_FILE_ATTACHMENT_TYPES = {
    ".png": allure.attachment_type.PNG,
    ".webm": allure.attachment_type.WEBM,
    ".zip": None,
}


def attach_file(path: str, name: Optional[str] = None) -> bool:
    """
    Attach a file produced by the browser (screenshot, video, trace).

    Returns:
        False when the file does not exist
    """
    file_path = Path(path)
    if not file_path.exists():
        logger.debug(f"Nothing to attach, file missing: {file_path}")
        return False

    attachment_type = _FILE_ATTACHMENT_TYPES.get(file_path.suffix.lower())
    if attachment_type is None:
        allure.attach.file(str(file_path), name=name or file_path.name, extension=file_path.suffix.lstrip("."))
    else:
        allure.attach.file(str(file_path), name=name or file_path.name, attachment_type=attachment_type)
    return True


# ================================================================================
# Report Processing
# ================================================================================

@dataclass
class RunSummary:
    """Summary of test execution results."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    unknown: int = 0
    duration_ms: int = 0
    failures: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Pass rate percentage over executed (non-skipped) tests."""
        executed = self.total - self.skipped
        if executed <= 0:
            return 0.0
        return (self.passed / executed) * 100

    @property
    def succeeded(self) -> bool:
        return self.failed == 0 and self.broken == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "unknown": self.unknown,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "duration_ms": self.duration_ms,
            "failures": list(self.failures),
            "timestamp": self.timestamp,
        }

    def to_markdown(self, title: str = "Mentoring UI Test Summary") -> str:
        status = "✅ PASSED" if self.succeeded else "❌ FAILED"
        lines = [
            f"# {title}",
            "",
            f"**Status:** {status}",
            f"**Generated:** {self.timestamp}",
            "",
            "| Metric | Value |",
            "|---|---|",
            f"| Total | {self.total} |",
            f"| Passed | {self.passed} |",
            f"| Failed | {self.failed} |",
            f"| Broken | {self.broken} |",
            f"| Skipped | {self.skipped} |",
            f"| Pass rate | {self.pass_rate:.2f}% |",
            f"| Duration | {self.duration_ms / 1000:.2f}s |",
        ]
        if self.failures:
            lines += ["", "## Failures", ""]
            lines += [f"- {name}" for name in self.failures]
        return "\n".join(lines) + "\n"


class AllureReportProcessor:
    """
    Turns an `allure-results` directory into a run summary and, when the
    Allure CLI is installed, an HTML report with trend history.

    Usage:
        processor = AllureReportProcessor(Path("reports/allure-results"))
        summary = processor.generate_summary()
        processor.write_markdown_summary(Path("reports/summary.md"))
    """

    def __init__(
        self,
        results_dir: Path,
        report_dir: Optional[Path] = None,
        history_dir: Optional[Path] = None
    ):
        """
        Args:
            results_dir: Where allure-pytest wrote `*-result.json`
            report_dir: HTML output (default: sibling `allure-report`)
            history_dir: Trend archive (default: sibling `allure-history`)
        """
        self.results_dir = Path(results_dir)
        self.report_dir = Path(report_dir or self.results_dir.parent / "allure-report")
        self.history_dir = Path(history_dir or self.results_dir.parent / "allure-history")

    def parse_results(self) -> List[Dict[str, Any]]:
        """Parse `*-result.json` files; unreadable files are skipped with a warning."""
        results = []

        for result_file in sorted(self.results_dir.glob("*-result.json")):
            try:
                with open(result_file, encoding="utf-8") as f:
                    results.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to parse {result_file}: {e}")

        return results

    def generate_summary(self) -> RunSummary:
        """
        Summarize the latest attempt of each test.

        Reruns produce one result file per attempt sharing a historyId;
        only the most recent attempt counts.
        """
        latest: Dict[str, Dict[str, Any]] = {}
        for result in self.parse_results():
            key = result.get("historyId") or result.get("uuid") or result.get("fullName", "")
            current = latest.get(key)
            if current is None or result.get("stop", 0) >= current.get("stop", 0):
                latest[key] = result

        summary = RunSummary()
        summary.total = len(latest)

        for result in latest.values():
            status = result.get("status", "unknown")
            if status == "passed":
                summary.passed += 1
            elif status == "failed":
                summary.failed += 1
            elif status == "broken":
                summary.broken += 1
            elif status == "skipped":
                summary.skipped += 1
            else:
                summary.unknown += 1

            if status in ("failed", "broken"):
                summary.failures.append(result.get("fullName") or result.get("name", "unknown"))

            summary.duration_ms += result.get("stop", 0) - result.get("start", 0)

        return summary

    def write_markdown_summary(self, output_path: Path) -> RunSummary:
        summary = self.generate_summary()
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(summary.to_markdown(), encoding="utf-8")
        logger.info(f"Summary written to {output_path}")
        return summary

    @staticmethod
    def _replace_tree(source: Path, destination: Path) -> None:
        if destination.exists():
            shutil.rmtree(destination)
        shutil.copytree(source, destination)

    def copy_history(self) -> bool:
        """Seed the results with the trend data of the last rendered report."""
        previous = self.report_dir / "history"
        if not previous.exists():
            return False
        self._replace_tree(previous, self.results_dir / "history")
        logger.debug(f"Trend history carried over from {previous}")
        return True

    def generate_report(self) -> bool:
        """
        Render the HTML report with the `allure` command line.

        Returns:
            False when the CLI is missing or exits non-zero
        """
        self.copy_history()

        cmd = ["allure", "generate", str(self.results_dir), "-o", str(self.report_dir), "--clean"]
        try:
            completed = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            logger.warning("Allure command not found. Install allure-commandline to render HTML reports.")
            return False

        if completed.returncode != 0:
            logger.error(f"allure generate exited with {completed.returncode}: {completed.stderr.strip()}")
            return False

        logger.info(f"📊 Allure report rendered at {self.report_dir}")
        return True

    def save_history(self) -> Optional[Path]:
        """
        Archive the rendered report's trend data.

        Keeps one timestamped snapshot per run plus `latest/` for the next run.
        """
        rendered = self.report_dir / "history"
        if not rendered.exists():
            return None

        snapshot = self.history_dir / datetime.now().strftime("%Y%m%d-%H%M%S")
        self.history_dir.mkdir(parents=True, exist_ok=True)
        self._replace_tree(rendered, snapshot)
        self._replace_tree(rendered, self.history_dir / "latest")
        logger.debug(f"Trend history archived to {snapshot}")
        return snapshot

    def print_summary(self, summary: Optional[RunSummary] = None) -> None:
        """Log the run summary, one line per metric and one per failure."""
        summary = summary or self.generate_summary()

        logger.info("-" * 60)
        logger.info(
            f"Mentoring suite: {summary.total} tests | ✅ {summary.passed} passed | "
            f"❌ {summary.failed} failed | ⚠️ {summary.broken} broken | ⏭️ {summary.skipped} skipped"
        )
        logger.info(f"Pass rate {summary.pass_rate:.2f}% in {summary.duration_ms / 1000:.2f}s")
        for name in summary.failures:
            logger.error(f"  ❌ {name}")
        logger.info("-" * 60)


__all__ = [
    "attach_json",
    "attach_text",
    "attach_file",
    "RunSummary",
    "AllureReportProcessor",
]
