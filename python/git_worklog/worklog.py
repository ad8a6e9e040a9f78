"""Write the full set of work-log reports for one repository."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from git_worklog.dashboard import write_dashboard
from git_worklog.export import format_summary, project_name, write_analysis, write_csv
from git_worklog.models import Session

DEFAULT_REPORTS_DIR = Path("reports")


@dataclass
class WorklogFiles:
    analysis: Path
    csv: Path
    summary: Path
    dashboard: Path

    def items(self) -> list[tuple[str, Path]]:
        return [
            ("Analysis Data", self.analysis),
            ("CSV Timesheet", self.csv),
            ("Summary Report", self.summary),
            ("Dashboard", self.dashboard),
        ]


def report_prefix(repository: str | Path, now: datetime | None = None) -> str:
    """``<repo>_<YYYY-MM-DDTHH-MM>``, safe for file names."""
    now = now or datetime.now()
    name = re.sub(r'[<>:"/\\|?*\s]', "_", Path(repository).resolve().name) or "repository"
    return f"{name}_{now:%Y-%m-%dT%H-%M}"


def write_worklog(
    repository: str | Path,
    sessions: list[Session],
    output_dir: str | Path = DEFAULT_REPORTS_DIR,
    project: str | None = None,
    since: str | None = None,
    until: str | None = None,
    now: datetime | None = None,
) -> WorklogFiles:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    prefix = report_prefix(repository, now)

    files = WorklogFiles(
        analysis=output_dir / f"{prefix}_analysis.json",
        csv=output_dir / f"{prefix}_timesheet.csv",
        summary=output_dir / f"{prefix}_summary.txt",
        dashboard=output_dir / f"{prefix}_dashboard.html",
    )

    write_analysis(files.analysis, repository, sessions)
    write_csv(files.csv, sessions, project_name(repository, project))
    files.summary.write_text(format_summary(repository, sessions, since, until), encoding="utf-8")
    write_dashboard(files.dashboard, repository, sessions)
    return files
