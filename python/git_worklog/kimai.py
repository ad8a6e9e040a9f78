"""Push estimated sessions to a Kimai time-tracking server.

Sessions become Kimai timesheet entries (``POST /api/timesheets``). The
server is reached with httpx; authentication is either an API token or a
username/password exchanged for a token at ``/api/auth``.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

import httpx

from git_worklog.console import log
from git_worklog.errors import KimaiError
from git_worklog.models import Session

DEFAULT_KIMAI_URL = "http://localhost:8001"
USER_AGENT = "git-worklog-kimai/0.1"
IMPORT_DELAY_SECONDS = 0.1  # pause between POSTs

EXPLORE_ENDPOINTS = [
    "/api",
    "/api/config",
    "/api/version",
    "/api/ping",
    "/api/doc",
    "/api/projects",
    "/api/timesheets",
    "/api/activities",
]


@dataclass(frozen=True)
class KimaiConfig:
    url: str = DEFAULT_KIMAI_URL
    username: str | None = None
    password: str | None = None
    api_token: str | None = None
    default_project: int = 1
    default_activity: int = 1
    timeout: float = 30.0


@dataclass
class TimesheetEntry:
    begin: str
    end: str
    project: int
    activity: int
    description: str
    hours: float
    tags: list[str] = field(default_factory=list)

    def payload(self) -> dict:
        return {
            "begin": self.begin,
            "end": self.end,
            "project": self.project,
            "activity": self.activity,
            "description": self.description,
            "tags": ",".join(self.tags),
        }


@dataclass
class ImportResult:
    created: int = 0
    failed: int = 0
    hours: float = 0.0


def author_tag(author: str) -> str:
    return re.sub(r"\s+", "-", author.strip().lower())


def sessions_to_timesheets(
    repository: str | Path,
    sessions: list[Session],
    config: KimaiConfig,
    project_mapping: dict[str, int] | None = None,
) -> list[TimesheetEntry]:
    """One entry per session; the project is looked up by repository directory name."""
    repo_name = Path(repository).resolve().name
    project = (project_mapping or {}).get(repo_name, config.default_project)

    entries = []
    for session in sessions:
        end = session.start + timedelta(minutes=session.duration_minutes)
        entries.append(
            TimesheetEntry(
                begin=session.start.isoformat(timespec="seconds"),
                end=end.isoformat(timespec="seconds"),
                project=project,
                activity=config.default_activity,
                description=f"{session.description} ({session.commit_count} commits)",
                hours=session.hours,
                tags=["git", "development", author_tag(session.author)],
            )
        )
    return entries


class KimaiClient:
    def __init__(self, config: KimaiConfig, transport: httpx.BaseTransport | None = None):
        self.config = config
        self.token: str | None = None
        self._client = httpx.Client(
            base_url=config.url.rstrip("/"),
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=config.timeout,
            transport=transport,
        )

    def __enter__(self) -> KimaiClient:
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self._client.close()

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, endpoint: str, payload: dict | None = None):
        try:
            resp = self._client.request(method, endpoint, json=payload, headers=self._headers())
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise KimaiError(
                f"{method} {endpoint} failed: HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise KimaiError(f"{method} {endpoint} failed: {exc}") from exc

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            content_type = resp.headers.get("Content-Type", "unknown")
            raise KimaiError(
                f"{method} {endpoint} returned a non-JSON response ({content_type}): {resp.text[:200]}"
            ) from exc

    def _get_list(self, endpoint: str) -> list[dict]:
        data = self._request("GET", endpoint)
        if not isinstance(data, list):
            raise KimaiError(f"GET {endpoint} returned {type(data).__name__}, expected a list")
        return data

    def authenticate(self) -> str:
        """Resolve a bearer token. Raises KimaiError when none can be obtained."""
        if self.config.api_token:
            self.token = self.config.api_token
            return self.token

        if not (self.config.username and self.config.password):
            raise KimaiError("Kimai credentials missing: pass --token or --username/--password")

        data = self._request(
            "POST",
            "/api/auth",
            {"username": self.config.username, "password": self.config.password},
        )
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise KimaiError("Kimai authentication failed: no token in response")
        self.token = token
        return token

    def get_projects(self) -> list[dict]:
        return self._get_list("/api/projects")

    def get_activities(self) -> list[dict]:
        return self._get_list("/api/activities")

    def create_timesheet(self, entry: TimesheetEntry) -> dict:
        return self._request("POST", "/api/timesheets", entry.payload())

    def import_sessions(
        self,
        repository: str | Path,
        sessions: list[Session],
        project_mapping: dict[str, int] | None = None,
        delay: float | None = None,
        verbose: bool = False,
    ) -> ImportResult:
        """Create one timesheet per session. Failed entries are logged and counted."""
        if delay is None:
            delay = IMPORT_DELAY_SECONDS
        if self.token is None:
            self.authenticate()

        result = ImportResult()
        entries = sessions_to_timesheets(repository, sessions, self.config, project_mapping)
        for i, entry in enumerate(entries, 1):
            try:
                self.create_timesheet(entry)
            except KimaiError as exc:
                result.failed += 1
                log(f"[{i}/{len(entries)}] {exc.message}", level="ERROR")
            else:
                result.created += 1
                result.hours += entry.hours
                log(f"[{i}/{len(entries)}] Created: {entry.description} ({entry.hours:.2f}h)", verbose)

            if delay and i < len(entries):
                time.sleep(delay)

        result.hours = round(result.hours, 2)
        return result

    def explore(self, endpoints: list[str] | None = None) -> list[tuple[str, int | None, str]]:
        """Probe endpoints without raising. Returns ``(endpoint, status, detail)``."""
        results = []
        for endpoint in endpoints or EXPLORE_ENDPOINTS:
            try:
                resp = self._client.get(endpoint, headers=self._headers())
            except httpx.HTTPError as exc:
                results.append((endpoint, None, f"Error: {exc}"))
                continue

            if resp.status_code == 200:
                try:
                    body = resp.json()
                except ValueError:
                    detail = resp.text[:100]
                else:
                    detail = f"Array with {len(body)} items" if isinstance(body, list) else str(body)[:100]
            elif resp.status_code == 401:
                detail = "Authentication required"
            elif resp.status_code == 404:
                detail = "Endpoint not found"
            else:
                detail = resp.text[:100]
            results.append((endpoint, resp.status_code, detail))
        return results
