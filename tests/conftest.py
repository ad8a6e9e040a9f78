import os
import shutil
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from git_worklog.models import Event

DAY = (2025, 11, 3)  # a Monday


@dataclass
class GitRepo:
    path: Path
    commit: Callable[..., None]


def at(hhmm: str, day: tuple[int, int, int] = DAY, tz=timezone.utc) -> datetime:
    hours, minutes = (int(p) for p in hhmm.split(":"))
    return datetime(*day, hours, minutes, tzinfo=tz)


def make_event(author: str, hhmm: str, message: str | None = None, day=DAY, tz=timezone.utc) -> Event:
    return Event(
        id=f"{author}-{day[1]:02d}{day[2]:02d}-{hhmm}",
        author=author,
        email=f"{author.lower()}@example.com",
        timestamp=at(hhmm, day, tz),
        message=message if message is not None else f"{author} work at {hhmm}",
    )


@pytest.fixture
def git_repo(tmp_path):
    """Factory for a throwaway git repository with commits at fixed dates."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    repo = tmp_path / "sample-repo"
    repo.mkdir()
    base_env = {
        **os.environ,
        "GIT_CONFIG_NOSYSTEM": "1",
        "HOME": str(tmp_path),
        "GIT_COMMITTER_NAME": "Committer",
        "GIT_COMMITTER_EMAIL": "committer@example.com",
    }
    subprocess.run(["git", "init", "-q"], cwd=repo, check=True, env=base_env)

    def commit(message: str, date: str, author: str = "Alice", email: str = "alice@example.com"):
        env = {
            **base_env,
            "GIT_AUTHOR_NAME": author,
            "GIT_AUTHOR_EMAIL": email,
            "GIT_AUTHOR_DATE": date,
            "GIT_COMMITTER_DATE": date,
        }
        subprocess.run(
            ["git", "commit", "-q", "--allow-empty", "--no-gpg-sign", "-m", message],
            cwd=repo,
            check=True,
            env=env,
        )

    return GitRepo(path=repo, commit=commit)


@pytest.fixture
def plain_dir(tmp_path, monkeypatch):
    """A directory git can't resolve to any repository, even if tmp_path sits in a checkout."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    plain = tmp_path / "plain"
    plain.mkdir()
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", os.pathsep.join([str(tmp_path), str(tmp_path.resolve())]))
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)
    return plain
