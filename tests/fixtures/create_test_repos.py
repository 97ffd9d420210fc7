"""
Programmatic generation of Git repositories for testing.
This script creates small repositories whose blame output is known exactly,
to be used as fixtures in integration tests.
"""

import shutil
from pathlib import Path
from datetime import datetime, timezone
from git import Repo, Actor

# Author times of the commits below, as git blame reports them.
HEAT_OLD_TIME = int(datetime(2020, 1, 1, 12, 0, 0, tzinfo=timezone.utc).timestamp())
HEAT_NEW_TIME = int(datetime(2020, 6, 1, 12, 0, 0, tzinfo=timezone.utc).timestamp())
UNIFORM_TIME = int(datetime(2021, 3, 15, 9, 30, 0, tzinfo=timezone.utc).timestamp())


# Helper functions for repository creation
def create_file(path: Path, content: str):
    """Creates a file with the given content, ensuring parent dirs exist."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def append_lines(path: Path, lines):
    """Appends whole lines to an existing file."""
    with path.open("a") as f:
        for line in lines:
            f.write(f"{line}\n")


def commit(repo: Repo, message: str, author: Actor, commit_date: datetime):
    """Creates a commit with a specific message, author, and date."""
    repo.index.commit(
        message,
        author=author,
        committer=author,
        commit_date=commit_date,
        author_date=commit_date,
    )


def create_heat_repo(path: Path):
    """
    Creates a repository whose notes.txt mixes two commits.
    - lines 1-3 from Alice on 2020-01-01, line 4 from Bob on 2020-06-01
    - untracked.txt exists in the work tree but was never added
    """
    if path.exists():
        shutil.rmtree(path)
    repo = Repo.init(path)
    alice = Actor("Alice", "alice@example.com")
    bob = Actor("Bob", "bob@example.com")

    create_file(path / "notes.txt", "alpha\nbeta\ngamma\n")
    repo.index.add(["notes.txt"])
    commit(
        repo,
        "Initial notes",
        alice,
        datetime(2020, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
    )

    append_lines(path / "notes.txt", ["delta"])
    repo.index.add(["notes.txt"])
    commit(
        repo,
        "Add delta",
        bob,
        datetime(2020, 6, 1, 12, 0, 0, tzinfo=timezone.utc),
    )

    create_file(path / "untracked.txt", "never committed\n")


def create_uniform_repo(path: Path):
    """Creates a repository with a single commit touching every line."""
    if path.exists():
        shutil.rmtree(path)
    repo = Repo.init(path)
    author = Actor("Dev", "dev@example.com")
    create_file(path / "src" / "module.py", "import os\n\nprint(os.sep)\n")
    repo.index.add(["src/module.py"])
    commit(
        repo,
        "Initial commit",
        author,
        datetime(2021, 3, 15, 9, 30, 0, tzinfo=timezone.utc),
    )
