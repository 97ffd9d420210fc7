"""
Pytest fixtures for the entire test suite.

This file defines:
1. Session-scoped fixtures to generate test repositories once.
2. Function-scoped fixtures to provide Repo objects to tests.
3. A builder for synthetic line-porcelain blame text.
4. Mocking fixtures for external dependencies like matplotlib.
"""
import matplotlib

matplotlib.use("Agg")

import pytest
from git import Repo

from tests.fixtures.create_test_repos import create_heat_repo, create_uniform_repo
from tests.fixtures.porcelain import porcelain_text


@pytest.fixture(scope="session")
def test_repos_dir(tmp_path_factory):
    """
    Creates all test repositories once per test session in a temporary directory.
    """
    repos_dir = tmp_path_factory.mktemp("git_repos")

    repo_paths = {
        "heat": repos_dir / "heat",
        "uniform": repos_dir / "uniform",
    }

    create_heat_repo(repo_paths["heat"])
    create_uniform_repo(repo_paths["uniform"])

    return repo_paths


@pytest.fixture
def heat_repo(test_repos_dir) -> Repo:
    """Provides the repository whose notes.txt mixes an old and a new commit."""
    return Repo(test_repos_dir["heat"])


@pytest.fixture
def uniform_repo(test_repos_dir) -> Repo:
    """Provides the repository with a single commit."""
    return Repo(test_repos_dir["uniform"])


@pytest.fixture
def make_porcelain():
    """Exposes the porcelain text builder to tests."""
    return porcelain_text


@pytest.fixture
def mock_plt(monkeypatch):
    """
    Mocks matplotlib.pyplot to prevent plots from being displayed during tests.
    Records the paths passed to savefig.
    """
    saved = []
    monkeypatch.setattr("matplotlib.pyplot.show", lambda: None)
    monkeypatch.setattr(
        "matplotlib.pyplot.savefig", lambda path, *args, **kwargs: saved.append(path)
    )
    return saved
