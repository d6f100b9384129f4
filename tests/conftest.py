from __future__ import annotations

import os
import shutil

os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

import pytest  # noqa: E402
from git import Actor, Repo  # noqa: E402

AUTHOR = Actor("Ada Lovelace", "ada@example.com")
AUTHORED_AT = 1577836800
SUMMARY = "Add sample module"
SOURCE_PATH = os.path.join("src", "a b.py")

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available"
)


@pytest.fixture
def git_repo(tmp_path) -> Repo:
    """A repository with one commit touching ``src/a b.py`` and an origin remote."""
    root = tmp_path.resolve() / "repo"
    root.mkdir()
    repo = Repo.init(root)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", AUTHOR.name)
        writer.set_value("user", "email", AUTHOR.email)

    source = root / SOURCE_PATH
    source.parent.mkdir()
    source.write_text("first\nsecond\nthird\n", encoding="utf-8")

    repo.index.add([SOURCE_PATH])
    stamp = f"{AUTHORED_AT} +0000"
    repo.index.commit(
        SUMMARY,
        author=AUTHOR,
        committer=AUTHOR,
        author_date=stamp,
        commit_date=stamp,
    )
    repo.create_remote("origin", "git@github.com:org/repo.git")
    yield repo
    repo.close()
