"""Shared fixtures for unit tests."""

import itertools

import pytest

_counter = itertools.count(1)


def build_raw_commit(message="Implement OAuth login flow", files=None, stats=None, **overrides):
    """Build a raw commit record in the shape the commits endpoint produces."""
    n = next(_counter)
    if files is None:
        files = [
            {
                "filename": "src/auth/oauth.py",
                "status": "added",
                "additions": 80,
                "deletions": 4,
                "changes": 84,
                "patch": "@@ -0,0 +1,80 @@\n+def login():\n+    pass",
            }
        ]
    if stats is None:
        additions = sum(f.get("additions", 0) for f in files)
        deletions = sum(f.get("deletions", 0) for f in files)
        stats = {"additions": additions, "deletions": deletions, "total": additions + deletions}

    raw = {
        "sha": f"{n:07d}abcdef0123456789abcdef012345",
        "message": message,
        "author": {"name": "Jane Doe", "email": "jane@example.com", "login": "jane"},
        "committer": {"name": "Jane Doe", "email": "jane@example.com", "login": "jane"},
        "timestamp": "2024-01-15T10:30:00Z",
        "stats": stats,
        "files": files,
        "parents": [{"sha": "0123456789abcdef", "url": None}],
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def raw_commit():
    """Factory for raw commit records."""
    return build_raw_commit


@pytest.fixture
def trivial_raw_commit():
    """Factory for raw commits whose message marks them trivial."""

    def factory(message="Merge branch 'feature/x' into main", **overrides):
        return build_raw_commit(message=message, **overrides)

    return factory
