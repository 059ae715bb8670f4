"""Pytest configuration helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_repo_on_path() -> None:
    """Allow tests to import from repo modules without setting PYTHONPATH."""
    repo_root = Path(__file__).resolve().parents[1]
    path_str = str(repo_root)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


_ensure_repo_on_path()

from neurospell.eeg.types import Sample  # noqa: E402


def _make_samples(count: int, *, channels: int = 4, start_ms: int = 0, step_ms: int = 8, offset: float = 0.0):
    return [
        Sample(
            timestamp=start_ms + idx * step_ms,
            channels=tuple(float((idx + ch) % 7) + offset for ch in range(channels)),
        )
        for idx in range(count)
    ]


@pytest.fixture()
def make_samples():
    return _make_samples
