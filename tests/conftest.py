"""Shared test fixtures."""

from pathlib import Path

import pytest

from dartstats.reader import load_league, read_player_stats


DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


@pytest.fixture(scope='session')
def data_dir() -> Path:
    """Path to the sample table export."""
    return DATA_DIR


@pytest.fixture(scope='session')
def league():
    """League snapshot of the sample export."""
    return load_league(DATA_DIR)


@pytest.fixture(scope='session')
def records():
    """All player_stats rows of the sample export."""
    return read_player_stats(DATA_DIR / 'player_stats.csv')
