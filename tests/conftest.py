"""Shared test fixtures for turn timeline tests."""

from pathlib import Path

import pytest

from turn_timeline.services.chunk_factory import ChunkFactory

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def factory() -> ChunkFactory:
    """A chunk factory with a frozen clock and no id prefix."""
    return ChunkFactory(clock=lambda: 1_700_000_000_000)


@pytest.fixture
def step_stream_text(fixtures_dir) -> str:
    return (fixtures_dir / "step_stream.jsonl").read_text()


@pytest.fixture
def item_stream_text(fixtures_dir) -> str:
    return (fixtures_dir / "item_stream.jsonl").read_text()


@pytest.fixture
def message_stream_text(fixtures_dir) -> str:
    return (fixtures_dir / "message_stream.jsonl").read_text()


@pytest.fixture
def console_text(fixtures_dir) -> str:
    return (fixtures_dir / "console_output.txt").read_text()


@pytest.fixture
def patch_text(fixtures_dir) -> str:
    return (fixtures_dir / "patch_output.txt").read_text()
