"""Pytest configuration for the tallyc test suite."""

import pytest


@pytest.fixture
def write_source(tmp_path):
    """Write program text to a .tly file and return its path."""

    def write(text, name="prog.tly"):
        path = tmp_path / name
        path.write_text(text)
        return path

    return write
