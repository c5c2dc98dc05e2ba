"""
Unit tests for apps configuration loading.
"""

import json
import os
import tempfile

import pytest

from review_poller.utils.app_config import load_app_ids, load_app_names


def _write_config(tmpdir, data):
    path = os.path.join(tmpdir, "apps.json")
    with open(path, "w") as f:
        if isinstance(data, str):
            f.write(data)
        else:
            json.dump(data, f)
    return path


def test_load_app_ids_mixed_entries():
    """Test bare ids and id/name objects together."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_config(tmpdir, {"apps": ["389801252", {"id": "447188370", "name": "Snapchat"}]})

        assert load_app_ids(path) == frozenset({"389801252", "447188370"})


def test_duplicate_ids_collapse():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_config(tmpdir, {"apps": ["1", "1", {"id": "1"}]})

        assert load_app_ids(path) == frozenset({"1"})


def test_load_app_names_defaults_to_id():
    """Apps without a name are named after their id."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_config(tmpdir, {"apps": ["1", {"id": "2", "name": "Two"}]})

        assert load_app_names(path) == {"1": "1", "2": "Two"}


def test_missing_file_raises():
    with pytest.raises(ValueError, match="not found"):
        load_app_ids("/nonexistent/apps.json")


@pytest.mark.parametrize("content", ["not json", {"apps": "1"}, {"other": []}, {"apps": [{"name": "x"}]}])
def test_malformed_config_raises(content):
    """Test handling of malformed config files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_config(tmpdir, content)

        with pytest.raises(ValueError):
            load_app_ids(path)


def test_shipped_config_is_valid():
    path = os.path.join(os.path.dirname(__file__), "..", "..", "config", "apps.json")

    assert len(load_app_ids(path)) == 3
