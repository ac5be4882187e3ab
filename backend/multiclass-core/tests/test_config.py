import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import importlib

import pytest

import config


def test_entry_point_policy_from_environment(monkeypatch):
    monkeypatch.setenv("ENTRY_POINT_POLICY", " First ")
    try:
        assert importlib.reload(config).ENTRY_POINT_POLICY == "first"
    finally:
        monkeypatch.delenv("ENTRY_POINT_POLICY")
        importlib.reload(config)


def test_unknown_entry_point_policy_fails_at_startup(monkeypatch):
    monkeypatch.setenv("ENTRY_POINT_POLICY", "newest")
    try:
        with pytest.raises(ValueError, match="ENTRY_POINT_POLICY must be one of last, first, fail"):
            importlib.reload(config)
    finally:
        monkeypatch.delenv("ENTRY_POINT_POLICY")
        importlib.reload(config)
    assert config.ENTRY_POINT_POLICY == "last"
