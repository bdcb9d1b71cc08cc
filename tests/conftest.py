from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def clean_atlas_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("ATLAS_"):
            monkeypatch.delenv(name, raising=False)
