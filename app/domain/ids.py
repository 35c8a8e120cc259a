from __future__ import annotations

import importlib

ulid_module = importlib.import_module("ulid")


def new_analysis_public_id() -> str:
    return f"ana_{ulid_module.new().str}"
