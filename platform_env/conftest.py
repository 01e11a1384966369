"""
Shared pytest fixtures.

Provides mock platform environments (build and runtime) assembled from the
JSON samples under ``tests/samples``, plus a recording key getter so tests
can inject an environment source without touching ``os.environ``.
"""

import base64
import json
from pathlib import Path
from typing import Dict, List, Optional

import pytest

SAMPLES_DIR = Path(__file__).resolve().parent / "tests" / "samples"


def load_sample(name: str) -> dict:
    with (SAMPLES_DIR / name).open() as f:
        return json.load(f)


def encode_sample(name: str) -> str:
    return base64.b64encode((SAMPLES_DIR / name).read_bytes()).decode("ascii")


def encode_json(value) -> str:
    return base64.b64encode(json.dumps(value).encode("utf-8")).decode("ascii")


class RecordingGetter:
    """
    Key getter over a plain dict that remembers which keys were read.
    """

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values = dict(values or {})
        self.reads: List[str] = []

    def __call__(self, key: str) -> Optional[str]:
        self.reads.append(key)
        return self.values.get(key)


def _build_environment() -> Dict[str, str]:
    env = load_sample("ENV.json")
    env["PLATFORM_VARIABLES"] = encode_sample("PLATFORM_VARIABLES.json")
    env["PLATFORM_APPLICATION"] = encode_sample("PLATFORM_APPLICATION.json")
    return env


@pytest.fixture
def build_env() -> Dict[str, str]:
    """Environment as seen during the build phase (no relationships or routes)."""
    return _build_environment()


@pytest.fixture
def runtime_env() -> Dict[str, str]:
    """Environment as seen by a deployed application."""
    env = _build_environment()
    env["PLATFORM_RELATIONSHIPS"] = encode_sample("PLATFORM_RELATIONSHIPS.json")
    env["PLATFORM_ROUTES"] = encode_sample("PLATFORM_ROUTES.json")
    env.update(load_sample("ENV_runtime.json"))
    return env


@pytest.fixture
def getter():
    """
    Use as: get = getter(runtime_env); load_config(get)
    """

    def factory(values: Optional[Dict[str, str]] = None) -> RecordingGetter:
        return RecordingGetter(values)

    return factory
