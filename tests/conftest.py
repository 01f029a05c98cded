import pytest
from pathlib import Path

from gluestage.config import resolve_plugin_config
from gluestage.storage import NoOpBlobStore
from gluestage.template import CompiledTemplate


ROLE = "arn:aws:iam::123456789012:role/glue-role"


@pytest.fixture
def store():
    return NoOpBlobStore()


@pytest.fixture
def template():
    return CompiledTemplate()


@pytest.fixture
def service_dir(tmp_path):
    """A service directory with one job script at jobs/etl1.py."""
    (tmp_path / "jobs").mkdir()
    (tmp_path / "jobs" / "etl1.py").write_text("print('etl1')\n")
    return tmp_path


@pytest.fixture
def make_config(service_dir):
    """Build a GluePluginConfig from a custom.Glue section rooted at service_dir."""
    def _make(**section):
        return resolve_plugin_config({"custom": {"Glue": section}}, base_dir=service_dir)
    return _make


def job_entry(name: str = "etl1", script: str = "jobs/etl1.py", **extra) -> dict:
    entry = {"name": name, "scriptPath": script, "role": ROLE}
    entry.update(extra)
    return entry


def write_file(path: Path, content: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path
