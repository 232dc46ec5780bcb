# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for settings loading.
"""
import pytest
from pydantic import ValidationError

from mongobox.MANAGERS.environment_manager import EnvironmentManager
from mongobox.MODELS.settings import RuntimeSettings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("STARTUP_TIMEOUT", "POLL_INTERVAL", "DOCKER_HOST", "HOST"):
        monkeypatch.delenv(f"MONGOBOX_{name}", raising=False)
    return monkeypatch


def test_defaults(clean_env, tmp_path):
    settings = EnvironmentManager(str(tmp_path)).load_settings()
    assert settings == RuntimeSettings()
    assert settings.startup_timeout == 60.0
    assert settings.host == "localhost"


def test_env_files_later_override_earlier(clean_env, tmp_path):
    (tmp_path / "base.env").write_text("MONGOBOX_STARTUP_TIMEOUT=30\nMONGOBOX_HOST=db.local\n")
    (tmp_path / "ci.env").write_text("# CI overrides\nMONGOBOX_STARTUP_TIMEOUT='120'\n")

    settings = EnvironmentManager(str(tmp_path)).load_settings(["base.env", "ci.env", "missing.env"])

    assert settings.startup_timeout == 120.0
    assert settings.host == "db.local"


def test_process_environment_wins(clean_env, tmp_path):
    (tmp_path / ".env").write_text("MONGOBOX_POLL_INTERVAL=5\n")
    clean_env.setenv("MONGOBOX_POLL_INTERVAL", "0.25")

    settings = EnvironmentManager(str(tmp_path)).load_settings([".env"])

    assert settings.poll_interval == 0.25


def test_invalid_value_rejected(clean_env, tmp_path):
    clean_env.setenv("MONGOBOX_STARTUP_TIMEOUT", "-1")
    with pytest.raises(ValidationError):
        EnvironmentManager(str(tmp_path)).load_settings()
