"""Tests de la carga de opciones desde la línea de comandos."""

import argparse
import json

from seren_sync.cli import _load_options
from seren_sync.core.domain import Category


def args(**overrides) -> argparse.Namespace:
    values = {"options": None, "rules": None, "format": None}
    values.update(overrides)
    return argparse.Namespace(**values)


class TestLoadOptions:

    def test_flags_override_options_file(self, tmp_path):
        options_file = tmp_path / "options.json"
        options_file.write_text(json.dumps({
            "stateSampleRate": 250,
            "sockets": {"state": "/run/state.sock"},
        }))

        options = _load_options(args(options=str(options_file), rules="/etc/rules.json", format="pipe"))

        assert options.state_sample_rate == 250
        assert options.sockets == {Category.STATE: "/run/state.sock"}
        assert options.rules_file == "/etc/rules.json"
        assert options.serialization == "pipe"

    def test_env_when_no_options_file(self, monkeypatch):
        monkeypatch.setenv("SEREN_SENSOR_SAMPLE_RATE", "3000")

        options = _load_options(args())

        assert options.sensor_sample_rate == 3000
