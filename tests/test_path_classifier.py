"""Tests del clasificador de paths.

Ejecutar:
    pytest tests/test_path_classifier.py -v
"""

import json
import re

import pytest

from seren_sync.core.classification import PathClassifier, build_rules, load_rules_file
from seren_sync.core.domain import Category, RuleConfigError


# =============================================================================
# REGLAS POR DEFECTO
# =============================================================================

class TestDefaultRules:
    """Clasificación con las reglas de la instalación original."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("navigation.speedOverGround", Category.SENSOR),
            ("environment.outside.temperature", Category.SENSOR),
            ("electrical.batteries.0.voltage", Category.SENSOR),
            ("electrical.solar.1.panelPower", Category.SENSOR),
            ("navigation.position", Category.POSITION),
            ("navigation.trip.log", Category.STATE),
            ("electrical.batteries.1.capacity.stateOfCharge", Category.STATE),
            ("electrical.solar.0.yieldToday", Category.STATE),
            ("notifications.navigation.gnss", Category.STATE),
            ("steering.autopilot.target.headingTrue", Category.STATE),
            ("electrical.inverters.0.mode", Category.STATE),
            ("design.name", Category.STATE),
        ],
    )
    def test_known_paths(self, classifier, path, expected):
        assert classifier.classify(path) is expected

    def test_state_evaluated_before_sensor(self, classifier):
        """navigation.* es SENSOR, pero STATE se evalúa antes."""
        assert classifier.classify("navigation.magneticVariation") is Category.STATE
        assert classifier.classify("navigation.courseRhumbline.nextPoint.position") is Category.STATE

    def test_position_evaluated_before_sensor(self, classifier):
        assert classifier.classify("navigation.position") is Category.POSITION


# =============================================================================
# PRECEDENCIA DE DUMP
# =============================================================================

class TestDumpPrecedence:
    """DUMP gana aunque el path también matchee otra categoría."""

    @pytest.mark.parametrize(
        "path",
        [
            "electrical.solar.0.totalPanelCurrent",   # también *Current (sensor)
            "electrical.inverters.0.ModeNumber",
            "electrical.batteries.0.consumedCharge",
            "electrical.batteries.279.voltage",       # también *voltage (sensor)
            "electrical.batteries.279.capacity.stateOfCharge",  # también state
        ],
    )
    def test_dump_wins(self, classifier, path):
        assert classifier.classify(path) is Category.DUMP

    def test_dump_rule_is_reported(self, classifier):
        rule = classifier.match("electrical.batteries.279.voltage")
        assert rule is not None
        assert rule.category is Category.DUMP


# =============================================================================
# NO CLASIFICADOS
# =============================================================================

class TestUnclassified:
    """Sin match ≡ DUMP."""

    @pytest.mark.parametrize("path", ["propulsion.main.revolutions", "design.length", "", "uuid"])
    def test_unmatched_is_dump(self, classifier, path):
        assert classifier.classify(path) is Category.DUMP
        assert classifier.match(path) is None


# =============================================================================
# REGLAS CONFIGURABLES
# =============================================================================

class TestConfigurableRules:
    """Las reglas son datos, no código."""

    def test_custom_rules(self):
        classifier = PathClassifier(build_rules({
            "dump": [r"^debug\."],
            "sensor": [r"^tanks\."],
            "state": [r"\.level$"],
        }))

        # STATE se evalúa antes que SENSOR aunque el archivo diga otra cosa
        assert classifier.classify("tanks.fuel.0.level") is Category.STATE
        assert classifier.classify("tanks.fuel.0.capacity") is Category.SENSOR
        assert classifier.classify("debug.tanks.level") is Category.DUMP
        assert classifier.classify("navigation.position") is Category.DUMP

    def test_list_order_within_category(self):
        rules = build_rules({"sensor": [r"^a", r"^ab"]})
        rule = PathClassifier(rules).match("abc")
        assert rule.pattern.pattern == "^a"

    def test_precompiled_patterns(self):
        classifier = PathClassifier(build_rules({"position": [re.compile(r"^gps$")]}))
        assert classifier.classify("gps") is Category.POSITION

    def test_unknown_category_rejected(self):
        with pytest.raises(RuleConfigError, match="unknown category"):
            build_rules({"weather": [r".*"]})

    def test_invalid_regex_rejected(self):
        with pytest.raises(RuleConfigError, match="invalid regex"):
            build_rules({"sensor": [r"(unclosed"]})

    def test_string_instead_of_list_rejected(self):
        with pytest.raises(RuleConfigError):
            build_rules({"sensor": r"^navigation"})

    def test_load_rules_file(self, tmp_path):
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(json.dumps({
            "dump": ["Secret"],
            "position": [r"^navigation\.position$"],
        }))

        classifier = PathClassifier(load_rules_file(rules_path))

        assert classifier.classify("navigation.position") is Category.POSITION
        assert classifier.classify("navigation.speedOverGround") is Category.DUMP
        assert classifier.rule_counts == {"dump": 1, "state": 0, "position": 1, "sensor": 0}

    def test_load_rules_file_invalid_json(self, tmp_path):
        rules_path = tmp_path / "rules.json"
        rules_path.write_text("{not json")

        with pytest.raises(RuleConfigError, match="invalid JSON"):
            load_rules_file(rules_path)
