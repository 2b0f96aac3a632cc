"""Reglas de clasificación por categoría.

Las reglas son DATOS (patrón + categoría), no código: se pueden cargar
desde un JSON ``{categoria: [regex, ...]}`` sin tocar el motor.
Las listas conservan el orden; el orden dentro de cada lista importa.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Pattern, Tuple, Union

from ..domain.category import Category
from ..domain.errors import RuleConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationRule:
    """Regla inmutable: si ``pattern`` hace match, el path es ``category``."""

    pattern: Pattern[str]
    category: Category

    def matches(self, path: str) -> bool:
        return self.pattern.search(path) is not None


RuleSet = Dict[Category, Tuple[ClassificationRule, ...]]


# Reglas de la instalación original (barco con Signal K).
DEFAULT_RULES: Dict[str, List[str]] = {
    "dump": [
        r"^(.*)(totalPanel)(.*)$",
        r"^(.*)(ModeNumber)(.*)$",
        r"^(.*)(consumedCharge)(.*)$",
        r"^(electrical\.batteries.279)(.*)$",
    ],
    "state": [
        r"^(.*)((m|M)ode)$",
        r"^(.*)\.(name)$",
        r"^(.*)\.(state)$",
        r"^(electrical\.batteries\.)([0-9]+)(\.capacity\.dischargedEnergy)$",
        r"^(electrical\.batteries\.)([0-9]+)(\.capacity\.stateOfCharge)$",
        r"^(electrical\.batteries\.)([0-9]+)(\.lifetimeDischarge)$",
        r"^(electrical\.solar\.)([0-9]+)(\.systemYield)$",
        r"^(electrical\.solar\.)([0-9]+)(\.yieldToday)$",
        r"^(electrical\.solar\.)([0-9]+)(\.yieldYesterday)$",
        r"^(navigation\.courseRhumbline\.nextPoint\.position)$",
        r"^(navigation\.currentRoute\.)(.*)$",
        r"^(navigation\.gns)(.*)$",
        r"^(navigation\.magneticVariation)$",
        r"^(navigation\.trip\.log)$",
        r"^(notifications)(.*)$",
        r"^(sensors\.ais)(.*)$",
        r"^(steering)(.*)$",
    ],
    "position": [
        r"^(navigation\.position)$",
    ],
    "sensor": [
        r"^(.*)([cC]urrent)$",
        r"^(.*)([pP]ower)$",
        r"^(.*)([vV]oltage)$",
        r"^(.*)([tT]emperature)$",
        r"^(environment)(.*)$",
        r"^(navigation)(.*)$",
    ],
}


def _parse_category(name: str) -> Category:
    try:
        return Category(name)
    except ValueError:
        raise RuleConfigError(name, "unknown category") from None


def build_rules(
    spec: Mapping[str, Iterable[Union[str, Pattern[str]]]],
) -> RuleSet:
    """Compila ``{categoria: [regex, ...]}`` a un RuleSet inmutable.

    Raises:
        RuleConfigError: categoría desconocida o regex inválida
    """
    rules: RuleSet = {}
    for name, patterns in spec.items():
        category = _parse_category(name)
        if isinstance(patterns, (str, bytes)):
            raise RuleConfigError(name, "patterns must be a list")

        compiled: List[ClassificationRule] = []
        for pattern in patterns:
            if isinstance(pattern, str):
                try:
                    pattern = re.compile(pattern)
                except re.error as e:
                    raise RuleConfigError(name, f"invalid regex {pattern!r}: {e}") from e
            compiled.append(ClassificationRule(pattern=pattern, category=category))
        rules[category] = tuple(compiled)
    return rules


def load_rules_file(path: Union[str, Path]) -> RuleSet:
    """Carga reglas desde un archivo JSON.

    Las categorías que no aparecen en el archivo quedan sin reglas
    (todo lo que no haga match se descarta).
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise RuleConfigError(str(path), f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise RuleConfigError(str(path), "top-level value must be an object")

    rules = build_rules(data)
    logger.info(
        "[RULES] Loaded %d rules from %s",
        sum(len(r) for r in rules.values()),
        path,
    )
    return rules
