"""PathClassifier - asigna una categoría a cada path.

Orden de evaluación:
1. Lista DUMP completa → DUMP (excluyente, gana sobre todo lo demás)
2. Categorías reales en orden fijo (STATE, POSITION, SENSOR),
   cada lista en orden → primera regla que haga match
3. Sin match → DUMP (no clasificado ≡ descartado)
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..domain.category import Category, REAL_CATEGORIES
from .rules import ClassificationRule, DEFAULT_RULES, RuleSet, build_rules


class PathClassifier:
    """Clasificador puro y sin estado."""

    def __init__(
        self,
        rules: Optional[RuleSet] = None,
        category_order: Sequence[Category] = REAL_CATEGORIES,
    ):
        if rules is None:
            rules = build_rules(DEFAULT_RULES)
        self._dump_rules = tuple(rules.get(Category.DUMP, ()))
        self._ordered = tuple(
            (category, tuple(rules.get(category, ())))
            for category in category_order
            if category is not Category.DUMP
        )

    def match(self, path: str) -> Optional[ClassificationRule]:
        """Retorna la regla que decide la categoría, o None si no hay match."""
        for rule in self._dump_rules:
            if rule.matches(path):
                return rule
        for _, rules in self._ordered:
            for rule in rules:
                if rule.matches(path):
                    return rule
        return None

    def classify(self, path: str) -> Category:
        rule = self.match(path)
        if rule is None:
            return Category.DUMP
        return rule.category

    @property
    def rule_counts(self) -> Mapping[str, int]:
        counts = {Category.DUMP.value: len(self._dump_rules)}
        for category, rules in self._ordered:
            counts[category.value] = len(rules)
        return counts
