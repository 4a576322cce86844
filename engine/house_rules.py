"""House-rule flags consulted by the rule engine.

Only ``stacking`` and ``drawToMatch`` change behavior today. ``jumpIn``,
``sevenSwap`` and ``zeroRotation`` are recognized so match configurations can
carry them, but nothing enforces them yet.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterable, Iterator, List, Optional, Union


class HouseRule(Enum):
    STACKING = "stacking"
    JUMP_IN = "jumpIn"
    SEVEN_SWAP = "sevenSwap"
    DRAW_TO_MATCH = "drawToMatch"
    ZERO_ROTATION = "zeroRotation"

    def __str__(self) -> str:
        return self.value


IMPLEMENTED_RULES: FrozenSet[HouseRule] = frozenset({HouseRule.STACKING, HouseRule.DRAW_TO_MATCH})

_BY_NAME = {rule.value: rule for rule in HouseRule}


def parse_house_rule(value: object) -> Optional[HouseRule]:
    """Return the matching flag, or None when the value is not a recognized name."""
    if isinstance(value, HouseRule):
        return value
    if not isinstance(value, str):
        return None
    return _BY_NAME.get(value)


class HouseRules:
    """Immutable set of enabled house rules.

    Unknown names are dropped on construction and membership checks for them
    simply return False.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[Union[str, HouseRule]] = ()) -> None:
        parsed = (parse_house_rule(rule) for rule in rules)
        self._rules: FrozenSet[HouseRule] = frozenset(rule for rule in parsed if rule is not None)

    def __contains__(self, item: object) -> bool:
        rule = parse_house_rule(item)
        return rule is not None and rule in self._rules

    def __iter__(self) -> Iterator[HouseRule]:
        return iter(self.enabled())

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HouseRules):
            return self._rules == other._rules
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._rules)

    def __copy__(self) -> "HouseRules":
        return self

    def __deepcopy__(self, memo: dict) -> "HouseRules":
        return self

    def __repr__(self) -> str:
        return f"HouseRules({[rule.value for rule in self.enabled()]!r})"

    def enabled(self) -> List[HouseRule]:
        """Recognized flags in declaration order."""
        return [rule for rule in HouseRule if rule in self._rules]

    def names(self) -> List[str]:
        return [rule.value for rule in self.enabled()]

    @property
    def stacking(self) -> bool:
        return HouseRule.STACKING in self._rules

    @property
    def draw_to_match(self) -> bool:
        return HouseRule.DRAW_TO_MATCH in self._rules


def as_house_rules(rules: Union[HouseRules, Iterable[Union[str, HouseRule]], None]) -> HouseRules:
    if isinstance(rules, HouseRules):
        return rules
    return HouseRules(rules or ())
