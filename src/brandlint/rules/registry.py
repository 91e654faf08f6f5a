"""ルール定義のプロセス全体カタログ。"""

import logging
import re
from functools import cache

from pydantic import ValidationError

from brandlint.models.errors import (
    DuplicateRuleError,
    InvalidRuleDefinitionError,
    RegistryFrozenError,
    RuleNotFoundError,
    UnknownNodeTypeError,
)
from brandlint.models.policy import BrandPolicy
from brandlint.models.rule import RuleDefinition
from brandlint.models.syntax import KNOWN_NODE_TYPES

logger = logging.getLogger(__name__)

_RULE_ID_RE = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*$")


class RuleRegistry:
    """登録順を保持するルールカタログ。

    起動時に register() で追記し、freeze() 以降は読み取り専用となる。
    読み取り専用になった後は複数スレッドから同時に参照してよい。
    """

    def __init__(self) -> None:
        self._rules: dict[str, RuleDefinition] = {}
        self._frozen = False

    def register(self, rule: RuleDefinition) -> RuleDefinition:
        """ルールを検証してカタログに追加する。

        Raises:
            RegistryFrozenError: freeze() 済みの場合。
            DuplicateRuleError: 同一IDのルールが登録済みの場合。
            UnknownNodeTypeError: 未知のノード種別にハンドラを割り当てている場合。
            InvalidRuleDefinitionError: ID形式・オプションスキーマが不正な場合。
        """
        if self._frozen:
            raise RegistryFrozenError(rule.id)
        if rule.id in self._rules:
            raise DuplicateRuleError(rule.id)
        self._validate(rule)
        self._rules[rule.id] = rule
        logger.debug("Registered rule %s (%s)", rule.id, ", ".join(rule.handlers))
        return rule

    def lookup(self, rule_id: str) -> RuleDefinition:
        """IDに対応するルール定義を返す。

        Raises:
            RuleNotFoundError: 未登録のIDの場合。
        """
        try:
            return self._rules[rule_id]
        except KeyError:
            raise RuleNotFoundError(rule_id) from None

    def rules(self) -> list[RuleDefinition]:
        """登録順のルール定義リスト。"""
        return list(self._rules.values())

    def categories(self) -> dict[str, str]:
        return {rule.id: rule.category for rule in self._rules.values()}

    def freeze(self) -> "RuleRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    @staticmethod
    def _validate(rule: RuleDefinition) -> None:
        if not _RULE_ID_RE.match(rule.id):
            raise InvalidRuleDefinitionError(rule.id, "rule id must be kebab-case")
        if not rule.handlers:
            raise InvalidRuleDefinitionError(rule.id, "rule binds no node types")
        for node_type, handler in rule.handlers.items():
            if node_type not in KNOWN_NODE_TYPES:
                raise UnknownNodeTypeError(rule.id, node_type)
            if not callable(handler):
                raise InvalidRuleDefinitionError(rule.id, f"handler for {node_type} is not callable")
        # 保守的なポリシーから生成したオプションがスキーマを満たすこと
        try:
            rule.build_options(BrandPolicy.conservative())
        except ValidationError as e:
            raise InvalidRuleDefinitionError(rule.id, f"options schema rejected defaults: {e}") from e


@cache
def default_registry() -> RuleRegistry:
    """組み込みルールを登録済みの、読み取り専用のプロセス全体レジストリを返す。"""
    from brandlint.rules.brand import BUILTIN_RULES

    registry = RuleRegistry()
    for rule in BUILTIN_RULES:
        registry.register(rule)
    return registry.freeze()
