"""構文木を1回だけ走査し、有効なルールのハンドラを呼び出すディスパッチエンジン。"""

import logging
from collections import defaultdict

from pydantic import BaseModel

from brandlint.models.policy import BrandPolicy, ValidationContext
from brandlint.models.rule import RuleDefinition, RuleOptions
from brandlint.models.syntax import SyntaxNode
from brandlint.models.violation import Violation

logger = logging.getLogger(__name__)


class Finding(BaseModel):
    """ディスパッチ中に検出された違反と、自動修正に必要なノード情報。"""

    violation: Violation
    node: SyntaxNode
    parent: SyntaxNode | None = None
    strategy: str | None = None


class RuleContext:
    """ルールハンドラに渡される実行コンテキスト。

    ブランドポリシーはここから参照し、グローバル状態は読まない。
    """

    def __init__(
        self,
        rule: RuleDefinition,
        options: RuleOptions,
        context: ValidationContext,
        ancestors: list[SyntaxNode],
        findings: list[Finding],
    ) -> None:
        self.rule = rule
        self.options = options
        self.context = context
        self._ancestors = ancestors
        self._findings = findings

    @property
    def policy(self) -> BrandPolicy:
        return self.context.policy

    @property
    def ancestors(self) -> list[SyntaxNode]:
        """ルートから親までのノード（現在のノードは含まない）。"""
        return list(self._ancestors)

    @property
    def parent(self) -> SyntaxNode | None:
        return self._ancestors[-1] if self._ancestors else None

    def report(
        self,
        node: SyntaxNode,
        message: str,
        strategy: str | None = None,
        parent: SyntaxNode | None = None,
    ) -> None:
        """違反を記録する。

        Args:
            node: 違反の対象ノード（自動修正の置換範囲）。
            message: 違反メッセージ。
            strategy: 自動修正の方式名。
            parent: node の親ノード。省略時は現在走査中のノードの親。
                現在のノード以外（属性値など）を報告する場合に指定する。
        """
        if self.context.mode == "brand-aware":
            message = f"[{self.policy.brand_name}] {message}"
        self._findings.append(
            Finding(
                violation=Violation(rule_id=self.rule.id, range=node.range, message=message),
                node=node,
                parent=parent if parent is not None else self.parent,
                strategy=strategy,
            )
        )


class DispatchEngine:
    """単一パスのASTディスパッチ。

    ノードごとに、そのノード種別へハンドラを登録している有効ルールを登録順に呼び出す。
    ハンドラの例外はそのルール・ノードの合成違反に変換し、走査は継続する。
    """

    def collect(
        self,
        tree: SyntaxNode,
        context: ValidationContext,
        active_rules: list[RuleDefinition],
    ) -> list[Finding]:
        """構文木を走査し、検出結果を検出順に返す。"""
        findings: list[Finding] = []
        path: list[SyntaxNode] = []

        table: dict[str, list[tuple[RuleDefinition, RuleContext]]] = defaultdict(list)
        for rule in active_rules:
            rule_ctx = RuleContext(rule, rule.build_options(context.policy), context, path, findings)
            for node_type in rule.handlers:
                table[node_type].append((rule, rule_ctx))

        stack: list[tuple[SyntaxNode, int]] = [(tree, 0)]
        while stack:
            node, depth = stack.pop()
            del path[depth:]
            for rule, rule_ctx in table.get(node.type, ()):
                try:
                    rule.handlers[node.type](node, rule_ctx)
                except Exception as e:
                    logger.warning(
                        "Rule %s crashed on %s at %s:%d:%d",
                        rule.id,
                        node.type,
                        context.file_path,
                        node.range.start_line,
                        node.range.start_col,
                        exc_info=True,
                    )
                    findings.append(
                        Finding(
                            violation=Violation(
                                rule_id=rule.id,
                                range=node.range,
                                message=f'Rule "{rule.id}" crashed: {type(e).__name__}: {e}',
                            ),
                            node=node,
                            parent=path[-1] if path else None,
                        )
                    )
            path.append(node)
            stack.extend((child, depth + 1) for child in reversed(node.children))

        return findings

    def run(
        self,
        tree: SyntaxNode,
        context: ValidationContext,
        active_rules: list[RuleDefinition],
    ) -> list[Violation]:
        """構文木を走査し、違反を検出順に返す。"""
        return [finding.violation for finding in self.collect(tree, context, active_rules)]
