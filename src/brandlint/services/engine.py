"""ポリシー解決・ディスパッチ・重大度解決をまとめるエンジンのファサード。"""

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from brandlint.config import EngineConfig
from brandlint.models.policy import ContextInputs, ContextMetadata, ValidationContext
from brandlint.models.severity import (
    HOST_LEVELS,
    CategoryOverride,
    CompiledConfiguration,
    PathOverride,
    Severity,
    SeverityProfile,
)
from brandlint.models.syntax import SyntaxNode
from brandlint.models.violation import Violation, apply_fixes
from brandlint.rules.registry import RuleRegistry, default_registry
from brandlint.services.aggregate import aggregate
from brandlint.services.autofix import AutofixGenerator
from brandlint.services.dispatch import DispatchEngine
from brandlint.services.policy import BrandPolicyResolver
from brandlint.services.severity import SeverityCompiler
from brandlint.storage.config_store import ConfigStore

logger = logging.getLogger(__name__)

# 内部エラー時に返す、全テナント共通の手書き設定
DEFAULT_CONFIGURATION = CompiledConfiguration(
    rules={
        "brand-enforce-colors": ["warn", {"colors": [], "allowTailwind": True, "allowCustomColors": False}],
        "brand-enforce-typography": [
            "warn",
            {
                "fonts": [],
                "allowSystemFonts": True,
                "allowCustomFonts": False,
                "typographyModule": "@/lib/brand/use-brand-typography",
            },
        ],
        "brand-enforce-icons": ["warn", {"iconLibraries": [], "iconModule": "@/components/brand/icons"}],
        "brand-no-inline-styles": [
            "warn",
            {"allowInlineStyles": False, "allowCustomColors": False, "stylingAccessor": "brandClass"},
        ],
    },
    overrides=[],
    fallback=True,
)


class LintResult(BaseModel):
    """ソース付きlintの結果。output は修正適用時のみ設定される。"""

    violations: list[Violation]
    output: str | None = None


class LintEngine:
    """brandlintの唯一の外部エントリポイント。

    レジストリ・リゾルバ・コンパイラは構築済みのインスタンスを受け取る。
    """

    def __init__(
        self,
        registry: RuleRegistry,
        resolver: BrandPolicyResolver,
        compiler: SeverityCompiler,
        config: EngineConfig | None = None,
        severity_defaults: dict[str, Any] | None = None,
        dispatcher: DispatchEngine | None = None,
        autofix: AutofixGenerator | None = None,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        self._compiler = compiler
        self._config = config if config is not None else EngineConfig()
        self._severity_defaults = severity_defaults or {}
        self._dispatcher = dispatcher if dispatcher is not None else DispatchEngine()
        self._autofix = autofix if autofix is not None else AutofixGenerator()
        self._fallback_logged = False

    def compile_configuration(self, inputs: ContextInputs | dict[str, Any] | None = None) -> CompiledConfiguration:
        """ホストlinter向けのコンパイル済み設定を生成する。

        内部で例外が発生した場合は1度だけログを出し、DEFAULT_CONFIGURATION を返す。

        Args:
            inputs: コンテキスト入力（tenantId, filePath, mode, brandOverrides, severityOverrides）。

        Returns:
            コンパイル済み設定。
        """
        try:
            context_inputs = self._parse_inputs(inputs)
            context = self.build_context(context_inputs)
            profile = self.build_profile(context_inputs)
            global_severities = self._compiler.compile(profile, None)

            rules: dict[str, Any] = {}
            for rule in self._registry.rules():
                options = rule.build_options(context.policy).model_dump(by_alias=True, mode="json")
                rules[rule.id] = [HOST_LEVELS[global_severities[rule.id]], options]

            configuration = CompiledConfiguration(
                rules=rules,
                overrides=self._compiler.to_overrides(profile),
                tenant_id=context.tenant_id,
                mode=context.mode,
            )
            # ホストに渡せない値が混入していないこと
            json.dumps(configuration.to_dict())
            return configuration
        except Exception:
            if not self._fallback_logged:
                self._fallback_logged = True
                logger.exception("Failed to compile brand lint configuration; using default configuration")
            return DEFAULT_CONFIGURATION

    def lint(self, tree: SyntaxNode | dict[str, Any], inputs: ContextInputs | dict[str, Any]) -> list[Violation]:
        """構文木を直接検査し、位置順の違反リストを返す。"""
        context_inputs = self._parse_inputs(inputs)
        if not isinstance(tree, SyntaxNode):
            tree = SyntaxNode.from_estree(tree)
        context = self.build_context(context_inputs)
        severities = self._effective_severities(context_inputs, context)
        active_rules = [rule for rule in self._registry.rules() if severities[rule.id] != "off"]

        per_rule: dict[str, list[Violation]] = defaultdict(list)
        for finding in self._dispatcher.collect(tree, context, active_rules):
            rule = self._registry.lookup(finding.violation.rule_id)
            fix = self._autofix.fix(finding, rule, context.policy)
            per_rule[rule.id].append(
                finding.violation.model_copy(update={"severity": severities[rule.id], "fix": fix})
            )
        return aggregate(per_rule[rule.id] for rule in active_rules)

    def lint_source(
        self,
        tree: SyntaxNode | dict[str, Any],
        source: str,
        inputs: ContextInputs | dict[str, Any],
        apply: bool = False,
    ) -> LintResult:
        """lintを実行し、指定があれば重ならない修正をソースに適用する。"""
        violations = self.lint(tree, inputs)
        if not apply:
            return LintResult(violations=violations)
        fixes = [v.fix for v in violations if v.fix is not None]
        return LintResult(violations=violations, output=apply_fixes(source, fixes))

    def build_context(self, inputs: ContextInputs) -> ValidationContext:
        """1回の実行用の検証コンテキストを生成する。"""
        tenant_id = self._resolver.derive_tenant_id(inputs.tenant_id)
        policy = self._resolver.resolve(tenant_id).with_overrides(inputs.brand_overrides)
        return ValidationContext(
            policy=policy,
            tenant_id=tenant_id,
            file_path=self._relative_path(inputs.file_path),
            mode=inputs.mode or self._config.mode,
            metadata=ContextMetadata(environment=self._config.environment),
        )

    def build_profile(self, inputs: ContextInputs) -> SeverityProfile:
        """既定の重大度設定とコンテキストの上書きから重大度プロファイルを組み立てる。

        コンテキスト側の上書きは既定の上書きの後ろに追加されるため、同じ段では優先される。
        """
        layers = [self._severity_defaults, inputs.severity_overrides or {}]
        rule_severities: dict[str, Severity] = {}
        category_overrides: list[CategoryOverride] = []
        path_overrides: list[PathOverride] = []
        for layer in layers:
            rule_severities.update(layer.get("rules") or {})
            category_overrides.extend(CategoryOverride.model_validate(o) for o in layer.get("categories") or [])
            path_overrides.extend(PathOverride.model_validate(o) for o in layer.get("overrides") or [])
        return SeverityProfile(
            mode=inputs.mode or self._config.mode,
            rule_severities=rule_severities,
            category_overrides=tuple(category_overrides),
            path_overrides=tuple(path_overrides),
            categories=self._registry.categories(),
        )

    def _effective_severities(self, inputs: ContextInputs, context: ValidationContext) -> dict[str, Severity]:
        try:
            return self._compiler.compile(self.build_profile(inputs), context.file_path)
        except Exception:
            logger.warning("Invalid severity overrides for %s; using mode defaults", context.file_path, exc_info=True)
            severity = self._compiler.mode_severity(context.mode)
            return {rule.id: severity for rule in self._registry.rules()}

    def _relative_path(self, file_path: str) -> str:
        path = Path(file_path)
        if path.is_absolute():
            try:
                return path.relative_to(self._config.project_root).as_posix()
            except ValueError:
                return path.as_posix()
        return file_path.replace("\\", "/")

    @staticmethod
    def _parse_inputs(inputs: ContextInputs | dict[str, Any] | None) -> ContextInputs:
        if isinstance(inputs, ContextInputs):
            return inputs
        return ContextInputs.model_validate(inputs or {})


def create_engine(config: EngineConfig | None = None) -> LintEngine:
    """設定からエンジンを組み立てる。

    Args:
        config: エンジン設定。Noneの場合は環境変数から読み込む。

    Returns:
        組み込みルールを登録済みのエンジン。
    """
    if config is None:
        config = EngineConfig()

    store = ConfigStore(config_dir=config.config_dir)
    try:
        severity_defaults = store.load_severity_overrides()
    except Exception:
        logger.warning("Ignoring unreadable severity configuration in %s", config.config_dir, exc_info=True)
        severity_defaults = {}

    return LintEngine(
        registry=default_registry(),
        resolver=BrandPolicyResolver(source=store, config=config),
        compiler=SeverityCompiler(),
        config=config,
        severity_defaults=severity_defaults,
    )
