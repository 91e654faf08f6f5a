"""DispatchEngineのユニットテスト。"""

import logging

import pytest

from brandlint.models.policy import BrandPolicy
from brandlint.models.rule import RuleDefinition
from brandlint.models.syntax import SyntaxNode
from brandlint.rules.registry import RuleRegistry, default_registry
from brandlint.services.dispatch import DispatchEngine, RuleContext
from tests.builders import jsx_attribute, jsx_element, literal, make_context, program, statement

SOURCE = '<div className="#1a2b3c" data-x="#abcdef" />;\nconst c = "#123456";'


def _tree() -> SyntaxNode:
    attrs = [
        jsx_attribute(SOURCE, "className", literal(SOURCE, '"#1a2b3c"')),
        jsx_attribute(SOURCE, "data-x", literal(SOURCE, '"#abcdef"')),
    ]
    element = statement(SOURCE, jsx_element(SOURCE, "div", attrs))
    return SyntaxNode.from_estree(program(SOURCE, [element, literal(SOURCE, '"#123456"')]))


def _exploding(node: SyntaxNode, ctx: RuleContext) -> None:
    if node.props.get("value") == "#abcdef":
        raise RuntimeError("boom")
    ctx.report(node, "seen")


def _recording(calls: list[str]) -> RuleDefinition:
    def handler(node: SyntaxNode, ctx: RuleContext) -> None:
        calls.append(f"{ctx.rule.id}:{node.type}")

    return RuleDefinition(id=f"record-{len(calls)}", category="test", description="", handlers={"Literal": handler})


class TestDispatch:
    def test_reports_every_disallowed_literal(self) -> None:
        colors = default_registry().lookup("brand-enforce-colors")
        violations = DispatchEngine().run(_tree(), make_context(BrandPolicy()), [colors])
        assert [v.range.start_line for v in violations] == [1, 1, 2]

    def test_deterministic_across_runs(self) -> None:
        rules = default_registry().rules()
        context = make_context(BrandPolicy())
        first = DispatchEngine().run(_tree(), context, rules)
        second = DispatchEngine().run(_tree(), make_context(BrandPolicy()), rules)
        assert [v.model_dump() for v in first] == [v.model_dump() for v in second]

    def test_handlers_called_in_registration_order(self) -> None:
        calls: list[str] = []
        first = _recording(calls)
        calls.append("sentinel")
        second = _recording(calls)
        calls.clear()
        source = 'const c = "x";'
        tree = SyntaxNode.from_estree(literal(source, '"x"'))
        DispatchEngine().run(tree, make_context(BrandPolicy()), [first, second])
        assert calls == ["record-0:Literal", "record-1:Literal"]

    def test_only_bound_node_types_visited(self) -> None:
        calls: list[str] = []
        rule = _recording(calls)
        DispatchEngine().run(_tree(), make_context(BrandPolicy()), [rule])
        assert calls == ["record-0:Literal"] * 3

    def test_report_records_explicit_parent(self) -> None:
        def handler(node: SyntaxNode, ctx: RuleContext) -> None:
            value = node.child("value")
            ctx.report(value, "value", parent=node)
            ctx.report(node, "attribute")

        rule = RuleDefinition(id="attr", category="test", description="", handlers={"JSXAttribute": handler})
        findings = DispatchEngine().collect(_tree(), make_context(BrandPolicy()), [rule])
        by_message = {f.violation.message: f for f in findings}
        assert by_message["value"].node.type == "Literal"
        assert by_message["value"].parent.type == "JSXAttribute"
        assert by_message["attribute"].parent.type == "JSXOpeningElement"


class TestFaultIsolation:
    def test_crashing_rule_does_not_affect_others(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = RuleRegistry()
        crashing = registry.register(
            RuleDefinition(id="crashing-rule", category="test", description="", handlers={"Literal": _exploding})
        )
        colors = default_registry().lookup("brand-enforce-colors")

        with caplog.at_level(logging.WARNING):
            violations = DispatchEngine().run(_tree(), make_context(BrandPolicy()), [crashing, colors])

        color_violations = [v for v in violations if v.rule_id == "brand-enforce-colors"]
        assert len(color_violations) == 3

        crashed = [v for v in violations if v.rule_id == "crashing-rule" and "crashed" in v.message]
        assert len(crashed) == 1
        assert crashed[0].message == 'Rule "crashing-rule" crashed: RuntimeError: boom'

        # 例外を送出しなかったノードでは通常どおり報告される
        seen = [v for v in violations if v.rule_id == "crashing-rule" and v.message == "seen"]
        assert len(seen) == 2
        assert "crashing-rule crashed" in caplog.text
