"""Violation集約のユニットテスト。"""

from brandlint.models.syntax import SourceRange
from brandlint.models.violation import Violation
from brandlint.services.aggregate import aggregate


def _v(rule_id: str, line: int, col: int, message: str = "m") -> Violation:
    return Violation(
        rule_id=rule_id,
        range=SourceRange(start_line=line, start_col=col, end_line=line, end_col=col + 1),
        message=message,
    )


class TestAggregate:
    def test_orders_by_line_then_column(self) -> None:
        result = aggregate([[_v("b", 3, 0), _v("b", 1, 5)], [_v("a", 1, 2)]])
        assert [(v.range.start_line, v.range.start_col) for v in result] == [(1, 2), (1, 5), (3, 0)]

    def test_deduplicates_same_rule_and_span_keeping_first(self) -> None:
        result = aggregate([[_v("a", 1, 0, "first"), _v("a", 1, 0, "second")]])
        assert len(result) == 1
        assert result[0].message == "first"

    def test_same_span_different_rules_kept(self) -> None:
        result = aggregate([[_v("a", 1, 0)], [_v("b", 1, 0)]])
        assert [v.rule_id for v in result] == ["a", "b"]

    def test_independent_of_rule_execution_order(self) -> None:
        a = [_v("a", 2, 0), _v("a", 1, 1)]
        b = [_v("b", 1, 0)]
        assert aggregate([a, b]) == aggregate([b, a])

    def test_empty(self) -> None:
        assert aggregate([]) == []
