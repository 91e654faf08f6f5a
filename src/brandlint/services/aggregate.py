"""ファイル単位の違反の集約。"""

from collections.abc import Iterable

from brandlint.models.violation import Violation


def aggregate(per_rule_results: Iterable[Iterable[Violation]]) -> list[Violation]:
    """違反を重複排除し、ソース位置順に並べる。

    同じ (ルールID, ノード範囲) の違反は最初のものだけを残す。
    並び順は (開始行, 開始列) で、同位置の違反は入力順を保つ（安定ソート）。

    Args:
        per_rule_results: ルールごと（または任意の単位）の違反リスト。

    Returns:
        重複排除・整列済みの違反リスト。
    """
    seen: set[tuple[str, tuple[int, int, int, int]]] = set()
    unique: list[Violation] = []
    for results in per_rule_results:
        for violation in results:
            if violation.key in seen:
                continue
            seen.add(violation.key)
            unique.append(violation)
    return sorted(unique, key=lambda v: (v.range.start_line, v.range.start_col))
