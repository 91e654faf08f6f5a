"""Violation / Fix モデルのユニットテスト。"""

from brandlint.models.syntax import SourceRange
from brandlint.models.violation import Fix, Violation, apply_fixes

SOURCE = 'const a = "#fff";\nconst b = "#000";\n'


def _range(start: int, end: int, line: int = 1) -> SourceRange:
    return SourceRange(start_line=line, start_col=start, end_line=line, end_col=end)


class TestViolation:
    def test_json_object_shape(self) -> None:
        violation = Violation(
            rule_id="brand-enforce-colors",
            range=_range(10, 16),
            message="bad color",
            severity="required",
            fix=Fix(range=_range(10, 16), replacement_text='"#0055ff"'),
        )
        assert violation.to_json_obj() == {
            "ruleId": "brand-enforce-colors",
            "severity": "required",
            "message": "bad color",
            "range": {"startLine": 1, "startCol": 10, "endLine": 1, "endCol": 16},
            "fix": {
                "range": {"startLine": 1, "startCol": 10, "endLine": 1, "endCol": 16},
                "replacementText": '"#0055ff"',
            },
        }

    def test_json_object_without_fix(self) -> None:
        violation = Violation(rule_id="r", range=_range(0, 1), message="m")
        assert "fix" not in violation.to_json_obj()
        assert violation.fixable is False
        assert violation.severity == "advisory"

    def test_key_is_rule_and_span(self) -> None:
        violation = Violation(rule_id="r", range=_range(3, 4), message="m")
        assert violation.key == ("r", (1, 3, 1, 4))


class TestFix:
    def test_apply_by_line_and_column(self) -> None:
        fix = Fix(range=_range(10, 16, line=2), replacement_text='"#111"')
        assert fix.apply(SOURCE) == 'const a = "#fff";\nconst b = "#111";\n'

    def test_apply_by_offsets(self) -> None:
        rng = SourceRange(start_line=1, start_col=10, end_line=1, end_col=16, start_offset=10, end_offset=16)
        assert Fix(range=rng, replacement_text='"#111"').apply(SOURCE).startswith('const a = "#111";')

    def test_apply_fixes_back_to_front(self) -> None:
        fixes = [
            Fix(range=_range(10, 16, line=1), replacement_text='"#aaaaaa"'),
            Fix(range=_range(10, 16, line=2), replacement_text='"#bbbbbb"'),
        ]
        assert apply_fixes(SOURCE, fixes) == 'const a = "#aaaaaa";\nconst b = "#bbbbbb";\n'

    def test_apply_fixes_skips_overlapping(self) -> None:
        fixes = [
            Fix(range=_range(10, 16), replacement_text='"#aaa"'),
            Fix(range=_range(12, 14), replacement_text="xx"),
        ]
        assert apply_fixes(SOURCE, fixes).startswith('const a = "#aaa";')


class TestUtf16Positions:
    """ESTreeの位置はUTF-16コード単位。絵文字はPython文字列では1文字だが2単位を占める。"""

    EMOJI_SOURCE = 'const e = "😀"; const c = "#123456";'

    def test_apply_by_utf16_offsets(self) -> None:
        rng = SourceRange(start_line=1, start_col=26, end_line=1, end_col=35, start_offset=26, end_offset=35)
        fixed = Fix(range=rng, replacement_text='"#0055ff"').apply(self.EMOJI_SOURCE)
        assert fixed == 'const e = "😀"; const c = "#0055ff";'

    def test_apply_by_utf16_columns(self) -> None:
        fixed = Fix(range=_range(26, 35), replacement_text='"#0055ff"').apply(self.EMOJI_SOURCE)
        assert fixed == 'const e = "😀"; const c = "#0055ff";'

    def test_columns_on_later_line(self) -> None:
        source = 'const e = "😀";\nconst x = "😀"; const c = "#123456";\n'
        fixed = Fix(range=_range(26, 35, line=2), replacement_text='"#0055ff"').apply(source)
        assert fixed == 'const e = "😀";\nconst x = "😀"; const c = "#0055ff";\n'

    def test_apply_fixes_with_emoji(self) -> None:
        fixes = [
            Fix(range=_range(10, 14), replacement_text='"ok"'),
            Fix(range=_range(26, 35), replacement_text='"#0055ff"'),
        ]
        assert apply_fixes(self.EMOJI_SOURCE, fixes) == 'const e = "ok"; const c = "#0055ff";'
