"""違反・自動修正関連のデータモデル。"""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from brandlint.models.syntax import SourceRange

ViolationSeverity = Literal["advisory", "required"]


class Fix(BaseModel):
    """違反を解消するテキスト置換。"""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    range: SourceRange
    replacement_text: str

    def apply(self, source: str) -> str:
        """ソーステキストに置換を適用した結果を返す。"""
        start, end = _offsets(self.range, source)
        return source[:start] + self.replacement_text + source[end:]


class Violation(BaseModel):
    """ルール違反の1件。生成後は変更しない。"""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    rule_id: str
    range: SourceRange
    message: str
    severity: ViolationSeverity = "advisory"
    fix: Fix | None = None

    @property
    def fixable(self) -> bool:
        return self.fix is not None

    @property
    def key(self) -> tuple[str, tuple[int, int, int, int]]:
        """重複排除に使う (ルールID, ノード範囲) の組。"""
        return (self.rule_id, self.range.span)

    def to_json_obj(self) -> dict:
        """ruleId / severity / message / range / fix? 形式の辞書を返す。"""
        return self.model_dump(by_alias=True, exclude_none=True)


def apply_fixes(source: str, fixes: list[Fix]) -> str:
    """重ならない修正をまとめて適用する。

    範囲が先行する修正と重なるものは適用しない。後方から適用するため
    各修正のオフセットは元のソース基準のまま有効。
    """
    accepted: list[Fix] = []
    for fix in sorted(fixes, key=lambda f: _offsets(f.range, source)):
        if accepted and _offsets(fix.range, source)[0] < _offsets(accepted[-1].range, source)[1]:
            continue
        accepted.append(fix)
    for fix in reversed(accepted):
        source = fix.apply(source)
    return source


def _offsets(rng: SourceRange, source: str) -> tuple[int, int]:
    """範囲をPython文字列のインデックスに変換する。

    ESTreeの range / loc.column はJavaScriptの文字列と同じくUTF-16コード単位で数えるため、
    サロゲートペアになる文字（絵文字など）を含むソースではコードポイント位置とずれる。
    """
    if rng.start_offset is not None and rng.end_offset is not None:
        return _from_utf16(source, rng.start_offset), _from_utf16(source, rng.end_offset)
    line_starts = [0]
    for i, ch in enumerate(source):
        if ch == "\n":
            line_starts.append(i + 1)

    def to_offset(line: int, col: int) -> int:
        start = line_starts[min(max(line, 1), len(line_starts)) - 1]
        return start + _from_utf16(source[start:], col)

    return to_offset(rng.start_line, rng.start_col), to_offset(rng.end_line, rng.end_col)


def _from_utf16(text: str, units: int) -> int:
    """UTF-16コード単位の位置を text 上のインデックスに変換する。"""
    if text.isascii():
        return min(units, len(text))
    prefix = text.encode("utf-16-le")[: units * 2]
    return len(prefix.decode("utf-16-le", errors="ignore"))
