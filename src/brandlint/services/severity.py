"""グローバルモード・カテゴリ上書き・パス上書きから実効重大度を解決するコンパイラ。"""

import re
from functools import lru_cache

from brandlint.models.errors import InvalidGlobError, RuleNotFoundError
from brandlint.models.policy import EngineMode
from brandlint.models.severity import HOST_LEVELS, OverrideBlock, Severity, SeverityProfile

# モード → ルールの既定重大度
MODE_SEVERITIES: dict[str, Severity] = {
    "advisory": "advisory",
    "required": "required",
    "brand-aware": "required",
}


def validate_glob(pattern: str) -> str:
    """ファイルglobを検証する。

    Raises:
        InvalidGlobError: 空文字・絶対パス・角括弧の対応が取れていない場合、
            または文字クラスが正規表現に変換できない場合。
    """
    if not isinstance(pattern, str) or not pattern.strip() or pattern.startswith("/"):
        raise InvalidGlobError(str(pattern))
    depth = 0
    for ch in pattern:
        if ch == "[":
            if depth:
                raise InvalidGlobError(pattern)
            depth = 1
        elif ch == "]" and depth:
            depth = 0
    if depth:
        raise InvalidGlobError(pattern)
    try:
        _glob_regex(pattern)
    except re.error as exc:
        raise InvalidGlobError(pattern) from exc
    return pattern


def normalize_path(path: str) -> str:
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def glob_matches(pattern: str, path: str) -> bool:
    """globがパス全体に一致するかを判定する。

    * と ? はディレクトリ区切りを越えない。"**/" は0個以上のディレクトリに一致するため、
    "**/*.stories.tsx" はトップレベルのファイルにも一致する。
    """
    validate_glob(pattern)
    return _glob_regex(pattern).fullmatch(normalize_path(path)) is not None


@lru_cache(maxsize=256)
def _glob_regex(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:[^/]*/)*")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        elif pattern[i] == "[":
            end = pattern.index("]", i + 1)
            parts.append(_char_class(pattern, pattern[i + 1 : end]))
            i = end + 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts))


def _char_class(pattern: str, body: str) -> str:
    """[abc] / [!abc] / [a-z] を正規表現の文字クラスにする。区切り文字には一致しない。"""
    negate = body.startswith("!")
    if negate:
        body = body[1:]
    if not body:
        raise InvalidGlobError(pattern)
    body = body.replace("\\", "\\\\").replace("^", "\\^")
    return f"[^/{body}]" if negate else f"(?!/)[{body}]"


class SeverityCompiler:
    """1つのルールカタログから advisory / required / brand-aware の各プロファイルを生成する。"""

    def compile(self, profile: SeverityProfile, active_path: str | None) -> dict[str, Severity]:
        """ファイルパスに対する実効重大度を解決する。

        適用順:
            1. モードによるグローバル既定値と、ルール単位のグローバル指定
            2. パスに一致するカテゴリ上書き
            3. パスに一致するパス上書き（宣言順、後勝ち）

        Args:
            profile: 重大度プロファイル。
            active_path: 対象ファイルのパス。Noneの場合はグローバル値のみを返す。

        Returns:
            ルールID → 重大度。

        Raises:
            InvalidGlobError: 上書きのglobが不正な場合。
            RuleNotFoundError: 上書きが未登録のルールを参照している場合。
        """
        resolved = self._global(profile)
        self._validate(profile)
        if active_path is None:
            return resolved

        for override in profile.category_overrides:
            if any(glob_matches(g, active_path) for g in override.files):
                for rule_id, category in profile.categories.items():
                    if category == override.category:
                        resolved[rule_id] = override.severity

        for override in profile.path_overrides:
            if any(glob_matches(g, active_path) for g in override.files):
                resolved.update(override.rules)

        return resolved

    def to_overrides(self, profile: SeverityProfile) -> list[OverrideBlock]:
        """プロファイルの上書きをホストlinterの overrides ブロックに展開する。

        ホスト側も後勝ちで適用するため、カテゴリ上書き → パス上書きの順に並べる。
        """
        self._validate(profile)
        blocks: list[OverrideBlock] = []
        for category_override in profile.category_overrides:
            rules = {
                rule_id: HOST_LEVELS[category_override.severity]
                for rule_id, category in profile.categories.items()
                if category == category_override.category
            }
            if rules:
                blocks.append(OverrideBlock(files=list(category_override.files), rules=rules))
        for path_override in profile.path_overrides:
            blocks.append(
                OverrideBlock(
                    files=list(path_override.files),
                    rules={rule_id: HOST_LEVELS[sev] for rule_id, sev in path_override.rules.items()},
                )
            )
        return blocks

    @staticmethod
    def mode_severity(mode: EngineMode) -> Severity:
        return MODE_SEVERITIES[mode]

    def _global(self, profile: SeverityProfile) -> dict[str, Severity]:
        base = self.mode_severity(profile.mode)
        resolved: dict[str, Severity] = {rule_id: base for rule_id in profile.categories}
        for rule_id, severity in profile.rule_severities.items():
            if rule_id not in resolved:
                raise RuleNotFoundError(rule_id)
            resolved[rule_id] = severity
        return resolved

    @staticmethod
    def _validate(profile: SeverityProfile) -> None:
        for category_override in profile.category_overrides:
            for pattern in category_override.files:
                validate_glob(pattern)
        for path_override in profile.path_overrides:
            for pattern in path_override.files:
                validate_glob(pattern)
            for rule_id in path_override.rules:
                if rule_id not in profile.categories:
                    raise RuleNotFoundError(rule_id)
