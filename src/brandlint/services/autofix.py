"""違反に対する安全な自動修正（テキスト置換）の生成。"""

import logging
import re
from collections.abc import Callable

from brandlint.models.policy import ACCESSOR_PATTERN, BrandPolicy
from brandlint.models.rule import RuleDefinition
from brandlint.models.syntax import SyntaxNode
from brandlint.models.violation import Fix
from brandlint.rules.brand import (
    CLASSNAME_ACCESSOR,
    COLOR_SUBSTITUTION,
    FONT_IMPORT_REWRITE,
    ICON_IMPORT_REWRITE,
    STYLE_TO_CLASSNAME,
    jsx_attribute_name,
)
from brandlint.services.dispatch import Finding

logger = logging.getLogger(__name__)

_STRING_LITERAL_RE = re.compile(r"""^(["'])(?:\\.|(?!\1)[^\\\n])*\1$""")
# 式コンテナはアクセサ参照または引数なし呼び出しのみ（{brandClass()} など）
_CONTAINER = rf"\{{\s*{ACCESSOR_PATTERN}(?:\(\))?\s*\}}"
_CONTAINER_RE = re.compile(rf"^{_CONTAINER}$", re.ASCII)
_ATTRIBUTE_RE = re.compile(rf"""^[A-Za-z_][\w-]*(?:=(?:"[^"\n]*"|'[^'\n]*'|{_CONTAINER}))?$""", re.ASCII)
_QUOTES = "\"'"
_PAIRS = {")": "(", "}": "{", "]": "["}

# ノード位置の種別 → 置換可能なテキストの種別
_COMPATIBLE_KINDS: dict[str, frozenset[str]] = {
    "literal": frozenset({"literal"}),
    "attribute": frozenset({"attribute"}),
    "attribute_value": frozenset({"literal", "expression_container"}),
}


class AutofixGenerator:
    """fixable なルールの違反に対して置換を生成する。

    置換テキストがノードの位置で構文的に不正になり得る場合は None を返す。
    None は「違反はあるが安全な自動修正がない」ことを意味する。
    """

    def __init__(self) -> None:
        self._strategies: dict[str, Callable[[Finding, BrandPolicy], Fix | None]] = {
            COLOR_SUBSTITUTION: self._substitute_color,
            FONT_IMPORT_REWRITE: lambda f, p: self._rewrite_import(f, p.typography_module),
            ICON_IMPORT_REWRITE: lambda f, p: self._rewrite_import(f, p.icon_module),
            STYLE_TO_CLASSNAME: self._style_to_classname,
            CLASSNAME_ACCESSOR: self._classname_to_accessor,
        }

    def fix(self, finding: Finding, rule: RuleDefinition, policy: BrandPolicy) -> Fix | None:
        """検出結果に対する安全な修正を返す。修正できない場合はNone。"""
        if not rule.fixable or finding.strategy is None:
            return None
        strategy = self._strategies.get(finding.strategy)
        if strategy is None:
            logger.debug("No fix strategy %s for rule %s", finding.strategy, rule.id)
            return None
        return strategy(finding, policy)

    def _substitute_color(self, finding: Finding, policy: BrandPolicy) -> Fix | None:
        # 「最も近い」ブランドカラーではなく、許可リストの先頭を使う
        if not policy.colors:
            return None
        quote = _quote_of(finding.node)
        return _checked_fix(finding.node, finding.parent, f"{quote}{policy.colors[0]}{quote}")

    def _rewrite_import(self, finding: Finding, module_path: str) -> Fix | None:
        source = finding.node.child("source")
        if source is None or source.string_value is None:
            return None
        quote = _quote_of(source)
        return _checked_fix(source, finding.node, f"{quote}{module_path}{quote}")

    def _style_to_classname(self, finding: Finding, policy: BrandPolicy) -> Fix | None:
        element = finding.parent
        if element is not None:
            # 既存のclassNameと重複させない
            for attribute in element.children_of("attributes"):
                if attribute is not finding.node and jsx_attribute_name(attribute) in ("className", "class"):
                    return None
        return _checked_fix(finding.node, element, f"className={{{policy.styling_accessor}()}}")

    def _classname_to_accessor(self, finding: Finding, policy: BrandPolicy) -> Fix | None:
        return _checked_fix(finding.node, finding.parent, f"{{{policy.styling_accessor}()}}")


def _quote_of(node: SyntaxNode) -> str:
    raw = node.props.get("raw")
    if isinstance(raw, str) and raw[:1] in _QUOTES:
        return raw[0]
    return '"'


def node_kind(node: SyntaxNode, parent: SyntaxNode | None) -> str | None:
    """置換対象ノードの位置の種別。"""
    if node.type == "JSXAttribute":
        return "attribute"
    if parent is not None and parent.type == "JSXAttribute" and node.type in ("Literal", "JSXExpressionContainer"):
        return "attribute_value"
    if node.type == "Literal":
        return "literal"
    return None


def replacement_kind(text: str) -> str | None:
    """置換テキストの構文上の種別。判定できない場合はNone。"""
    if _STRING_LITERAL_RE.fullmatch(text):
        return "literal"
    if not _balanced(text):
        return None
    if _CONTAINER_RE.fullmatch(text):
        return "expression_container"
    if _ATTRIBUTE_RE.fullmatch(text):
        return "attribute"
    return None


def is_compatible(node: SyntaxNode, parent: SyntaxNode | None, text: str) -> bool:
    """置換テキストがノードと同じ構文カテゴリに収まるかを判定する。"""
    kind = node_kind(node, parent)
    replacement = replacement_kind(text)
    if kind is None or replacement is None:
        return False
    return replacement in _COMPATIBLE_KINDS[kind]


def _checked_fix(node: SyntaxNode, parent: SyntaxNode | None, text: str) -> Fix | None:
    if not is_compatible(node, parent, text):
        logger.debug("Rejected fix %r for %s", text, node.type)
        return None
    return Fix(range=node.range, replacement_text=text)


def _balanced(text: str) -> bool:
    """括弧の対応と引用符の閉じを検査する（引用符内の括弧は無視）。"""
    stack: list[str] = []
    quote: str | None = None
    escaped = False
    for ch in text:
        if quote is not None:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in _QUOTES or ch == "`":
            quote = ch
        elif ch in "({[":
            stack.append(ch)
        elif ch in _PAIRS:
            if not stack or stack.pop() != _PAIRS[ch]:
                return False
    return quote is None and not stack
