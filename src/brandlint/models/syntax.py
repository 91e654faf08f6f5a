"""構文木関連のデータモデル。

外部パーサー（@typescript-eslint/parser, Babel等）が出力したESTree形式のJSONを
エンジン内部で扱うノードモデルに変換する。
"""

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ルールハンドラが登録可能なESTree / JSXノード種別
KNOWN_NODE_TYPES: frozenset[str] = frozenset(
    {
        "Program",
        "ImportDeclaration",
        "ImportSpecifier",
        "ImportDefaultSpecifier",
        "ImportNamespaceSpecifier",
        "ImportExpression",
        "ExportNamedDeclaration",
        "ExportDefaultDeclaration",
        "ExportAllDeclaration",
        "ExportSpecifier",
        "VariableDeclaration",
        "VariableDeclarator",
        "FunctionDeclaration",
        "FunctionExpression",
        "ArrowFunctionExpression",
        "ClassDeclaration",
        "ClassBody",
        "MethodDefinition",
        "PropertyDefinition",
        "BlockStatement",
        "ExpressionStatement",
        "ReturnStatement",
        "IfStatement",
        "ConditionalExpression",
        "LogicalExpression",
        "BinaryExpression",
        "AssignmentExpression",
        "CallExpression",
        "NewExpression",
        "MemberExpression",
        "ObjectExpression",
        "ArrayExpression",
        "Property",
        "SpreadElement",
        "Identifier",
        "Literal",
        "TemplateLiteral",
        "TemplateElement",
        "TaggedTemplateExpression",
        "JSXElement",
        "JSXFragment",
        "JSXOpeningElement",
        "JSXClosingElement",
        "JSXOpeningFragment",
        "JSXClosingFragment",
        "JSXAttribute",
        "JSXSpreadAttribute",
        "JSXIdentifier",
        "JSXNamespacedName",
        "JSXMemberExpression",
        "JSXExpressionContainer",
        "JSXEmptyExpression",
        "JSXText",
    }
)

# ESTreeのノードキーのうち子ノード・属性として扱わないもの
_NON_CHILD_KEYS = frozenset({"type", "loc", "range", "start", "end", "parent", "comments", "tokens"})


class SourceRange(BaseModel):
    """ソース上の位置範囲。行は1始まり、列は0始まり（ESTreeのloc規約）。"""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    start_line: int = 0
    start_col: int = 0
    end_line: int = 0
    end_col: int = 0
    start_offset: int | None = Field(default=None, exclude=True)
    end_offset: int | None = Field(default=None, exclude=True)

    @property
    def span(self) -> tuple[int, int, int, int]:
        return (self.start_line, self.start_col, self.end_line, self.end_col)

    def overlaps(self, other: "SourceRange") -> bool:
        """2つの範囲が重なっているかを判定する。"""
        return (self.start_line, self.start_col) < (other.end_line, other.end_col) and (
            other.start_line,
            other.start_col,
        ) < (self.end_line, self.end_col)


class SyntaxNode(BaseModel):
    """構文木の1ノード。

    children はESTreeのフィールド順に並び、各子ノードの field に
    親ノード上のキー名（"source", "attributes" 等）を保持する。
    """

    type: str
    range: SourceRange = Field(default_factory=SourceRange)
    field: str | None = None
    props: dict[str, Any] = Field(default_factory=dict)
    children: list["SyntaxNode"] = Field(default_factory=list)

    @classmethod
    def from_estree(cls, data: dict[str, Any], field: str | None = None) -> "SyntaxNode":
        """ESTree形式の辞書からノードを構築する。

        Args:
            data: "type" キーを持つESTreeノード。
            field: 親ノード上でのキー名。

        Returns:
            変換済みのノード。

        Raises:
            ValueError: "type" キーを持たない場合。
        """
        node_type = data.get("type")
        if not isinstance(node_type, str):
            raise ValueError(f"ESTree node without type: {sorted(data)}")

        props: dict[str, Any] = {}
        children: list[SyntaxNode] = []
        for key, value in data.items():
            if key in _NON_CHILD_KEYS:
                continue
            if _is_estree_node(value):
                children.append(cls.from_estree(value, field=key))
            elif isinstance(value, list) and any(_is_estree_node(v) for v in value):
                # 配列の穴（None）は読み飛ばす
                children.extend(cls.from_estree(v, field=key) for v in value if _is_estree_node(v))
            else:
                props[key] = value

        return cls(type=node_type, range=_range_from_estree(data), field=field, props=props, children=children)

    def child(self, field: str) -> "SyntaxNode | None":
        """指定フィールドの最初の子ノードを返す。"""
        for c in self.children:
            if c.field == field:
                return c
        return None

    def children_of(self, field: str) -> list["SyntaxNode"]:
        return [c for c in self.children if c.field == field]

    def walk(self) -> Iterator["SyntaxNode"]:
        """深さ優先・行きがけ順でノードを列挙する。"""
        stack: list[SyntaxNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @property
    def string_value(self) -> str | None:
        """文字列リテラル・テンプレート要素の文字列値。それ以外はNone。"""
        value = self.props.get("value")
        if self.type == "Literal" and isinstance(value, str):
            return value
        if self.type == "TemplateElement" and isinstance(value, dict):
            cooked = value.get("cooked")
            return cooked if isinstance(cooked, str) else value.get("raw")
        return None


def _is_estree_node(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("type"), str)


def _range_from_estree(data: dict[str, Any]) -> SourceRange:
    loc = data.get("loc") or {}
    start = loc.get("start") or {}
    end = loc.get("end") or {}
    offsets = data.get("range")
    if not (isinstance(offsets, list) and len(offsets) == 2):
        offsets = [data.get("start"), data.get("end")]
    return SourceRange(
        start_line=start.get("line", 0),
        start_col=start.get("column", 0),
        end_line=end.get("line", 0),
        end_col=end.get("column", 0),
        start_offset=offsets[0] if isinstance(offsets[0], int) else None,
        end_offset=offsets[1] if isinstance(offsets[1], int) else None,
    )
