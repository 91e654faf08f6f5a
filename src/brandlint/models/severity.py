"""重大度プロファイル・コンパイル済み設定関連のデータモデル。"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from brandlint.models.policy import DEFAULT_TENANT_ID, EngineMode

Severity = Literal["off", "advisory", "required"]
HostLevel = Literal["off", "warn", "error"]

# 重大度 → ホストlinterのレベル
HOST_LEVELS: dict[str, HostLevel] = {"off": "off", "advisory": "warn", "required": "error"}


class CategoryOverride(BaseModel):
    """カテゴリ単位の重大度上書き（例: design-guardian を components/ui/** で required）。"""

    model_config = ConfigDict(frozen=True)

    category: str
    files: tuple[str, ...]
    severity: Severity


class PathOverride(BaseModel):
    """ファイルglob単位のルール重大度上書き。"""

    model_config = ConfigDict(frozen=True)

    files: tuple[str, ...]
    rules: dict[str, Severity]


class SeverityProfile(BaseModel):
    """グローバルモード・カテゴリ上書き・パス上書きをまとめた重大度プロファイル。

    上書きは global → category → path の順に適用され、同じ段では宣言順で後勝ち。
    """

    model_config = ConfigDict(frozen=True)

    mode: EngineMode = "advisory"
    rule_severities: dict[str, Severity] = Field(default_factory=dict)
    category_overrides: tuple[CategoryOverride, ...] = ()
    path_overrides: tuple[PathOverride, ...] = ()
    categories: dict[str, str] = Field(default_factory=dict)


class OverrideBlock(BaseModel):
    """ホストlinter設定の overrides 要素。"""

    files: list[str]
    rules: dict[str, Any]


class CompiledConfiguration(BaseModel):
    """ホストlinterにそのまま渡せる、重大度・オプション解決済みの設定。"""

    model_config = ConfigDict(frozen=True)

    rules: dict[str, Any] = Field(default_factory=dict)
    overrides: list[OverrideBlock] = Field(default_factory=list)
    tenant_id: str = DEFAULT_TENANT_ID
    mode: EngineMode = "advisory"
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        """ホストlinterが解釈する rules / overrides の2キー構造を返す。"""
        return {
            "rules": dict(self.rules),
            "overrides": [block.model_dump() for block in self.overrides],
        }
