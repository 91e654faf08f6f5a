"""ブランドポリシー・検証コンテキスト関連のデータモデル。"""

import re
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

EngineMode = Literal["advisory", "required", "brand-aware"]

DEFAULT_TENANT_ID = "default"

# ポリシーで未指定の場合のフォールバック先モジュール
_DEFAULT_TYPOGRAPHY_MODULE = "@/lib/brand/use-brand-typography"
_DEFAULT_ICON_MODULE = "@/components/brand/icons"
_DEFAULT_STYLING_ACCESSOR = "brandClass"

# JavaScriptの識別子、またはドット区切りのメンバーアクセス（例: brand.cls）
ACCESSOR_PATTERN = r"[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*"
_ACCESSOR_RE = re.compile(ACCESSOR_PATTERN, re.ASCII)


def _check_accessor(value: str) -> str:
    if not _ACCESSOR_RE.fullmatch(value):
        raise ValueError(f"styling_accessor must be a JavaScript identifier: {value}")
    return value


class BrandPolicy(BaseModel):
    """テナントごとに解決されたデザインポリシー。

    colors の先頭要素は自動修正（色の置換）の置換先として使われる。
    """

    model_config = ConfigDict(frozen=True)

    tenant_id: str = DEFAULT_TENANT_ID
    brand_name: str = "Default"
    colors: tuple[str, ...] = ()
    allow_tailwind: bool = True
    allow_custom_colors: bool = False
    fonts: tuple[str, ...] = ()
    allow_system_fonts: bool = True
    allow_custom_fonts: bool = False
    icon_libraries: tuple[str, ...] = ()
    allow_inline_styles: bool = False
    typography_module: str = _DEFAULT_TYPOGRAPHY_MODULE
    icon_module: str = _DEFAULT_ICON_MODULE
    styling_accessor: str = _DEFAULT_STYLING_ACCESSOR

    @field_validator("styling_accessor")
    @classmethod
    def _accessor_is_identifier(cls, value: str) -> str:
        return _check_accessor(value)

    @classmethod
    def conservative(cls, tenant_id: str = DEFAULT_TENANT_ID) -> "BrandPolicy":
        """ブランド情報が取得できない場合の保守的なポリシー。

        カスタムカラー不可・Tailwindのみ・システムフォントのみ・インラインスタイル不可。
        """
        return cls(tenant_id=tenant_id, brand_name="Default")

    def with_overrides(self, overrides: "BrandOverrides | None") -> "BrandPolicy":
        """部分的な上書き設定を適用した新しいポリシーを返す。

        model_copy は検証を行わないため、マージ結果を改めて検証する。
        """
        if overrides is None:
            return self
        return BrandPolicy.model_validate({**self.model_dump(), **overrides.model_dump(exclude_none=True)})


class BrandOverrides(BaseModel):
    """コンテキスト入力で渡されるポリシーの部分上書き。"""

    model_config = ConfigDict(extra="forbid")

    brand_name: str | None = None
    colors: tuple[str, ...] | None = None
    allow_tailwind: bool | None = None
    allow_custom_colors: bool | None = None
    fonts: tuple[str, ...] | None = None
    allow_system_fonts: bool | None = None
    allow_custom_fonts: bool | None = None
    icon_libraries: tuple[str, ...] | None = None
    allow_inline_styles: bool | None = None
    typography_module: str | None = None
    icon_module: str | None = None
    styling_accessor: str | None = None

    @field_validator("styling_accessor")
    @classmethod
    def _accessor_is_identifier(cls, value: str | None) -> str | None:
        return None if value is None else _check_accessor(value)


class ContextMetadata(BaseModel):
    """検証コンテキストのメタデータ。timestamp は比較対象から除外する。"""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    environment: str = "development"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContextMetadata):
            return NotImplemented
        return self.environment == other.environment

    def __hash__(self) -> int:
        return hash(self.environment)


class ValidationContext(BaseModel):
    """1回のlint実行ごとに生成される検証コンテキスト。"""

    model_config = ConfigDict(frozen=True)

    policy: BrandPolicy
    tenant_id: str
    file_path: str
    mode: EngineMode = "advisory"
    metadata: ContextMetadata = Field(default_factory=ContextMetadata)


class ContextInputs(BaseModel):
    """ホストから渡される生のコンテキスト入力。camelCase / snake_case の両方を受け付ける。"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tenant_id: str | None = Field(default=None, alias="tenantId")
    file_path: str = Field(default="", alias="filePath")
    mode: EngineMode | None = None
    brand_overrides: BrandOverrides | None = Field(default=None, alias="brandOverrides")
    severity_overrides: dict[str, Any] | None = Field(default=None, alias="severityOverrides")
