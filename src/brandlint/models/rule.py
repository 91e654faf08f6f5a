"""ルール定義関連のデータモデル。"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from brandlint.models.policy import BrandPolicy
from brandlint.models.syntax import SyntaxNode

if TYPE_CHECKING:
    from brandlint.services.dispatch import RuleContext

RuleHandler = Callable[[SyntaxNode, "RuleContext"], None]


class RuleOptions(BaseModel):
    """ルールオプションの基底クラス。ホストlinter設定にはcamelCaseで出力する。"""

    model_config = ConfigDict(frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True)


class RuleDefinition(BaseModel):
    """プロセス起動時に一度だけ登録されるルール定義。"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    category: str
    description: str
    fixable: bool = False
    options_model: type[RuleOptions] = RuleOptions
    options_from_policy: Callable[[BrandPolicy], dict[str, Any]] = Field(default=lambda policy: {})
    handlers: dict[str, Callable[..., None]] = Field(default_factory=dict)

    def build_options(self, policy: BrandPolicy) -> RuleOptions:
        """ポリシーからルールオプションを生成し、スキーマで検証する。"""
        return self.options_model.model_validate(self.options_from_policy(policy))
