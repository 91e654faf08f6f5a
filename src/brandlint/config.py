"""brandlintエンジンの設定管理。"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from brandlint.models.policy import EngineMode

_PACKAGE_ROOT = Path(__file__).parent
_REPO_ROOT = _PACKAGE_ROOT.parent.parent


class EngineConfig(BaseSettings):
    """エンジン設定。環境変数（BRANDLINT_ 接頭辞）から読み込み可能。"""

    model_config = {"env_prefix": "BRANDLINT_"}

    config_dir: Path = _REPO_ROOT / "config"
    project_root: Path = Field(default_factory=Path.cwd)

    # テナントの環境シグナル（明示指定がない場合に使用）
    tenant_id: str = ""
    mode: EngineMode = "advisory"

    # 環境変数由来のプライマリカラー（許可カラーの先頭に追加）
    primary_color: str = ""

    environment: str = "development"
