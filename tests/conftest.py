"""テスト共通フィクスチャ。"""

from pathlib import Path

import pytest

from brandlint.config import EngineConfig
from brandlint.models.policy import BrandPolicy
from brandlint.rules.registry import RuleRegistry, default_registry
from brandlint.services.engine import LintEngine
from brandlint.services.policy import BrandPolicyResolver, reset_fallback_warning
from brandlint.services.severity import SeverityCompiler
from brandlint.storage.config_store import ConfigStore


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """BRANDLINT_ 環境変数がテストに漏れないようにする。"""
    for name in ("TENANT_ID", "PRIMARY_COLOR", "MODE", "CONFIG_DIR", "PROJECT_ROOT", "ENVIRONMENT"):
        monkeypatch.delenv(f"BRANDLINT_{name}", raising=False)


@pytest.fixture(autouse=True)
def _reset_fallback_warning() -> None:
    """フォールバック警告の出力済み状態はプロセス全体で共有されるため、テストごとに戻す。"""
    reset_fallback_warning()


@pytest.fixture
def config_dir() -> Path:
    """設定ファイルディレクトリ。"""
    return Path(__file__).parent.parent / "config"


@pytest.fixture
def engine_config(config_dir: Path, tmp_path: Path) -> EngineConfig:
    """テスト用EngineConfig。"""
    return EngineConfig(config_dir=config_dir, project_root=tmp_path)


@pytest.fixture
def store(config_dir: Path) -> ConfigStore:
    return ConfigStore(config_dir=config_dir)


@pytest.fixture
def registry() -> RuleRegistry:
    return default_registry()


@pytest.fixture
def resolver(store: ConfigStore, engine_config: EngineConfig) -> BrandPolicyResolver:
    """テストごとに新しいキャッシュを持つリゾルバ。"""
    return BrandPolicyResolver(source=store, config=engine_config)


@pytest.fixture
def engine(
    registry: RuleRegistry,
    resolver: BrandPolicyResolver,
    engine_config: EngineConfig,
    store: ConfigStore,
) -> LintEngine:
    """config/severity.yaml の既定上書きを読み込んだエンジン。"""
    return LintEngine(
        registry=registry,
        resolver=resolver,
        compiler=SeverityCompiler(),
        config=engine_config,
        severity_defaults=store.load_severity_overrides(),
    )


@pytest.fixture
def scenario_policy() -> BrandPolicy:
    """Tailwindのみ許可・ブランドカラーなし・システムフォントのみのポリシー。"""
    return BrandPolicy(
        tenant_id="scenario",
        brand_name="Scenario",
        colors=(),
        allow_tailwind=True,
        allow_custom_colors=False,
        fonts=(),
        allow_system_fonts=True,
    )
