"""YAMLファイルベースのブランド設定・重大度設定の読み込み。"""

from pathlib import Path
from typing import Any

import yaml

from brandlint.models.errors import BrandConfigError, BrandNotFoundError


class ConfigStore:
    """config_dir 配下のYAMLファイルからブランド設定を読み込む（読み取り専用）。

    config/brands/<tenant_id>.yaml にテナントごとのポリシー、
    config/severity.yaml に重大度の上書き設定を置く。
    """

    def __init__(self, config_dir: Path) -> None:
        self._config_dir = config_dir
        self._brands_dir = config_dir / "brands"

    def _brand_file(self, tenant_id: str) -> Path:
        # ディレクトリトラバーサル防止
        safe_id = Path(tenant_id).name
        if safe_id != tenant_id or not safe_id:
            raise BrandConfigError(tenant_id, "invalid tenant id")
        return self._brands_dir / f"{safe_id}.yaml"

    def load_brand(self, tenant_id: str) -> dict[str, Any]:
        """テナントのブランド設定を読み込む。

        Raises:
            BrandNotFoundError: 設定ファイルが存在しない場合。
            BrandConfigError: YAMLが不正、またはマッピングでない場合。
        """
        brand_file = self._brand_file(tenant_id)
        if not brand_file.exists():
            raise BrandNotFoundError(tenant_id)
        data = self._read_yaml(brand_file, tenant_id)
        brand = data.get("brand", data)
        if not isinstance(brand, dict):
            raise BrandConfigError(tenant_id, "'brand' must be a mapping")
        return brand

    def list_tenants(self) -> list[str]:
        """設定ファイルが存在するテナントIDの一覧を返す。"""
        if not self._brands_dir.exists():
            return []
        return sorted(p.stem for p in self._brands_dir.glob("*.yaml"))

    def load_severity_overrides(self) -> dict[str, Any]:
        """重大度の上書き設定を読み込む。ファイルがない場合は空の辞書。"""
        severity_file = self._config_dir / "severity.yaml"
        if not severity_file.exists():
            return {}
        return self._read_yaml(severity_file, "severity")

    @staticmethod
    def _read_yaml(path: Path, label: str) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise BrandConfigError(label, f"invalid YAML in {path.name}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise BrandConfigError(label, f"{path.name} must contain a mapping")
        return data
