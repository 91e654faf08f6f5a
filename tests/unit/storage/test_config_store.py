"""ConfigStoreのユニットテスト。"""

from pathlib import Path

import pytest

from brandlint.models.errors import BrandConfigError, BrandNotFoundError
from brandlint.storage.config_store import ConfigStore


@pytest.fixture
def tmp_store(tmp_path: Path) -> ConfigStore:
    (tmp_path / "brands").mkdir()
    return ConfigStore(config_dir=tmp_path)


def _write(store_dir: Path, name: str, text: str) -> None:
    (store_dir / "brands" / f"{name}.yaml").write_text(text, encoding="utf-8")


class TestLoadBrand:
    def test_repository_brands(self, store: ConfigStore) -> None:
        brand = store.load_brand("acme")
        assert brand["brand_name"] == "Acme"
        assert brand["fonts"] == ["manrope", "jetbrains-mono"]

    def test_plain_mapping_without_brand_key(self, tmp_store: ConfigStore, tmp_path: Path) -> None:
        _write(tmp_path, "plain", "brand_name: Plain\ncolors: ['#000000']\n")
        assert tmp_store.load_brand("plain") == {"brand_name": "Plain", "colors": ["#000000"]}

    def test_missing_tenant(self, tmp_store: ConfigStore) -> None:
        with pytest.raises(BrandNotFoundError) as exc_info:
            tmp_store.load_brand("ghost")
        assert exc_info.value.tenant_id == "ghost"

    def test_invalid_yaml(self, tmp_store: ConfigStore, tmp_path: Path) -> None:
        _write(tmp_path, "broken", "brand: {colors: [\n")
        with pytest.raises(BrandConfigError):
            tmp_store.load_brand("broken")

    def test_brand_must_be_mapping(self, tmp_store: ConfigStore, tmp_path: Path) -> None:
        _write(tmp_path, "listy", "brand:\n  - a\n  - b\n")
        with pytest.raises(BrandConfigError):
            tmp_store.load_brand("listy")

    def test_empty_file_is_empty_brand(self, tmp_store: ConfigStore, tmp_path: Path) -> None:
        _write(tmp_path, "empty", "")
        assert tmp_store.load_brand("empty") == {}

    @pytest.mark.parametrize("tenant_id", ["../secrets", "a/b", ""])
    def test_path_traversal_rejected(self, tmp_store: ConfigStore, tenant_id: str) -> None:
        with pytest.raises(BrandConfigError):
            tmp_store.load_brand(tenant_id)


class TestListTenants:
    def test_repository_tenants(self, store: ConfigStore) -> None:
        assert store.list_tenants() == ["acme", "default"]

    def test_missing_brands_dir(self, tmp_path: Path) -> None:
        assert ConfigStore(tmp_path / "nowhere").list_tenants() == []


class TestSeverityOverrides:
    def test_repository_severity_file(self, store: ConfigStore) -> None:
        data = store.load_severity_overrides()
        assert data["categories"][0]["category"] == "design-guardian"
        assert data["overrides"][0]["rules"] == {"brand-no-inline-styles": "off"}

    def test_missing_file_is_empty(self, tmp_store: ConfigStore) -> None:
        assert tmp_store.load_severity_overrides() == {}

    def test_non_mapping_rejected(self, tmp_store: ConfigStore, tmp_path: Path) -> None:
        (tmp_path / "severity.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(BrandConfigError):
            tmp_store.load_severity_overrides()
