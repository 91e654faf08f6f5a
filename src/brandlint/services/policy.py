"""テナントのブランドポリシーを解決するサービス。"""

import logging
import threading
from typing import Any, Protocol

from brandlint.config import EngineConfig
from brandlint.models.errors import BrandNotFoundError
from brandlint.models.policy import DEFAULT_TENANT_ID, BrandPolicy
from brandlint.validators.patterns import is_color_value

logger = logging.getLogger(__name__)

# 保守的ポリシーへのフォールバック警告はリゾルバの数によらずプロセスで1回だけ
_warn_lock = threading.Lock()
_warned = False


def reset_fallback_warning() -> None:
    """フォールバック警告の出力済み状態を戻す。"""
    global _warned
    with _warn_lock:
        _warned = False


def _claim_warning() -> bool:
    global _warned
    with _warn_lock:
        if _warned:
            return False
        _warned = True
        return True


class BrandSource(Protocol):
    """ブランド設定の取得元。"""

    def load_brand(self, tenant_id: str) -> dict[str, Any]: ...


class BrandPolicyResolver:
    """テナントIDからブランドポリシーを解決する。例外は送出しない。

    解決順: 指定テナント → "default" テナント → 静的な保守的ポリシー。
    テナントごとに1回だけ取得元を参照し、結果をプロセスの生存期間中キャッシュする。
    """

    def __init__(self, source: BrandSource | None, config: EngineConfig | None = None) -> None:
        self._source = source
        self._config = config if config is not None else EngineConfig()
        self._cache: dict[str, BrandPolicy] = {}
        self._lock = threading.Lock()

    def derive_tenant_id(self, explicit: str | None = None) -> str:
        """テナントIDを決定する。明示指定 → 環境シグナル → "default" の順。"""
        if explicit:
            return explicit
        if self._config.tenant_id:
            return self._config.tenant_id
        return DEFAULT_TENANT_ID

    def resolve(self, tenant_id: str | None = None) -> BrandPolicy:
        """テナントのブランドポリシーを返す。

        Args:
            tenant_id: 明示的なテナントID。Noneの場合は環境から導出する。

        Returns:
            解決済みのポリシー。取得に失敗した場合は保守的なポリシー。
        """
        tenant = self.derive_tenant_id(tenant_id)
        with self._lock:
            cached = self._cache.get(tenant)
            if cached is not None:
                logger.debug("Brand policy cache hit for tenant %s", tenant)
                return cached
            policy = self._apply_environment(self._load(tenant))
            self._cache[tenant] = policy
            return policy

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def _load(self, tenant: str) -> BrandPolicy:
        if self._source is None:
            self._warn_once("no brand source configured")
            return BrandPolicy.conservative(tenant)

        candidates = [tenant] if tenant == DEFAULT_TENANT_ID else [tenant, DEFAULT_TENANT_ID]
        for candidate in candidates:
            try:
                data = self._source.load_brand(candidate)
                policy = BrandPolicy.model_validate({**data, "tenant_id": tenant})
            except BrandNotFoundError:
                logger.debug("No brand configuration for tenant %s", candidate)
                continue
            except Exception as e:
                self._warn_once(f"failed to load brand for tenant {candidate}: {e}")
                continue
            logger.debug("Resolved brand policy for tenant %s from %s", tenant, candidate)
            return policy

        self._warn_once(f"no brand configuration for tenant {tenant}")
        return BrandPolicy.conservative(tenant)

    def _apply_environment(self, policy: BrandPolicy) -> BrandPolicy:
        primary = self._config.primary_color.strip()
        if not primary:
            return policy
        if not is_color_value(primary):
            self._warn_once(f"ignoring invalid primary color from environment: {primary}")
            return policy
        colors = (primary, *(c for c in policy.colors if c.lower() != primary.lower()))
        return policy.model_copy(update={"colors": colors})

    def _warn_once(self, reason: str) -> None:
        if not _claim_warning():
            logger.debug("Brand policy fallback: %s", reason)
            return
        logger.warning("Falling back to conservative brand policy: %s", reason)
