"""brandlintのカスタム例外クラス。"""


class BrandLintError(Exception):
    """brandlintの基底例外クラス。"""


class DuplicateRuleError(BrandLintError):
    """同一IDのルールが既に登録されている場合の例外。"""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule already registered: {rule_id}")
        self.rule_id = rule_id


class RuleNotFoundError(BrandLintError):
    """指定されたルールが見つからない場合の例外。"""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule not found: {rule_id}")
        self.rule_id = rule_id


class UnknownNodeTypeError(BrandLintError):
    """ルールのハンドラが未知のASTノード種別を参照している場合の例外。"""

    def __init__(self, rule_id: str, node_type: str) -> None:
        super().__init__(f"Rule {rule_id} binds unknown node type: {node_type}")
        self.rule_id = rule_id
        self.node_type = node_type


class InvalidRuleDefinitionError(BrandLintError):
    """ルール定義がスキーマ検証に失敗した場合の例外。"""

    def __init__(self, rule_id: str, reason: str) -> None:
        super().__init__(f"Invalid rule definition {rule_id}: {reason}")
        self.rule_id = rule_id
        self.reason = reason


class RegistryFrozenError(BrandLintError):
    """初期化完了後のレジストリにルールを登録しようとした場合の例外。"""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Registry is frozen, cannot register: {rule_id}")
        self.rule_id = rule_id


class BrandNotFoundError(BrandLintError):
    """テナントのブランド設定が見つからない場合の例外。"""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(f"Brand configuration not found for tenant: {tenant_id}")
        self.tenant_id = tenant_id


class BrandConfigError(BrandLintError):
    """ブランド設定ファイルの内容が不正な場合の例外。"""

    def __init__(self, tenant_id: str, reason: str) -> None:
        super().__init__(f"Malformed brand configuration for tenant {tenant_id}: {reason}")
        self.tenant_id = tenant_id
        self.reason = reason


class InvalidGlobError(BrandLintError):
    """オーバーライドのファイルglobが不正な場合の例外。"""

    def __init__(self, pattern: str) -> None:
        super().__init__(f"Invalid file glob: {pattern!r}")
        self.pattern = pattern
