"""カラー値・フォントインポート・Tailwindユーティリティの判定ロジック。

いずれも正規表現と集合の包含判定のみで行い、色空間上の距離計算などは行わない。
"""

import re
from typing import Protocol
from urllib.parse import parse_qs, urlparse


class ColorPolicy(Protocol):
    """カラー判定に必要な属性（BrandPolicy・ルールオプションの双方が満たす）。"""

    colors: tuple[str, ...]
    allow_tailwind: bool
    allow_custom_colors: bool


class FontPolicy(Protocol):
    fonts: tuple[str, ...]
    allow_system_fonts: bool
    allow_custom_fonts: bool


class IconPolicy(Protocol):
    icon_libraries: tuple[str, ...]
    icon_module: str


_HEX = r"#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})"
_COLOR_FUNCTION = r"(?:rgba?|hsla?)\(\s*[^()]*\)"

_COLOR_VALUE_RE = re.compile(rf"(?:{_HEX}|{_COLOR_FUNCTION})", re.IGNORECASE)
_EMBEDDED_COLOR_RE = re.compile(
    rf"(?<![\w-]){_HEX}(?![0-9a-fA-F])|(?:rgba?|hsla?)\(",
    re.IGNORECASE,
)

# Tailwindのカラーパレット名（固定リスト）
TAILWIND_PALETTES: tuple[str, ...] = (
    "slate",
    "gray",
    "zinc",
    "neutral",
    "stone",
    "red",
    "orange",
    "amber",
    "yellow",
    "lime",
    "green",
    "emerald",
    "teal",
    "cyan",
    "sky",
    "blue",
    "indigo",
    "violet",
    "purple",
    "fuchsia",
    "pink",
    "rose",
)

# 色を取るTailwindユーティリティの接頭辞
_TAILWIND_COLOR_UTILITIES: tuple[str, ...] = (
    "bg",
    "text",
    "border",
    "border-t",
    "border-r",
    "border-b",
    "border-l",
    "border-x",
    "border-y",
    "outline",
    "ring",
    "ring-offset",
    "divide",
    "fill",
    "stroke",
    "from",
    "via",
    "to",
    "decoration",
    "shadow",
    "accent",
    "caret",
    "placeholder",
)

_TAILWIND_COLOR_CLASS_RE = re.compile(
    r"^(?:[a-z0-9-]+:)*"
    rf"(?:{'|'.join(re.escape(u) for u in sorted(_TAILWIND_COLOR_UTILITIES, key=len, reverse=True))})-"
    rf"(?:(?:{'|'.join(TAILWIND_PALETTES)})-(?:50|[1-9]00|950)|white|black|transparent|current|inherit)"
    r"(?:/\d{1,3})?$"
)

# フォントパッケージとみなすインポートパスの断片
FONT_IMPORT_FRAGMENTS: tuple[str, ...] = (
    "@fontsource/",
    "@fontsource-variable/",
    "next/font/google",
    "next/font/local",
    "fonts.googleapis.com",
    "typeface-",
)

SYSTEM_FONTS: frozenset[str] = frozenset(
    {
        "system-ui",
        "-apple-system",
        "blinkmacsystemfont",
        "segoe-ui",
        "helvetica",
        "helvetica-neue",
        "arial",
        "georgia",
        "times-new-roman",
        "courier-new",
        "menlo",
        "monaco",
        "consolas",
        "sans-serif",
        "serif",
        "monospace",
        "ui-sans-serif",
        "ui-serif",
        "ui-monospace",
        "ui-rounded",
    }
)

ICON_PACKAGES: tuple[str, ...] = (
    "react-icons",
    "@heroicons/react",
    "@fortawesome/react-fontawesome",
    "@fortawesome/free-solid-svg-icons",
    "@fortawesome/free-regular-svg-icons",
    "@fortawesome/free-brands-svg-icons",
    "lucide-react",
    "@tabler/icons-react",
    "@mui/icons-material",
    "react-feather",
    "@phosphor-icons/react",
)


def is_color_value(value: str) -> bool:
    """文字列がカラー値（#RGB, #RRGGBB, rgb(), rgba(), hsl(), hsla()）かを判定する。"""
    return _COLOR_VALUE_RE.fullmatch(value.strip()) is not None


def is_tailwind_color_class(value: str) -> bool:
    """Tailwindのカラーユーティリティ（例: bg-blue-500, hover:text-white）かを判定する。"""
    return _TAILWIND_COLOR_CLASS_RE.match(value) is not None


def contains_embedded_color(value: str) -> bool:
    """クラス文字列にhex/rgb/hsl表記が埋め込まれているか（例: bg-[#ff0000]）を判定する。"""
    return _EMBEDDED_COLOR_RE.search(value) is not None


def split_class_tokens(value: str) -> list[str]:
    return value.split()


def is_brand_color(value: str, policy: "ColorPolicy") -> bool:
    """カラー値がブランドポリシーで許可されているかを判定する。

    許可条件（いずれか）:
        - 許可カラーに完全一致（大文字小文字は区別しない）
        - allow_tailwind が有効で、Tailwindカラーユーティリティに一致
        - allow_custom_colors が有効
    """
    normalized = value.strip().lower()
    if normalized in {c.strip().lower() for c in policy.colors}:
        return True
    if policy.allow_tailwind and is_tailwind_color_class(value.strip()):
        return True
    return policy.allow_custom_colors


def is_font_import(path: str) -> bool:
    return any(fragment in path for fragment in FONT_IMPORT_FRAGMENTS)


def normalize_font_id(name: str) -> str:
    """フォント名を比較用のID（小文字・ハイフン区切り）に正規化する。"""
    cleaned = name.strip().strip("'\"").lower()
    return re.sub(r"[\s_+]+", "-", cleaned)


def font_ids_for_import(path: str, imported_names: list[str] | None = None) -> list[str]:
    """フォントインポートから対象フォントIDを抽出する。

    Args:
        path: インポートパス。
        imported_names: インポートされた名前（next/font/google の { Inter } 等）。

    Returns:
        正規化済みのフォントIDリスト。
    """
    if "next/font/google" in path:
        return [normalize_font_id(name) for name in imported_names or []]
    if "next/font/local" in path:
        return ["local"]
    if "fonts.googleapis.com" in path:
        families = parse_qs(urlparse(path).query).get("family", [])
        return [normalize_font_id(f.split(":")[0]) for f in families]
    for prefix in ("@fontsource-variable/", "@fontsource/"):
        if prefix in path:
            package = path.split(prefix, 1)[1].split("/")[0]
            return [normalize_font_id(package)]
    if "typeface-" in path:
        package = path.rsplit("/", 1)[-1]
        return [normalize_font_id(package.split("typeface-", 1)[1])]
    return []


def is_brand_font(font_id: str, policy: "FontPolicy") -> bool:
    """フォントIDがブランドポリシーで許可されているかを判定する。

    許可条件はカラーと同様で、許可リスト・システムフォント・カスタムフォント許可のいずれか。
    """
    normalized = normalize_font_id(font_id)
    if normalized in {normalize_font_id(f) for f in policy.fonts}:
        return True
    if policy.allow_system_fonts and normalized in SYSTEM_FONTS:
        return True
    return policy.allow_custom_fonts


def icon_package_for_import(path: str) -> str | None:
    """アイコンパッケージからのインポートであればパッケージ名を返す。"""
    for package in ICON_PACKAGES:
        if path == package or path.startswith(package + "/"):
            return package
    return None


def is_brand_icon_import(path: str, policy: "IconPolicy") -> bool:
    if path == policy.icon_module or path.startswith(policy.icon_module + "/"):
        return True
    return any(path == lib or path.startswith(lib + "/") for lib in policy.icon_libraries)
