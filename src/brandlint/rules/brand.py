"""組み込みのブランドデザインルール。

各ルールはブランドポリシーから導出したオプションのみを参照する。
"""

from brandlint.models.policy import BrandPolicy
from brandlint.models.rule import RuleDefinition, RuleOptions
from brandlint.models.syntax import SyntaxNode
from brandlint.services.dispatch import RuleContext
from brandlint.validators.patterns import (
    contains_embedded_color,
    font_ids_for_import,
    icon_package_for_import,
    is_brand_color,
    is_brand_font,
    is_brand_icon_import,
    is_color_value,
    is_font_import,
    is_tailwind_color_class,
    split_class_tokens,
)

DESIGN_GUARDIAN = "design-guardian"
COMPONENT_POLICY = "component-policy"

# 自動修正の方式名（services.autofix と対応）
COLOR_SUBSTITUTION = "color-substitution"
FONT_IMPORT_REWRITE = "font-import-rewrite"
ICON_IMPORT_REWRITE = "icon-import-rewrite"
STYLE_TO_CLASSNAME = "style-to-classname"
CLASSNAME_ACCESSOR = "classname-accessor"

_CLASS_ATTRIBUTES = frozenset({"className", "class"})
_FONT_FAMILY_KEYS = frozenset({"fontFamily", "font-family"})


class ColorRuleOptions(RuleOptions):
    colors: tuple[str, ...] = ()
    allow_tailwind: bool = True
    allow_custom_colors: bool = False


class TypographyRuleOptions(RuleOptions):
    fonts: tuple[str, ...] = ()
    allow_system_fonts: bool = True
    allow_custom_fonts: bool = False
    typography_module: str


class IconRuleOptions(RuleOptions):
    icon_libraries: tuple[str, ...] = ()
    icon_module: str


class InlineStyleRuleOptions(RuleOptions):
    allow_inline_styles: bool = False
    allow_custom_colors: bool = False
    styling_accessor: str


def jsx_attribute_name(node: SyntaxNode) -> str | None:
    """JSXAttributeノードの属性名を返す。"""
    name = node.child("name")
    if name is None:
        return None
    if name.type == "JSXNamespacedName":
        local = name.child("name")
        return local.props.get("name") if local else None
    return name.props.get("name")


def _enclosing_attribute(ctx: RuleContext) -> str | None:
    """現在のノードを囲む最も近いJSX属性名。要素の境界を越えては探さない。"""
    for ancestor in reversed(ctx.ancestors):
        if ancestor.type == "JSXAttribute":
            return jsx_attribute_name(ancestor)
        if ancestor.type in ("JSXOpeningElement", "JSXElement"):
            return None
    return None


def _property_key(node: SyntaxNode) -> str | None:
    key = node.child("key")
    if key is None:
        return None
    if key.type == "Identifier":
        return key.props.get("name")
    return key.string_value


# ============================================================
# brand-enforce-colors
# ============================================================


def _check_color_string(node: SyntaxNode, value: str, ctx: RuleContext, strategy: str | None) -> None:
    options: ColorRuleOptions = ctx.options  # type: ignore[assignment]
    if is_color_value(value):
        if not is_brand_color(value, options):
            ctx.report(node, f'Color "{value.strip()}" is not part of the brand palette', strategy)
        return

    if _enclosing_attribute(ctx) not in _CLASS_ATTRIBUTES:
        return
    for token in split_class_tokens(value):
        if is_tailwind_color_class(token) and not is_brand_color(token, options):
            ctx.report(node, f'Color utility "{token}" is not allowed by the brand palette')
            return


def check_color_literal(node: SyntaxNode, ctx: RuleContext) -> None:
    value = node.string_value
    if value is not None:
        _check_color_string(node, value, ctx, COLOR_SUBSTITUTION)


def check_color_template(node: SyntaxNode, ctx: RuleContext) -> None:
    value = node.string_value
    if value is not None:
        _check_color_string(node, value, ctx, None)


def _color_options(policy: BrandPolicy) -> dict:
    return {
        "colors": policy.colors,
        "allow_tailwind": policy.allow_tailwind,
        "allow_custom_colors": policy.allow_custom_colors,
    }


# ============================================================
# brand-enforce-typography
# ============================================================


def _import_source(node: SyntaxNode) -> str | None:
    source = node.child("source")
    if source is None:
        return None
    return source.string_value


def _imported_names(node: SyntaxNode) -> list[str]:
    names: list[str] = []
    for spec in node.children_of("specifiers"):
        target = spec.child("imported") or spec.child("local")
        if target is not None and isinstance(target.props.get("name"), str):
            names.append(target.props["name"])
    return names


def check_font_import(node: SyntaxNode, ctx: RuleContext) -> None:
    path = _import_source(node)
    if path is None or not is_font_import(path):
        return
    options: TypographyRuleOptions = ctx.options  # type: ignore[assignment]
    disallowed = [f for f in font_ids_for_import(path, _imported_names(node)) if not is_brand_font(f, options)]
    if disallowed:
        ctx.report(
            node,
            f'Font import "{path}" ({", ".join(disallowed)}) is not a brand font; '
            f'use "{options.typography_module}"',
            FONT_IMPORT_REWRITE,
        )


def check_font_family(node: SyntaxNode, ctx: RuleContext) -> None:
    if _property_key(node) not in _FONT_FAMILY_KEYS:
        return
    value_node = node.child("value")
    value = value_node.string_value if value_node else None
    if value is None:
        return
    options: TypographyRuleOptions = ctx.options  # type: ignore[assignment]
    disallowed = [f.strip() for f in value.split(",") if f.strip() and not is_brand_font(f, options)]
    if disallowed:
        ctx.report(node, f'Font family "{", ".join(disallowed)}" is not a brand font')


def _typography_options(policy: BrandPolicy) -> dict:
    return {
        "fonts": policy.fonts,
        "allow_system_fonts": policy.allow_system_fonts,
        "allow_custom_fonts": policy.allow_custom_fonts,
        "typography_module": policy.typography_module,
    }


# ============================================================
# brand-enforce-icons
# ============================================================


def check_icon_import(node: SyntaxNode, ctx: RuleContext) -> None:
    path = _import_source(node)
    if path is None:
        return
    package = icon_package_for_import(path)
    options: IconRuleOptions = ctx.options  # type: ignore[assignment]
    if package is not None and not is_brand_icon_import(path, options):
        ctx.report(
            node,
            f'Icon library "{package}" is not approved; use "{options.icon_module}"',
            ICON_IMPORT_REWRITE,
        )


def _icon_options(policy: BrandPolicy) -> dict:
    return {"icon_libraries": policy.icon_libraries, "icon_module": policy.icon_module}


# ============================================================
# brand-no-inline-styles
# ============================================================


def check_jsx_attribute(node: SyntaxNode, ctx: RuleContext) -> None:
    options: InlineStyleRuleOptions = ctx.options  # type: ignore[assignment]
    name = jsx_attribute_name(node)
    if name == "style":
        if not options.allow_inline_styles:
            ctx.report(
                node,
                f"Inline styles are not allowed; use {options.styling_accessor}() for brand styling",
                STYLE_TO_CLASSNAME,
            )
        return

    if name not in _CLASS_ATTRIBUTES or options.allow_custom_colors:
        return
    value = node.child("value")
    if value is None:
        return
    if value.type == "JSXExpressionContainer":
        expression = value.child("expression")
        text = _static_text(expression) if expression else None
    else:
        text = value.string_value
    if text is not None and contains_embedded_color(text):
        ctx.report(
            value,
            f"{name} embeds a raw color value; use {options.styling_accessor}() instead",
            CLASSNAME_ACCESSOR,
            parent=node,
        )


def _static_text(node: SyntaxNode) -> str | None:
    """リテラル・式を含まないテンプレートリテラルの文字列値。"""
    if node.type == "Literal":
        return node.string_value
    if node.type == "TemplateLiteral" and not node.children_of("expressions"):
        return "".join(q.string_value or "" for q in node.children_of("quasis"))
    return None


def _inline_style_options(policy: BrandPolicy) -> dict:
    return {
        "allow_inline_styles": policy.allow_inline_styles,
        "allow_custom_colors": policy.allow_custom_colors,
        "styling_accessor": policy.styling_accessor,
    }


BUILTIN_RULES: tuple[RuleDefinition, ...] = (
    RuleDefinition(
        id="brand-enforce-colors",
        category=DESIGN_GUARDIAN,
        description="Color literals and Tailwind color utilities must come from the brand palette",
        fixable=True,
        options_model=ColorRuleOptions,
        options_from_policy=_color_options,
        handlers={"Literal": check_color_literal, "TemplateElement": check_color_template},
    ),
    RuleDefinition(
        id="brand-enforce-typography",
        category=DESIGN_GUARDIAN,
        description="Fonts must be imported through the brand typography module",
        fixable=True,
        options_model=TypographyRuleOptions,
        options_from_policy=_typography_options,
        handlers={"ImportDeclaration": check_font_import, "Property": check_font_family},
    ),
    RuleDefinition(
        id="brand-enforce-icons",
        category=DESIGN_GUARDIAN,
        description="Icons must come from the brand-approved icon module",
        fixable=True,
        options_model=IconRuleOptions,
        options_from_policy=_icon_options,
        handlers={"ImportDeclaration": check_icon_import},
    ),
    RuleDefinition(
        id="brand-no-inline-styles",
        category=COMPONENT_POLICY,
        description="Inline styles and raw color values in className are replaced by the brand styling accessor",
        fixable=True,
        options_model=InlineStyleRuleOptions,
        options_from_policy=_inline_style_options,
        handlers={"JSXAttribute": check_jsx_attribute},
    ),
)
