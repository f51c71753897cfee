# Token ingestion and value model for TokenWeaver

from .models import (
    Token, TokenCategory, Theme, Typeface, FontFile, TypographyRole,
    Component, ComponentProp, ComponentVariant, ComponentExample, ComponentStatus,
    ColorValue, DimensionValue, ShadowValue, ShadowLayer, FontFamilyValue,
    TypographyValue, RawValue, BinaryFileRef, ParseResult, PackageRequest, PackageResult,
    CATEGORY_ORDER, coerce_value, css_variable_for_path
)

from .format_detector import TokenFormat, detect_format
from .normalizer import TokenNormalizer, parse_tokens, detect_category
from .values import token_to_css_value, expand_composite_typography
from .size_budget import (
    SizeBudgetEnforcer, BudgetResult, DocumentBudget, TruncationStyle, enforce_budget
)

__all__ = [
    'Token', 'TokenCategory', 'Theme', 'Typeface', 'FontFile', 'TypographyRole',
    'Component', 'ComponentProp', 'ComponentVariant', 'ComponentExample', 'ComponentStatus',
    'ColorValue', 'DimensionValue', 'ShadowValue', 'ShadowLayer', 'FontFamilyValue',
    'TypographyValue', 'RawValue', 'BinaryFileRef', 'ParseResult', 'PackageRequest', 'PackageResult',
    'CATEGORY_ORDER', 'coerce_value', 'css_variable_for_path',
    'TokenFormat', 'detect_format',
    'TokenNormalizer', 'parse_tokens', 'detect_category',
    'token_to_css_value', 'expand_composite_typography',
    'SizeBudgetEnforcer', 'BudgetResult', 'DocumentBudget', 'TruncationStyle', 'enforce_budget'
]
