"""
Business logic services.

Each service handles one stage of a conversion. ConversionService, which
ties them together, lives in services.conversion_service.
"""

from services.category_service import CategoryTranslator, resolve_condition, ebay_condition_id
from services.generator_service import (
    GENERATORS,
    generate_ebay,
    generate_google,
    generate_facebook,
    generate_ecokart,
    write_ecokart_workbook,
)
from services.template_service import (
    TemplateProvider,
    FileTemplateProvider,
    InMemoryTemplateProvider,
    get_template_provider,
    resolve_template,
    compose,
)

__all__ = [
    "CategoryTranslator",
    "resolve_condition",
    "ebay_condition_id",
    "GENERATORS",
    "generate_ebay",
    "generate_google",
    "generate_facebook",
    "generate_ecokart",
    "write_ecokart_workbook",
    "TemplateProvider",
    "FileTemplateProvider",
    "InMemoryTemplateProvider",
    "get_template_provider",
    "resolve_template",
    "compose",
]
