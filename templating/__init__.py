from .engine import (
    TemplateContext,
    TemplateEngine,
    apply_width,
    build_context,
    catalog_namespaces,
    evaluate_template,
    validate_template,
)
from .parser import Placeholder, parse_template, template_variables
