ENRICHMENT_SYSTEM_PROMPT = """
You are a product data enrichment assistant. You generate values for computed
product fields based on the product data you are given.

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
RULES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- Generate a value for EVERY requested field, following its instruction
- Base values ONLY on the product data; NEVER invent codes, prices or EANs
- Be concise and accurate
- If you cannot generate a value, use an empty string ""
- Return ONLY valid JSON: one object whose keys are exactly the field keys
"""


def _product_context(product: dict) -> str:
    lines = []
    for key, value in product.items():
        if value is None or value == "" or isinstance(value, (list, dict)):
            continue
        lines.append(f"{key}: {value}")
    return "\n".join(lines)


def build_enrichment_prompt(fields, product: dict) -> str:
    """User prompt listing the product data and one line per field to generate."""
    field_lines = "\n".join(f"- {f.key} ({f.label}): {f.prompt}" for f in fields)
    keys = ", ".join(f'"{f.key}"' for f in fields)

    return f"""
PRODUCT DATA
{_product_context(product) or "(no data)"}

FIELDS TO GENERATE
{field_lines}

Respond with a JSON object with the keys {keys} and string values.
""".strip()


def build_catalog_guide_section(guide: str) -> str:
    """Prompt section asking extraction to return canonical catalog names."""
    if not guide:
        return ""
    return f"""
CATALOG MATCH GUIDE
When an extracted value is a synonym, translation or spelling variant of one
of the names below, return the listed name exactly. Otherwise keep the value.

{guide}
""".strip()
