from .enrichment import OpenAIEnricher, parse_llm_response
from .prompts import build_catalog_guide_section, build_enrichment_prompt
