"""
OpenAI-backed AI enrichment collaborator.

Generates values for `ai_enrichment` computed fields. Products are processed
in chunks of ENRICHMENT_BATCH_SIZE; each product gets one chat completion whose
JSON answer is parsed leniently (markdown fences, trailing commas) and, if it
is still invalid, sent back to the model for repair.

Any failure for a product yields the fields' fallback values for that product:
enrichment never aborts a batch.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Mapping, Sequence

from config import DEFAULT_TEMPERATURE, ENRICHMENT_BATCH_SIZE, JSON_RETRY_ATTEMPTS
from pipeline.enrichment import EnrichmentField

from .llm_client import enrichment_model, get_client
from .prompts import ENRICHMENT_SYSTEM_PROMPT, build_enrichment_prompt

logger = logging.getLogger(__name__)


def _extract_json_from_text(text: str) -> str:
    """Extract the first JSON object from a response that may include markdown or extra text."""
    text = (text or "").strip()

    if "```" in text:
        match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, flags=re.DOTALL)
        if match:
            return match.group(1)
        text = re.sub(r"```(?:json)?", "", text).strip()

    match = re.search(r"\{.*\}", text, flags=re.DOTALL)
    return match.group(0) if match else text


def parse_llm_response(raw_response: str) -> Dict[str, Any]:
    """Parse model output into a JSON object with minimal repair attempts."""
    if not raw_response or not raw_response.strip():
        raise ValueError("LLM returned empty response")

    json_text = _extract_json_from_text(raw_response)

    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as e:
        try:
            parsed = json.loads(re.sub(r",\s*([}\]])", r"\1", json_text))
        except json.JSONDecodeError:
            raise ValueError(
                f"Failed to parse LLM JSON response. Error: Position {e.pos}: {e.msg}\n"
                f"First 500 chars: {raw_response[:500]}"
            ) from e

    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _fallbacks(fields: Sequence[EnrichmentField]) -> Dict[str, str]:
    return {f.key: f.fallback for f in fields}


class OpenAIEnricher:
    def __init__(
        self,
        model: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        batch_size: int = ENRICHMENT_BATCH_SIZE,
        client: Any = None,
    ):
        self.model = model or enrichment_model()
        self.temperature = temperature
        self.batch_size = max(1, batch_size)
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_client()
        return self._client

    def _complete(self, system: str, user: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=self.temperature,
        )
        return response.choices[0].message.content or ""

    def _parse_with_repair(self, raw_output: str) -> Dict[str, Any]:
        for attempt in range(JSON_RETRY_ATTEMPTS):
            try:
                return parse_llm_response(raw_output)
            except ValueError as e:
                if attempt >= JSON_RETRY_ATTEMPTS - 1:
                    raise
                fix_prompt = (
                    "The following JSON is invalid:\n\n"
                    f"{raw_output}\n\n"
                    f"Error: {e}\n\n"
                    "Output ONLY the corrected valid JSON with no additional text."
                )
                raw_output = self._complete("You are a JSON validator. Fix invalid JSON.", fix_prompt)
        raise ValueError("Unexpected error in JSON parsing retry loop")

    def enrich_one(self, fields: Sequence[EnrichmentField], product: Mapping[str, Any]) -> Dict[str, str]:
        """Values for every field of one product (fallbacks on any failure)."""
        try:
            raw_output = self._complete(ENRICHMENT_SYSTEM_PROMPT, build_enrichment_prompt(fields, dict(product)))
            parsed = self._parse_with_repair(raw_output)
        except Exception:
            logger.exception("AI enrichment failed for one product, using fallbacks")
            return _fallbacks(fields)

        values: Dict[str, str] = {}
        for f in fields:
            value = parsed.get(f.key)
            text = "" if value is None else str(value).strip()
            values[f.key] = text or f.fallback
        return values

    def enrich(
        self,
        fields: Sequence[EnrichmentField],
        products: Sequence[Mapping[str, Any]],
    ) -> List[Dict[str, str]]:
        if not fields or not products:
            return []

        results: List[Dict[str, str]] = []
        total = len(products)
        num_chunks = (total + self.batch_size - 1) // self.batch_size

        for i in range(num_chunks):
            chunk = products[i * self.batch_size:(i + 1) * self.batch_size]
            logger.info("Enriching products %d-%d of %d", i * self.batch_size + 1, i * self.batch_size + len(chunk), total)
            results.extend(self.enrich_one(fields, product) for product in chunk)

        return results
