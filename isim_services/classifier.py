# classifier.py
# Classification Request Builder: "is this string a Turkish personal name?"

# Builds the onomastics prompt for Gemini, sends it through GenAIClient and
# parses the strict-JSON reply into a NameVerdict. The verdict is never
# persisted here; saving it is a separate POST to the catalogue.

# @see: isim_api/routers/classify.py - Calls classify() after the catalogue checks
# @see: isim_services/genai_client.py - Model transport
# @note: Reply parsing tolerates ```json fences, nothing else

from __future__ import annotations

import json
import re
from typing import Any, Dict

import pydantic

from isim_api.errors import UpstreamParseError
from isim_api.logging_config import get_logger
from isim_api.models import NameVerdict
from isim_services.genai_client import GenAIClient
from isim_services.turkish import tr_title

logger = get_logger("classifier")

NOT_A_NAME_MESSAGE = "Bu bir isim değil veya yanlış yazılmış."

# ============================================================================
# PROMPT
# ============================================================================

CLASSIFICATION_PROMPT = """**System Instructions:**
You are a linguistics expert specializing in Turkish Onomastics. Your task is to analyze if a given string is used as a "personal name" (first name) in Türkiye.

**Context:**
This is for a cultural research project. Even if a word has a dictionary meaning (e.g., "Deniz" means "Sea"), you must accept it if it is used as a person's name.

**Rules:**
1. REJECT: Clearly misspelled names (e.g., 'Ahmettt'), random strings (e.g., 'asdfgh'), or numbers.
2. DICTIONARY TRAP: Do not reject names just because they are also common nouns or virtues.

**Output Format:**
return JSON in this format:
{{
  "isName": true,
  "name": "Name (correct spelling)",
  "gender": "Kız" or "Erkek" or "Her ikisi",
  "origin": "Origin (e.g., Türkçe, Arapça, Farsça, İbranice, etc.)",
  "syllables": syllable count (number),
  "length": character length (number),
  "meaning": "Meaning of the name in Turkish",
  "inQuran": true or false (whether it appears in the Quran)
}}

If this is CLEARLY not a name or is an OBVIOUS typo:
{{
  "isName": false,
  "message": "{not_a_name}"
}}
Return ONLY JSON format, no additional explanation.
**Input Text to Analyze:** "{name}"
"""

_FENCE_JSON_RE = re.compile(r"```json\n?")
_FENCE_RE = re.compile(r"```\n?")


def build_prompt(name: str) -> str:
    """Fill the classification prompt with an already sanitized name."""
    return CLASSIFICATION_PROMPT.format(name=name, not_a_name=NOT_A_NAME_MESSAGE)


def parse_reply(text: str) -> NameVerdict:
    """
    Decode the model's reply.

    Markdown code fences are removed before decoding. Accepted names are
    re-title-cased with Turkish rules so they match stored records.

    Raises:
        UpstreamParseError: Reply is not a JSON object with an isName flag
    """
    cleaned = _FENCE_RE.sub("", _FENCE_JSON_RE.sub("", text or "")).strip()
    try:
        data: Any = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.error(f"Failed to parse Gemini response: {text!r}")
        raise UpstreamParseError(text)

    if not isinstance(data, dict):
        logger.error(f"Gemini response is not a JSON object: {text!r}")
        raise UpstreamParseError(text)

    try:
        verdict = NameVerdict.model_validate(data)
    except pydantic.ValidationError:
        logger.error(f"Gemini response has an unexpected shape: {text!r}")
        raise UpstreamParseError(text)

    if verdict.isName and verdict.name:
        verdict.name = tr_title(verdict.name)
    return verdict


class NameClassifier:
    """Ask the model whether a sanitized string is a personal name."""

    def __init__(self, client: GenAIClient):
        self.client = client

    def classify(self, name: str) -> NameVerdict:
        prompt = build_prompt(name)
        logger.info(f"Classifying '{name}' with {self.client.model_name}")
        reply = self.client.generate_text(prompt)
        return parse_reply(reply)

    @staticmethod
    def verdict_body(verdict: NameVerdict) -> Dict[str, Any]:
        return verdict.model_dump(exclude_none=True)
