"""
ai_handler.py - Google Gemini Calls
File analysis, case scenario generation and case chat.

Every public function catches its own failures and reports them as a fixed
fallback string (or a (False, message) tuple for file analysis), so callers
never need a try/except around an AI call.
"""

import json
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from config import (
    DEFAULT_ANALYSIS_MODEL, DEFAULT_SCENARIO_MODEL, DEFAULT_CHAT_MODEL,
    AI_UNAVAILABLE_TEXT, ANALYSIS_FAILED_TEXT, ANALYSIS_EMPTY_TEXT,
    SCENARIO_UNAVAILABLE_TEXT, SCENARIO_FAILED_TEXT, SCENARIO_EMPTY_TEXT,
    SCENARIO_DEFAULT_CONFIDENCE, CHAT_UNAVAILABLE_TEXT, CHAT_FAILED_TEXT, CHAT_EMPTY_TEXT,
)
from item_store import Item

logger = logging.getLogger(__name__)


def _get_model(model: str, api_key: str, system_instruction: str = None):
    """Configure the SDK and build a GenerativeModel (raises on any problem)"""
    import google.generativeai as genai

    genai.configure(api_key=api_key)
    if system_instruction:
        return genai.GenerativeModel(model_name=model, system_instruction=system_instruction)
    return genai.GenerativeModel(model_name=model)


def _response_text(response) -> str:
    try:
        return response.text or ""
    except ValueError:
        # Blocked / empty candidates raise instead of returning ''
        return ""


# -------------------------
# File Analysis
# -------------------------

def build_analysis_prompt(item: Item, context: str) -> str:
    return (
        f"You are a legal analyst AI.\n"
        f"Analyze this file named \"{item.name}\" of type {item.mime_type or 'unknown'}.\n"
        f"Context: {context}\n\n"
        f"Provide a concise 2-sentence summary of how this might be relevant to a legal case.\n"
        f"Assume the content is generic legal boilerplate if actual content is missing.\n"
    )


def analyze_file_content(item: Item, context: str, api_key: Optional[str],
                         model: str = DEFAULT_ANALYSIS_MODEL) -> Tuple[bool, str]:
    """
    Summarise an uploaded item.

    Returns:
        (True, summary) on success, (False, placeholder) on any failure
    """
    if not api_key:
        return False, AI_UNAVAILABLE_TEXT

    try:
        gemini_model = _get_model(model, api_key)
        response = gemini_model.generate_content(build_analysis_prompt(item, context))
        return True, _response_text(response) or ANALYSIS_EMPTY_TEXT
    except ImportError:
        logger.error("google-generativeai is not installed")
        return False, AI_UNAVAILABLE_TEXT
    except Exception as e:
        logger.warning(f"Analysis failed for '{item.name}': {e}")
        return False, ANALYSIS_FAILED_TEXT


# -------------------------
# Case Scenario
# -------------------------

def build_scenario_prompt(case_name: str, evidence: Sequence[Item]) -> str:
    evidence_list = "\n".join(f"- {e.name} ({e.type.value})" for e in evidence)
    return (
        f"You are a Senior Legal Strategist.\n"
        f"Case Name: {case_name}\n\n"
        f"Evidence List:\n{evidence_list}\n\n"
        f"Task:\n"
        f"1. Write a narrative scenario (story) of the case based on these filenames "
        f"(infer content from names like 'invoice', 'contract', 'email').\n"
        f"2. Estimate a confidence score (0-100) based on how complete the evidence looks.\n\n"
        f"Return JSON with the keys \"scenario\" (string) and \"confidence\" (number).\n"
    )


def parse_scenario_response(text: str) -> Tuple[str, float]:
    """Pull scenario/confidence out of the model's JSON reply"""
    try:
        result = json.loads(text or "{}")
    except json.JSONDecodeError:
        logger.warning("Scenario response was not valid JSON")
        return SCENARIO_FAILED_TEXT, 0
    if not isinstance(result, dict):
        return SCENARIO_FAILED_TEXT, 0

    scenario = result.get("scenario") or SCENARIO_EMPTY_TEXT
    try:
        confidence = float(result.get("confidence") or SCENARIO_DEFAULT_CONFIDENCE)
    except (TypeError, ValueError):
        confidence = SCENARIO_DEFAULT_CONFIDENCE
    return str(scenario), max(0, min(100, confidence))


def generate_case_scenario(case_name: str, evidence: Sequence[Item], api_key: Optional[str],
                           model: str = DEFAULT_SCENARIO_MODEL) -> Tuple[str, float]:
    """
    Returns:
        (scenario narrative, confidence 0-100); failures give a fallback text and 0
    """
    if not api_key:
        return SCENARIO_UNAVAILABLE_TEXT, 0

    try:
        import google.generativeai as genai

        gemini_model = _get_model(model, api_key)
        response = gemini_model.generate_content(
            build_scenario_prompt(case_name, evidence),
            generation_config=genai.types.GenerationConfig(response_mime_type="application/json"),
        )
        return parse_scenario_response(_response_text(response))
    except ImportError:
        logger.error("google-generativeai is not installed")
        return SCENARIO_UNAVAILABLE_TEXT, 0
    except Exception as e:
        logger.warning(f"Scenario generation failed for '{case_name}': {e}")
        return SCENARIO_FAILED_TEXT, 0


# -------------------------
# Case Chat
# -------------------------

def to_gemini_history(history: Sequence[Dict]) -> List[Dict]:
    """[{'role', 'text'}] -> Gemini chat history format"""
    return [{"role": h["role"], "parts": [h["text"]]} for h in history]


def chat_with_case(history: Sequence[Dict], new_message: str, case_name: str,
                   api_key: Optional[str], model: str = DEFAULT_CHAT_MODEL) -> str:
    """Send one chat turn about a case; returns the reply or a fallback string"""
    if not api_key:
        return CHAT_UNAVAILABLE_TEXT

    try:
        gemini_model = _get_model(
            model, api_key,
            system_instruction=(f"You are a legal assistant specialized in the case: "
                                f"\"{case_name}\". Answer strictly based on evidence."),
        )
        chat = gemini_model.start_chat(history=to_gemini_history(history))
        response = chat.send_message(new_message)
        return _response_text(response) or CHAT_EMPTY_TEXT
    except ImportError:
        logger.error("google-generativeai is not installed")
        return CHAT_UNAVAILABLE_TEXT
    except Exception as e:
        logger.warning(f"Chat failed for case '{case_name}': {e}")
        return CHAT_FAILED_TEXT
