# llm.py  (question extraction through google-generativeai)
import os
import json
import logging
from typing import Optional

from dotenv import load_dotenv
import google.generativeai as genai

load_dotenv()

logger = logging.getLogger(__name__)

# Pin a model in .env (GEMINI_MODEL=...); the fallback list is tried after it.
ENV_MODEL = (os.getenv("GEMINI_MODEL") or "").strip()

CANDIDATE_MODELS = [
    "gemini-2.0-flash",
    "gemini-1.5-flash",
    "gemini-1.5-flash-8b",
    "gemini-1.5-pro",
]

PROMPT_PATH = os.path.join(os.path.dirname(__file__), "prompts", "question_prompt.md")
with open(PROMPT_PATH, "r", encoding="utf-8") as f:
    PROMPT_MD = f.read()


class LLMError(Exception):
    pass


_configured = False


def _configure():
    global _configured
    if _configured:
        return
    api_key = os.getenv("GOOGLE_API_KEY", "").strip()
    if not api_key:
        raise LLMError("GOOGLE_API_KEY is missing in .env")
    genai.configure(api_key=api_key)
    _configured = True


def _format_prompt(pdf_text: str, answer_key_text: Optional[str] = None) -> str:
    prompt = f"""{PROMPT_MD}

Question paper text:
{pdf_text}
"""
    if answer_key_text:
        prompt += f"""
Answer key text (use it to fill correct_answers):
{answer_key_text}
"""
    return prompt


def strip_fences(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else ""
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


def _try_model_once(model_name: str, prompt_text: str) -> dict:
    model = genai.GenerativeModel(model_name)
    resp = model.generate_content(prompt_text)
    # blocked or empty responses have no text
    if not getattr(resp, "text", None):
        raise LLMError(f"Model {model_name} returned empty response.")
    content = strip_fences(resp.text)

    try:
        data = json.loads(content)
    except ValueError as e:
        raise LLMError(f"Model {model_name} returned non-JSON or bad JSON: {e}\nRaw: {content[:400]}")
    if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
        raise LLMError(f"Model {model_name} returned JSON without a questions list")
    return data


def models_to_try() -> list:
    names = [ENV_MODEL] if ENV_MODEL else []
    return names + [m for m in CANDIDATE_MODELS if m != ENV_MODEL]


def extract_questions(pdf_text: str, answer_key_text: Optional[str] = None) -> dict:
    """
    Sends the paper text to Gemini, trying the env-selected model first and
    then the fallbacks. Returns the parsed JSON ({"questions": [...],
    "metadata": {...}}). Raises LLMError when every model fails.
    """
    _configure()
    prompt_text = _format_prompt(pdf_text, answer_key_text)

    errors = []
    for name in models_to_try():
        try:
            logger.info("[LLM] Trying model: %s", name)
            data = _try_model_once(name, prompt_text)
            data["metadata"] = {**(data.get("metadata") or {}), "model": name}
            return data
        except Exception as e:
            logger.warning("[LLM] %s failed: %s", name, e)
            errors.append(f"{name}: {e}")
    raise LLMError("All candidate models failed:\n" + "\n".join(errors))
