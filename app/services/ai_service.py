import os
import time
import yaml
import openai

from typing import Callable, Optional
from pydantic import ValidationError
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI

from app.core.config import PROMPTS_PATH, Settings, logger, mask_key
from app.core.errors import (
    Misconfigured,
    ParseFailure,
    QuotaExceeded,
    RateLimited,
    UpstreamFailure,
)
from app.schemas import AnalysisResult
from app.utils import parsers

# --- GLOBAL STATE ---
PROMPTS = {}

def load_prompts(path: str = PROMPTS_PATH):
    """Loads prompts from app/prompts.yaml"""
    global PROMPTS

    if not os.path.exists(path):
        logger.warning(f"⚠️ prompts.yaml not found at {path}")
        return

    with open(path, "r", encoding="utf-8") as f:
        PROMPTS = yaml.safe_load(f) or {}
    logger.info(f"✅ Prompts loaded from YAML ({len(PROMPTS)} templates).")

def get_analysis_prompt() -> ChatPromptTemplate:
    """System (analyst persona + output shape) and user (role + resume) messages."""
    if not PROMPTS:
        load_prompts()

    system_text = PROMPTS.get("analyst_system_prompt")
    user_text = PROMPTS.get("analyst_user_prompt")
    if not system_text or not user_text:
        logger.error("Analyst prompts missing from prompts.yaml!")
        raise Misconfigured("AI service not configured")

    return ChatPromptTemplate.from_messages([
        ("system", system_text),
        ("human", user_text),
    ])

def get_chat_model(settings: Settings) -> ChatOpenAI:
    """OpenAI-compatible gateway client. Retries are off: every failure is terminal."""
    logger.info(f"🤖 Gateway model {settings.AI_MODEL}. API key: {mask_key(settings.AI_GATEWAY_API_KEY)}")
    return ChatOpenAI(
        model=settings.AI_MODEL,
        api_key=settings.AI_GATEWAY_API_KEY,
        base_url=settings.AI_GATEWAY_URL,
        timeout=settings.AI_TIMEOUT_SECONDS,
        max_retries=0,
    )

ModelFactory = Callable[[Settings], object]

def _preview(text: str, words: int = 50) -> str:
    # Flatten newlines for cleaner logs
    return " ".join(str(text).replace("\n", " ").split()[:words])

def _log_usage(response, model_name: str, duration: float):
    content = getattr(response, "content", "")
    if content:
        logger.info(f"📥 [{model_name}] RECEIVED ({duration:.2f}s): {_preview(content)}...")
    else:
        logger.info(f"📥 [{model_name}] RECEIVED ({duration:.2f}s): [Empty Content]")

    usage = getattr(response, "usage_metadata", None)
    if usage:
        logger.info(
            f"💰 TOKEN USAGE (Resume Analysis - {model_name}): "
            f"In={usage.get('input_tokens', 0)}, Out={usage.get('output_tokens', 0)}, "
            f"Total={usage.get('total_tokens', 0)}"
        )

async def _call_model(llm, inputs: dict, model_name: str) -> str:
    """Runs the prompt once and translates gateway errors into AnalysisErrors."""
    chain = get_analysis_prompt() | llm

    logger.info(f"📤 [{model_name}] SENDING: {_preview(inputs)}...")
    start_time = time.time()

    try:
        response = await chain.ainvoke(inputs)
    except openai.RateLimitError as e:
        logger.warning(f"🚦 AI gateway rate limited the request: {e}")
        raise RateLimited("Rate limit exceeded. Please try again in a moment.")
    except openai.APIStatusError as e:
        logger.error(f"❌ AI gateway error: {e.status_code} {e.message}")
        if e.status_code == 402:
            raise QuotaExceeded("AI usage limit reached. Please add credits to continue.")
        raise UpstreamFailure("Failed to analyze resume. Please try again.")
    except openai.APITimeoutError:
        logger.error(f"⏱️ AI gateway did not answer within the timeout ({time.time() - start_time:.2f}s).")
        raise UpstreamFailure("AI service timed out. Please try again.")
    except openai.APIConnectionError as e:
        logger.error(f"❌ Could not reach AI gateway: {e}")
        raise UpstreamFailure("Failed to analyze resume. Please try again.")

    _log_usage(response, model_name, time.time() - start_time)

    content = getattr(response, "content", None)
    if not isinstance(content, str):
        # Multi-part content; keep only the text parts
        content = "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in (content or [])
        )
    return content

def validate_analysis(analysis: dict, raw_text: str):
    try:
        AnalysisResult.model_validate(analysis)
    except ValidationError as e:
        logger.error(f"❌ AI response does not match the analysis shape: {e.error_count()} error(s)")
        logger.debug(f"Validation errors: {e.errors()}")
        raise ParseFailure("Failed to parse analysis results", raw_text)

async def analyze_resume(
    resume_text: str,
    target_role: str,
    settings: Settings,
    model_factory: Optional[ModelFactory] = None,
) -> dict:
    """
    Resume + target role -> parsed analysis dict.

    Pipeline (no retries, no fallback):
    1. Gateway key check (Misconfigured).
    2. Single model call (RateLimited / QuotaExceeded / UpstreamFailure).
    3. JSON extraction (ParseFailure keeps the raw reply).
    4. Optional shape validation against AnalysisResult.

    The parsed object is returned as-is, never rebuilt from the pydantic model.
    """
    if not settings.AI_GATEWAY_API_KEY:
        logger.error("❌ AI_GATEWAY_API_KEY is not configured")
        raise Misconfigured("AI service not configured")

    factory = model_factory or get_chat_model
    llm = factory(settings)

    inputs = {"target_role": target_role, "resume_text": resume_text}
    analysis_text = await _call_model(llm, inputs, settings.AI_MODEL)

    if not analysis_text or not analysis_text.strip():
        logger.error("❌ No content in AI response")
        raise UpstreamFailure("Failed to get analysis from AI")

    analysis = parsers.extract_analysis_json(analysis_text)
    if analysis is None:
        logger.error("❌ Failed to parse AI response as JSON.")
        logger.info(f"Raw AI Output: {analysis_text[:500]}")
        raise ParseFailure("Failed to parse analysis results", analysis_text)

    if settings.VALIDATE_ANALYSIS_SCHEMA:
        validate_analysis(analysis, analysis_text)

    return analysis
