import logging
from datetime import datetime, timezone
from typing import Any

from ..config import (
    AI_LOG_PAYLOADS,
    AI_MAX_RETRIES,
    AI_TIMEOUT_S,
    COMPANY_NAME,
    GEMINI_API_KEY,
    GEMINI_API_VERSION,
    GEMINI_BASE_URL,
    GEMINI_MODEL,
)
from ..utils.error_handlers import AIConfigurationError, get_error_message, handle_ai_service_error
from .ai_client import gemini_generate_content
from .ai_prompts import interview_email_system_prompt, interview_email_user_prompt


logger = logging.getLogger(__name__)


async def draft_interview_email(*, candidate_name: str, role_title: str) -> tuple[str, dict[str, Any]]:
    """
    Returns (email_text, meta).

    Best-effort: any failure talking to Gemini yields a fallback text the recruiter
    can overwrite, with meta["fallback"] set. A missing API key is a configuration
    error and raises AIConfigurationError.
    """
    if not GEMINI_API_KEY:
        raise AIConfigurationError()

    meta: dict[str, Any] = {
        "model": GEMINI_MODEL,
        "fallback": False,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        text, gm = await gemini_generate_content(
            api_key=GEMINI_API_KEY,
            base_url=GEMINI_BASE_URL,
            api_version=GEMINI_API_VERSION,
            model=GEMINI_MODEL,
            system_text=interview_email_system_prompt(),
            user_text=interview_email_user_prompt(
                candidate_name=candidate_name,
                role_title=role_title,
                company_name=COMPANY_NAME,
            ),
            timeout_s=AI_TIMEOUT_S,
            max_retries=AI_MAX_RETRIES,
            log_payloads=AI_LOG_PAYLOADS,
        )
    except Exception as e:
        failure = handle_ai_service_error(e, "interview email drafting")
        meta.update({"fallback": True, "error_type": failure["error_type"], "message": failure["message"]})
        return get_error_message("ai_failed"), meta

    meta.update({"latency_ms": gm.latency_ms, "retries": gm.retries})
    if not text:
        logger.warning("Gemini returned no text for interview email (model=%s)", gm.model)
        meta.update({"fallback": True, "error_type": "empty"})
        return get_error_message("ai_empty"), meta
    return text, meta


async def compose_interview_email(candidate_name: str, role_title: str) -> str:
    text, _meta = await draft_interview_email(candidate_name=candidate_name, role_title=role_title)
    return text
