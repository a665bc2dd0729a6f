import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response

from app.core.config import Settings, get_settings
from app.core.errors import AnalysisError, BadRequest, UpstreamFailure
from app.routers.roles import resolve_role_name
from app.schemas import AnalysisRequest
from app.services import ai_service, auth_service
from app.services.auth_service import TokenVerifier

router = APIRouter()
logger = logging.getLogger(__name__)

def get_verifier(settings: Settings = Depends(get_settings)) -> TokenVerifier:
    return auth_service.get_token_verifier(settings)

def get_model_factory() -> ai_service.ModelFactory:
    return ai_service.get_chat_model

async def read_analysis_request(request: Request) -> AnalysisRequest:
    """Parses the JSON body by hand so missing fields are a 400, not a 422."""
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequest("Request body must be valid JSON")

    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")

    resume_text = data.get("resumeText")
    target_role = data.get("targetRole")

    if not isinstance(resume_text, str) or not resume_text.strip() \
            or not isinstance(target_role, str) or not target_role.strip():
        raise BadRequest("Resume text and target role are required")

    return AnalysisRequest(resumeText=resume_text, targetRole=target_role.strip())

@router.options("/analyze-resume")
async def analyze_resume_preflight():
    """CORS pre-flight. No auth, no body."""
    return Response(status_code=200)

@router.post("/analyze-resume")
async def analyze_resume(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
    verifier: TokenVerifier = Depends(get_verifier),
    model_factory: ai_service.ModelFactory = Depends(get_model_factory),
):
    """
    Skill-gap analysis of a resume against a target role.
    Body: {"resumeText": str, "targetRole": str} -> {"analysis": {...}}

    A targetRole equal to a /roles id (e.g. "qa") is sent to the model as that
    role's display name ("QA Engineer"); any other value is used verbatim.
    """
    try:
        # 1. Authenticate (hard precondition)
        token = auth_service.extract_bearer_token(authorization)
        user_id = await verifier.verify_async(token)
        logger.info(f"Authenticated user: {user_id}")

        # 2. Validate input
        body = await read_analysis_request(request)
        role_name = resolve_role_name(body.targetRole)
        logger.info(f"Analyzing resume for role: {role_name} (user: {user_id})")

        # 3. Prompt, call, parse
        analysis = await ai_service.analyze_resume(
            body.resumeText,
            role_name,
            settings,
            model_factory=model_factory,
        )

    except AnalysisError:
        # Typed failures pass through to the exception handler unmodified
        raise

    except Exception as e:
        logger.error(f"Error in analyze-resume: {e}", exc_info=True)
        raise UpstreamFailure(str(e) or "Unknown error occurred")

    logger.info(f"Analysis completed successfully for user: {user_id}")
    return {"analysis": analysis}
