import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings, mask_key
from app.core.errors import AnalysisError
from app.routers import analysis, roles
from app.services import ai_service

logger = logging.getLogger(__name__)

def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=Settings.PROJECT_NAME, version=Settings.VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        logger.info(">>> SERVER STARTING UP <<<")

        ai_service.load_prompts()
        current = get_settings()
        logger.info(f"AI gateway: {current.AI_GATEWAY_URL} ({current.AI_MODEL}). API key: {mask_key(current.AI_GATEWAY_API_KEY)}")
        if not current.SUPABASE_URL:
            logger.warning("⚠️ SUPABASE_URL not set. Every analysis request will fail authentication.")

        logger.info("Server is ready to accept requests.")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info(">>> SERVER SHUTTING DOWN <<<")

    @app.exception_handler(AnalysisError)
    async def analysis_error_handler(request: Request, exc: AnalysisError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.get("/")
    async def root():
        return {
            "message": f"{Settings.PROJECT_NAME} API is running!",
            "docs": "/docs",
            "status": "OK"
        }

    app.include_router(analysis.router)
    app.include_router(roles.router)

    return app

app = create_app()
