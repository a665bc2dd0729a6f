import asyncio
import logging
from typing import Optional

from supabase import create_client

from app.core.config import Settings
from app.core.errors import Misconfigured, Unauthorized

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

def extract_bearer_token(authorization: Optional[str]) -> str:
    """Pulls the token out of an `Authorization: Bearer <token>` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        logger.error("Missing or invalid Authorization header")
        raise Unauthorized("Unauthorized - please log in")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        logger.error("Empty bearer token")
        raise Unauthorized("Unauthorized - please log in")
    return token

class TokenVerifier:
    """
    The only identity capability the analyzer needs:
    verify(token) -> user id, or raise Unauthorized.
    """

    def verify(self, token: str) -> str:
        raise NotImplementedError

    async def verify_async(self, token: str) -> str:
        # Identity clients are blocking; keep them off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.verify, token)

class SupabaseTokenVerifier(TokenVerifier):
    def __init__(self, url: Optional[str], anon_key: Optional[str]):
        self.url = url
        self.anon_key = anon_key

    def verify(self, token: str) -> str:
        if not self.url or not self.anon_key:
            logger.error("❌ SUPABASE_URL / SUPABASE_ANON_KEY are not configured")
            raise Misconfigured("Authentication service not configured")

        try:
            client = create_client(self.url, self.anon_key)
        except Exception as e:
            logger.error(f"❌ Could not build Supabase client: {e}")
            raise Misconfigured("Authentication service not configured")

        try:
            response = client.auth.get_user(token)
        except Exception as e:
            logger.error(f"Token validation failed: {e}")
            raise Unauthorized("Unauthorized - invalid or expired session")

        user = getattr(response, "user", None) if response else None
        if not user or not getattr(user, "id", None):
            logger.error("Token validation failed: No user returned")
            raise Unauthorized("Unauthorized - invalid or expired session")

        return str(user.id)

def get_token_verifier(settings: Settings) -> TokenVerifier:
    return SupabaseTokenVerifier(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
