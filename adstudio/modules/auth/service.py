import hashlib
import logging
from supabase import Client
from adstudio.modules.auth.schemas import (
    ApiKeyCreate, ApiKeyResponse, LoginRequest, RegisterRequest, RegisterResponse, TokenResponse,
)
from adstudio.modules.templates.cache import TTLCache
from fastapi import HTTPException
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

# Verified identities keyed by token hash, so parallel requests with one token hit Supabase Auth once
_AUTH_USER_CACHE = TTLCache(60, max_entries=500)

API_KEY_COLUMNS = "id, provider, created_at, updated_at"


def token_cache_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def initials_for(first_name: Optional[str], last_name: Optional[str], email: str) -> str:
    if first_name and last_name:
        return f"{first_name[0]}{last_name[0]}".upper()
    return email[:2].upper()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _create_profile(self, user_id: str, register_data: RegisterRequest) -> None:
        names = [register_data.first_name, register_data.last_name]
        self.supabase.table("profiles").upsert({
            "id": user_id,
            "email": register_data.email,
            "first_name": register_data.first_name,
            "last_name": register_data.last_name,
            "display_name": " ".join(n for n in names if n) or register_data.email,
            "initials": initials_for(register_data.first_name, register_data.last_name, register_data.email),
            "role": "user",
        }).execute()

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Sign the user up with Supabase Auth and create their profile row"""
        metadata = {
            k: v for k, v in (
                ("first_name", register_data.first_name),
                ("last_name", register_data.last_name),
            ) if v
        }
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {"data": metadata},
            })
            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")
            self._create_profile(auth_response.user.id, register_data)
        except HTTPException:
            raise
        except Exception as e:
            message = str(e).lower()
            if "already registered" in message or "already exists" in message:
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Registration failed for {register_data.email}: {e}")
            raise HTTPException(status_code=500, detail=f"Registration failed: {e}")

        logger.info(f"Registered user {auth_response.user.id}")
        return RegisterResponse(
            user_id=auth_response.user.id,
            email=auth_response.user.email or register_data.email,
            message="User registered successfully",
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password,
            })
        except Exception as e:
            message = str(e).lower()
            if "invalid" in message or "credentials" in message:
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error(f"Login failed for {login_data.email}: {e}")
            raise HTTPException(status_code=500, detail=f"Login failed: {e}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return TokenResponse(
            access_token=auth_response.session.access_token,
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email,
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Identity behind a bearer token, verified by Supabase Auth and cached briefly."""
        cache_key = token_cache_key(token)
        cached = _AUTH_USER_CACHE.get(cache_key)
        if cached is not None:
            return cached

        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            message = str(e)
            if "JWT" in message or "expired" in message.lower() or "invalid" in message.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            logger.warning(f"Token verification failed: {e}")
            raise HTTPException(status_code=401, detail="Authentication failed")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
        }
        _AUTH_USER_CACHE.set(cache_key, user_data)
        return user_data

    def logout(self, token: str) -> bool:
        _AUTH_USER_CACHE.clear(token_cache_key(token))
        try:
            # Access tokens are stateless JWTs and stay valid until they expire
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Supabase sign_out failed: {e}")
            return False


class ApiKeyService:
    """Provider API keys stored in the api_keys table. Key values are write-only."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_api_keys(self) -> List[ApiKeyResponse]:
        result = self.supabase.table("api_keys")\
            .select(API_KEY_COLUMNS)\
            .order("provider")\
            .execute()
        return [ApiKeyResponse(**row) for row in (result.data or [])]

    def create_api_key(self, data: ApiKeyCreate) -> ApiKeyResponse:
        result = self.supabase.table("api_keys").insert({
            "provider": data.provider,
            "key_value": data.key_value,
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create API key")
        logger.info(f"Stored API key for provider {data.provider}")
        return ApiKeyResponse(**result.data[0])

    def delete_api_key(self, key_id: str) -> None:
        result = self.supabase.table("api_keys").delete().eq("id", key_id).execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="API key not found")
        logger.info(f"Deleted API key {key_id}")

    def get_api_key_for_provider(self, provider: str) -> ApiKeyResponse:
        result = self.supabase.table("api_keys")\
            .select(API_KEY_COLUMNS)\
            .eq("provider", provider)\
            .order("created_at", desc=True)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="API key not found for this provider")
        return ApiKeyResponse(**result.data[0])

