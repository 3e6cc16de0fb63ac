# file: shopflow/server/api/deps.py
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException

from shopflow.core.errors import ErrorKind, ShopflowError
from shopflow.server.settings.config import settings
from shopflow.services.ai_client import AIClient
from shopflow.services.session_cache import InspectionSessionCache


# ==============================
# API KEY
# ==============================

API_KEY_HEADER_NAME = "X-SHOPFLOW-API-KEY"


def verify_api_key(x_shopflow_api_key: str = Header(None)) -> None:
    if x_shopflow_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


# ==============================
# CURRENT USER
# ==============================

@dataclass
class CurrentUser:
    id: Optional[str]
    role: Optional[str] = None


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> CurrentUser:
    # opaque: whoever sits in front of the API resolved the user already
    return CurrentUser(id=(x_user_id or "").strip() or None, role=(x_user_role or "").strip() or None)


# ==============================
# SHARED SERVICES
# ==============================

@lru_cache
def get_ai_client() -> AIClient:
    return AIClient()


@lru_cache
def get_session_cache() -> InspectionSessionCache:
    return InspectionSessionCache(
        ttl_seconds=settings.session_cache_ttl_seconds,
        max_entries=settings.session_cache_max_entries,
    )


# ==============================
# ERRORS
# ==============================

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DEPENDENCY: 502,
}


def http_status_for(err: ShopflowError) -> int:
    return STATUS_BY_KIND.get(err.kind, 500)
