"""
Profile API endpoints.

Thin handlers: validate the request, call the resolver or the ranker, and
map domain errors to HTTP status codes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from api.dependencies import get_app_settings, get_profile_resolver, get_search_ranker
from modules.directory.exceptions import (
    AuthExchangeError,
    ExternalApiError,
    RateLimitExceededError,
)
from shared.config import Settings
from shared.exceptions import ConfigError, NotFoundError

from .interfaces import IProfileResolver, ISearchRanker
from .models import ProfileRecord, SuggestionRecord

logger = logging.getLogger(__name__)

router = APIRouter()

LOGIN_PATTERN = r"^[A-Za-z0-9_-]{1,20}$"
MAX_SEARCH_LIMIT = 50


@router.get("/search", response_model=list[SuggestionRecord])
async def search_suggestions(
    q: str = Query(..., max_length=100, description="Partial login or name"),
    limit: Optional[int] = Query(
        default=None, ge=1, le=MAX_SEARCH_LIMIT, description="Maximum suggestions"
    ),
    ranker: ISearchRanker = Depends(get_search_ranker),
    settings: Settings = Depends(get_app_settings),
) -> list[SuggestionRecord]:
    """
    Suggest users whose login or display name matches ``q``.

    Login prefix matches come first, then display-name prefix matches,
    then substring matches.
    """
    term = q.strip()
    if not term:
        raise HTTPException(status_code=400, detail="Missing or empty query parameter 'q'.")
    return await ranker.suggest(term, limit or settings.search_default_limit)


@router.get("/{login}", response_model=ProfileRecord)
async def get_profile(
    login: str = Path(..., pattern=LOGIN_PATTERN),
    refresh: bool = Query(default=False, description="Bypass the cache"),
    resolver: IProfileResolver = Depends(get_profile_resolver),
) -> ProfileRecord:
    """
    Get a user's profile, served from the cache when possible.
    """
    try:
        return await resolver.resolve(login, force_refresh=refresh)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except RateLimitExceededError:
        raise HTTPException(
            status_code=503,
            detail="Directory is rate limiting requests, try again shortly",
        )
    except (ExternalApiError, AuthExchangeError) as e:
        logger.error(f"Directory failure resolving {login}: {e}")
        raise HTTPException(status_code=502, detail="Failed to retrieve user data.")
    except ConfigError as e:
        logger.error(f"Configuration error resolving {login}: {e}")
        raise HTTPException(status_code=500, detail="Server configuration error.")
