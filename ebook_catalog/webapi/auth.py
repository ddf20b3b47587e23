"""Shared-secret gate for the catalog endpoints."""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, status

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from .dependencies import get_settings_dependency

logger = log_mgr.get_logger().getChild("webapi.auth")

UNAUTHORIZED_MESSAGE = "Unauthorized: missing or invalid API token."


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def _presented_token(
    api_key: Optional[str], authorization: Optional[str], query_token: Optional[str]
) -> Optional[str]:
    for candidate in (api_key, _extract_bearer_token(authorization), query_token):
        if candidate is not None:
            return candidate
    return None


def require_api_token(
    x_api_key: Optional[str] = Header(default=None, alias="X-Api-Key"),
    authorization: Optional[str] = Header(default=None),
    api_token: Optional[str] = Query(default=None),
    settings: cfg.CatalogSettings = Depends(get_settings_dependency),
) -> None:
    """Reject the request unless it presents the configured API token.

    The token is read from ``X-Api-Key``, then a ``Bearer`` authorization
    header, then the ``api_token`` query parameter. An empty configured
    token leaves the catalog open.
    """

    expected = settings.api_token_value()
    if not expected:
        return
    presented = _presented_token(x_api_key, authorization, api_token)
    if presented is None or not hmac.compare_digest(
        presented.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.info(
            "Rejected unauthenticated request",
            extra={"event": "webapi.auth.rejected", "status": status.HTTP_401_UNAUTHORIZED},
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE)


__all__ = ["UNAUTHORIZED_MESSAGE", "require_api_token"]
