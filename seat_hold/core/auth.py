import hmac
from typing import Optional
from fastapi import Depends, Header

from seat_hold.core.config import settings
from seat_hold.exceptions import UnauthorizedException
from seat_hold.services.seat_view import ViewerContext


# Tokens are verified by the gateway in front of this service, which forwards
# the caller's id in X-User-Id.

async def get_optional_user_id(user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> Optional[str]:
    return user_id or None


async def get_current_user_id(user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> str:
    if not user_id:
        raise UnauthorizedException()
    return user_id


async def require_order_service(service_key: Optional[str] = Header(default=None, alias="X-Order-Service-Key")) -> None:
    if not service_key or not hmac.compare_digest(service_key, settings.ORDER_SERVICE_KEY):
        raise UnauthorizedException("Order service credentials required")


async def get_viewer_context(user_id: Optional[str] = Depends(get_optional_user_id)) -> ViewerContext:
    return ViewerContext(user_id=user_id)


async def require_internal_service(service_key: Optional[str] = Header(default=None, alias="X-Internal-Service-Key")) -> None:
    if not service_key or not hmac.compare_digest(service_key, settings.INTERNAL_SERVICE_KEY):
        raise UnauthorizedException("Internal service credentials required")
