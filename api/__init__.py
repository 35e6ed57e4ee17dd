"""HTTP surface of the finance engine: envelope, routers and app factory."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    success_response,
    error_response,
    ErrorCodes,
)
from api.app import build_services, create_app, create_default_app
