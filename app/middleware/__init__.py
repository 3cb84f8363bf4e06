# Middleware package for Streaker API

from .request_id import RequestIDMiddleware
from .rate_limit import limiter, rate_limit_api_read, rate_limit_api_write

__all__ = [
    "RequestIDMiddleware",
    "limiter",
    "rate_limit_api_read",
    "rate_limit_api_write"
]
