"""Rate limiting configuration using slowapi.

The sign-in endpoints decorate themselves with ``@limiter.limit(...)``;
the limiter is wired into the FastAPI app in main.py.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

SIGN_IN_LIMIT = "5/minute"

limiter = Limiter(key_func=get_remote_address)
