"""Rate limiter shared by main.py and the routers.

Kept in its own module so routers can import the limiter without importing
main.py.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

COMPLAINT_CREATE_RATE = "10/minute"
UPLOAD_RATE = "20/minute"
WEBHOOK_RATE = "120/minute"

limiter = Limiter(key_func=get_remote_address)
