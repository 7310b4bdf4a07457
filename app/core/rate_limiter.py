from slowapi import Limiter
from slowapi.util import get_remote_address

READ_LIMIT = "100/minute"
WRITE_LIMIT = "60/minute"

limiter = Limiter(key_func=get_remote_address)
