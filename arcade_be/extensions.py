from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Bound to the app in create_app(); routes decorate with limiter.limit(...)
limiter = Limiter(key_func=get_remote_address)
