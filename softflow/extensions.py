from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# ======================
# Database
# ======================
db = SQLAlchemy()
migrate = Migrate()

# ======================
# Login Manager
# ======================
# The user_loader lives in softflow.auth (it needs the session store).
login_manager = LoginManager()
login_manager.session_protection = "basic"

# ======================
# Rate Limiter
# ======================
# Storage comes from RATELIMIT_STORAGE_URI in the app config (Redis in
# production, in-memory locally).
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],              # No global limits by default
)
