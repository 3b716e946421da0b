from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from dotenv import load_dotenv
import os

# Load environment variables
load_dotenv()

# Access tokens are issued by the auth provider; we only verify them
DEFAULT_JWT_SECRET = "fallback-secret-key"
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", DEFAULT_JWT_SECRET)
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "sb-access-token")


# JWT token decoding
def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE
        )
    except JWTError:
        return None


# Token creation mirrors the provider's claims; used by fixtures and local tooling
def create_access_token(user_id: str, email: Optional[str] = None, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    to_encode = {
        "sub": user_id,
        "email": email,
        "aud": SUPABASE_JWT_AUDIENCE,
        "role": "authenticated",
        "exp": expire,
    }
    return jwt.encode(to_encode, SUPABASE_JWT_SECRET, algorithm=ALGORITHM)


def uses_fallback_secret() -> bool:
    """True when SUPABASE_JWT_SECRET is unset and tokens are signed with the public default"""
    return SUPABASE_JWT_SECRET == DEFAULT_JWT_SECRET
