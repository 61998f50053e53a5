import bcrypt
from jose import JWTError, jwt

_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Malformed hash in the users table.
        return False


def sign_session_id(sid: str, secret: str) -> str:
    """Wrap a session id in a signed token so the cookie can't be forged."""
    return jwt.encode({"sid": sid}, secret, algorithm=_ALGORITHM)


def unsign_session_id(token: str, secret: str) -> str | None:
    """Return the session id carried by ``token``, or None if it was tampered with."""
    try:
        payload = jwt.decode(token, secret, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) and sid else None
