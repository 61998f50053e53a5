from fastapi import Depends, HTTPException, Request

from contactdesk.sessions import ServerSession


def get_web_session(request: Request) -> ServerSession:
    session = getattr(request.state, "session", None)
    if session is None:
        raise RuntimeError("SessionMiddleware is not installed")
    return session


async def get_current_admin(
    web_session: ServerSession = Depends(get_web_session),
) -> dict:
    user = web_session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
