from fastapi import APIRouter, Depends, Request, Response
from typing import Optional
import logging

from ..schemas.pydantic_schemas import LoginRequest, LogoutRequest, SessionRead
from ..services.data_access import DataAccessFacade
from ..services.session import SessionProvider
from .deps import SESSION_COOKIE, Runtime, get_runtime, get_session

logger = logging.getLogger(__name__)

router = APIRouter()


def _session_read(session: SessionProvider) -> dict:
    data = session.to_dict()
    owner = session.resolve_owner_or_demo()
    data["storage_mode"] = DataAccessFacade.storage_mode(owner).value
    return data


@router.post("/login", response_model=SessionRead)
async def login(body: LoginRequest, request: Request, response: Response,
                session: SessionProvider = Depends(get_session), runtime: Runtime = Depends(get_runtime)):
    session.login(body.email, body.password)
    cookie = request.cookies.get(SESSION_COOKIE)
    session_id = runtime.register(cookie, session)
    if session_id != cookie:
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return _session_read(session)


@router.post("/logout", response_model=SessionRead)
async def logout(request: Request, response: Response, body: Optional[LogoutRequest] = None,
                 session: SessionProvider = Depends(get_session), runtime: Runtime = Depends(get_runtime)):
    session.logout(clear_local=bool(body and body.clear_local))
    runtime.evict(request.cookies.get(SESSION_COOKIE))
    response.delete_cookie(SESSION_COOKIE)
    return _session_read(session)


@router.get("/session", response_model=SessionRead)
async def get_session_state(session: SessionProvider = Depends(get_session)):
    session.refresh_session_if_needed()
    return _session_read(session)


@router.post("/refresh", response_model=SessionRead)
async def refresh(session: SessionProvider = Depends(get_session)):
    session.refresh()
    return _session_read(session)
