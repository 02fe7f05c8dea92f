from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backoffice.core.security import decode_token
from backoffice.db.session import get_session_factory
from backoffice.services.store import build_store

bearer = HTTPBearer()

def store(request: Request):
    cfg = request.app.state.settings
    if (cfg.storage_driver or "").strip().lower() == "memory":
        yield build_store("memory", memory=request.app.state.memory_store)
        return
    s = get_session_factory(cfg.database_url)()
    try:
        yield build_store(cfg.storage_driver, session=s)
    finally:
        s.close()

def current_user(request: Request, creds: HTTPAuthorizationCredentials = Depends(bearer)):
    try:
        return decode_token(creds.credentials, request.app.state.settings)
    except Exception:
        raise HTTPException(status_code=401, detail="invalid_token")

def owner_id(u=Depends(current_user)) -> str:
    sub = u.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="invalid_token")
    return str(sub)
