import secrets
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.templating import Jinja2Templates

from core.status import FILTERS

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
security = HTTPBasic()


def check_auth(request: Request, credentials: HTTPBasicCredentials = Depends(security)):
    state = request.app.state
    if not (secrets.compare_digest(credentials.username.encode(), state.admin_user.encode()) and
            secrets.compare_digest(credentials.password.encode(), state.admin_pass.encode())):
        raise HTTPException(status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Basic"})
    return credentials.username


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request, user_id: str = "", filter: str = "all", auth: str = Depends(check_auth)):
    if filter not in FILTERS:
        raise HTTPException(status_code=400, detail="Unknown filter")
    service = request.app.state.service
    subs = service.subscriptions.list(filter)
    if user_id:
        subs = {uid: sub for uid, sub in subs.items() if user_id in uid}
    return templates.TemplateResponse(request, "dashboard.html", {
        "subs": subs,
        "filter": filter,
        "filters": FILTERS,
        "user_id": user_id,
        "now": service.clock.now(),
    })


@router.get("/admin/stats")
def stats(request: Request, auth: str = Depends(check_auth)):
    subs = request.app.state.service.subscriptions.list("all")
    buckets = {}
    for sub in subs.values():
        day = sub.expires_at.date().isoformat()
        buckets[day] = buckets.get(day, 0) + 1
    labels = sorted(buckets.keys())
    counts = [buckets[k] for k in labels]
    return {"labels": labels, "counts": counts}
