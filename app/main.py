import logging
import secrets
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from admin.dashboard import router as admin_router
from app import schemas
from core.schemas import UserInfo
from core.status import FILTERS
from core.storage import StorageError

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

ENDPOINTS = [
    ("GET", "/api/subscription/{user_id}"),
    ("GET", "/api/subscriptions"),
    ("GET", "/api/users/{user_id}"),
    ("POST", "/api/log"),
    ("GET", "/api/logs"),
    ("GET", "/api/health"),
]


def check_api_secret(request: Request, x_api_secret: Optional[str] = Header(None)):
    expected = request.app.state.api_secret
    if not x_api_secret or not secrets.compare_digest(x_api_secret.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_service(request: Request):
    return request.app.state.service


router = APIRouter(prefix="/api", dependencies=[Depends(check_api_secret)])
public = APIRouter()


@router.get("/subscription/{user_id}", response_model=schemas.SubscriptionStatus)
def subscription_status(user_id: str, service=Depends(get_service)):
    info = service.get_user_info(user_id)
    logger.info(f"📡 API: запрос подписки для {user_id}, banned={info.banned}")
    return schemas.SubscriptionStatus(
        user_id=user_id,
        subscription=info.subscription,
        banned=info.banned,
        ban_info=info.ban_info,
    )


@router.get("/subscriptions", response_model=schemas.SubscriptionList)
def list_subscriptions(filter: str = "all", service=Depends(get_service)):
    if filter not in FILTERS:
        raise HTTPException(status_code=400, detail=f"Unknown filter, expected one of: {', '.join(FILTERS)}")
    subs = service.subscriptions.list(filter)
    return schemas.SubscriptionList(subscriptions=subs, count=len(subs))


@router.get("/users/{user_id}", response_model=UserInfo)
def user_info(user_id: str, service=Depends(get_service)):
    return service.get_user_info(user_id)


@router.post("/log", response_model=schemas.LogCreated)
async def add_log(payload: schemas.LogCreate, request: Request, service=Depends(get_service)):
    log = await run_in_threadpool(service.logs.add_log, payload.event_type, payload.user_id, payload.data)
    await request.app.state.notifier.log(payload.event_type, payload.user_id, payload.data)
    return schemas.LogCreated(log=log)


@router.get("/logs", response_model=schemas.LogList)
def get_logs(limit: int = Query(50, ge=1, le=10000), service=Depends(get_service)):
    logs = service.logs.get_logs(limit)
    return schemas.LogList(logs=logs, count=len(logs))


@public.get("/api/health", response_model=schemas.Health)
def health(request: Request):
    return schemas.Health(uptime=time.monotonic() - request.app.state.started_at)


@public.get("/", response_class=HTMLResponse)
def status_page(request: Request, service=Depends(get_service)):
    uptime = int(time.monotonic() - request.app.state.started_at)
    with service.store.lock:
        context = {
            "uptime": f"{uptime // 3600}h {uptime % 3600 // 60}m {uptime % 60}s",
            "subscriptions": len(service.subscriptions.list("all")),
            "active": len(service.subscriptions.list("active")),
            "banned": sum(1 for profile in service.store.state.users.users.values() if profile.banned),
            "logs": len(service.store.state.logs.logs),
            "endpoints": ENDPOINTS,
        }
    return templates.TemplateResponse(request, "status.html", context)


async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"❌ Ошибка хранилища: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Storage failure"})


def create_app(service, notifier, api_secret, admin_user="admin", admin_pass="admin",
               cors_origins=("*",), lifespan=None):
    app = FastAPI(title="Access Ledger API", lifespan=lifespan)
    app.state.service = service
    app.state.notifier = notifier
    app.state.api_secret = api_secret
    app.state.admin_user = admin_user
    app.state.admin_pass = admin_pass
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StorageError, storage_error_handler)
    app.include_router(router)
    app.include_router(public)
    app.include_router(admin_router)
    return app
