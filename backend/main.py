import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.auth import AuthService
from backend.config import Settings, get_settings
from backend.database import create_db_engine, create_session_factory, get_session, init_db, ping
from backend.errors import (
    DuplicateEmail,
    InvalidCredentials,
    InvalidToken,
    NotFound,
    TaskTrackerError,
    UserNotFound,
)
from backend.export import CONTENT_TYPE, export_filename
from backend.logging_setup import setup_logging
from backend.models import User
from backend.security import PasswordHasher, TokenIssuer
from backend.stores import TaskStore, UserStore
from backend.tasks import TaskService
from schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    TaskOut,
    TaskPayload,
    TaskPriority,
    TaskStatus,
)

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

ERROR_STATUS = {
    NotFound: status.HTTP_404_NOT_FOUND,
    DuplicateEmail: status.HTTP_400_BAD_REQUEST,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    InvalidToken: status.HTTP_401_UNAUTHORIZED,
}


# Dependencies
def get_auth_service(request: Request, session: Session = Depends(get_session)) -> AuthService:
    state = request.app.state
    return AuthService(UserStore(session), state.password_hasher, state.token_issuer)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    try:
        return auth.resolve_user(token)
    except InvalidToken as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_task_service(
    session: Session = Depends(get_session),
    current: User = Depends(get_current_user),
) -> TaskService:
    return TaskService(TaskStore(session, current.id))


# Error handlers
def _field_name(loc) -> str:
    names = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(names) or str(loc[-1])


def _clean_message(msg: str) -> str:
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


async def handle_validation_error(request: Request, exc: RequestValidationError):
    details = {}
    for err in exc.errors():
        details.setdefault(_field_name(err.get("loc", ())), _clean_message(err.get("msg", "")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


async def handle_domain_error(request: Request, exc: TaskTrackerError):
    if isinstance(exc, UserNotFound):
        logger.error("Inconsistent credential store: %s", exc.message)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    code = next((c for cls, c in ERROR_STATUS.items() if isinstance(exc, cls)), 500)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, InvalidToken) else None
    return JSONResponse(status_code=code, content={"error": exc.message}, headers=headers)


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Routes
router = APIRouter()


@router.get("/")
def read_root(request: Request):
    return {"message": f"{request.app.title} running"}


@router.get("/health")
def health(request: Request):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
    }
    try:
        ping(request.app.state.engine)
        response["database"] = "✅ Connected & Working"
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        response["database"] = f"❌ Error: {str(e)[:50]}"
    return response


# Auth Endpoints
@router.post("/api/auth/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED,
             responses={400: {"model": ErrorResponse}})
def register(payload: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.register(payload.name, payload.email, payload.password)
    return AuthResponse(token=result.token, email=result.email, name=result.name)


@router.post("/api/auth/login", response_model=AuthResponse,
             responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}})
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.login(payload.email, payload.password)
    return AuthResponse(token=result.token, email=result.email, name=result.name)


# Task Endpoints
# /search and /export are registered before /{task_id} so they are not read as ids
@router.get("/api/tasks", response_model=List[TaskOut])
def list_tasks(tasks: TaskService = Depends(get_task_service)):
    return tasks.list()


@router.get("/api/tasks/search", response_model=List[TaskOut])
def search_tasks(
    search: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    tasks: TaskService = Depends(get_task_service),
):
    return tasks.search(search, status, priority)


@router.get("/api/tasks/export", response_class=Response,
            responses={200: {"content": {CONTENT_TYPE: {}}}})
def export_tasks(
    search: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    tasks: TaskService = Depends(get_task_service),
):
    content = tasks.export_to_document(search, status, priority)
    return Response(
        content=content,
        media_type=CONTENT_TYPE,
        headers={"Content-Disposition": f"attachment; filename={export_filename()}"},
    )


@router.get("/api/tasks/{task_id}", response_model=TaskOut, responses={404: {"model": ErrorResponse}})
def get_task(task_id: int, tasks: TaskService = Depends(get_task_service)):
    return tasks.get(task_id)


@router.post("/api/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED,
             responses={400: {"model": ErrorResponse}})
def create_task(data: TaskPayload, tasks: TaskService = Depends(get_task_service)):
    return tasks.create(data.title, data.description, data.status, data.priority, data.due_date)


@router.put("/api/tasks/{task_id}", response_model=TaskOut,
            responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
def update_task(task_id: int, data: TaskPayload, tasks: TaskService = Depends(get_task_service)):
    return tasks.update(task_id, data.title, data.description, data.status, data.priority, data.due_date)


@router.delete("/api/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT,
               responses={404: {"model": ErrorResponse}})
def delete_task(task_id: int, tasks: TaskService = Depends(get_task_service)):
    tasks.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# App setup
def create_app(settings: Optional[Settings] = None, configure_logging: bool = True) -> FastAPI:
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, version="1.0.0")

    engine = create_db_engine(settings.database_url)
    init_db(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.password_hasher = PasswordHasher()
    app.state.token_issuer = TokenIssuer(
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(TaskTrackerError, handle_domain_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(router)

    logger.info("%s ready (database=%s)", settings.app_name, engine.url.render_as_string(hide_password=True))
    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
