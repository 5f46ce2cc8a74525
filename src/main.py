import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from contextlib import asynccontextmanager

from config import (
    CORS_ORIGINS, LOG_LEVEL, SEED_ON_STARTUP, SEED_SUPPORT_USERNAME, SEED_SUPPORT_PASSWORD
)
from create_tables import crear_tablas
from database import SessionLocal
from errors import AppError

from modules.auth.services.auth_service import AuthService
from modules.directory.models import Sector, User, UserRole
from modules.auth.controllers.auth_controller import router as auth_router
from modules.directory.controllers.user_controller import router as user_router
from modules.directory.controllers.sector_controller import router as sector_router
from modules.signatures.controllers.signature_controller import router as signature_router
from modules.signatures.controllers.attachment_controller import router as attachment_router
from modules.workflow.controllers.request_controller import router as request_router
from modules.chat.controllers.chat_controller import router as chat_router
from modules.notifications.controllers.notification_controller import router as notification_router
from modules.exports.controllers.export_controller import router as export_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_SECTORS = [
    ("Suporte TI", "Setor de suporte técnico"),
    ("Administração", "Setor administrativo"),
    ("Financeiro", "Setor financeiro"),
]

@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup logic ---
    logger.info("Iniciando aplicação...")
    crear_tablas()
    if SEED_ON_STARTUP:
        seed_initial_data()
    yield
    # --- Shutdown logic ---
    logger.info("Aplicação encerrada")

def seed_initial_data():
    """Crea los sectores base y el usuario de soporte si no existen."""
    with SessionLocal() as session:
        for name, description in DEFAULT_SECTORS:
            if not session.query(Sector).filter(Sector.name == name).first():
                session.add(Sector(name=name, description=description))
        session.commit()

        if session.query(User).filter(User.username == SEED_SUPPORT_USERNAME).first():
            logger.info("Dados iniciais já existem")
            return

        support_sector = session.query(Sector).filter(Sector.name == DEFAULT_SECTORS[0][0]).first()
        support = User(
            username=SEED_SUPPORT_USERNAME,
            name="Suporte",
            password_hash=AuthService.get_password_hash(SEED_SUPPORT_PASSWORD),
            role=UserRole.SUPPORT,
            sector_id=support_sector.id,
            is_first_login=True,
        )
        session.add(support)
        session.commit()
        logger.info("Usuário de suporte criado: %s", SEED_SUPPORT_USERNAME)

app = FastAPI(
    title="Sistema de Assinaturas",
    description="API para registro de assinaturas com fluxo de aprovação de solicitações",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=[
        "Accept",
        "Accept-Language",
        "Content-Language",
        "Content-Type",
        "Authorization",
        "X-Requested-With",
        "Origin",
    ],
    max_age=86400,
)

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})

@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": f"Campos inválidos ou ausentes: {', '.join(fields)}"},
    )

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Erro interno do servidor"})

# Routers
app.include_router(auth_router)
app.include_router(sector_router)
app.include_router(user_router)
app.include_router(signature_router)
app.include_router(attachment_router)
app.include_router(request_router)
app.include_router(chat_router)
app.include_router(notification_router, prefix="/notifications", tags=["notifications"])
app.include_router(export_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
