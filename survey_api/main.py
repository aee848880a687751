# survey_api/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from survey_api.api.v1.endpoints import (
    admin_analytics,
    admin_assignments,
    admin_audit,
    admin_companies,
    admin_departments,
    admin_surveys,
    admin_users,
    assignments,
    auth,
    catalogs,
    comments,
    health,
    responses,
    surveys,
)
from survey_api.core.config import settings
from survey_api.core.errors import ServiceError
from survey_api.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

API_V1_PREFIX = "/api/v1"

app = FastAPI(
    title=settings.APP_NAME,
    description="API para encuestas de empleados y su analítica",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------- errores -------------------- #

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "kind": exc.kind})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # cuerpo mal formado: 400 con la misma forma que los errores de servicio
    return JSONResponse(
        status_code=400,
        content={"detail": "Solicitud inválida", "kind": "validation_error", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Error interno", "kind": "internal_error"})


# -------------------- routers -------------------- #

app.include_router(health.router,      prefix=API_V1_PREFIX)
app.include_router(auth.router,        prefix=API_V1_PREFIX)
app.include_router(catalogs.router,    prefix=API_V1_PREFIX)
app.include_router(surveys.router,     prefix=API_V1_PREFIX)
app.include_router(responses.router,   prefix=API_V1_PREFIX)
app.include_router(assignments.router, prefix=API_V1_PREFIX)
app.include_router(comments.router,    prefix=API_V1_PREFIX)

# Admin: monta AQUÍ el prefijo /api/v1/admin
app.include_router(admin_surveys.router,     prefix=f"{API_V1_PREFIX}/admin")
app.include_router(admin_audit.router,       prefix=f"{API_V1_PREFIX}/admin")
app.include_router(admin_analytics.router,   prefix=f"{API_V1_PREFIX}/admin")
app.include_router(admin_departments.router, prefix=f"{API_V1_PREFIX}/admin")
app.include_router(admin_users.router,       prefix=f"{API_V1_PREFIX}/admin")
app.include_router(admin_assignments.router, prefix=f"{API_V1_PREFIX}/admin")
app.include_router(admin_companies.router,   prefix=f"{API_V1_PREFIX}/admin")


@app.get("/")
def root():
    return {
        "message": "Bienvenido a la API de Encuestas de Empleados",
        "version": "1.0.0",
        "docs": "/docs",
        "api_v1": API_V1_PREFIX,
    }
