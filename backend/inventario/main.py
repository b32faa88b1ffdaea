import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .db import init_db
from .api.routers import health, auth, categorias, proveedores, productos, movimientos, dashboard, roles, usuarios, permisos, upload
from .domain.errors import InventarioError
from .infrastructure.logging_config import setup_logging
from .config import settings as app_settings

# Configurar logging al iniciar la aplicación
setup_logging()
logger = logging.getLogger(__name__)

# Inicializar BD (no fallar si la conexión no está configurada)
try:
    init_db()
except Exception as e:
    logger.warning("No se pudo inicializar la base de datos: %s. Revise DATABASE_URL.", e)

app = FastAPI(
    title="Inventario - API",
    version="1.0.0",
    description="Gestión de inventario para pequeños negocios: productos, stock, movimientos y usuarios",
    docs_url="/docs" if app_settings.environment != "production" else None,
    redoc_url="/redoc" if app_settings.environment != "production" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
)

# Middleware para agregar headers de seguridad HTTP
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    # Solo HSTS en producción con HTTPS
    if app_settings.environment == "production":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response


# ===== Errores: todas las respuestas de error son {"error": "<mensaje>"} =====

@app.exception_handler(InventarioError)
async def inventario_error_handler(request: Request, exc: InventarioError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Mensajes en español para los errores de validación de pydantic más comunes
MENSAJES_VALIDACION = {
    "missing": "{campo} es un dato obligatorio",
    "string_too_short": "{campo} debe tener al menos {min_length} caracteres",
    "string_too_long": "{campo} debe tener como máximo {max_length} caracteres",
    "string_type": "{campo} debe ser texto",
    "greater_than_equal": "{campo} debe ser mayor o igual a {ge}",
    "greater_than": "{campo} debe ser mayor a {gt}",
    "less_than_equal": "{campo} debe ser menor o igual a {le}",
    "less_than": "{campo} debe ser menor a {lt}",
    "int_parsing": "{campo} debe ser un número entero",
    "int_type": "{campo} debe ser un número entero",
    "int_from_float": "{campo} debe ser un número entero",
    "decimal_parsing": "{campo} debe ser un número",
    "decimal_type": "{campo} debe ser un número",
    "float_parsing": "{campo} debe ser un número",
    "float_type": "{campo} debe ser un número",
    "decimal_max_digits": "{campo} admite como máximo {max_digits} dígitos",
    "decimal_max_places": "{campo} admite como máximo {decimal_places} decimales",
    "bool_parsing": "{campo} debe ser verdadero o falso",
    "bool_type": "{campo} debe ser verdadero o falso",
    "datetime_parsing": "{campo} debe ser una fecha válida",
    "datetime_from_date_parsing": "{campo} debe ser una fecha válida",
    "enum": "{campo} debe ser uno de: {expected}",
    "list_type": "{campo} debe ser una lista",
    "model_attributes_type": "{campo} debe ser un objeto JSON",
    "dict_type": "{campo} debe ser un objeto JSON",
}

ETIQUETAS = {
    "nombre": "El nombre",
    "email": "El email",
    "password": "La contraseña",
    "codigo": "El código",
    "precio": "El precio",
    "costo": "El costo",
    "stock": "El stock",
    "stockMinimo": "El stock mínimo",
    "categoriaId": "La categoría",
    "proveedorId": "El proveedor",
    "productoId": "El producto",
    "cantidad": "La cantidad",
    "rolId": "El rol",
    "permisos": "Los permisos",
}


def primer_error_validacion(exc: RequestValidationError) -> str:
    errores = exc.errors()
    if not errores:
        return "Datos inválidos"
    err = errores[0]
    msg = str(err.get("msg", "Datos inválidos"))
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    if err.get("type") == "json_invalid":
        return "El cuerpo de la petición no es un JSON válido"

    campos = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
    if campos:
        etiqueta = ETIQUETAS.get(campos[-1], f"El campo {campos[-1]}")
    else:
        etiqueta = "El cuerpo de la petición"
    plantilla = MENSAJES_VALIDACION.get(err.get("type", ""))
    if plantilla:
        try:
            return plantilla.format(campo=etiqueta, **(err.get("ctx") or {}))
        except KeyError:
            pass
    return f"{etiqueta}: {msg}"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": primer_error_validacion(exc)})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Error no controlado en %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Error interno del servidor"})


API_PREFIX = "/api"

app.include_router(health.router, prefix=API_PREFIX)
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(categorias.router, prefix=API_PREFIX)
app.include_router(proveedores.router, prefix=API_PREFIX)
app.include_router(productos.router, prefix=API_PREFIX)
app.include_router(movimientos.router, prefix=API_PREFIX)
app.include_router(dashboard.router, prefix=API_PREFIX)
app.include_router(roles.router, prefix=API_PREFIX)
app.include_router(usuarios.router, prefix=API_PREFIX)
app.include_router(permisos.router, prefix=API_PREFIX)
app.include_router(upload.router, prefix=API_PREFIX)
