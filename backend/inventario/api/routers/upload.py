"""
Subida de imágenes
==================
Proxy hacia el host de imágenes: valida el archivo (tipo, tamaño y contenido)
y lo sube a la carpeta de productos. Devuelve la URL pública y el public_id.
"""
import io
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from PIL import Image, UnidentifiedImageError

from ...application.dtos import ImagenEliminarIn, ImagenSubidaOut, MensajeOut
from ...config import settings
from ...infrastructure.image_host import CloudinaryClient, ImagenHostError
from ...security.auth import get_token_usuario

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"], dependencies=[Depends(get_token_usuario)])


def get_image_host() -> CloudinaryClient:
    return CloudinaryClient.desde_settings()


def _validar_imagen(contenido: bytes) -> None:
    try:
        img = Image.open(io.BytesIO(contenido))
        img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise HTTPException(400, f"Archivo de imagen inválido: {e}")


@router.post("/imagen", response_model=ImagenSubidaOut)
async def upload_imagen(
    imagen: UploadFile = File(None),
    host: CloudinaryClient = Depends(get_image_host),
):
    if imagen is None:
        raise HTTPException(400, "No se proporcionó ninguna imagen")
    if not (imagen.content_type or "").startswith("image/"):
        raise HTTPException(400, "Solo se permiten archivos de imagen")

    # Leer como máximo un byte más que el límite
    max_size_bytes = settings.max_upload_size_mb * 1024 * 1024
    contenido = await imagen.read(max_size_bytes + 1)
    if len(contenido) > max_size_bytes:
        raise HTTPException(400, f"Archivo demasiado grande. Máximo: {settings.max_upload_size_mb}MB")
    await run_in_threadpool(_validar_imagen, contenido)

    try:
        return await run_in_threadpool(host.subir, contenido, imagen.filename or "imagen")
    except ImagenHostError as e:
        logger.error("Error al subir imagen: %s", e)
        raise HTTPException(500, str(e))


@router.delete("/imagen", response_model=MensajeOut)
async def delete_imagen(
    payload: ImagenEliminarIn,
    host: CloudinaryClient = Depends(get_image_host),
):
    if not payload.public_id:
        raise HTTPException(400, "Se requiere public_id")
    try:
        await run_in_threadpool(host.eliminar, payload.public_id)
    except ImagenHostError as e:
        logger.error("Error al eliminar imagen: %s", e)
        raise HTTPException(500, str(e))
    return {"message": "Imagen eliminada exitosamente"}
