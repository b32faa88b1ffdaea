"""
Cliente del host de imágenes (Cloudinary)
=========================================

Sube y elimina imágenes con el SDK oficial (cloudinary.uploader). Las
llamadas del SDK son bloqueantes: los routers async las ejecutan con
run_in_threadpool.
"""
import io
import logging
from typing import Any, Dict, Optional

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from ..config import settings

logger = logging.getLogger(__name__)


class ImagenHostError(Exception):
    """Fallo de configuración o de comunicación con el host de imágenes"""


class CloudinaryClient:
    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str = "inventario/productos",
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder

    @classmethod
    def desde_settings(cls) -> "CloudinaryClient":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
        )

    @property
    def configurado(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _credenciales(self) -> Dict[str, Any]:
        """Credenciales por llamada; no se toca la configuración global del SDK."""
        if not self.configurado:
            raise ImagenHostError("El servicio de imágenes no está configurado")
        return {"cloud_name": self.cloud_name, "api_key": self.api_key, "api_secret": self.api_secret}

    def subir(self, contenido: bytes, filename: str) -> Dict[str, str]:
        """Sube la imagen a la carpeta configurada. Devuelve {url, public_id}."""
        credenciales = self._credenciales()
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(contenido),
                folder=self.folder,
                resource_type="image",
                filename=filename,
                **credenciales,
            )
        except CloudinaryError as e:
            logger.error("Cloudinary rechazó la subida de %s: %s", filename, e)
            raise ImagenHostError(f"Error del servicio de imágenes: {e}")
        logger.info("Imagen subida: %s (%s bytes)", result.get("public_id"), len(contenido))
        return {"url": result["secure_url"], "public_id": result["public_id"]}

    def eliminar(self, public_id: str) -> str:
        credenciales = self._credenciales()
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type="image", **credenciales)
        except CloudinaryError as e:
            logger.error("Cloudinary rechazó la eliminación de %s: %s", public_id, e)
            raise ImagenHostError(f"Error del servicio de imágenes: {e}")
        estado = result.get("result", "")
        logger.info("Imagen %s eliminada: %s", public_id, estado)
        return estado
