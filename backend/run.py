#!/usr/bin/env python3
"""
Arranca la API con uvicorn en HOST:PORT (por defecto 0.0.0.0:3000).

Uso: cd backend && python run.py
"""
import uvicorn

from inventario.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "inventario.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
