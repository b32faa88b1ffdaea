#!/usr/bin/env python3
"""
Resetea la base de datos: elimina todas las tablas, las recrea desde los
modelos y vuelve a cargar permisos, roles y el usuario administrador.

Uso: python reset_db.py [--demo] [--yes]
"""
import argparse
import sys
from pathlib import Path

# Añadir el directorio del backend al path
sys.path.insert(0, str(Path(__file__).resolve().parent))

def main(argv=None):
    from inventario.db import SessionLocal, recreate_schema_from_models
    from inventario.application.seed_inicial import seed_inicial

    parser = argparse.ArgumentParser(description="Resetea la base de datos del inventario")
    parser.add_argument("--demo", action="store_true", help="Cargar también el catálogo de ejemplo")
    parser.add_argument("--yes", action="store_true", help="No pedir confirmación")
    args = parser.parse_args(argv)

    print("Reseteando base de datos...")
    print("Se eliminarán todas las tablas y datos.")
    if not args.yes:
        resp = input("Continuar? (s/n): ").strip().lower()
        if resp != "s":
            print("Cancelado.")
            return

    recreate_schema_from_models()

    db = SessionLocal()
    try:
        result = seed_inicial(db, demo=args.demo)
    finally:
        db.close()

    print(f"\nListo. Administrador: {result['admin']}")

if __name__ == "__main__":
    main()
