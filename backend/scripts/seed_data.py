#!/usr/bin/env python3
"""
Script para cargar los datos iniciales del inventario.

Uso:
  cd backend && python -m scripts.seed_data
  cd backend && python -m scripts.seed_data --demo

Crea:
- Catálogo de permisos y roles ADMIN / ALMACENERO
- Usuario administrador (ADMIN_EMAIL / ADMIN_PASSWORD, por defecto admin@abasto.com / admin123)
- Con --demo: categorías, proveedores y productos de ejemplo (incluye BEB001)
"""
import argparse
import sys
from pathlib import Path

# Agregar backend al path
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from inventario.config import settings
from inventario.db import SessionLocal, init_db
from inventario.application.seed_inicial import seed_inicial


def main(argv=None):
    parser = argparse.ArgumentParser(description="Carga los datos iniciales del inventario")
    parser.add_argument("--demo", action="store_true", help="Incluir catálogo de ejemplo")
    args = parser.parse_args(argv)

    print("🌱 Inventario - Carga de datos iniciales")
    print("=" * 50)

    init_db()
    db = SessionLocal()
    try:
        result = seed_inicial(db, demo=args.demo)
        print(f"   ✓ Permisos en catálogo: {result['permisos']}")
        print("   ✓ Roles ADMIN y ALMACENERO")
        print(f"   ✓ Administrador: {result['admin']}")
        if args.demo:
            print(f"   ✓ Productos demo creados: {result['productos_demo']}")

        print("\n✅ Datos iniciales listos.")
        if result["admin"] == settings.admin_email.strip().lower() and settings.admin_password == "admin123":
            print("   ⚠ Cambia la contraseña del administrador por defecto.")
        return 0

    except Exception as e:
        print(f"\n❌ Error: {e}")
        import traceback
        traceback.print_exc()
        db.rollback()
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
