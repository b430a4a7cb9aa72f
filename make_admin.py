# make_admin.py
import sys

from sqlalchemy import select

from storefront.auth import get_password_hash
from storefront.config import Settings
from storefront.database import Database
from storefront.models import Admin

ROLES = ("superadmin", "admin", "editor")


def main(argv):
    if len(argv) < 4:
        print("Uso: python make_admin.py <usuario> <email> <contraseña> [rol]")
        return 1
    username, email, password = argv[1].strip(), argv[2].strip().lower(), argv[3]
    role = argv[4] if len(argv) > 4 else "admin"
    if role not in ROLES:
        print("Rol inválido:", role, "(opciones:", ", ".join(ROLES) + ")")
        return 2
    if len(password) < 6:
        print("La contraseña debe tener al menos 6 caracteres")
        return 2

    settings = Settings.from_env()
    database = Database(settings)
    database.create_all()
    try:
        with database.session() as db:
            admin = db.scalar(select(Admin).where(Admin.username == username))
            if admin is None:
                admin = Admin(username=username, email=email)
                db.add(admin)
            admin.email = email
            admin.role = role
            admin.is_active = True
            admin.password_hash = get_password_hash(password)
            db.commit()
            print("Administrador listo:", username, f"({role})", "en", settings.database_url.split("@")[-1])
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
