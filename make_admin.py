import sys

from painel.database import Base, SessionLocal, engine
from painel.models import content, finance, personal, project, subscription  # noqa: F401
from painel.models.user import User, UserRole


def grant_admin(db, email: str) -> bool:
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        return False
    if not user.is_admin:
        db.add(UserRole(user_id=user.id, role="admin"))
        db.commit()
    return True


def main() -> int:
    if len(sys.argv) != 2:
        print("Uso: python make_admin.py <email>")
        return 2

    email = sys.argv[1].strip().lower()
    if not email:
        print("Email inválido.")
        return 2

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        if not grant_admin(db, email):
            print("Usuário não encontrado. Cadastre-se primeiro e rode novamente.")
            return 1

    print(f"OK: `{email}` agora é admin.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
