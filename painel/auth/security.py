import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from painel.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from painel.database import get_db
from painel.errors import DataUnavailable, Unauthorized
from painel.models.user import User
from painel.users.access import LOGIN_PAGE, AccessDecision, evaluate_access

logger = logging.getLogger(__name__)

# pbkdf2_sha256 não tem o problema de compatibilidade do bcrypt no Windows
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str):
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str):
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def user_from_token(token: str | None, db: Session) -> User | None:
    if not token:
        return None

    try:
        payload = jwt.decode(token.replace("Bearer ", ""), SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None

    email = payload.get("sub")
    if email is None:
        return None
    return db.query(User).filter(User.email == email).first()


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> User | None:
    return user_from_token(request.cookies.get("access_token"), db)


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise Unauthorized("Faça login para continuar.", LOGIN_PAGE)
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso restrito ao admin")
    return user


def get_access_decision(
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> AccessDecision:
    return evaluate_access(db, user)


def require_access(
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> User:
    """Dependência das rotas protegidas: sem assinatura válida, redireciona."""
    try:
        decision = evaluate_access(db, user)
    except DataUnavailable:
        # Nunca liberar acesso quando a verificação falha
        logger.warning("Acesso negado: verificação de assinatura indisponível")
        raise Unauthorized("Não foi possível verificar sua assinatura.", LOGIN_PAGE)

    if not decision.granted:
        raise Unauthorized("Acesso não liberado.", decision.redirect_to)
    return user
