import logging
import re

from fastapi import APIRouter, Depends, Form, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from painel.auth.security import create_access_token, get_password_hash, verify_password
from painel.database import get_db
from painel.errors import ValidationError
from painel.models.user import User
from painel.users.plans import start_trial

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Autenticação"])

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_RE = re.compile(r"^\+?[1-9]\d{0,14}$")


@router.post("/signup")
def signup(
    nome: str = Form(""),
    email: str = Form(...),
    telefone: str = Form(""),
    password: str = Form(...),
    password_confirm: str = Form(...),
    db: Session = Depends(get_db),
):
    nome_clean = nome.strip()
    email_clean = str(email).strip().lower()
    telefone_clean = telefone.strip()

    if not EMAIL_RE.match(email_clean) or len(email_clean) > 255:
        raise ValidationError("Formato de email inválido")
    if len(nome_clean) > 100:
        raise ValidationError("Nome deve ter no máximo 100 caracteres")
    if telefone_clean and not PHONE_RE.match(telefone_clean):
        raise ValidationError("Formato de telefone inválido")
    if len(password) < 6:
        raise ValidationError("A senha deve ter pelo menos 6 caracteres")
    if len(password) > 100:
        raise ValidationError("A senha deve ter no máximo 100 caracteres")
    if password != password_confirm:
        raise ValidationError("As senhas não conferem.")

    # Verifica se usuário já existe
    if db.query(User).filter(User.email == email_clean).first():
        raise ValidationError("Email já cadastrado.")

    novo_usuario = User(
        nome=nome_clean or None,
        email=email_clean,
        telefone=telefone_clean or None,
        hashed_password=get_password_hash(password),
    )
    db.add(novo_usuario)
    # Toda conta nova começa com um período de teste
    db.add(start_trial(novo_usuario))
    db.commit()
    logger.info("Novo usuário cadastrado: %s", email_clean)
    return RedirectResponse(url="/auth/login-page", status_code=status.HTTP_302_FOUND)


@router.post("/login")
def login(email: str = Form(...), password: str = Form(...), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Email ou senha incorretos")

    access_token = create_access_token(data={"sub": user.email})

    # O token vai num cookie httponly para o navegador enviar sozinho
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    response.set_cookie(key="access_token", value=f"Bearer {access_token}", httponly=True)
    return response


@router.post("/logout")
def logout():
    response = RedirectResponse(url="/auth/login-page", status_code=status.HTTP_302_FOUND)
    response.delete_cookie("access_token")
    return response


@router.get("/signup-page")
def signup_page():
    return {"page": "signup", "fields": ["nome", "email", "telefone", "password", "password_confirm"]}


@router.get("/login-page")
def login_page():
    return {"page": "login", "fields": ["email", "password"]}
