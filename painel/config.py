# painel/config.py
import os
from dotenv import load_dotenv

load_dotenv()

# Banco de dados
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./painel.db")

# Autenticação
SECRET_KEY = os.getenv("SECRET_KEY", "troque_esta_chave_em_producao")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Assinaturas
TRIAL_DAYS = int(os.getenv("TRIAL_DAYS", "7"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
