import os

# Banco em memória e chave fixa antes de qualquer import do painel
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "chave-de-teste"
os.environ["LOG_LEVEL"] = "WARNING"
