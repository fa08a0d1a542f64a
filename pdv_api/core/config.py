import os
from dotenv import load_dotenv

# Carrega o .env da raiz do projeto
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./pdv.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "America/Sao_Paulo").strip() or "America/Sao_Paulo"

# URLs públicas (links de recuperação de senha)
PUBLIC_APP_URL = os.getenv("PUBLIC_APP_URL", "http://localhost:5173").strip().rstrip("/")
PUBLIC_API_URL = os.getenv("PUBLIC_API_URL", "http://localhost:8000").strip().rstrip("/")

# CORS
# Sem origens configuradas o front (SPA com bearer token, sem cookies) é aceito de qualquer origem.
_cors_env = os.getenv("ORIGENS_CORS", os.getenv("CORS_ORIGINS", ""))
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip()]
if not CORS_ORIGINS:
    CORS_ORIGINS = ["*"]
CORS_ALLOW_CREDENTIALS = "*" not in CORS_ORIGINS

FUNCTION_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

# Auth (JWT emitido pelo provedor de identidade)
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET", "CHANGE_ME_SUPER_SECRET")
AUTH_JWT_ALGORITHM = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated").strip() or None
AUTH_JWT_EXPIRE_MINUTES = int(os.getenv("AUTH_JWT_EXPIRE_MINUTES", "60"))

RECOVERY_TOKEN_TTL_MINUTES = int(os.getenv("RECOVERY_TOKEN_TTL_MINUTES", "60"))
