import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD", "root")
DB_HOST = os.getenv("DB_HOST", "db")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME", "signatures-db")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-here")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24"))
REMEMBER_ME_EXPIRE_DAYS = int(os.getenv("REMEMBER_ME_EXPIRE_DAYS", "30"))
AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "auth-token")
# 0 disables the token cache
AUTH_CACHE_TTL_SECONDS = int(os.getenv("AUTH_CACHE_TTL_SECONDS", "300"))

MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "minio:9000")
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "minioadmin")
MINIO_BUCKET = os.getenv("MINIO_BUCKET", "attachments")
MINIO_SECURE = _env_bool("MINIO_SECURE", "false")

MAX_ATTACHMENT_SIZE = int(os.getenv("MAX_ATTACHMENT_SIZE", str(10 * 1024 * 1024)))

ALLOWED_SIGNATURE_TOKENS = [
    t.strip() for t in os.getenv("ALLOWED_SIGNATURE_TOKENS", "Prefeito,Municipio").split(",") if t.strip()
]

# Owners may update/delete their own signatures without going through a request
ALLOW_OWNER_DIRECT_UPDATE = _env_bool("ALLOW_OWNER_DIRECT_UPDATE", "true")
ALLOW_OWNER_DIRECT_DELETE = _env_bool("ALLOW_OWNER_DIRECT_DELETE", "true")

SEED_ON_STARTUP = _env_bool("SEED_ON_STARTUP", "true")
SEED_SUPPORT_USERNAME = os.getenv("SEED_SUPPORT_USERNAME", "suporte")
SEED_SUPPORT_PASSWORD = os.getenv("SEED_SUPPORT_PASSWORD", "suporte123")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
