from .settings import *
import os
from dotenv import load_dotenv
load_dotenv(os.path.join(BASE_DIR, '..', '.env'))

DEBUG = False
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", SECRET_KEY)
SIMPLE_JWT["SIGNING_KEY"] = SECRET_KEY
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(',')
CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000").split(',')

DATABASES["default"].update({
    "ENGINE": os.getenv("DATABASE_ENGINE", DATABASES["default"]["ENGINE"]),
    "NAME": os.getenv("DATABASE_NAME", DATABASES["default"]["NAME"]),
    "USER": os.getenv("DATABASE_USER", ""),
    "PASSWORD": os.getenv("DATABASE_PASSWORD", ""),
    "HOST": os.getenv("DATABASE_HOST", ""),
    "PORT": os.getenv("DATABASE_PORT", ""),
})
