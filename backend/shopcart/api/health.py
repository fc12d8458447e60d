from shopcart.adapters.mock_mailer import get_mailer
from shopcart.db import engine
from fastapi import APIRouter
from sqlalchemy import text

router = APIRouter()


@router.get("/health", tags=["health"])
def health():
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception:
        db_ok = False
    try:
        mailer_ok = get_mailer().health_check()
    except Exception:
        mailer_ok = False

    return {
        "status": "ok" if db_ok and mailer_ok else "degraded",
        "db": db_ok,
        "mailer": mailer_ok,
    }
