import logging

from fastapi import Depends, FastAPI
from sqlalchemy.orm import Session

from painel.auth.routes import router as auth_router
from painel.auth.security import require_access
from painel.config import LOG_LEVEL
from painel.database import Base, SessionLocal, engine, get_db
from painel.errors import register_exception_handlers
from painel.finance.aggregator import aggregate_global_totals, aggregate_window
from painel.finance.windows import resolve_window
from painel.realtime import feed
from painel.routes.admin import router as admin_router
from painel.routes.content import router as content_router
from painel.routes.finance import router as finance_router
from painel.routes.personal import router as personal_router
from painel.routes.plans import router as plans_router
from painel.routes.projects import router as projects_router
from painel.routes.realtime import router as realtime_router
from painel.users.plans import ensure_default_plans

# Importante importar os modelos para que o Base.metadata os reconheça
from painel.models.user import User, UserRole  # noqa: F401
from painel.models.subscription import Subscription, SubscriptionPlan  # noqa: F401
from painel.models.project import Project, ProjectNote, Task  # noqa: F401
from painel.models.finance import FinancialHistory, Investment, Revenue  # noqa: F401
from painel.models.personal import PendingPayment, PendingReceipt, PersonalExpense, PersonalIncome  # noqa: F401
from painel.models.content import GlobalTask, Idea, Learning, PersonalNote  # noqa: F401

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("painel")

app = FastAPI(title="Painel de Projetos")

Base.metadata.create_all(bind=engine)
with SessionLocal() as _db:
    ensure_default_plans(_db)

feed.attach()
register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(plans_router)
app.include_router(admin_router)
app.include_router(projects_router)
app.include_router(finance_router)
app.include_router(personal_router)
app.include_router(content_router)
app.include_router(realtime_router)


@app.get("/")
def home(db: Session = Depends(get_db), user: User = Depends(require_access)):
    totals = aggregate_global_totals(db, user.id)
    today = aggregate_window(db, user.id, resolve_window("today"))
    return {
        "user": {"id": user.id, "nome": user.nome, "email": user.email, "is_admin": user.is_admin},
        "totals": {
            "total_investment": totals.total_investment,
            "total_revenue": totals.total_revenue,
            "net_profit": totals.net_profit,
            "roi": totals.roi,
        },
        "today": {
            "total_investment": today.total_investment,
            "total_revenue": today.total_revenue,
            "total_profit": today.total_profit,
        },
    }
