import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fee_ledger.api.v1.academic_years.router import router as academic_years_router
from fee_ledger.api.v1.accounts.router import router as accounts_router
from fee_ledger.api.v1.fee_structures.router import router as fee_structures_router
from fee_ledger.api.v1.finance.router import router as finance_router
from fee_ledger.api.v1.payments.router import router as payments_router
from fee_ledger.api.v1.transport_fees.router import router as transport_fees_router
from fee_ledger.core.config import settings


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title="Student Finance Ledger")

    # CORS: the dashboard frontend is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(academic_years_router)
    app.include_router(fee_structures_router)
    app.include_router(accounts_router)
    app.include_router(finance_router)
    app.include_router(payments_router)
    app.include_router(transport_fees_router)

    return app


app = create_app()
