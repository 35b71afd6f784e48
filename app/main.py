import logging

from fastapi import FastAPI
from app.api.tax_routes import router as tax_router
from app.api.invoice_routes import router as invoice_router
from app.core.config import settings

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(title=settings.SERVICE_NAME, docs_url="/docs")


@app.get("/")
def root():
    return {"message": "Pricing Service Running 🚀"}


app.include_router(tax_router)
app.include_router(invoice_router)
