from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from salepdv.routes import auth as auth_routes
from salepdv.routes import tables as tables_routes
from salepdv.routes import products as products_routes
from salepdv.routes import orders as orders_routes
from salepdv.routes import users as users_routes
from salepdv.routes import stats as stats_routes
from salepdv.db import session as db_session
from salepdv.core.config import settings
from salepdv.core.errors import LifecycleError
import logging
import threading
from collections import defaultdict

app = FastAPI(
    title="SalePdv API",
    version="1.0.0",
    description="Pedidos e mesas para carrinhos de praia",
    # Avoid automatic 307 redirects between /path and /path/
    # Root endpoints are registered in both forms instead.
    redirect_slashes=False,
)

# Configure logging level from env
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))
# Use a dedicated app logger to avoid uvicorn.access formatter expectations
_req_logger = logging.getLogger("salepdv.request")
_req_logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))

# In-memory request counters per route (method + path), guarded by a lock
_request_counts = defaultdict(int)
_req_lock = threading.Lock()
_global_request_count = 0


@app.middleware("http")
async def request_count_middleware(request: Request, call_next):
    response = await call_next(request)

    # the matched route is only known after routing ran
    route = request.scope.get("route")
    key_path = getattr(route, "path", None) or request.url.path
    key = f"{request.method} {key_path}"

    with _req_lock:
        global _global_request_count
        _request_counts[key] += 1
        count_val = _request_counts[key]
        _global_request_count += 1
        global_count_val = _global_request_count

    # Log every N hits to avoid spam
    if count_val % settings.REQUEST_LOG_EVERY_N == 0:
        _req_logger.info("Request count threshold reached: %s -> %s (global=%s)", key, count_val, global_count_val)
    return response


@app.exception_handler(LifecycleError)
async def lifecycle_error_handler(request: Request, exc: LifecycleError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_routes.router)
app.include_router(tables_routes.router)
app.include_router(products_routes.router)
app.include_router(orders_routes.router)
app.include_router(users_routes.router)
app.include_router(stats_routes.router)


@app.on_event("startup")
def on_startup():
    # create database tables if they don't exist
    db_session.create_db()


@app.get("/")
def root():
    return {"status": "API rodando com sucesso 🚀"}
