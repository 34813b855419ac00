from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from fastapi.middleware.cors import CORSMiddleware

from lingodrill.core.config import settings
from lingodrill.core.exceptions import register_exception_handlers
from lingodrill.core.logging_config import setup_logging
from lingodrill.models import all_models  # noqa: F401
from lingodrill.routes.auth.auth_routers import auth_router
from lingodrill.routes.user.user_routers import user_router
from lingodrill.routes.collection.collection_routers import collection_router
from lingodrill.routes.exercise.exercise_routers import exercise_router
from lingodrill.routes.drill.drill_routers import drill_router
from lingodrill.routes.stats.stats_routers import stats_router

setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)

app = FastAPI(title="Lingodrill API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(collection_router)
app.include_router(exercise_router)
app.include_router(drill_router)
app.include_router(stats_router)


@app.get("/", response_class=HTMLResponse)
async def read_root():
    return """
    <html>
        <head>
            <title>Lingodrill</title>
        </head>
        <body>
            <h1>Welcome to the Lingodrill API!</h1>
            <p>Browse the API documentation <a href="/docs">here</a>.</p>
        </body>
    </html>
    """


@app.get("/health")
async def health():
    return {"status": "ok"}
