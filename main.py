from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.core.database import init_db
from app.core.errors import FindOneError
from app.core.logging import configure_logging
from app.routes.auth.auth_routers import auth_router
from app.routes.user.user_routers import user_router
from app.routes.activity.activity_routers import activity_router
from app.routes.chat.chat_routers import chat_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield


app = FastAPI(title="FindOne API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(activity_router)
app.include_router(chat_router)


@app.exception_handler(FindOneError)
async def findone_error_handler(request: Request, exc: FindOneError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "code": exc.code})


@app.get("/", response_class=HTMLResponse)
async def read_root():
    return """
    <html>
        <head>
            <title>FindOne</title>
        </head>
        <body>
            <h1>FindOne API</h1>
            <p>Encontrá a alguien para tu próxima actividad. Documentación <a href="/docs">aquí</a>.</p>
        </body>
    </html>
    """
