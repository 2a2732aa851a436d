from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from .config import settings
from .errors import AnalysisServiceFailure
from .logging import configure_logging, logger
from .middleware import AccessLogMiddleware, RequestIDMiddleware
from .providers import shutdown_providers
from .routers import analysis, health, notifications, progress, review, sessions, vocabulary
from .srs.service import review_ticker

configure_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # 期限チェックは API と同じイベントループ上で動かし、状態更新と重ならないようにする
    if settings.review_ticker_enabled:
        review_ticker.start()
    try:
        yield
    finally:
        await review_ticker.stop()
        # 共有スレッドプールなどのリソースを解放
        shutdown_providers()


app = FastAPI(title="LinguistPro API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AccessLogMiddleware)
# リクエストID付与（全リクエスト）。最後に追加したものが最外層になる
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(AnalysisServiceFailure)
async def _analysis_failure_handler(request: Request, exc: AnalysisServiceFailure) -> JSONResponse:
    logger.warning("analysis_failed", operation=exc.operation, reason=exc.reason, path=request.url.path)
    return JSONResponse(
        status_code=502,
        content={"error": "analysis_failed", "operation": exc.operation, "detail": exc.reason},
    )


app.include_router(health.router)  # ヘルスチェック
app.include_router(sessions.router, prefix="/api/sessions")
app.include_router(review.router, prefix="/api/review")
app.include_router(progress.router, prefix="/api")
app.include_router(vocabulary.router, prefix="/api/vocabulary")
app.include_router(notifications.router, prefix="/api/notifications")
app.include_router(analysis.router, prefix="/api/analysis")
