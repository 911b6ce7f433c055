"""
DataAsk 테이블 통계 쿼리 엔진 API

이 모듈은 FastAPI를 사용한 쿼리 엔진의 메인 애플리케이션을 정의합니다.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .exceptions import (
    BaseAPIException,
    TableNotFoundException,
    base_api_exception_handler,
    table_not_found_handler,
    general_exception_handler
)
from .routers import dataframes
from .utils.dataframe_store import store

LOG_LEVEL = os.getenv("DATAASK_LOG_LEVEL", "INFO").upper()
STRICT_MODE = os.getenv("DATAASK_STRICT_MODE", "false").lower() in ("1", "true", "yes")

# 로깅 설정
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션 생명주기 관리

    종료 시 등록된 테이블을 정리합니다.
    """
    logger.info(f"애플리케이션 시작 중... (strict_mode={STRICT_MODE})")
    yield
    logger.info("애플리케이션 종료 중...")
    store.clear()
    logger.info("애플리케이션 종료 완료")


app = FastAPI(
    title="DataAsk Query Engine API",
    version="1.0.0",
    description="""
    ## DataAsk 테이블 통계 쿼리 엔진 API

    pandas 스타일 표현식을 인메모리 테이블에 대해 실행합니다.

    ### 주요 기능
    - **테이블 관리**: 레코드 기반 테이블 등록/조회/삭제
    - **기술 통계**: describe, value_counts, groupby, corr/cov
    - **추론 통계**: t-검정, 카이제곱 검정, 정규성 검정
    - **예측 분석**: 선형/다중 회귀, 추세 분석, 예측
    """,
    lifespan=lifespan
)

# CORS 미들웨어 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 예외 핸들러 등록
app.add_exception_handler(BaseAPIException, base_api_exception_handler)
app.add_exception_handler(TableNotFoundException, table_not_found_handler)
app.add_exception_handler(Exception, general_exception_handler)

# 라우터 등록
dataframes.configure_executor({'strict_mode': STRICT_MODE})
app.include_router(dataframes.router)


@app.get("/", summary="API 루트", tags=["General"])
async def root():
    """
    API 루트 엔드포인트

    API가 정상적으로 동작하는지 확인할 수 있습니다.
    """
    return {
        "message": "Welcome to DataAsk Query Engine API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "status": "healthy"
    }


@app.get("/health", summary="헬스 체크", tags=["General"])
async def health_check():
    """애플리케이션 헬스 체크"""
    return {
        "status": "healthy",
        "services": {
            "api": "healthy",
            "store": "healthy"
        },
        "tables": len(store),
        "strict_mode": STRICT_MODE
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("dataask.main:app", host="0.0.0.0", port=8000, reload=True)
