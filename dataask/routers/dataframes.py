"""
DataFrame API 라우터

인메모리 테이블 등록/조회/삭제 및 표현식 실행 엔드포인트를 제공합니다.
엔진 예외는 main.py에 등록된 예외 핸들러에서 JSON 응답으로 변환됩니다.
"""

import logging
import math
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from ..models.query import QueryRequest, QueryResult, TableCreateRequest, TableSummary
from ..models.table import Table
from ..utils.dataframe_store import DataFrameStore, store
from ..utils.query_executor import QueryExecutor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dataframes", tags=["DataFrames"])


def get_store() -> DataFrameStore:
    return store


# main.py에서 환경 변수 기반으로 설정
_executor_config: Dict[str, Any] = {}


def configure_executor(config: Dict[str, Any]) -> None:
    _executor_config.clear()
    _executor_config.update(config)


def get_executor() -> QueryExecutor:
    return QueryExecutor(dict(_executor_config))


def _json_safe(value: Any) -> Any:
    """JSON으로 표현할 수 없는 float(inf, nan)을 None으로 변환"""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, list):
        return [_json_safe(item) for item in value]
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    return value


def _summary(table_id: str, table: Table, include_counts: bool = False) -> TableSummary:
    return TableSummary(
        id=table_id,
        name=table.name,
        shape=list(table.shape),
        columns=table.columns,
        dtypes=table.dtypes,
        non_null_counts=table.non_null_counts() if include_counts else None
    )


@router.post("", response_model=TableSummary, status_code=201, summary="테이블 등록")
async def create_dataframe(request: TableCreateRequest,
                           table_store: DataFrameStore = Depends(get_store)):
    """
    레코드 목록으로부터 테이블을 생성하여 등록합니다.

    컬럼 유형은 명시하지 않으면 값으로부터 추론됩니다.
    """
    try:
        table = Table.from_records(
            request.records,
            columns=request.columns,
            dtypes=request.dtypes,
            name=request.name
        )
    except ValueError as e:
        logger.warning(f"테이블 생성 실패: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    table_id = table_store.add(table)
    return _summary(table_id, table)


@router.get("", response_model=List[TableSummary], summary="테이블 목록 조회")
async def list_dataframes(table_store: DataFrameStore = Depends(get_store)):
    return [_summary(table_id, table) for table_id, table in table_store.items()]


@router.get("/{table_id}", response_model=TableSummary, summary="테이블 상세 조회")
async def get_dataframe(table_id: str, table_store: DataFrameStore = Depends(get_store)):
    table = table_store.get(table_id)
    return _summary(table_id, table, include_counts=True)


@router.delete("/{table_id}", summary="테이블 삭제")
async def delete_dataframe(table_id: str,
                           table_store: DataFrameStore = Depends(get_store)) -> Dict[str, Any]:
    table_store.remove(table_id)
    return {"success": True, "message": f"DataFrame '{table_id}' deleted"}


@router.post("/{table_id}/execute", response_model=QueryResult, summary="표현식 실행")
def execute_expression(table_id: str,
                       request: QueryRequest,
                       table_store: DataFrameStore = Depends(get_store),
                       executor: QueryExecutor = Depends(get_executor)):
    """
    등록된 테이블에 대해 pandas 스타일 표현식을 실행합니다.

    예시:
    - `df.head(10)`
    - `df[['sales', 'marketing_spend']].corr()`
    - `stats.linregress(df['marketing_spend'], df['sales'])`
    - `stats.forecast(df['revenue'], periods=3)`
    """
    table = table_store.get(table_id)
    logger.info(f"표현식 실행 요청: table_id={table_id}, code={request.code!r}")

    result = executor.execute(table, request.code)
    result.data = _json_safe(result.data)
    return result
