"""
DataAsk Tabular Statistical Query Engine

pandas 스타일 표현식을 인메모리 테이블에 대해 실행하는 쿼리 엔진입니다.

- 테이블 모델 및 로더 (models.table)
- 통계 헬퍼 라이브러리 (utils.statistical_helpers)
- 표현식 파서 / 실행기 (utils.expression_parser, utils.query_executor)
- FastAPI 애플리케이션 (main)
"""

from .models.table import Table, ColumnType
from .models.query import QueryResult
from .utils.query_executor import QueryExecutor, execute
from .exceptions import (
    BaseAPIException,
    ColumnNotFoundException,
    InvalidSyntaxException,
    DomainException,
    UnsupportedOperationException,
    TableNotFoundException
)

__version__ = "1.0.0"

__all__ = [
    'Table',
    'ColumnType',
    'QueryResult',
    'QueryExecutor',
    'execute',
    'BaseAPIException',
    'ColumnNotFoundException',
    'InvalidSyntaxException',
    'DomainException',
    'UnsupportedOperationException',
    'TableNotFoundException',
]
