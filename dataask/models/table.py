"""
In-memory Table Model

쿼리 엔진이 읽는 인메모리 테이블 구조와 로더를 정의합니다.
테이블은 외부에서 생성되어 참조로 전달되며, 엔진은 이를 절대 수정하지 않습니다.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ..utils.numeric_extraction import is_null

logger = logging.getLogger(__name__)

# 타입 추론에 사용할 샘플 크기
DTYPE_SAMPLE_SIZE = 100

DATE_PATTERNS = [
    re.compile(r'^\d{4}-\d{2}-\d{2}$'),
    re.compile(r'^\d{2}/\d{2}/\d{4}$'),
    re.compile(r'^\d{2}-\d{2}-\d{4}$'),
]


class ColumnType(str, Enum):
    """컬럼 데이터 유형"""
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    TEXT = "text"


def _is_date_like(value: Any) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    if not isinstance(value, str):
        return False
    return any(pattern.match(value) for pattern in DATE_PATTERNS)


def infer_column_type(values: Sequence[Any]) -> ColumnType:
    """
    샘플 값으로부터 컬럼 유형을 추론합니다.

    Args:
        values: 컬럼 값 시퀀스 (null 포함 가능)

    Returns:
        추론된 컬럼 유형
    """
    sample = [v for v in values if not is_null(v)][:DTYPE_SAMPLE_SIZE]
    if not sample:
        return ColumnType.TEXT

    inferred = pd.api.types.infer_dtype(sample, skipna=True)
    if inferred == 'boolean':
        return ColumnType.BOOLEAN
    if inferred in ('integer', 'floating', 'mixed-integer-float', 'decimal'):
        return ColumnType.NUMERIC
    if inferred in ('datetime', 'datetime64', 'date'):
        return ColumnType.DATETIME
    if all(_is_date_like(v) for v in sample):
        return ColumnType.DATETIME
    return ColumnType.TEXT


def _pandas_dtype_to_column_type(series: pd.Series) -> ColumnType:
    if pd.api.types.is_bool_dtype(series):
        return ColumnType.BOOLEAN
    if pd.api.types.is_numeric_dtype(series):
        return ColumnType.NUMERIC
    if pd.api.types.is_datetime64_any_dtype(series):
        return ColumnType.DATETIME
    return infer_column_type(series.tolist())


@dataclass
class Table:
    """
    인메모리 테이블

    columns 순서가 곧 출력 순서이며, 모든 row는 columns와 정확히 같은 키 집합을 가집니다.
    """
    columns: List[str]
    dtypes: Dict[str, str]
    rows: List[Dict[str, Any]]
    name: str = "dataframe"

    def __post_init__(self):
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Duplicate column names: {self.columns}")

        expected = set(self.columns)
        for position, row in enumerate(self.rows):
            if set(row.keys()) != expected:
                raise ValueError(
                    f"Row {position} keys {sorted(row.keys())} do not match columns {self.columns}"
                )

        self.dtypes = dict(self.dtypes)
        for column in self.columns:
            self.dtypes.setdefault(column, ColumnType.TEXT.value)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def shape(self) -> tuple:
        return (len(self.rows), len(self.columns))

    def has_column(self, column: str) -> bool:
        return column in self.columns

    def dtype(self, column: str) -> str:
        return self.dtypes.get(column, ColumnType.TEXT.value)

    def numeric_columns(self) -> List[str]:
        """숫자형 컬럼 목록 (컬럼 순서 유지)"""
        return [col for col in self.columns if self.dtypes.get(col) == ColumnType.NUMERIC.value]

    def column_values(self, column: str) -> List[Any]:
        return [row[column] for row in self.rows]

    def non_null_counts(self) -> Dict[str, int]:
        return {
            col: sum(1 for row in self.rows if not is_null(row[col]))
            for col in self.columns
        }

    @classmethod
    def from_records(cls,
                     records: Sequence[Dict[str, Any]],
                     columns: Optional[Sequence[str]] = None,
                     dtypes: Optional[Dict[str, str]] = None,
                     name: str = "dataframe") -> "Table":
        """
        레코드 리스트로부터 테이블을 생성합니다.

        Args:
            records: 행 딕셔너리 리스트
            columns: 컬럼 순서 (None이면 레코드의 키 등장 순서)
            dtypes: 명시적 컬럼 유형 (누락된 컬럼은 추론)
            name: 테이블 이름

        Returns:
            생성된 Table
        """
        if columns is None:
            ordered: Dict[str, None] = {}
            for record in records:
                for key in record.keys():
                    ordered.setdefault(key, None)
            columns = list(ordered.keys())
        columns = list(columns)

        rows = []
        for record in records:
            rows.append({
                col: None if is_null(record.get(col)) else record.get(col)
                for col in columns
            })

        resolved_dtypes: Dict[str, str] = {}
        for col in columns:
            if dtypes and col in dtypes:
                resolved_dtypes[col] = ColumnType(dtypes[col]).value
            else:
                resolved_dtypes[col] = infer_column_type([row[col] for row in rows]).value

        logger.info(f"테이블 '{name}' 로드 완료: shape=({len(rows)}, {len(columns)})")
        return cls(columns=columns, dtypes=resolved_dtypes, rows=rows, name=name)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, name: str = "dataframe") -> "Table":
        """pandas DataFrame으로부터 테이블을 생성합니다."""
        columns = [str(col) for col in df.columns]
        dtypes = {
            str(col): _pandas_dtype_to_column_type(df[col]).value
            for col in df.columns
        }

        cleaned = df.astype(object).where(pd.notna(df), None)
        cleaned.columns = columns
        records = cleaned.to_dict(orient='records')

        return cls.from_records(records, columns=columns, dtypes=dtypes, name=name)
