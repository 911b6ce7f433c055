"""
Query / DataFrame API Models

쿼리 실행 및 테이블 등록 API의 요청/응답 모델을 정의합니다.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QueryRequest(BaseModel):
    """표현식 실행 요청"""
    code: str = Field(..., min_length=1, description="pandas 스타일 표현식")

    @field_validator('code')
    @classmethod
    def code_must_not_be_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("code must not be blank")
        return value

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "stats.linregress(df['marketing_spend'], df['sales'])"
            }
        }
    )


class QueryResult(BaseModel):
    """표현식 실행 결과"""
    data: List[Dict[str, Any]] = Field(default_factory=list, description="결과 행 목록")
    columns: List[str] = Field(default_factory=list, description="출력 필드 이름 (첫 등장 순서)")
    row_count: int = Field(0, description="결과 행 수")
    execution_time_ms: float = Field(0.0, description="실행 시간 (밀리초)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": [{"result": 42.5}],
                "columns": ["result"],
                "row_count": 1,
                "execution_time_ms": 0.12
            }
        }
    )


class TableCreateRequest(BaseModel):
    """테이블 등록 요청"""
    name: str = Field("dataframe", description="테이블 이름")
    records: List[Dict[str, Any]] = Field(..., description="행 레코드 목록")
    columns: Optional[List[str]] = Field(None, description="컬럼 순서 (생략 시 레코드 키 순서)")
    dtypes: Optional[Dict[str, str]] = Field(None, description="명시적 컬럼 유형")


class TableSummary(BaseModel):
    """등록된 테이블 요약"""
    id: str = Field(..., description="테이블 ID")
    name: str = Field(..., description="테이블 이름")
    shape: List[int] = Field(..., description="[행 수, 컬럼 수]")
    columns: List[str] = Field(..., description="컬럼 목록")
    dtypes: Dict[str, str] = Field(..., description="컬럼별 유형")
    non_null_counts: Optional[Dict[str, int]] = Field(None, description="컬럼별 non-null 개수")
