"""
커스텀 예외 클래스 정의

이 모듈은 쿼리 엔진에서 사용되는 커스텀 예외들과
중앙 집중식 예외 처리를 위한 핸들러들을 정의합니다.
"""

import logging
from typing import Optional, Dict, Any, List
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BaseAPIException(Exception):
    """
    API 예외의 기본 클래스

    모든 커스텀 예외는 이 클래스를 상속받아야 합니다.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ColumnNotFoundException(BaseAPIException):
    """
    참조한 컬럼이 테이블에 없을 때 발생하는 예외

    단일 컬럼만 참조하는 연산은 "Column 'x' not found", 여러 컬럼을 참조하는 연산은
    "Column(s) not found: a, b" 형식의 메시지를 사용합니다.
    """

    def __init__(self, columns: List[str], referenced: Optional[List[str]] = None):
        self.columns = list(columns)
        referenced = list(referenced) if referenced is not None else self.columns
        if len(referenced) == 1 and len(self.columns) == 1:
            message = f"Column '{self.columns[0]}' not found"
        else:
            message = f"Column(s) not found: {', '.join(self.columns)}"
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"missing_columns": self.columns}
        )


class InvalidSyntaxException(BaseAPIException):
    """알려진 연산이지만 구문 해석에 실패했을 때 발생하는 예외"""

    def __init__(self, operation: str, expected: str):
        self.operation = operation
        self.expected = expected
        super().__init__(
            message=f"Invalid {operation} syntax. Expected: {expected}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"operation": operation, "expected": expected}
        )


class DomainException(BaseAPIException):
    """피연산자가 허용 범위를 벗어났을 때 발생하는 예외"""

    def __init__(self, message: str, parameter: str, bound: Optional[str] = None):
        self.parameter = parameter
        self.bound = bound
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"parameter": parameter, "bound": bound}
        )


class UnsupportedOperationException(BaseAPIException):
    """지원하지 않는 표현식일 때 발생하는 예외 (strict 모드)"""

    def __init__(self, expression: str):
        self.expression = expression
        super().__init__(
            message=f"Unsupported operation: {expression}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"expression": expression}
        )


class TableNotFoundException(BaseAPIException):
    """등록된 테이블을 찾을 수 없을 때 발생하는 예외"""

    def __init__(self, table_id: str):
        self.table_id = table_id
        super().__init__(
            message=f"DataFrame with id '{table_id}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"table_id": table_id}
        )


# 예외 핸들러 함수들
async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """
    BaseAPIException에 대한 기본 예외 핸들러

    Args:
        request: FastAPI 요청 객체
        exc: 발생한 예외

    Returns:
        JSONResponse: 표준화된 에러 응답
    """
    logger.warning(
        f"API Exception: {exc.message} | "
        f"Status: {exc.status_code} | "
        f"Details: {exc.details} | "
        f"Path: {request.url.path}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "message": exc.message,
                "type": exc.__class__.__name__,
                "status_code": exc.status_code,
                "details": exc.details
            },
            "path": str(request.url.path),
            "method": request.method
        }
    )


async def table_not_found_handler(request: Request, exc: TableNotFoundException) -> JSONResponse:
    """테이블 찾을 수 없음 예외 핸들러"""
    logger.warning(f"DataFrame not found: {exc.table_id} | Path: {request.url.path}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "message": exc.message,
                "type": "TableNotFound",
                "table_id": exc.table_id
            }
        }
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    일반적인 예외에 대한 핸들러

    예상하지 못한 예외가 발생했을 때 사용됩니다.
    """
    logger.error(f"Unexpected error: {str(exc)} | Path: {request.url.path}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": {
                "message": "An unexpected error occurred. Please try again later.",
                "type": "InternalServerError"
            }
        }
    )
