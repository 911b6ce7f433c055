"""
기본 임포트 테스트
쿼리 엔진에 필요한 라이브러리와 패키지 모듈이 올바르게 설치되었는지 확인합니다.
"""

import pytest
import logging

# 로깅 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def test_pandas_import():
    """pandas 라이브러리 임포트 테스트"""
    try:
        import pandas as pd
        logger.info("✓ pandas 임포트 성공")
        assert hasattr(pd, 'DataFrame')
        assert hasattr(pd.api.types, 'infer_dtype')
    except ImportError as e:
        pytest.fail(f"pandas 임포트 실패: {e}")


def test_numpy_import():
    """numpy 라이브러리 임포트 테스트"""
    try:
        import numpy as np
        logger.info("✓ numpy 임포트 성공")
        assert hasattr(np, 'column_stack')
    except ImportError as e:
        pytest.fail(f"numpy 임포트 실패: {e}")


def test_scipy_import():
    """scipy 라이브러리 임포트 테스트"""
    try:
        from scipy.stats import norm
        logger.info("✓ scipy 임포트 성공")
        assert abs(norm.cdf(0) - 0.5) < 1e-12
    except ImportError as e:
        pytest.fail(f"scipy 임포트 실패: {e}")


def test_pydantic_import():
    """pydantic 라이브러리 임포트 테스트"""
    try:
        from pydantic import BaseModel, ValidationError
        logger.info("✓ pydantic 임포트 성공")
        assert BaseModel is not None
        assert ValidationError is not None
    except ImportError as e:
        pytest.fail(f"pydantic 임포트 실패: {e}")


def test_fastapi_import():
    """fastapi 라이브러리 임포트 테스트"""
    try:
        from fastapi import FastAPI
        from fastapi.testclient import TestClient
        logger.info("✓ fastapi 임포트 성공")
        assert FastAPI is not None
        assert TestClient is not None
    except ImportError as e:
        pytest.fail(f"fastapi 임포트 실패: {e}")


def test_package_import():
    """dataask 패키지 임포트 테스트"""
    try:
        import dataask
        from dataask import QueryExecutor, Table, execute
        logger.info("✓ dataask 임포트 성공")
        assert dataask.__version__
        assert callable(execute)
        assert QueryExecutor is not None
        assert Table is not None
    except ImportError as e:
        pytest.fail(f"dataask 임포트 실패: {e}")


def test_engine_basics():
    """쿼리 엔진 기본 기능 테스트"""
    from dataask import Table, execute

    table = Table.from_records([{'x': 1, 'y': 2}, {'x': 2, 'y': 4}, {'x': 3, 'y': 6}])
    result = execute(table, "df['x'].corr(df['y'])")

    assert result.row_count == 1
    assert abs(result.data[0]['result'] - 1.0) < 1e-9

    logger.info("✓ 기본 쿼리 엔진 동작 확인")


if __name__ == "__main__":
    # 개별 실행을 위한 코드
    pytest.main([__file__, "-v"])
