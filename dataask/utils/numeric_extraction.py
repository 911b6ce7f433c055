"""
숫자 추출 헬퍼

테이블 행에서 숫자 시리즈를 추출하는 순수 함수 모음입니다.
단변량 헬퍼는 컬럼별로 null/비숫자 셀을 제외하고, 다변량 헬퍼는 참조된 모든 컬럼이
숫자인 행만 유지합니다 (pairwise complete).
"""

import math
import numbers
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


def to_number(value: Any) -> Optional[float]:
    """셀 값을 float로 변환. null이거나 숫자가 아니면 None"""
    if value is None:
        return None
    if isinstance(value, (bool, np.bool_)):
        return 1.0 if value else 0.0
    if isinstance(value, numbers.Real):
        number = float(value)
        return None if math.isnan(number) else number
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def is_null(value: Any) -> bool:
    """None, NaN, NaT를 null로 판단"""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NaT


def get_numeric_values(rows: Sequence[Dict[str, Any]], column: str) -> List[float]:
    values = []
    for row in rows:
        number = to_number(row.get(column))
        if number is not None:
            values.append(number)
    return values


def get_paired_values(rows: Sequence[Dict[str, Any]],
                      x_column: str,
                      y_column: str) -> Tuple[List[float], List[float]]:
    """두 컬럼이 모두 숫자인 행에 대해 (x, y) 반환"""
    xs, ys = [], []
    for row in rows:
        x = to_number(row.get(x_column))
        y = to_number(row.get(y_column))
        if x is None or y is None:
            continue
        xs.append(x)
        ys.append(y)
    return xs, ys


def get_complete_matrix(rows: Sequence[Dict[str, Any]],
                        columns: Sequence[str]) -> List[List[float]]:
    """``columns``의 숫자 값 행 목록. 하나라도 비숫자인 행은 제외"""
    matrix = []
    for row in rows:
        values = [to_number(row.get(col)) for col in columns]
        if any(v is None for v in values):
            continue
        matrix.append(values)
    return matrix
