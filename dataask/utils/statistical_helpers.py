"""
통계 헬퍼 함수 라이브러리

기술 통계, 상관/공분산, 회귀 분석, 추세 분류, 예측 및 추론 검정을 위한
순수 함수들을 제공합니다. 모든 함수는 명시적인 숫자 시퀀스를 입력받아 값을 반환하며
공유 상태를 갖지 않습니다.

퇴화 입력 정책: 빈 입력은 위치/척도 통계에서 0을 반환하고, 검정에 필요한 데이터가
부족하면 예외 대신 문서화된 sentinel 결과를 반환합니다.

주의: p-value 및 정규성 검정은 단순화된 근사식이며 완전한 정밀도의 수치 라이브러리와
동일한 결과를 보장하지 않습니다.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from scipy.stats import norm

logger = logging.getLogger(__name__)

MAX_FORECAST_PERIODS = 20
SIGNIFICANCE_LEVEL = 0.05

# 회귀 결과 반올림 자릿수 / 검정 결과 반올림 자릿수
REGRESSION_DIGITS = 6
TEST_DIGITS = 4


class TrendType(str, Enum):
    """추세 유형"""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    QUADRATIC = "quadratic"
    NO_TREND = "no_trend"


class TrendStrength(str, Enum):
    """추세 강도"""
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"


@dataclass
class RegressionResult:
    """단순 선형 회귀 결과"""
    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = 0.0
    predictions: List[float] = field(default_factory=list)
    residuals: List[float] = field(default_factory=list)
    standard_error: float = 0.0


@dataclass
class MultipleRegressionResult:
    """다중 선형 회귀 결과 (coefficients[0]은 절편)"""
    coefficients: List[float] = field(default_factory=list)
    r_squared: float = 0.0
    predictions: List[float] = field(default_factory=list)
    residuals: List[float] = field(default_factory=list)
    standard_error: float = 0.0


@dataclass
class TrendResult:
    """추세 분석 결과"""
    trend_type: TrendType
    strength: TrendStrength
    slope: float
    r_squared: float
    description: str


@dataclass
class ForecastResult:
    """예측 결과"""
    forecasts: List[float]
    lower: List[float]
    upper: List[float]
    method: str


@dataclass
class TTestResult:
    """t-검정 결과"""
    t_statistic: float
    p_value: float
    degrees_of_freedom: int
    significant: bool


@dataclass
class ChiSquareResult:
    """카이제곱 검정 결과"""
    chi_square: float
    p_value: float
    degrees_of_freedom: int
    significant: bool


@dataclass
class NormalityResult:
    """정규성 검정 결과"""
    w_statistic: float
    p_value: float
    is_normal: bool


def _round(value: float, digits: int) -> float:
    return round(float(value), digits)


# ---------------------------------------------------------------------------
# 기술 통계
# ---------------------------------------------------------------------------

def mean(values: Sequence[float]) -> float:
    """산술 평균 (빈 입력은 0)"""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def variance(values: Sequence[float]) -> float:
    """모분산 (n으로 나눔)"""
    if len(values) == 0:
        return 0.0
    arr = np.asarray(values, dtype=float)
    return float(np.mean((arr - arr.mean()) ** 2))


def std(values: Sequence[float]) -> float:
    """모표준편차 (n으로 나눔)"""
    return math.sqrt(variance(values))


def median(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return float(ordered[mid])


def percentile(values: Sequence[float], p: float) -> float:
    """
    백분위수를 계산합니다.

    정렬된 값의 인덱스 p*(n-1) 위치에서 인접한 두 순서통계량을 선형 보간합니다.

    Args:
        values: 숫자 시퀀스
        p: 0~1 사이의 분위 (예: 0.25)

    Returns:
        보간된 백분위수 값
    """
    if len(values) == 0:
        return 0.0
    ordered = sorted(values)
    index = p * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    weight = index % 1

    if lower == upper:
        return float(ordered[lower])
    return ordered[lower] * (1 - weight) + ordered[upper] * weight


def skewness(values: Sequence[float]) -> float:
    """표본 왜도 (3개 미만이거나 표준편차가 0이면 0)"""
    n = len(values)
    if n < 3:
        return 0.0
    sd = std(values)
    if sd == 0:
        return 0.0
    arr = np.asarray(values, dtype=float)
    skew_sum = float(np.sum(((arr - arr.mean()) / sd) ** 3))
    return (n / ((n - 1) * (n - 2))) * skew_sum


def kurtosis(values: Sequence[float]) -> float:
    """편향 보정된 초과 첨도 (4개 미만이거나 표준편차가 0이면 0)"""
    n = len(values)
    if n < 4:
        return 0.0
    sd = std(values)
    if sd == 0:
        return 0.0
    arr = np.asarray(values, dtype=float)
    kurt_sum = float(np.sum(((arr - arr.mean()) / sd) ** 4))
    kurt = (n * (n + 1) / ((n - 1) * (n - 2) * (n - 3))) * kurt_sum
    correction = 3 * (n - 1) ** 2 / ((n - 2) * (n - 3))
    return kurt - correction


def mode(values: Sequence[float]) -> List[float]:
    """
    최빈값 목록을 반환합니다.

    최고 빈도에 동률인 값을 모두 반환하며 처음 등장한 순서를 유지합니다.
    """
    if len(values) == 0:
        return []
    frequency: Dict[float, int] = {}
    for value in values:
        frequency[value] = frequency.get(value, 0) + 1
    max_freq = max(frequency.values())
    return [value for value, count in frequency.items() if count == max_freq]


# ---------------------------------------------------------------------------
# 상관 / 공분산
# ---------------------------------------------------------------------------

def pearson_correlation(values1: Sequence[float], values2: Sequence[float]) -> float:
    """피어슨 상관계수 (길이 불일치, 2개 미만, 분산 0이면 0)"""
    if len(values1) != len(values2) or len(values1) < 2:
        return 0.0
    x = np.asarray(values1, dtype=float)
    y = np.asarray(values2, dtype=float)
    dx = x - x.mean()
    dy = y - y.mean()
    denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denominator == 0:
        return 0.0
    return float(np.sum(dx * dy)) / denominator


def covariance(values1: Sequence[float], values2: Sequence[float]) -> float:
    """표본 공분산 (n-1로 나눔)"""
    if len(values1) != len(values2) or len(values1) < 2:
        return 0.0
    x = np.asarray(values1, dtype=float)
    y = np.asarray(values2, dtype=float)
    return float(np.sum((x - x.mean()) * (y - y.mean()))) / (len(values1) - 1)


# ---------------------------------------------------------------------------
# 회귀 분석
# ---------------------------------------------------------------------------

def linear_regression(x_values: Sequence[float], y_values: Sequence[float]) -> RegressionResult:
    """
    최소제곱법 단순 선형 회귀 y = slope * x + intercept

    Args:
        x_values: 독립 변수
        y_values: 종속 변수

    Returns:
        RegressionResult. 길이 불일치, 2개 미만, x 분산 0이면 모든 값이 0이고 배열은 비어 있음
    """
    if len(x_values) != len(y_values) or len(x_values) < 2:
        return RegressionResult()

    x = np.asarray(x_values, dtype=float)
    y = np.asarray(y_values, dtype=float)
    n = len(x)
    mean_x = x.mean()
    mean_y = y.mean()

    x_diff = x - mean_x
    denominator = float(np.sum(x_diff * x_diff))
    if denominator == 0:
        logger.debug("x 분산이 0이므로 회귀를 수행할 수 없습니다")
        return RegressionResult()

    slope = float(np.sum(x_diff * (y - mean_y))) / denominator
    intercept = mean_y - slope * mean_x

    predictions = slope * x + intercept
    residuals = y - predictions

    total_ss = float(np.sum((y - mean_y) ** 2))
    residual_ss = float(np.sum(residuals ** 2))
    r_squared = 0.0 if total_ss == 0 else 1 - residual_ss / total_ss
    standard_error = 0.0 if n <= 2 else math.sqrt(residual_ss / (n - 2))

    return RegressionResult(
        slope=_round(slope, REGRESSION_DIGITS),
        intercept=_round(intercept, REGRESSION_DIGITS),
        r_squared=_round(r_squared, REGRESSION_DIGITS),
        predictions=[_round(p, REGRESSION_DIGITS) for p in predictions],
        residuals=[_round(r, REGRESSION_DIGITS) for r in residuals],
        standard_error=_round(standard_error, REGRESSION_DIGITS)
    )


def _gaussian_elimination(a: np.ndarray, b: np.ndarray) -> Optional[np.ndarray]:
    """
    부분 피벗팅 가우스 소거법으로 Ax = b를 풉니다.

    각 단계에서 절댓값이 가장 큰 피벗 행으로 교환한 뒤 전진 소거하고 후진 대입합니다.
    피벗이 허용오차보다 작으면 (특이 행렬) None을 반환합니다.
    """
    n = len(b)
    augmented = np.column_stack([a.astype(float), b.astype(float)])
    tolerance = 1e-12 * max(1.0, float(np.abs(a).max()) if a.size else 1.0)

    for i in range(n):
        max_row = i + int(np.argmax(np.abs(augmented[i:, i])))
        if abs(augmented[max_row, i]) < tolerance:
            return None

        if max_row != i:
            augmented[[i, max_row]] = augmented[[max_row, i]]

        for k in range(i + 1, n):
            factor = augmented[k, i] / augmented[i, i]
            augmented[k, i:] -= factor * augmented[i, i:]

    solution = np.zeros(n)
    for i in range(n - 1, -1, -1):
        solution[i] = augmented[i, n] - np.dot(augmented[i, i + 1:n], solution[i + 1:])
        solution[i] /= augmented[i, i]

    return solution


def multiple_linear_regression(x_matrix: Sequence[Sequence[float]],
                               y_values: Sequence[float]) -> MultipleRegressionResult:
    """
    다중 선형 회귀 y = b0 + b1*x1 + ... + bp*xp

    절편 열을 추가한 뒤 정규방정식 (X'X)b = X'y 를 가우스 소거법으로 풉니다.

    Args:
        x_matrix: n x p 예측 변수 행렬
        y_values: 종속 변수 (길이 n)

    Returns:
        MultipleRegressionResult. n < p + 2 이거나 특이 행렬이면 빈 계수와 r_squared=0
    """
    n = len(y_values)
    p = len(x_matrix[0]) if len(x_matrix) > 0 else 0

    if (p == 0 or len(x_matrix) != n or n < p + 2
            or any(len(row) != p for row in x_matrix)):
        return MultipleRegressionResult()

    y = np.asarray(y_values, dtype=float)
    design = np.column_stack([np.ones(n), np.asarray(x_matrix, dtype=float)])

    xtx = design.T @ design
    xty = design.T @ y
    coefficients = _gaussian_elimination(xtx, xty)
    if coefficients is None:
        logger.debug("정규방정식 행렬이 특이 행렬입니다")
        return MultipleRegressionResult()

    predictions = design @ coefficients
    residuals = y - predictions
    total_ss = float(np.sum((y - y.mean()) ** 2))
    residual_ss = float(np.sum(residuals ** 2))
    r_squared = 0.0 if total_ss == 0 else 1 - residual_ss / total_ss
    standard_error = 0.0 if n <= p + 1 else math.sqrt(residual_ss / (n - p - 1))

    return MultipleRegressionResult(
        coefficients=[_round(c, REGRESSION_DIGITS) for c in coefficients],
        r_squared=_round(r_squared, REGRESSION_DIGITS),
        predictions=[_round(v, REGRESSION_DIGITS) for v in predictions],
        residuals=[_round(r, REGRESSION_DIGITS) for r in residuals],
        standard_error=_round(standard_error, REGRESSION_DIGITS)
    )


# ---------------------------------------------------------------------------
# 추세 분석 / 예측
# ---------------------------------------------------------------------------

def trend_analysis(values: Sequence[float]) -> TrendResult:
    """
    인덱스 0..n-1에 대한 선형 회귀로 추세를 분류합니다.

    선형 적합도가 낮고 (r² < 0.5) 데이터가 5개 이상이면 2차 모형을 추가로 적합하여
    r²가 0.1 넘게 개선될 때 quadratic으로 재분류합니다.
    """
    n = len(values)
    if n < 3:
        return TrendResult(
            trend_type=TrendType.NO_TREND,
            strength=TrendStrength.WEAK,
            slope=0.0,
            r_squared=0.0,
            description="Insufficient data for trend analysis"
        )

    x_values = list(range(n))
    regression = linear_regression(x_values, values)
    slope = regression.slope
    r_squared = regression.r_squared

    if abs(slope) < 0.01 or r_squared < 0.1:
        trend_type = TrendType.NO_TREND
    elif slope > 0:
        trend_type = TrendType.INCREASING
    else:
        trend_type = TrendType.DECREASING

    if r_squared < 0.5 and n >= 5:
        quadratic = multiple_linear_regression([[x, x * x] for x in x_values], values)
        if quadratic.r_squared > r_squared + 0.1:
            trend_type = TrendType.QUADRATIC

    if r_squared >= 0.7:
        strength = TrendStrength.STRONG
    elif r_squared >= 0.3:
        strength = TrendStrength.MODERATE
    else:
        strength = TrendStrength.WEAK

    descriptions = {
        TrendType.INCREASING: f"Strong upward trend (slope: {slope:.3f})",
        TrendType.DECREASING: f"Strong downward trend (slope: {slope:.3f})",
        TrendType.QUADRATIC: f"Curved trend detected (R²: {r_squared:.3f})",
        TrendType.NO_TREND: "No significant trend detected",
    }

    return TrendResult(
        trend_type=trend_type,
        strength=strength,
        slope=slope,
        r_squared=r_squared,
        description=descriptions[trend_type]
    )


def forecast(values: Sequence[float],
             periods: int,
             max_periods: int = MAX_FORECAST_PERIODS) -> ForecastResult:
    """
    선형 회귀 외삽으로 향후 값을 예측합니다.

    신뢰 구간은 ±2 표준오차이며 예측 시점과 무관하게 폭이 일정합니다.

    Args:
        values: 과거 시계열
        periods: 예측 기간 수 (1 ~ max_periods)
        max_periods: 허용 최대 예측 기간

    Returns:
        ForecastResult. 데이터 3개 미만 또는 기간이 범위를 벗어나면 method='insufficient_data'
    """
    n = len(values)
    if n < 3 or periods <= 0 or periods > max_periods:
        return ForecastResult(forecasts=[], lower=[], upper=[], method="insufficient_data")

    regression = linear_regression(list(range(n)), values)
    margin = 2 * regression.standard_error

    forecasts, lower, upper = [], [], []
    for offset in range(periods):
        future_x = n + offset
        predicted = regression.slope * future_x + regression.intercept
        forecasts.append(_round(predicted, REGRESSION_DIGITS))
        lower.append(_round(predicted - margin, REGRESSION_DIGITS))
        upper.append(_round(predicted + margin, REGRESSION_DIGITS))

    return ForecastResult(forecasts=forecasts, lower=lower, upper=upper, method="linear_regression")


# ---------------------------------------------------------------------------
# 분포 근사
# ---------------------------------------------------------------------------

def standard_normal_cdf(z: float) -> float:
    """표준정규 누적분포함수"""
    return float(norm.cdf(z))


def normal_quantile(p: float) -> float:
    """
    표준정규 분위수 함수의 유리식 근사 (Beasley-Springer-Moro 계열)

    p가 (0, 1) 범위를 벗어나면 0을 반환합니다.
    """
    if p <= 0 or p >= 1:
        return 0.0

    c0, c1, c2 = 2.515517, 0.802853, 0.010328
    d1, d2, d3 = 1.432788, 0.189269, 0.001308

    if p > 0.5:
        t = math.sqrt(-2 * math.log(1 - p))
        sign = 1
    else:
        t = math.sqrt(-2 * math.log(p))
        sign = -1

    numerator = c0 + c1 * t + c2 * t * t
    denominator = 1 + d1 * t + d2 * t * t + d3 * t * t * t
    return sign * (t - numerator / denominator)


def t_distribution_p_value(t: float, df: int) -> float:
    """
    t-분포 양측 p-value 근사

    df >= 30이면 정규분포를 그대로 사용하고, 그 외에는 보정 계수를 적용합니다.
    """
    t = abs(t)
    if math.isinf(t):
        return 0.0
    if df >= 30:
        return 2 * (1 - standard_normal_cdf(t))
    adjustment = 1 + (t * t) / (4 * df)
    return 2 * (1 - standard_normal_cdf(t / math.sqrt(adjustment)))


def chi_square_p_value(chi_square: float, df: int) -> float:
    """Wilson-Hilferty 세제곱근 변환을 이용한 카이제곱 상측 p-value 근사"""
    h = 2 / (9 * df)
    z = (chi_square / df) ** (1 / 3) - 1 + h
    return 1 - standard_normal_cdf(z / math.sqrt(h))


# ---------------------------------------------------------------------------
# 추론 검정
# ---------------------------------------------------------------------------

def _t_statistic(difference: float, standard_error: float) -> float:
    if standard_error == 0:
        return 0.0 if difference == 0 else math.copysign(math.inf, difference)
    return difference / standard_error


def one_sample_t_test(values: Sequence[float],
                      population_mean: float,
                      alpha: float = SIGNIFICANCE_LEVEL) -> TTestResult:
    """
    단일 표본 t-검정

    Args:
        values: 표본
        population_mean: 귀무가설의 모평균
        alpha: 유의수준

    Returns:
        TTestResult. 표본이 2개 미만이면 t=0, p=1, df=0
    """
    if len(values) < 2:
        return TTestResult(t_statistic=0.0, p_value=1.0, degrees_of_freedom=0, significant=False)

    n = len(values)
    df = n - 1
    standard_error = std(values) / math.sqrt(n)
    t_statistic = _t_statistic(mean(values) - population_mean, standard_error)
    p_value = t_distribution_p_value(t_statistic, df)

    logger.debug(f"단일 표본 t-검정: t={t_statistic:.4f}, p={p_value:.4f}, df={df}")
    return TTestResult(
        t_statistic=_round(t_statistic, TEST_DIGITS),
        p_value=_round(p_value, TEST_DIGITS),
        degrees_of_freedom=df,
        significant=p_value < alpha
    )


def two_sample_t_test(group1: Sequence[float],
                      group2: Sequence[float],
                      alpha: float = SIGNIFICANCE_LEVEL) -> TTestResult:
    """
    독립 2표본 t-검정 (등분산 가정, 합동 분산)

    Returns:
        TTestResult. 어느 한 그룹이라도 2개 미만이면 t=0, p=1, df=0
    """
    if len(group1) < 2 or len(group2) < 2:
        return TTestResult(t_statistic=0.0, p_value=1.0, degrees_of_freedom=0, significant=False)

    n1, n2 = len(group1), len(group2)
    df = n1 + n2 - 2
    pooled_variance = ((n1 - 1) * variance(group1) + (n2 - 1) * variance(group2)) / df
    standard_error = math.sqrt(pooled_variance * (1 / n1 + 1 / n2))
    t_statistic = _t_statistic(mean(group1) - mean(group2), standard_error)
    p_value = t_distribution_p_value(t_statistic, df)

    logger.debug(f"2표본 t-검정: t={t_statistic:.4f}, p={p_value:.4f}, df={df}")
    return TTestResult(
        t_statistic=_round(t_statistic, TEST_DIGITS),
        p_value=_round(p_value, TEST_DIGITS),
        degrees_of_freedom=df,
        significant=p_value < alpha
    )


def chi_square_test(observed: Sequence[Sequence[float]],
                    alpha: float = SIGNIFICANCE_LEVEL) -> ChiSquareResult:
    """
    분할표 독립성 카이제곱 검정

    Args:
        observed: 관측 빈도 분할표 (행 x 열)

    Returns:
        ChiSquareResult. 자유도가 0이면 (1x1 또는 빈 표) chi_square=0, p=1
    """
    rows = len(observed)
    cols = len(observed[0]) if rows > 0 else 0
    df = (rows - 1) * (cols - 1) if rows > 0 and cols > 0 else 0

    if df <= 0:
        return ChiSquareResult(chi_square=0.0, p_value=1.0, degrees_of_freedom=0, significant=False)

    if any(len(row) != cols for row in observed):
        raise ValueError("Contingency table rows must all have the same length")

    table = np.asarray(observed, dtype=float)
    row_totals = table.sum(axis=1)
    col_totals = table.sum(axis=0)
    grand_total = float(table.sum())

    chi_square = 0.0
    if grand_total > 0:
        expected = np.outer(row_totals, col_totals) / grand_total
        mask = expected > 0
        chi_square = float(np.sum((table[mask] - expected[mask]) ** 2 / expected[mask]))

    p_value = chi_square_p_value(chi_square, df)

    logger.debug(f"카이제곱 검정: chi2={chi_square:.4f}, p={p_value:.4f}, df={df}")
    return ChiSquareResult(
        chi_square=_round(chi_square, TEST_DIGITS),
        p_value=_round(p_value, TEST_DIGITS),
        degrees_of_freedom=df,
        significant=p_value < alpha
    )


def normality_test(values: Sequence[float]) -> NormalityResult:
    """
    단순화된 Shapiro-Wilk 유사 정규성 검정

    순서통계량과 정규 분위수의 내적으로 W를 계산하는 근사이며, 참조 구현과 같은
    정확도를 갖지 않습니다. p-value는 W > 0.9 일 때 max(0.05, 1 - W), 그 외 0.01 입니다.

    Returns:
        NormalityResult. 3개 미만이거나 분산이 0이면 w=0, p=1, is_normal=False
    """
    n = len(values)
    if n < 3:
        return NormalityResult(w_statistic=0.0, p_value=1.0, is_normal=False)

    ordered = np.sort(np.asarray(values, dtype=float))
    center = ordered.mean()
    quantiles = np.array([normal_quantile((i + 1 - 0.375) / (n + 0.25)) for i in range(n)])

    numerator = float(np.sum(quantiles * ordered))
    denominator = float(np.sum((ordered - center) ** 2))
    if denominator == 0:
        return NormalityResult(w_statistic=0.0, p_value=1.0, is_normal=False)

    w_statistic = numerator ** 2 / denominator
    p_value = max(0.05, 1 - w_statistic) if w_statistic > 0.9 else 0.01

    return NormalityResult(
        w_statistic=_round(w_statistic, TEST_DIGITS),
        p_value=_round(p_value, TEST_DIGITS),
        is_normal=p_value > 0.05
    )


def describe_values(values: Sequence[float]) -> Dict[str, Any]:
    """describe()용 요약 통계 (count/mean/std/min/25%/50%/75%/max)"""
    return {
        'count': len(values),
        'mean': mean(values),
        'std': std(values),
        'min': min(values) if values else None,
        '25%': percentile(values, 0.25),
        '50%': percentile(values, 0.50),
        '75%': percentile(values, 0.75),
        'max': max(values) if values else None,
    }
