"""
통계 헬퍼 라이브러리 단위 테스트

기술 통계, 상관/회귀, 추세/예측, 추론 검정 함수의 정확성과
퇴화 입력에 대한 sentinel 결과를 검증합니다.
"""

import math

import pytest

from dataask.utils import statistical_helpers as sh
from dataask.utils.statistical_helpers import TrendStrength, TrendType


class TestDescriptiveStatistics:
    """기술 통계 테스트"""

    def setup_method(self):
        self.values = [2, 4, 4, 4, 5, 5, 7, 9]

    def test_mean_variance_std(self):
        assert sh.mean(self.values) == pytest.approx(5.0)
        assert sh.variance(self.values) == pytest.approx(4.0)
        assert sh.std(self.values) == pytest.approx(2.0)

    def test_empty_input_returns_zero(self):
        assert sh.mean([]) == 0
        assert sh.variance([]) == 0
        assert sh.std([]) == 0
        assert sh.median([]) == 0
        assert sh.percentile([], 0.5) == 0

    def test_median(self):
        assert sh.median([3, 1, 2]) == 2
        assert sh.median([4, 1, 3, 2]) == pytest.approx(2.5)

    def test_percentile_interpolation(self):
        assert sh.percentile([1, 2, 3, 4, 5], 0.25) == pytest.approx(2.0)
        assert sh.percentile([1, 2, 3, 4, 5], 0.5) == pytest.approx(3.0)
        assert sh.percentile([1, 2, 3, 4], 0.5) == pytest.approx(2.5)
        assert sh.percentile([10, 20], 0.0) == 10
        assert sh.percentile([10, 20], 1.0) == 20

    def test_skewness(self):
        assert sh.skewness([1, 2, 3, 4, 5]) == pytest.approx(0.0)
        assert sh.skewness([1, 2]) == 0
        assert sh.skewness([3, 3, 3, 3]) == 0
        assert sh.skewness([1, 1, 1, 2, 10]) > 0

    def test_kurtosis_needs_four_points(self):
        assert sh.kurtosis([1, 2, 3]) == 0
        assert sh.kurtosis([5, 5, 5, 5, 5]) == 0
        assert isinstance(sh.kurtosis([1, 2, 3, 4, 10]), float)

    def test_mode(self):
        result = sh.mode([1, 1, 2, 2, 3])
        assert 1 in result
        assert 2 in result
        assert result == [1, 2]
        assert sh.mode([]) == []
        assert sh.mode([7]) == [7]


class TestCorrelation:
    """상관계수 / 공분산 테스트"""

    def test_perfect_correlation(self):
        x = [1, 2, 3, 4, 5]
        assert sh.pearson_correlation(x, [2 * v for v in x]) == pytest.approx(1.0)
        assert sh.pearson_correlation(x, [-2 * v for v in x]) == pytest.approx(-1.0)

    def test_degenerate_correlation(self):
        assert sh.pearson_correlation([1, 2, 3], [1, 2]) == 0
        assert sh.pearson_correlation([1], [1]) == 0
        assert sh.pearson_correlation([1, 1, 1], [1, 2, 3]) == 0

    def test_sample_covariance(self):
        assert sh.covariance([1, 2, 3], [1, 2, 3]) == pytest.approx(1.0)
        assert sh.covariance([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)
        assert sh.covariance([1], [1]) == 0


class TestRegression:
    """회귀 분석 테스트"""

    def test_linear_regression_recovers_line(self):
        x = [1, 2, 3, 4, 5]
        y = [2 * v + 1 for v in x]
        result = sh.linear_regression(x, y)

        assert result.slope == pytest.approx(2.0)
        assert result.intercept == pytest.approx(1.0)
        assert result.r_squared == pytest.approx(1.0)
        assert result.standard_error == pytest.approx(0.0)
        assert result.predictions == pytest.approx(y)
        assert len(result.residuals) == 5

    def test_linear_regression_mismatched_lengths(self):
        result = sh.linear_regression([1, 2, 3], [1, 2])
        assert result.slope == 0
        assert result.intercept == 0
        assert result.r_squared == 0
        assert result.predictions == []
        assert result.residuals == []

    def test_linear_regression_zero_variance_x(self):
        result = sh.linear_regression([3, 3, 3], [1, 2, 3])
        assert result.slope == 0
        assert result.r_squared == 0
        assert result.predictions == []

    def test_linear_regression_two_points_has_zero_standard_error(self):
        result = sh.linear_regression([0, 1], [1, 3])
        assert result.slope == pytest.approx(2.0)
        assert result.standard_error == 0

    def test_multiple_regression(self):
        a = [1, 2, 3, 4, 5, 6]
        b = [2, 1, 4, 3, 6, 5]
        y = [1 + 2 * ai + 3 * bi for ai, bi in zip(a, b)]
        result = sh.multiple_linear_regression([[ai, bi] for ai, bi in zip(a, b)], y)

        assert result.coefficients == pytest.approx([1.0, 2.0, 3.0], abs=1e-6)
        assert result.r_squared == pytest.approx(1.0)
        assert len(result.predictions) == 6

    def test_multiple_regression_insufficient_rows(self):
        result = sh.multiple_linear_regression([[1, 2], [2, 3], [3, 5]], [1, 2, 3])
        assert result.coefficients == []
        assert result.r_squared == 0

    def test_multiple_regression_singular(self):
        a = [1, 2, 3, 4, 5, 6]
        result = sh.multiple_linear_regression([[v, 2 * v] for v in a], [1, 3, 2, 5, 4, 6])
        assert result.coefficients == []
        assert result.predictions == []

    def test_multiple_regression_inconsistent_widths(self):
        result = sh.multiple_linear_regression([[1, 2], [2], [3, 4], [4, 5]], [1, 2, 3, 4])
        assert result.coefficients == []


class TestTrendAndForecast:
    """추세 분석 / 예측 테스트"""

    def test_increasing_trend(self):
        result = sh.trend_analysis([1, 2, 3, 4, 5])
        assert result.trend_type == TrendType.INCREASING
        assert result.strength == TrendStrength.STRONG
        assert result.slope == pytest.approx(1.0)
        assert "upward" in result.description

    def test_decreasing_trend(self):
        result = sh.trend_analysis([10, 8, 6, 4, 2])
        assert result.trend_type == TrendType.DECREASING
        assert "downward" in result.description

    def test_description_wording_is_independent_of_strength(self):
        result = sh.trend_analysis([1, 3, 1, 4])
        assert result.trend_type == TrendType.INCREASING
        assert result.strength == TrendStrength.MODERATE
        assert result.description == "Strong upward trend (slope: 0.700)"

    def test_constant_series_has_no_trend(self):
        result = sh.trend_analysis([5, 5, 5, 5, 5])
        assert result.trend_type == TrendType.NO_TREND
        assert result.description == "No significant trend detected"

    def test_quadratic_reclassification(self):
        result = sh.trend_analysis([9, 4, 1, 0, 1, 4, 9])
        assert result.trend_type == TrendType.QUADRATIC

    def test_insufficient_trend_data(self):
        result = sh.trend_analysis([1, 2])
        assert result.trend_type == TrendType.NO_TREND
        assert result.strength == TrendStrength.WEAK
        assert "Insufficient data" in result.description

    def test_forecast_rejects_out_of_range_periods(self):
        for periods in (0, 21):
            result = sh.forecast([1, 2, 3, 4], periods)
            assert result.method == "insufficient_data"
            assert result.forecasts == []
            assert result.lower == []
            assert result.upper == []

    def test_forecast_needs_three_points(self):
        assert sh.forecast([1, 2], 2).method == "insufficient_data"

    def test_forecast_extrapolates(self):
        result = sh.forecast([1, 2, 3, 4], 2)
        assert result.method == "linear_regression"
        assert result.forecasts == pytest.approx([5.0, 6.0])
        for low, value, high in zip(result.lower, result.forecasts, result.upper):
            assert low <= value <= high

    def test_forecast_band_has_constant_width(self):
        result = sh.forecast([3, 7, 4, 9, 6, 11], 4)
        widths = [high - low for low, high in zip(result.lower, result.upper)]
        assert widths == pytest.approx([widths[0]] * 4, abs=1e-5)
        assert widths[0] > 0


class TestDistributionApproximations:
    """분포 근사 함수 테스트"""

    def test_standard_normal_cdf(self):
        assert sh.standard_normal_cdf(0) == pytest.approx(0.5)
        assert sh.standard_normal_cdf(1.96) == pytest.approx(0.975, abs=1e-3)

    def test_normal_quantile(self):
        assert sh.normal_quantile(0.5) == pytest.approx(0.0, abs=1e-3)
        assert sh.normal_quantile(0.975) == pytest.approx(1.96, abs=1e-2)
        assert sh.normal_quantile(0.025) == pytest.approx(-1.96, abs=1e-2)
        assert sh.normal_quantile(0) == 0
        assert sh.normal_quantile(1) == 0

    def test_t_distribution_p_value(self):
        assert sh.t_distribution_p_value(0, 10) == pytest.approx(1.0)
        assert sh.t_distribution_p_value(1.96, 100) == pytest.approx(0.05, abs=1e-3)
        assert sh.t_distribution_p_value(-3.0, 5) == sh.t_distribution_p_value(3.0, 5)
        assert sh.t_distribution_p_value(math.inf, 5) == 0

    def test_chi_square_p_value_decreases_with_statistic(self):
        assert sh.chi_square_p_value(20, 1) < sh.chi_square_p_value(1, 1)


class TestInferentialTests:
    """추론 검정 테스트"""

    def test_one_sample_t_test_at_sample_mean(self):
        values = [12.0, 15.0, 11.0, 14.0, 13.0]
        result = sh.one_sample_t_test(values, sh.mean(values))
        assert result.t_statistic == pytest.approx(0.0)
        assert result.p_value == pytest.approx(1.0)
        assert result.degrees_of_freedom == 4
        assert result.significant is False

    def test_one_sample_t_test_degenerate(self):
        result = sh.one_sample_t_test([1.0], 0)
        assert result.t_statistic == 0
        assert result.p_value == 1
        assert result.degrees_of_freedom == 0
        assert result.significant is False

    def test_one_sample_t_test_zero_standard_error(self):
        result = sh.one_sample_t_test([5, 5, 5], 3)
        assert math.isinf(result.t_statistic)
        assert result.p_value == 0
        assert result.significant is True

        same = sh.one_sample_t_test([5, 5, 5], 5)
        assert same.t_statistic == 0
        assert same.p_value == 1

    def test_two_sample_t_test(self):
        result = sh.two_sample_t_test([1, 2, 3, 4, 5], [11, 12, 13, 14, 15])
        assert result.t_statistic < 0
        assert result.degrees_of_freedom == 8
        assert result.significant is True

    def test_two_sample_t_test_degenerate(self):
        result = sh.two_sample_t_test([1], [1, 2, 3])
        assert result.t_statistic == 0
        assert result.p_value == 1
        assert result.degrees_of_freedom == 0

    def test_chi_square_dependent_table(self):
        result = sh.chi_square_test([[10, 0], [0, 10]])
        assert result.chi_square == pytest.approx(20.0)
        assert result.degrees_of_freedom == 1
        assert result.significant is True

    def test_chi_square_independent_table(self):
        result = sh.chi_square_test([[10, 10], [10, 10]])
        assert result.chi_square == 0
        assert result.p_value > 0.05
        assert result.significant is False

    def test_chi_square_degenerate(self):
        for table in ([[5]], []):
            result = sh.chi_square_test(table)
            assert result.chi_square == 0
            assert result.p_value == 1
            assert result.degrees_of_freedom == 0

    def test_normality_sentinels(self):
        for values in ([1, 2], [4, 4, 4, 4]):
            result = sh.normality_test(values)
            assert result.w_statistic == 0
            assert result.p_value == 1
            assert result.is_normal is False

    def test_normality_result_fields(self):
        result = sh.normality_test([2.1, 2.5, 2.9, 3.0, 3.2, 3.8, 4.1])
        assert result.w_statistic > 0
        assert result.p_value == 0.01 or result.p_value >= 0.05
        assert result.is_normal == (result.p_value > 0.05)


class TestDescribeValues:
    """describe 요약 테스트"""

    def test_describe_values(self):
        summary = sh.describe_values([1.0, 2.0, 3.0, 4.0])
        assert list(summary.keys()) == ['count', 'mean', 'std', 'min', '25%', '50%', '75%', 'max']
        assert summary['count'] == 4
        assert summary['50%'] == pytest.approx(2.5)
        assert summary['min'] == 1.0
        assert summary['max'] == 4.0

    def test_describe_empty(self):
        summary = sh.describe_values([])
        assert summary['count'] == 0
        assert summary['min'] is None
        assert summary['max'] is None
