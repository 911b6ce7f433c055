"""
쿼리 실행기

파싱된 명령을 테이블에 대해 실행하고 균일한 결과 구조
{data, columns, row_count, execution_time_ms}로 변환합니다.

실행 단계:
1. 표현식 파싱 (ExpressionParser)
2. 참조 컬럼 검증
3. 통계 함수 또는 테이블 변환 실행
4. 결과 행 구성

실행기는 읽기 전용 설정만 보관하며, 테이블을 수정하지 않습니다.
같은 테이블에 대한 동시 호출은 서로 독립적입니다.
"""

import logging
import math
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..exceptions import (
    BaseAPIException,
    ColumnNotFoundException,
    DomainException,
    UnsupportedOperationException,
)
from ..models.query import QueryResult
from ..models.table import Table
from . import statistical_helpers as stats
from .expression_parser import (
    ChiSquareCommand,
    ColumnStatCommand,
    ColumnsCommand,
    Condition,
    CorrelationMatrixCommand,
    CovarianceMatrixCommand,
    DescribeCommand,
    DtypesCommand,
    ExpressionParser,
    ForecastCommand,
    GroupByCommand,
    HeadCommand,
    InfoCommand,
    LinearRegressionCommand,
    MultipleRegressionCommand,
    NormalityCommand,
    OneSampleTTestCommand,
    PairwiseCorrelationCommand,
    SelectionCommand,
    SeriesRef,
    ShapeCommand,
    SortValuesCommand,
    TableStatCommand,
    TailCommand,
    TrendCommand,
    TwoSampleTTestCommand,
    ValueCountsCommand,
)
from .numeric_extraction import (
    get_complete_matrix,
    get_numeric_values,
    get_paired_values,
    is_null,
    to_number,
)

logger = logging.getLogger(__name__)

DESCRIBE_METRICS = ['count', 'mean', 'std', 'min', '25%', '50%', '75%', 'max']


def collect_columns(rows: Sequence[Dict[str, Any]]) -> List[str]:
    """모든 행의 키를 첫 등장 순서대로 합칩니다."""
    ordered: Dict[str, None] = {}
    for row in rows:
        for key in row.keys():
            ordered.setdefault(key, None)
    return list(ordered.keys())


def matches_condition(cell: Any, condition: Condition) -> bool:
    """
    필터 조건 평가

    양쪽이 모두 숫자로 변환 가능하면 숫자 비교, 모두 문자열이면 문자열 비교를 수행합니다.
    그 외의 조합에서는 == / != 만 판정 가능하며 순서 비교는 False 입니다.
    null 셀은 non-null 리터럴에 대한 != 만 만족합니다.
    """
    operator = condition.operator
    literal = condition.value

    if literal is None:
        if operator == '==':
            return is_null(cell)
        if operator == '!=':
            return not is_null(cell)
        return False

    if is_null(cell):
        return operator == '!='

    if isinstance(cell, str) and isinstance(literal, str):
        left, right = cell, literal
    else:
        left, right = to_number(cell), to_number(literal)
        if left is None or right is None:
            if operator == '==':
                return cell == literal
            if operator == '!=':
                return cell != literal
            return False

    if operator == '==':
        return left == right
    if operator == '!=':
        return left != right
    if operator == '>':
        return left > right
    if operator == '<':
        return left < right
    if operator == '>=':
        return left >= right
    return left <= right


def _sort_key(value: Any):
    if isinstance(value, str):
        return (1, 0.0, value)
    number = to_number(value)
    if number is None:
        return (1, 0.0, str(value))
    return (0, number, '')


def _relationship_strength(r_squared: float) -> str:
    r = math.sqrt(max(r_squared, 0.0))
    if r >= 0.7:
        return "strong"
    if r >= 0.3:
        return "moderate"
    return "weak"


class QueryExecutor:
    """pandas 스타일 표현식 실행기"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        QueryExecutor 초기화

        Args:
            config: 설정 파라미터 딕셔너리 (기본 설정 위에 병합)
        """
        self.config = {**self._get_default_config(), **(config or {})}
        self.parser = ExpressionParser()
        self._handlers: Dict[type, Callable[[Table, Any], List[Dict[str, Any]]]] = {
            HeadCommand: self._head,
            TailCommand: self._tail,
            ShapeCommand: self._shape,
            ColumnsCommand: self._columns,
            DtypesCommand: self._dtypes,
            InfoCommand: self._info,
            DescribeCommand: self._describe,
            ValueCountsCommand: self._value_counts,
            GroupByCommand: self._groupby,
            SortValuesCommand: self._sort_values,
            CorrelationMatrixCommand: self._correlation_matrix,
            CovarianceMatrixCommand: self._covariance_matrix,
            PairwiseCorrelationCommand: self._pairwise_correlation,
            ColumnStatCommand: self._column_stat,
            TableStatCommand: self._table_stat,
            SelectionCommand: self._selection,
            OneSampleTTestCommand: self._one_sample_t_test,
            TwoSampleTTestCommand: self._two_sample_t_test,
            ChiSquareCommand: self._chi_square,
            NormalityCommand: self._normality,
            LinearRegressionCommand: self._linear_regression,
            MultipleRegressionCommand: self._multiple_regression,
            TrendCommand: self._trend,
            ForecastCommand: self._forecast,
        }
        logger.debug(f"QueryExecutor 초기화 완료: config={self.config}")

    def _get_default_config(self) -> Dict[str, Any]:
        """기본 설정 반환"""
        return {
            'default_head_rows': 5,  # head()/tail() 기본 행 수
            'default_forecast_periods': 5,  # forecast() 기본 예측 기간
            'max_forecast_periods': stats.MAX_FORECAST_PERIODS,  # 최대 예측 기간
            'alpha': stats.SIGNIFICANCE_LEVEL,  # 유의수준
            'strict_mode': False,  # True면 인식 불가 표현식에 예외 발생
        }

    def execute(self, table: Table, expression: str) -> QueryResult:
        """
        표현식을 테이블에 대해 실행합니다.

        Args:
            table: 대상 테이블 (수정되지 않음)
            expression: pandas 스타일 표현식

        Returns:
            QueryResult

        Raises:
            ColumnNotFoundException: 참조 컬럼이 없는 경우
            InvalidSyntaxException: 알려진 연산의 구문 오류
            DomainException: 피연산자가 허용 범위를 벗어난 경우
            UnsupportedOperationException: strict 모드에서 인식할 수 없는 표현식
        """
        start_time = time.perf_counter()

        try:
            command = self.parser.parse(expression)
            if command is None:
                if self.config['strict_mode']:
                    raise UnsupportedOperationException(expression)
                logger.info(f"인식할 수 없는 표현식, 전체 테이블 반환: {expression!r}")
                rows = [dict(row) for row in table.rows]
            else:
                rows = self._handlers[type(command)](table, command)
        except BaseAPIException as e:
            logger.warning(f"표현식 실행 실패: {e.message} | expression={expression!r}")
            raise

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"표현식 실행 완료: {expression!r} | rows={len(rows)} | {execution_time_ms:.2f}ms"
        )

        return QueryResult(
            data=rows,
            columns=collect_columns(rows),
            row_count=len(rows),
            execution_time_ms=round(execution_time_ms, 3)
        )

    # ------------------------------------------------------------------
    # 공통 헬퍼
    # ------------------------------------------------------------------

    def _require_columns(self, table: Table, columns: Sequence[str]) -> None:
        """참조 컬럼 존재 여부 검증"""
        referenced = list(dict.fromkeys(columns))
        missing = [col for col in referenced if not table.has_column(col)]
        if missing:
            raise ColumnNotFoundException(missing, referenced=referenced)

    def _series_values(self, table: Table, ref: SeriesRef) -> List[float]:
        rows = table.rows
        if ref.condition is not None:
            rows = [row for row in rows if matches_condition(row[ref.condition.column], ref.condition)]
        return get_numeric_values(rows, ref.column)

    def _significance_text(self, p_value: float) -> str:
        alpha = self.config['alpha']
        if p_value < alpha:
            return f"statistically significant at alpha = {alpha} (p = {p_value:.4f})"
        return f"not statistically significant at alpha = {alpha} (p = {p_value:.4f})"

    def _column_statistic(self, table: Table, column: str, statistic: str,
                          argument: Optional[float] = None) -> Any:
        raw = [value for value in table.column_values(column) if not is_null(value)]
        values = get_numeric_values(table.rows, column)

        if statistic == 'count':
            return len(raw)
        if statistic == 'nunique':
            return len(dict.fromkeys(raw))
        if statistic == 'unique':
            return list(dict.fromkeys(raw))
        if statistic == 'mode':
            is_numeric = table.dtype(column) in ('numeric', 'boolean')
            return stats.mode(values if is_numeric else raw)
        if statistic == 'sum':
            return float(sum(values))
        if statistic == 'min':
            return min(values) if values else None
        if statistic == 'max':
            return max(values) if values else None
        if statistic == 'mean':
            return stats.mean(values)
        if statistic == 'median':
            return stats.median(values)
        if statistic == 'std':
            return stats.std(values)
        if statistic == 'var':
            return stats.variance(values)
        if statistic == 'skew':
            return stats.skewness(values)
        if statistic in ('kurt', 'kurtosis'):
            return stats.kurtosis(values)
        if statistic == 'quantile':
            if argument is None or not 0 <= argument <= 1:
                raise DomainException(
                    f"Quantile must be between 0 and 1, got {argument}",
                    parameter='q',
                    bound='[0, 1]'
                )
            return stats.percentile(values, argument)
        raise UnsupportedOperationException(f".{statistic}()")

    # ------------------------------------------------------------------
    # 테이블 수준 연산
    # ------------------------------------------------------------------

    def _head(self, table: Table, command: HeadCommand) -> List[Dict[str, Any]]:
        n = self.config['default_head_rows'] if command.n is None else command.n
        return [dict(row) for row in table.rows[:n]]

    def _tail(self, table: Table, command: TailCommand) -> List[Dict[str, Any]]:
        n = self.config['default_head_rows'] if command.n is None else command.n
        if n <= 0:
            return []
        return [dict(row) for row in table.rows[-n:]]

    def _shape(self, table: Table, command: ShapeCommand) -> List[Dict[str, Any]]:
        rows, columns = table.shape
        return [{'rows': rows, 'columns': columns}]

    def _columns(self, table: Table, command: ColumnsCommand) -> List[Dict[str, Any]]:
        return [{'index': i, 'value': col} for i, col in enumerate(table.columns)]

    def _dtypes(self, table: Table, command: DtypesCommand) -> List[Dict[str, Any]]:
        return [{'column': col, 'dtype': table.dtype(col)} for col in table.columns]

    def _info(self, table: Table, command: InfoCommand) -> List[Dict[str, Any]]:
        counts = table.non_null_counts()
        return [
            {'Column': col, 'Non-Null Count': counts[col], 'Dtype': table.dtype(col)}
            for col in table.columns
        ]

    def _describe(self, table: Table, command: DescribeCommand) -> List[Dict[str, Any]]:
        if command.column is not None:
            self._require_columns(table, [command.column])
            columns = [command.column]
        else:
            columns = table.numeric_columns()

        summaries = {
            col: stats.describe_values(get_numeric_values(table.rows, col))
            for col in columns
        }
        result = []
        for metric in DESCRIBE_METRICS:
            row: Dict[str, Any] = {'statistic': metric}
            for col in columns:
                row[col] = summaries[col][metric]
            result.append(row)
        return result

    def _value_counts(self, table: Table, command: ValueCountsCommand) -> List[Dict[str, Any]]:
        self._require_columns(table, [command.column])
        counts: Dict[Any, int] = {}
        for value in table.column_values(command.column):
            if is_null(value):
                continue
            counts[value] = counts.get(value, 0) + 1

        # sorted()는 안정 정렬이므로 동률은 첫 등장 순서 유지
        ordered = sorted(counts.items(), key=lambda item: -item[1])
        # 'count' 컬럼 자체를 집계하면 빈도 필드명이 겹치므로 'frequency' 사용
        count_field = 'frequency' if command.column == 'count' else 'count'
        return [{command.column: value, count_field: count} for value, count in ordered]

    def _groupby(self, table: Table, command: GroupByCommand) -> List[Dict[str, Any]]:
        if len(command.keys) != 1:
            raise DomainException(
                f"groupby requires exactly one key column, got {len(command.keys)}",
                parameter='keys',
                bound='1'
            )
        key = command.keys[0]
        referenced = [key] + ([command.target] if command.target else [])
        self._require_columns(table, referenced)

        if command.target:
            targets = [command.target]
        else:
            targets = [col for col in table.numeric_columns() if col != key]

        groups: Dict[Any, List[Dict[str, Any]]] = {}
        for row in table.rows:
            group_key = row[key]
            if is_null(group_key):
                continue
            groups.setdefault(group_key, []).append(row)

        aggregation = command.aggregation
        result = []
        for group_key, group_rows in groups.items():
            agg_row: Dict[str, Any] = {key: group_key}
            for col in targets:
                values = get_numeric_values(group_rows, col)
                if aggregation == 'sum':
                    agg_row[col] = float(sum(values))
                elif aggregation == 'mean':
                    agg_row[col] = stats.mean(values)
                elif aggregation == 'count':
                    agg_row[col] = len(values)
                elif aggregation == 'min':
                    agg_row[col] = min(values) if values else None
                else:
                    agg_row[col] = max(values) if values else None
            result.append(agg_row)

        logger.debug(f"groupby 완료: key={key}, groups={len(result)}, aggregation={aggregation}")
        return result

    def _sort_values(self, table: Table, command: SortValuesCommand) -> List[Dict[str, Any]]:
        self._require_columns(table, command.columns)
        rows = [dict(row) for row in table.rows]

        # 마지막 키부터 안정 정렬을 반복하면 사전식 정렬이 됨. null은 항상 끝.
        for column in reversed(command.columns):
            present = [row for row in rows if not is_null(row[column])]
            nulls = [row for row in rows if is_null(row[column])]
            present.sort(key=lambda row: _sort_key(row[column]), reverse=not command.ascending)
            rows = present + nulls
        return rows

    def _matrix_columns(self, table: Table, columns: Optional[Sequence[str]]) -> List[str]:
        if columns is None:
            return table.numeric_columns()
        self._require_columns(table, columns)
        return list(columns)

    def _correlation_matrix(self, table: Table,
                            command: CorrelationMatrixCommand) -> List[Dict[str, Any]]:
        columns = self._matrix_columns(table, command.columns)
        result = []
        for col_i in columns:
            row: Dict[str, Any] = {'index': col_i}
            for col_j in columns:
                xs, ys = get_paired_values(table.rows, col_i, col_j)
                if col_i == col_j:
                    row[col_j] = 1.0 if len(xs) >= 2 and stats.std(xs) > 0 else 0.0
                else:
                    row[col_j] = stats.pearson_correlation(xs, ys)
            result.append(row)
        return result

    def _covariance_matrix(self, table: Table,
                           command: CovarianceMatrixCommand) -> List[Dict[str, Any]]:
        columns = self._matrix_columns(table, command.columns)
        result = []
        for col_i in columns:
            row: Dict[str, Any] = {'index': col_i}
            for col_j in columns:
                xs, ys = get_paired_values(table.rows, col_i, col_j)
                row[col_j] = stats.covariance(xs, ys)
            result.append(row)
        return result

    def _pairwise_correlation(self, table: Table,
                              command: PairwiseCorrelationCommand) -> List[Dict[str, Any]]:
        self._require_columns(table, [command.column1, command.column2])
        xs, ys = get_paired_values(table.rows, command.column1, command.column2)
        return [{'result': stats.pearson_correlation(xs, ys)}]

    def _column_stat(self, table: Table, command: ColumnStatCommand) -> List[Dict[str, Any]]:
        self._require_columns(table, [command.column])
        value = self._column_statistic(table, command.column, command.statistic, command.argument)
        if isinstance(value, list):
            return [{'index': i, 'value': v} for i, v in enumerate(value)]
        return [{'result': value}]

    def _table_stat(self, table: Table, command: TableStatCommand) -> List[Dict[str, Any]]:
        statistic = command.statistic
        if statistic in ('count', 'nunique'):
            columns = table.columns
        else:
            columns = table.numeric_columns()
        return [
            {'column': col, statistic: self._column_statistic(table, col, statistic)}
            for col in columns
        ]

    def _selection(self, table: Table, command: SelectionCommand) -> List[Dict[str, Any]]:
        referenced = list(command.columns or [])
        if command.condition is not None:
            referenced.append(command.condition.column)
        self._require_columns(table, referenced)

        rows = table.rows
        if command.condition is not None:
            condition = command.condition
            rows = [row for row in rows if matches_condition(row[condition.column], condition)]

        columns = list(command.columns) if command.columns else table.columns
        return [{col: row[col] for col in columns} for row in rows]

    # ------------------------------------------------------------------
    # 추론 / 예측 연산
    # ------------------------------------------------------------------

    def _one_sample_t_test(self, table: Table,
                           command: OneSampleTTestCommand) -> List[Dict[str, Any]]:
        self._require_columns(table, [command.column])
        values = get_numeric_values(table.rows, command.column)
        result = stats.one_sample_t_test(values, command.population_mean, self.config['alpha'])

        if len(values) < 2:
            interpretation = "Insufficient data for a one-sample t-test (need at least 2 values)"
        else:
            interpretation = (
                f"The mean of {command.column} differs from {command.population_mean} "
                if result.significant else
                f"No evidence that the mean of {command.column} differs from {command.population_mean} "
            ) + f"({self._significance_text(result.p_value)})"

        return [{
            'test': "One-Sample T-Test",
            'column': command.column,
            'population_mean': command.population_mean,
            'sample_mean': round(stats.mean(values), stats.TEST_DIGITS),
            't_statistic': result.t_statistic,
            'p_value': result.p_value,
            'degrees_of_freedom': result.degrees_of_freedom,
            'significant': result.significant,
            'sample_size': len(values),
            'interpretation': interpretation,
        }]

    def _two_sample_t_test(self, table: Table,
                           command: TwoSampleTTestCommand) -> List[Dict[str, Any]]:
        referenced = []
        for ref in (command.sample1, command.sample2):
            if ref.condition is not None:
                referenced.append(ref.condition.column)
            referenced.append(ref.column)
        self._require_columns(table, referenced)

        group1 = self._series_values(table, command.sample1)
        group2 = self._series_values(table, command.sample2)
        result = stats.two_sample_t_test(group1, group2, self.config['alpha'])

        if len(group1) < 2 or len(group2) < 2:
            interpretation = "Insufficient data for a two-sample t-test (need at least 2 values per group)"
        elif result.significant:
            interpretation = f"The group means differ ({self._significance_text(result.p_value)})"
        else:
            interpretation = f"No evidence that the group means differ ({self._significance_text(result.p_value)})"

        return [{
            'test': "Two-Sample T-Test",
            'group1': command.sample1.label,
            'group2': command.sample2.label,
            'group1_mean': round(stats.mean(group1), stats.TEST_DIGITS),
            'group2_mean': round(stats.mean(group2), stats.TEST_DIGITS),
            't_statistic': result.t_statistic,
            'p_value': result.p_value,
            'degrees_of_freedom': result.degrees_of_freedom,
            'significant': result.significant,
            'sample_size': len(group1) + len(group2),
            'interpretation': interpretation,
        }]

    def _chi_square(self, table: Table, command: ChiSquareCommand) -> List[Dict[str, Any]]:
        self._require_columns(table, [command.column1, command.column2])

        row_labels: Dict[Any, int] = {}
        col_labels: Dict[Any, int] = {}
        pairs = []
        for row in table.rows:
            a, b = row[command.column1], row[command.column2]
            if is_null(a) or is_null(b):
                continue
            row_labels.setdefault(a, len(row_labels))
            col_labels.setdefault(b, len(col_labels))
            pairs.append((a, b))

        observed = [[0.0] * len(col_labels) for _ in row_labels]
        for a, b in pairs:
            observed[row_labels[a]][col_labels[b]] += 1

        result = stats.chi_square_test(observed, self.config['alpha'])

        if result.degrees_of_freedom == 0:
            interpretation = "Insufficient categories for a chi-square test (need at least 2x2)"
        elif result.significant:
            interpretation = (f"{command.column1} and {command.column2} are associated "
                              f"({self._significance_text(result.p_value)})")
        else:
            interpretation = (f"No evidence of association between {command.column1} and "
                              f"{command.column2} ({self._significance_text(result.p_value)})")

        return [{
            'test': "Chi-Square Test of Independence",
            'variable1': command.column1,
            'variable2': command.column2,
            'chi_square': result.chi_square,
            'p_value': result.p_value,
            'degrees_of_freedom': result.degrees_of_freedom,
            'significant': result.significant,
            'sample_size': len(pairs),
            'interpretation': interpretation,
        }]

    def _normality(self, table: Table, command: NormalityCommand) -> List[Dict[str, Any]]:
        self._require_columns(table, [command.column])
        values = get_numeric_values(table.rows, command.column)
        result = stats.normality_test(values)

        if len(values) < 3:
            interpretation = "Insufficient data for a normality test (need at least 3 values)"
        elif result.is_normal:
            interpretation = f"{command.column} appears normally distributed"
        else:
            interpretation = f"{command.column} does not appear normally distributed"

        return [{
            'test': "Normality Test (Shapiro-Wilk approximation)",
            'column': command.column,
            'w_statistic': result.w_statistic,
            'p_value': result.p_value,
            'is_normal': result.is_normal,
            'sample_size': len(values),
            'interpretation': interpretation,
        }]

    def _linear_regression(self, table: Table,
                           command: LinearRegressionCommand) -> List[Dict[str, Any]]:
        x_col, y_col = command.x_column, command.y_column
        self._require_columns(table, [x_col, y_col])
        xs, ys = get_paired_values(table.rows, x_col, y_col)
        result = stats.linear_regression(xs, ys)

        if len(xs) < 2:
            interpretation = f"Insufficient data to estimate a relationship between {x_col} and {y_col}"
        elif result.slope == 0 and result.r_squared == 0:
            interpretation = f"No linear relationship detected between {x_col} and {y_col}"
        else:
            direction = "positive" if result.slope > 0 else "negative"
            strength = _relationship_strength(result.r_squared)
            interpretation = (
                f"{strength.capitalize()} {direction} relationship between {x_col} and {y_col} "
                f"(R² = {result.r_squared:.3f}); each unit increase in {x_col} changes "
                f"{y_col} by {result.slope:.4f}"
            )

        return [{
            'analysis_type': "Linear Regression",
            'x_variable': x_col,
            'y_variable': y_col,
            'slope': result.slope,
            'intercept': result.intercept,
            'r_squared': result.r_squared,
            'standard_error': result.standard_error,
            'sample_size': len(xs),
            'interpretation': interpretation,
        }]

    def _multiple_regression(self, table: Table,
                             command: MultipleRegressionCommand) -> List[Dict[str, Any]]:
        x_cols = list(command.x_columns)
        self._require_columns(table, x_cols + [command.y_column])

        matrix = get_complete_matrix(table.rows, x_cols + [command.y_column])
        x_matrix = [row[:-1] for row in matrix]
        y_values = [row[-1] for row in matrix]
        result = stats.multiple_linear_regression(x_matrix, y_values)

        base = {
            'analysis_type': "Multiple Linear Regression",
            'y_variable': command.y_column,
        }
        if not result.coefficients:
            return [{
                **base,
                'term': None,
                'coefficient': None,
                'r_squared': result.r_squared,
                'standard_error': result.standard_error,
                'sample_size': len(matrix),
                'interpretation': (
                    f"Insufficient or collinear data for regression on {len(x_cols)} predictors "
                    f"(need at least {len(x_cols) + 2} complete rows)"
                ),
            }]

        terms = ['intercept'] + x_cols
        interpretation = (
            f"{_relationship_strength(result.r_squared).capitalize()} fit: the predictors explain "
            f"{result.r_squared * 100:.1f}% of the variance in {command.y_column}"
        )
        return [
            {
                **base,
                'term': term,
                'coefficient': coefficient,
                'r_squared': result.r_squared,
                'standard_error': result.standard_error,
                'sample_size': len(matrix),
                'interpretation': interpretation,
            }
            for term, coefficient in zip(terms, result.coefficients)
        ]

    def _trend(self, table: Table, command: TrendCommand) -> List[Dict[str, Any]]:
        self._require_columns(table, [command.column])
        values = get_numeric_values(table.rows, command.column)
        result = stats.trend_analysis(values)

        return [{
            'analysis_type': "Trend Analysis",
            'column': command.column,
            'trend_type': result.trend_type.value,
            'strength': result.strength.value,
            'slope': result.slope,
            'r_squared': result.r_squared,
            'sample_size': len(values),
            'description': result.description,
            'interpretation': f"{result.description} across {len(values)} observations of {command.column}",
        }]

    def _forecast(self, table: Table, command: ForecastCommand) -> List[Dict[str, Any]]:
        self._require_columns(table, [command.column])

        max_periods = self.config['max_forecast_periods']
        periods = self.config['default_forecast_periods'] if command.periods is None else command.periods
        if periods < 1 or periods > max_periods:
            raise DomainException(
                f"Forecast periods must be between 1 and {max_periods}",
                parameter='periods',
                bound=f"[1, {max_periods}]"
            )

        values = get_numeric_values(table.rows, command.column)
        result = stats.forecast(values, periods, max_periods=max_periods)

        if result.method == "insufficient_data":
            interpretation = (f"Insufficient data to forecast {command.column} "
                              f"(need at least 3 values, got {len(values)})")
        else:
            interpretation = (f"Linear extrapolation of {len(values)} historical values of "
                              f"{command.column} over {periods} future periods")

        summary = {
            'analysis_type': "Forecast Summary",
            'column': command.column,
            'historical_periods': len(values),
            'forecast_periods': periods,
            'method': result.method,
            'interpretation': interpretation,
        }
        forecast_rows = [
            {
                'period': i + 1,
                'forecast': result.forecasts[i],
                'lower_bound': result.lower[i],
                'upper_bound': result.upper[i],
                'method': result.method,
            }
            for i in range(len(result.forecasts))
        ]
        return [summary] + forecast_rows


def execute(table: Table, expression: str, config: Optional[Dict[str, Any]] = None) -> QueryResult:
    """기본 설정의 QueryExecutor로 표현식을 실행합니다."""
    return QueryExecutor(config).execute(table, expression)
