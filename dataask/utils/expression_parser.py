"""
표현식 파서

pandas 스타일의 제한된 표현식 문자열을 타입이 지정된 명령(Command) 객체로 변환합니다.
인식하는 형태는 고정된 목록이며, 각 형태는 공백을 제거한 전체 문자열에 대해
앵커된 정규식으로 매칭됩니다. 테이블 변수명은 임의의 식별자(df, t, table ...)를 허용하며
생략할 수도 있고 (.head(5), ['c'].value_counts()),
추론 통계 호출에는 선택적으로 `stats.` 또는 `scipy.stats.` 접두사를 붙일 수 있습니다.

명령 우선순위: 테이블 수준 연산이 추론/예측 연산보다 먼저 검사됩니다.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Pattern, Tuple

from ..exceptions import InvalidSyntaxException

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 명령 정의
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Condition:
    """불리언 필터 조건: column <operator> value"""
    column: str
    operator: str
    value: Any


@dataclass(frozen=True)
class SeriesRef:
    """(선택적으로 필터링된) 단일 컬럼 참조"""
    column: str
    condition: Optional[Condition] = None

    @property
    def label(self) -> str:
        if self.condition is None:
            return self.column
        return f"{self.column}[{self.condition.column} {self.condition.operator} {self.condition.value!r}]"


@dataclass(frozen=True)
class HeadCommand:
    n: Optional[int] = None


@dataclass(frozen=True)
class TailCommand:
    n: Optional[int] = None


@dataclass(frozen=True)
class ShapeCommand:
    pass


@dataclass(frozen=True)
class ColumnsCommand:
    pass


@dataclass(frozen=True)
class DtypesCommand:
    pass


@dataclass(frozen=True)
class InfoCommand:
    pass


@dataclass(frozen=True)
class DescribeCommand:
    column: Optional[str] = None


@dataclass(frozen=True)
class ValueCountsCommand:
    column: str


@dataclass(frozen=True)
class GroupByCommand:
    keys: Tuple[str, ...]
    aggregation: str
    target: Optional[str] = None


@dataclass(frozen=True)
class SortValuesCommand:
    columns: Tuple[str, ...]
    ascending: bool = True


@dataclass(frozen=True)
class CorrelationMatrixCommand:
    columns: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class CovarianceMatrixCommand:
    columns: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class PairwiseCorrelationCommand:
    column1: str
    column2: str


@dataclass(frozen=True)
class ColumnStatCommand:
    column: str
    statistic: str
    argument: Optional[float] = None


@dataclass(frozen=True)
class TableStatCommand:
    statistic: str


@dataclass(frozen=True)
class SelectionCommand:
    columns: Optional[Tuple[str, ...]] = None
    condition: Optional[Condition] = None


@dataclass(frozen=True)
class OneSampleTTestCommand:
    column: str
    population_mean: float


@dataclass(frozen=True)
class TwoSampleTTestCommand:
    sample1: SeriesRef
    sample2: SeriesRef


@dataclass(frozen=True)
class ChiSquareCommand:
    column1: str
    column2: str


@dataclass(frozen=True)
class NormalityCommand:
    column: str
    method: str = "shapiro"


@dataclass(frozen=True)
class LinearRegressionCommand:
    x_column: str
    y_column: str


@dataclass(frozen=True)
class MultipleRegressionCommand:
    x_columns: Tuple[str, ...]
    y_column: str


@dataclass(frozen=True)
class TrendCommand:
    column: str


@dataclass(frozen=True)
class ForecastCommand:
    column: str
    periods: Optional[int] = None


# ---------------------------------------------------------------------------
# 정규식 구성 요소
# ---------------------------------------------------------------------------

COLUMN_STATISTICS = (
    'mean', 'median', 'std', 'var', 'sum', 'min', 'max', 'count', 'nunique',
    'skew', 'kurt', 'kurtosis', 'mode', 'unique',
)
GROUPBY_AGGREGATIONS = ('sum', 'mean', 'count', 'min', 'max')

_IDENT = r'[A-Za-z_]\w*'
_QSTR = r'''(?:'[^']*'|"[^"]*")'''
_NUMBER = r'-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?'
_LITERAL = rf'(?:{_QSTR}|{_NUMBER}|True|False|None)'
_OPERATOR = r'(?:>=|<=|==|!=|>|<)'
_STATS_PREFIX = r'(?:(?:scipy\s*\.\s*)?stats\s*\.\s*)?'

# 테이블 변수명은 생략 가능: df.head(5) 또는 .head(5)
_TABLE = rf'(?:{_IDENT}\s*)?'
# df['c'] 또는 ['c']
_COLUMN = rf'{_TABLE}\[\s*({_QSTR})\s*\]'
# [['a', 'b']]
_COLUMN_LIST_BODY = rf'\[\s*\[\s*({_QSTR}(?:\s*,\s*{_QSTR})*)\s*,?\s*\]\s*\]'
# [df['c'] > 5] 또는 [c > 5]
_CONDITION = (
    rf'\[\s*({_TABLE}\[\s*{_QSTR}\s*\]|{_IDENT})\s*({_OPERATOR})\s*({_LITERAL})\s*\]'
)
_AGG_NAMES = '|'.join(GROUPBY_AGGREGATIONS)
_STAT_NAMES = '|'.join(sorted(COLUMN_STATISTICS, key=len, reverse=True))
_BOOL = r'(True|False)'


def _unquote(token: str) -> str:
    return token[1:-1]


def _quoted_list(body: str) -> Tuple[str, ...]:
    return tuple(_unquote(token) for token in re.findall(_QSTR, body))


def parse_literal(token: str) -> Any:
    """필터/인자 리터럴을 파이썬 값으로 변환합니다."""
    token = token.strip()
    if token[:1] in ("'", '"'):
        return _unquote(token)
    if token == 'True':
        return True
    if token == 'False':
        return False
    if token == 'None':
        return None
    if re.fullmatch(r'-?\d+', token):
        return int(token)
    return float(token)


def _condition(column: str, operator: str, literal: str) -> Condition:
    """필터 좌변은 df['c'], ['c'] 또는 c 형태"""
    quoted = re.search(_QSTR, column)
    name = _unquote(quoted.group(0)) if quoted else column
    return Condition(column=name, operator=operator, value=parse_literal(literal))


def _series_ref(match: re.Match, offset: int) -> SeriesRef:
    """_SAMPLE 패턴의 그룹(offset부터 5개)을 SeriesRef로 변환"""
    plain, cond_col, cond_op, cond_lit, filtered = match.group(offset, offset + 1, offset + 2,
                                                              offset + 3, offset + 4)
    if plain is not None:
        return SeriesRef(column=_unquote(plain))
    return SeriesRef(column=_unquote(filtered), condition=_condition(cond_col, cond_op, cond_lit))


# df['c'], df[df['g'] == 'A']['c'] 또는 df[g == 'A']['c'] (그룹 5개)
_SAMPLE = (
    rf'(?:{_COLUMN}'
    rf'|{_TABLE}{_CONDITION}\s*\[\s*({_QSTR})\s*\])'
)


# ---------------------------------------------------------------------------
# 파서
# ---------------------------------------------------------------------------

Builder = Callable[[re.Match], Any]


class ExpressionParser:
    """
    표현식 파서

    등록된 (이름, 정규식, 빌더) 목록을 우선순위 순으로 검사하여 처음 일치한 형태의
    명령 객체를 반환합니다. 일치하는 형태가 없지만 알려진 연산 키워드가 포함된 경우
    InvalidSyntaxException을 발생시키고, 그 외에는 None을 반환합니다.
    """

    # (키워드 정규식, 연산 이름, 기대 형태) - 구문 오류 메시지에 사용
    FAMILY_KEYWORDS: List[Tuple[str, str, str]] = [
        (r'\.head\s*\(', 'head', "df.head(n)"),
        (r'\.tail\s*\(', 'tail', "df.tail(n)"),
        (r'\.describe\s*\(', 'describe', "df.describe() or df['column'].describe()"),
        (r'\.value_counts\s*\(', 'value_counts', "df['column'].value_counts()"),
        (r'\.groupby\s*\(', 'groupby', "df.groupby(['column']).mean() or df.groupby('column')['value'].sum()"),
        (r'\.sort_values\s*\(', 'sort_values', "df.sort_values('column', ascending=True)"),
        (r'\.corr\s*\(', 'corr', "df[['a', 'b']].corr() or df['a'].corr(df['b'])"),
        (r'\.cov\s*\(', 'cov', "df[['a', 'b']].cov()"),
        (r'\.quantile\s*\(', 'quantile', "df['column'].quantile(0.5)"),
        (r'\bttest_1samp\s*\(', 'ttest_1samp', "ttest_1samp(df['column'], 0)"),
        (r'\bttest_ind\s*\(', 'ttest_ind', "ttest_ind(df['a'], df['b'])"),
        (r'\bchi2_contingency\s*\(', 'chi2_contingency', "chi2_contingency(df['a'], df['b'])"),
        (r'\bnormaltest\s*\(', 'normaltest', "normaltest(df['column'])"),
        (r'\bshapiro\s*\(', 'shapiro', "shapiro(df['column'])"),
        (r'\blinregress\s*\(', 'linregress', "linregress(df['x'], df['y'])"),
        (r'\bmultiple_regression\s*\(', 'multiple_regression', "multiple_regression(df[['x1', 'x2']], df['y'])"),
        (r'\btrend_analysis\s*\(', 'trend_analysis', "trend_analysis(df['column'])"),
        (r'\bforecast\s*\(', 'forecast', "forecast(df['column'], periods=5)"),
    ]

    def __init__(self):
        self._shapes: List[Tuple[str, Pattern, Builder]] = self._build_shapes()
        self._keywords = [(re.compile(pattern), name, expected)
                          for pattern, name, expected in self.FAMILY_KEYWORDS]

    def _build_shapes(self) -> List[Tuple[str, Pattern, Builder]]:
        shapes = [
            # 테이블 수준 연산
            ('head', rf'{_TABLE}\.\s*head\s*\(\s*(?:n\s*=\s*)?(\d+)?\s*\)',
             lambda m: HeadCommand(n=int(m.group(1)) if m.group(1) else None)),
            ('tail', rf'{_TABLE}\.\s*tail\s*\(\s*(?:n\s*=\s*)?(\d+)?\s*\)',
             lambda m: TailCommand(n=int(m.group(1)) if m.group(1) else None)),
            ('shape', rf'{_TABLE}\.\s*shape', lambda m: ShapeCommand()),
            ('columns', rf'{_TABLE}\.\s*columns(?:\s*\.\s*tolist\s*\(\s*\))?', lambda m: ColumnsCommand()),
            ('dtypes', rf'{_TABLE}\.\s*dtypes', lambda m: DtypesCommand()),
            ('describe', rf'{_TABLE}\.\s*describe\s*\(\s*\)', lambda m: DescribeCommand()),
            ('describe', rf'{_COLUMN}\s*\.\s*describe\s*\(\s*\)',
             lambda m: DescribeCommand(column=_unquote(m.group(1)))),
            ('info', rf'{_TABLE}\.\s*info\s*\(\s*\)', lambda m: InfoCommand()),
            ('value_counts', rf'{_COLUMN}\s*\.\s*value_counts\s*\(\s*\)',
             lambda m: ValueCountsCommand(column=_unquote(m.group(1)))),
            ('groupby',
             rf'{_TABLE}\.\s*groupby\s*\(\s*(?:by\s*=\s*)?(\[[^\]]*\]|{_QSTR})\s*\)'
             rf'(?:\s*\[\s*({_QSTR})\s*\])?\s*\.\s*({_AGG_NAMES})\s*\(\s*\)',
             lambda m: GroupByCommand(keys=_quoted_list(m.group(1)), aggregation=m.group(3),
                                      target=_unquote(m.group(2)) if m.group(2) else None)),
            ('groupby',
             rf'{_TABLE}\.\s*groupby\s*\(\s*(?:by\s*=\s*)?(\[[^\]]*\]|{_QSTR})\s*\)'
             rf'(?:\s*\[\s*({_QSTR})\s*\])?\s*\.\s*agg\s*\(\s*(?:func\s*=\s*)?[\'"]({_AGG_NAMES})[\'"]\s*\)',
             lambda m: GroupByCommand(keys=_quoted_list(m.group(1)), aggregation=m.group(3),
                                      target=_unquote(m.group(2)) if m.group(2) else None)),
            ('sort_values',
             rf'{_TABLE}\.\s*sort_values\s*\(\s*(?:by\s*=\s*)?(\[\s*{_QSTR}(?:\s*,\s*{_QSTR})*\s*,?\s*\]|{_QSTR})'
             rf'(?:\s*,\s*ascending\s*=\s*{_BOOL})?\s*\)',
             lambda m: SortValuesCommand(columns=_quoted_list(m.group(1)),
                                         ascending=m.group(2) != 'False')),
            ('corr', rf'{_TABLE}{_COLUMN_LIST_BODY}\s*\.\s*corr\s*\(\s*\)(?:\s*\.\s*reset_index\s*\(\s*\))?',
             lambda m: CorrelationMatrixCommand(columns=_quoted_list(m.group(1)))),
            ('corr', rf'{_TABLE}\.\s*corr\s*\(\s*\)(?:\s*\.\s*reset_index\s*\(\s*\))?',
             lambda m: CorrelationMatrixCommand()),
            ('corr', rf'{_COLUMN}\s*\.\s*corr\s*\(\s*{_COLUMN}\s*\)',
             lambda m: PairwiseCorrelationCommand(column1=_unquote(m.group(1)),
                                                  column2=_unquote(m.group(2)))),
            ('cov', rf'{_TABLE}{_COLUMN_LIST_BODY}\s*\.\s*cov\s*\(\s*\)(?:\s*\.\s*reset_index\s*\(\s*\))?',
             lambda m: CovarianceMatrixCommand(columns=_quoted_list(m.group(1)))),
            ('cov', rf'{_TABLE}\.\s*cov\s*\(\s*\)(?:\s*\.\s*reset_index\s*\(\s*\))?',
             lambda m: CovarianceMatrixCommand()),
            ('quantile', rf'{_COLUMN}\s*\.\s*quantile\s*\(\s*(?:q\s*=\s*)?({_NUMBER})\s*\)',
             lambda m: ColumnStatCommand(column=_unquote(m.group(1)), statistic='quantile',
                                         argument=float(m.group(2)))),
            ('column_stat', rf'{_COLUMN}\s*\.\s*({_STAT_NAMES})\s*\(\s*\)',
             lambda m: ColumnStatCommand(column=_unquote(m.group(1)), statistic=m.group(2))),
            ('table_stat', rf'{_TABLE}\.\s*({_STAT_NAMES})\s*\(\s*\)',
             lambda m: TableStatCommand(statistic=m.group(1))),
            ('selection', _COLUMN,
             lambda m: SelectionCommand(columns=(_unquote(m.group(1)),))),
            ('selection', rf'{_TABLE}{_COLUMN_LIST_BODY}',
             lambda m: SelectionCommand(columns=_quoted_list(m.group(1)))),
            ('selection', rf'{_TABLE}{_CONDITION}',
             lambda m: SelectionCommand(condition=_condition(m.group(1), m.group(2), m.group(3)))),
            ('selection', rf'{_TABLE}{_CONDITION}\s*\[\s*({_QSTR})\s*\]',
             lambda m: SelectionCommand(columns=(_unquote(m.group(4)),),
                                        condition=_condition(m.group(1), m.group(2), m.group(3)))),
            ('selection', rf'{_TABLE}{_CONDITION}\s*{_COLUMN_LIST_BODY}',
             lambda m: SelectionCommand(columns=_quoted_list(m.group(4)),
                                        condition=_condition(m.group(1), m.group(2), m.group(3)))),

            # 추론 / 예측 연산
            ('ttest_1samp',
             rf'{_STATS_PREFIX}ttest_1samp\s*\(\s*{_COLUMN}\s*,\s*(?:popmean\s*=\s*)?({_NUMBER})\s*\)',
             lambda m: OneSampleTTestCommand(column=_unquote(m.group(1)),
                                             population_mean=float(m.group(2)))),
            ('ttest_ind',
             rf'{_STATS_PREFIX}ttest_ind\s*\(\s*{_SAMPLE}\s*,\s*{_SAMPLE}\s*\)',
             lambda m: TwoSampleTTestCommand(sample1=_series_ref(m, 1), sample2=_series_ref(m, 6))),
            ('chi2_contingency',
             rf'{_STATS_PREFIX}chi2_contingency\s*\(\s*{_COLUMN}\s*,\s*{_COLUMN}\s*\)',
             lambda m: ChiSquareCommand(column1=_unquote(m.group(1)), column2=_unquote(m.group(2)))),
            ('chi2_contingency',
             rf'{_STATS_PREFIX}chi2_contingency\s*\(\s*(?:pd\s*\.\s*)?crosstab\s*\(\s*{_COLUMN}\s*,\s*{_COLUMN}\s*\)\s*\)',
             lambda m: ChiSquareCommand(column1=_unquote(m.group(1)), column2=_unquote(m.group(2)))),
            ('normaltest', rf'{_STATS_PREFIX}(normaltest|shapiro)\s*\(\s*{_COLUMN}\s*\)',
             lambda m: NormalityCommand(column=_unquote(m.group(2)), method=m.group(1))),
            ('linregress', rf'{_STATS_PREFIX}linregress\s*\(\s*{_COLUMN}\s*,\s*{_COLUMN}\s*\)',
             lambda m: LinearRegressionCommand(x_column=_unquote(m.group(1)),
                                               y_column=_unquote(m.group(2)))),
            ('multiple_regression',
             rf'{_STATS_PREFIX}multiple_regression\s*\(\s*{_TABLE}{_COLUMN_LIST_BODY}\s*,\s*{_COLUMN}\s*\)',
             lambda m: MultipleRegressionCommand(x_columns=_quoted_list(m.group(1)),
                                                 y_column=_unquote(m.group(2)))),
            ('trend_analysis', rf'{_STATS_PREFIX}trend_analysis\s*\(\s*{_COLUMN}\s*\)',
             lambda m: TrendCommand(column=_unquote(m.group(1)))),
            ('forecast',
             rf'{_STATS_PREFIX}forecast\s*\(\s*{_COLUMN}\s*(?:,\s*(?:periods\s*=\s*)?(-?\d+)\s*)?\)',
             lambda m: ForecastCommand(column=_unquote(m.group(1)),
                                       periods=int(m.group(2)) if m.group(2) is not None else None)),
        ]
        return [(name, re.compile(pattern), builder) for name, pattern, builder in shapes]

    def parse(self, expression: str) -> Optional[Any]:
        """
        표현식을 명령 객체로 변환합니다.

        Args:
            expression: pandas 스타일 표현식 문자열

        Returns:
            명령 객체. 인식할 수 없는 표현식이면 None

        Raises:
            InvalidSyntaxException: 알려진 연산 키워드가 있으나 형태가 맞지 않는 경우
        """
        code = expression.strip()

        for name, pattern, builder in self._shapes:
            match = pattern.fullmatch(code)
            if match:
                command = builder(match)
                logger.debug(f"표현식 매칭: shape={name}, command={command}")
                return command

        for pattern, name, expected in self._keywords:
            if pattern.search(code):
                raise InvalidSyntaxException(name, expected)

        logger.debug(f"인식할 수 없는 표현식: {code!r}")
        return None
