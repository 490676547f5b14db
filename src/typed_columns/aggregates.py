"""Aggregate functions that can appear in AggregateFunction columns."""

from __future__ import annotations

from enum import Enum

# Suffixes the database appends to an aggregate function to change its
# behaviour; longest first so MergeState is tried before State and Merge.
COMBINATORS = (
    "SimpleState",
    "MergeState",
    "OrDefault",
    "Resample",
    "Distinct",
    "ForEach",
    "OrNull",
    "ArgMax",
    "ArgMin",
    "Array",
    "State",
    "Merge",
    "Map",
    "If",
)


class AggregateFunction(Enum):
    """Canonical aggregate function identifiers."""

    ANY = "any"
    ANY_HEAVY = "anyHeavy"
    ANY_LAST = "anyLast"
    ARG_MAX = "argMax"
    ARG_MIN = "argMin"
    AVG = "avg"
    AVG_WEIGHTED = "avgWeighted"
    BOUNDING_RATIO = "boundingRatio"
    CATEGORICAL_INFORMATION_VALUE = "categoricalInformationValue"
    CORR = "corr"
    COUNT = "count"
    COVAR_POP = "covarPop"
    COVAR_SAMP = "covarSamp"
    DELTA_SUM = "deltaSum"
    ENTROPY = "entropy"
    FIRST_VALUE = "first_value"
    GROUP_ARRAY = "groupArray"
    GROUP_ARRAY_INSERT_AT = "groupArrayInsertAt"
    GROUP_ARRAY_MOVING_AVG = "groupArrayMovingAvg"
    GROUP_ARRAY_MOVING_SUM = "groupArrayMovingSum"
    GROUP_ARRAY_SAMPLE = "groupArraySample"
    GROUP_BIT_AND = "groupBitAnd"
    GROUP_BIT_OR = "groupBitOr"
    GROUP_BIT_XOR = "groupBitXor"
    GROUP_BITMAP = "groupBitmap"
    GROUP_BITMAP_AND = "groupBitmapAnd"
    GROUP_BITMAP_OR = "groupBitmapOr"
    GROUP_BITMAP_XOR = "groupBitmapXor"
    GROUP_UNIQ_ARRAY = "groupUniqArray"
    HISTOGRAM = "histogram"
    KURT_POP = "kurtPop"
    KURT_SAMP = "kurtSamp"
    LAST_VALUE = "last_value"
    MANN_WHITNEY_U_TEST = "mannWhitneyUTest"
    MAX = "max"
    MAX_MAP = "maxMap"
    MIN = "min"
    MIN_MAP = "minMap"
    QUANTILE = "quantile"
    QUANTILE_BFLOAT16 = "quantileBFloat16"
    QUANTILE_DETERMINISTIC = "quantileDeterministic"
    QUANTILE_EXACT = "quantileExact"
    QUANTILE_EXACT_HIGH = "quantileExactHigh"
    QUANTILE_EXACT_LOW = "quantileExactLow"
    QUANTILE_EXACT_WEIGHTED = "quantileExactWeighted"
    QUANTILE_TDIGEST = "quantileTDigest"
    QUANTILE_TDIGEST_WEIGHTED = "quantileTDigestWeighted"
    QUANTILE_TIMING = "quantileTiming"
    QUANTILE_TIMING_WEIGHTED = "quantileTimingWeighted"
    QUANTILES = "quantiles"
    QUANTILES_BFLOAT16 = "quantilesBFloat16"
    QUANTILES_EXACT = "quantilesExact"
    QUANTILES_TDIGEST = "quantilesTDigest"
    QUANTILES_TIMING = "quantilesTiming"
    RANK_CORR = "rankCorr"
    RETENTION = "retention"
    SEQUENCE_COUNT = "sequenceCount"
    SEQUENCE_MATCH = "sequenceMatch"
    SIMPLE_LINEAR_REGRESSION = "simpleLinearRegression"
    SKEW_POP = "skewPop"
    SKEW_SAMP = "skewSamp"
    STDDEV_POP = "stddevPop"
    STDDEV_SAMP = "stddevSamp"
    STOCHASTIC_LINEAR_REGRESSION = "stochasticLinearRegression"
    STOCHASTIC_LOGISTIC_REGRESSION = "stochasticLogisticRegression"
    STUDENT_T_TEST = "studentTTest"
    SUM = "sum"
    SUM_KAHAN = "sumKahan"
    SUM_MAP = "sumMap"
    SUM_WITH_OVERFLOW = "sumWithOverflow"
    TOP_K = "topK"
    TOP_K_WEIGHTED = "topKWeighted"
    UNIQ = "uniq"
    UNIQ_COMBINED = "uniqCombined"
    UNIQ_COMBINED64 = "uniqCombined64"
    UNIQ_EXACT = "uniqExact"
    UNIQ_HLL12 = "uniqHLL12"
    UNIQ_THETA = "uniqTheta"
    VAR_POP = "varPop"
    VAR_SAMP = "varSamp"
    WELCH_T_TEST = "welchTTest"
    WINDOW_FUNNEL = "windowFunnel"

    @classmethod
    def of(cls, name: str) -> AggregateFunction | None:
        """Resolve a function name, stripping combinator suffixes.

        ``sumIf`` and ``uniqMergeState`` resolve to ``sum`` and ``uniq``.
        Returns None when no known function is found.
        """
        while name:
            function = _BY_NAME.get(name) or _ALIASES.get(name)
            if function is not None:
                return function
            for suffix in COMBINATORS:
                if name.endswith(suffix) and len(name) > len(suffix):
                    name = name[: -len(suffix)]
                    break
            else:
                return None
        return None


_BY_NAME: dict[str, AggregateFunction] = {f.value: f for f in AggregateFunction}

# Lower-case spellings and synonyms the database also accepts
_ALIASES: dict[str, AggregateFunction] = {
    "median": AggregateFunction.QUANTILE,
    "medianExact": AggregateFunction.QUANTILE_EXACT,
    "medianTiming": AggregateFunction.QUANTILE_TIMING,
    "medianTDigest": AggregateFunction.QUANTILE_TDIGEST,
    "medianDeterministic": AggregateFunction.QUANTILE_DETERMINISTIC,
    "VAR_POP": AggregateFunction.VAR_POP,
    "VAR_SAMP": AggregateFunction.VAR_SAMP,
    "STDDEV_POP": AggregateFunction.STDDEV_POP,
    "STDDEV_SAMP": AggregateFunction.STDDEV_SAMP,
    "COVAR_POP": AggregateFunction.COVAR_POP,
    "COVAR_SAMP": AggregateFunction.COVAR_SAMP,
}
