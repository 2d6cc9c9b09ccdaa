"""Domain models for the restaurant report normalizer & metrics engine.

Grid/record models feed the normalizer; LineItem, SummaryData and PlReport
carry parsed period reports; DerivedMetric is the KPI result shape.
"""

from .config_models import DashboardConfig, PlReportConfig, ProductUsageConfig, SurveyConfig
from .derived_metric import DerivedMetric
from .grid import VALUE_FIELD, CellValue, HeaderPath, NormalizationResult, NormalizedRecord, RawGrid
from .line_item import LineItem
from .pl_report import PlReport
from .product_usage import GroupUsageSummary, ProductUsage
from .summary_data import LineFigures, OperatingStatistics, SummaryData
from .survey import SurveyMetrics, SurveySummary, SurveyTable

__all__ = [
    # Configuration models
    "DashboardConfig",
    "PlReportConfig",
    "SurveyConfig",
    "ProductUsageConfig",
    # Grid normalization
    "RawGrid",
    "VALUE_FIELD",
    "CellValue",
    "HeaderPath",
    "NormalizedRecord",
    "NormalizationResult",
    # Reports
    "LineItem",
    "LineFigures",
    "OperatingStatistics",
    "SummaryData",
    "PlReport",
    "DerivedMetric",
    # Surveys
    "SurveyTable",
    "SurveyMetrics",
    "SurveySummary",
    # Product usage
    "ProductUsage",
    "GroupUsageSummary",
]
