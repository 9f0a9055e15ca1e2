from stockchart.areas import PanelAreas, resolve_display_areas
from stockchart.chart import StockChart
from stockchart.config import ChartConfig, ChartSettings, PanelConfig, load_chart_config
from stockchart.entities import EmptyKEntity, KEntity
from stockchart.errors import ChartConfigError, ChartDataError, SingularMatrixError
from stockchart.geometry import Path, Rect
from stockchart.highlight import Highlight
from stockchart.matrix import Matrix
from stockchart.panels import AvgPricePanel, BasePanel, CandlePanel, KdjPanel, MacdPanel
from stockchart.transform import ExternalTransforms, FrameMatrices, TransformPipeline

__all__ = [
    "AvgPricePanel",
    "BasePanel",
    "CandlePanel",
    "ChartConfig",
    "ChartConfigError",
    "ChartDataError",
    "ChartSettings",
    "EmptyKEntity",
    "ExternalTransforms",
    "FrameMatrices",
    "Highlight",
    "KEntity",
    "KdjPanel",
    "MacdPanel",
    "Matrix",
    "PanelAreas",
    "PanelConfig",
    "Path",
    "Rect",
    "SingularMatrixError",
    "StockChart",
    "TransformPipeline",
    "load_chart_config",
    "resolve_display_areas",
]
