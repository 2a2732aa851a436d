from .analysis import AnalysisFlow, build_analysis_flow

__all__ = ["AnalysisFlow", "build_analysis_flow"]
