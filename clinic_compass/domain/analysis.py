"""Analysis dispatch - one entry point per analysis tab"""

from typing import Callable, Dict, Union

from clinic_compass.domain.analyzers import (
    analyze_coo_finance,
    analyze_location,
    analyze_package,
    analyze_positioning,
    analyze_risk,
)
from clinic_compass.domain.benchmark import analyze_benchmark
from clinic_compass.domain.exceptions import UnknownAnalysisKindError
from clinic_compass.domain.models import (
    AnalysisKind,
    BenchmarkAnalysis,
    ClinicProfile,
    CooAnalysis,
    LocationAnalysis,
    PackageAnalysis,
    PositioningAnalysis,
    RiskAnalysis,
    SimulatorAnalysis,
)
from clinic_compass.domain.simulator import analyze_simulator

# Tagged by each result's `kind` field
AnalysisResult = Union[
    LocationAnalysis,
    CooAnalysis,
    PackageAnalysis,
    PositioningAnalysis,
    RiskAnalysis,
    SimulatorAnalysis,
    BenchmarkAnalysis,
]

ANALYZERS: Dict[AnalysisKind, Callable[[ClinicProfile], AnalysisResult]] = {
    AnalysisKind.LOCATION: analyze_location,
    AnalysisKind.COO: analyze_coo_finance,
    AnalysisKind.PACKAGE: analyze_package,
    AnalysisKind.POSITIONING: analyze_positioning,
    AnalysisKind.RISK: analyze_risk,
    AnalysisKind.SIMULATOR: analyze_simulator,
    AnalysisKind.BENCHMARK: analyze_benchmark,
}


def parse_analysis_kind(value: str) -> AnalysisKind:
    """Map a tab identifier to an AnalysisKind, rejecting anything outside the closed set"""
    try:
        return AnalysisKind(value)
    except ValueError as e:
        raise UnknownAnalysisKindError(f"Unknown analysis tab: {value!r}") from e


def run_analysis(kind: AnalysisKind, profile: ClinicProfile) -> AnalysisResult:
    """Main entry point: run the deterministic analysis for one tab"""
    return ANALYZERS[kind](profile)
