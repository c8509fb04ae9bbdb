"""osdeps: discover the OS shared libraries needed by compiled artifacts in an environment."""

__version__ = "0.1.0"

from osdeps.analyzer import DependencyResolver, WorkerPool, merge
from osdeps.config import ScanConfig, default_config, load_config
from osdeps.exceptions import (
    ConfigError,
    ConfigurationWarning,
    OsDepsError,
    OutputFormatError,
    ParseError,
    ScanError,
    UnsupportedTargetError,
)
from osdeps.models import AnalysisReport, Artifact, ArtifactKind, ShardResult
from osdeps.output import format_dependencies
from osdeps.parsers import create_parser
from osdeps.pipeline import analyze_artifacts, analyze_environment
from osdeps.scanners import create_scanner

__all__ = [
    "AnalysisReport",
    "Artifact",
    "ArtifactKind",
    "ConfigError",
    "ConfigurationWarning",
    "DependencyResolver",
    "OsDepsError",
    "OutputFormatError",
    "ParseError",
    "ScanConfig",
    "ScanError",
    "ShardResult",
    "UnsupportedTargetError",
    "WorkerPool",
    "analyze_artifacts",
    "analyze_environment",
    "create_parser",
    "create_scanner",
    "default_config",
    "format_dependencies",
    "load_config",
    "merge",
]
