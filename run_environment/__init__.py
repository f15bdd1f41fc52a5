"""Runtime detection of the distribution environment: debug, TestFlight or App Store"""
from .environment import RunEnvironment
from .detection import DetectionResult, EnvironmentDetector
from .providers import (
    AppBundle,
    BuildConfiguration,
    BundleMetadata,
    HostPlatform,
    PlatformCapabilities,
    ProcessEnvironment,
)
from .config import Settings
from .context import EnvironmentContext, runtime_context, current, under_review

__all__ = [
    'RunEnvironment',
    'DetectionResult',
    'EnvironmentDetector',
    'AppBundle',
    'BuildConfiguration',
    'BundleMetadata',
    'HostPlatform',
    'PlatformCapabilities',
    'ProcessEnvironment',
    'Settings',
    'EnvironmentContext',
    'runtime_context',
    'current',
    'under_review',
]
