"""Process-wide access to the run environment"""
from typing import Optional

from .config import Settings
from .detection import EnvironmentDetector, is_under_review
from .environment import RunEnvironment
from .logging_config import get_logger, log_error
from .providers import BuildConfiguration, ProcessEnvironment


class EnvironmentContext:
    """Singleton holding the detector used by ``current`` and ``under_review``"""

    _instance: Optional['EnvironmentContext'] = None

    def __new__(cls) -> 'EnvironmentContext':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not hasattr(self, '_initialized'):
            self._detector: Optional[EnvironmentDetector] = None
            self._initialized = True

    def initialize(self, settings: Optional[Settings] = None,
                   detector: Optional[EnvironmentDetector] = None) -> EnvironmentDetector:
        """Install a detector, built from ``settings`` unless one is given.

        Unreadable settings are logged and replaced by a release-build
        detector on the host, so detection keeps working.
        """
        logger = get_logger(__name__)
        if detector is None:
            try:
                detector = EnvironmentDetector.from_settings(settings or Settings())
            except (ValueError, OSError) as e:
                log_error(logger, e, {"component": "settings", "fallback": "release_build"})
                detector = EnvironmentDetector(build=BuildConfiguration())
        self._detector = detector

        logger.debug(
            "Run environment context initialized",
            debug_build=detector.build.debug,
            platform=type(detector.platform).__name__,
            bundle=type(detector.bundle).__name__
        )
        return detector

    @property
    def detector(self) -> EnvironmentDetector:
        """Current detector (initialize if needed)"""
        if self._detector is None:
            return self.initialize()
        return self._detector

    def reset(self) -> None:
        """Drop the detector so the next call rebuilds it from settings"""
        self._detector = None

    def current(self) -> RunEnvironment:
        return self.detector.current()

    def under_review(self) -> bool:
        # Only the process environment is needed, settings are not read
        if self._detector is None:
            return is_under_review(ProcessEnvironment())
        return self._detector.under_review()


# Global instance for easy access
runtime_context = EnvironmentContext()


def current() -> RunEnvironment:
    """Run environment of this process"""
    return runtime_context.current()


def under_review() -> bool:
    """Best-effort check whether the app runs under automated review"""
    return runtime_context.under_review()
