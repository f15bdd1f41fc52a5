"""Run environment detection: debug build, TestFlight or App Store"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

from .config import Settings
from .environment import RunEnvironment
from .logging_config import get_logger, log_detection
from .providers import (
    AppBundle,
    BuildConfiguration,
    BundleMetadata,
    HostPlatform,
    MODERN_PLATFORM_VERSIONS,
    PlatformCapabilities,
    ProcessEnvironment,
    discover_bundle_path,
)

SANDBOX_RECEIPT_MARKER = "sandboxreceipt"

# Set by the networking diagnostics of the review tooling
REVIEW_ENVIRONMENT_VARIABLES = ("CFNETWORK_DIAGNOSTICS", "CFNETWORK_HAR_LOGGING")

T = TypeVar("T")


def is_under_review(process_env: ProcessEnvironment) -> bool:
    """Check for the environment variables set during automated review"""
    return any(process_env.contains(name) for name in REVIEW_ENVIRONMENT_VARIABLES)


@dataclass(frozen=True)
class DetectionResult:
    """Result of environment detection"""
    environment: RunEnvironment
    method: str
    reason: str
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False)


class EnvironmentDetector:
    """Classify the running binary as debug, TestFlight or App Store.

    Rules are evaluated in order and the first match wins:

    1. debug build configuration -> DEBUG
    2. running in a simulator -> DEBUG
    3. on platforms older than ``MODERN_PLATFORM_VERSIONS`` the install
       receipt is consulted: no receipt -> DEBUG, a sandbox receipt ->
       TEST_FLIGHT. Newer platforms skip this step entirely.
    4. embedded provisioning profile -> TEST_FLIGHT
    5. otherwise -> APP_STORE

    On modern platforms a TestFlight build without an embedded provisioning
    profile is therefore reported as APP_STORE.

    Provider failures are logged and treated as a missing artifact, so
    ``detect`` always returns one of the three environments.
    """

    def __init__(self,
                 build: Optional[BuildConfiguration] = None,
                 platform: Optional[PlatformCapabilities] = None,
                 bundle: Optional[BundleMetadata] = None,
                 process_env: Optional[ProcessEnvironment] = None,
                 force_environment: Optional[RunEnvironment] = None):
        self.build = build or BuildConfiguration()
        self.platform = platform or HostPlatform()
        self.bundle = bundle or AppBundle(discover_bundle_path())
        self.process_env = process_env or ProcessEnvironment()
        self._force_environment = force_environment

    @classmethod
    def from_settings(cls, settings: Settings) -> 'EnvironmentDetector':
        """Build a detector for the host using ``Settings``"""
        bundle_path = settings.bundle_path or discover_bundle_path()
        return cls(
            build=BuildConfiguration(debug=settings.debug_build),
            platform=HostPlatform(),
            bundle=AppBundle(bundle_path),
            process_env=ProcessEnvironment(),
            force_environment=settings.force_environment,
        )

    @property
    def _logger(self):
        # Looked up per use so logging configured later is honoured
        return get_logger(__name__)

    def force_environment(self, environment: Optional[RunEnvironment]) -> None:
        """Force a specific environment (for testing/override), None to clear"""
        self._force_environment = environment

    def current(self) -> RunEnvironment:
        """Current run environment"""
        return self.detect().environment

    def detect(self) -> DetectionResult:
        """Detect current environment, re-reading every input"""
        result = self._classify()
        log_detection(self._logger, result)
        return result

    def under_review(self) -> bool:
        """Check for the environment variables set during automated review"""
        return is_under_review(self.process_env)

    def _classify(self) -> DetectionResult:
        if self._force_environment is not None:
            return DetectionResult(
                environment=self._force_environment,
                method="manual_override",
                reason="Manual environment override",
                metadata={"forced": True}
            )

        if self.build.debug:
            return DetectionResult(
                environment=RunEnvironment.DEBUG,
                method="debug_build",
                reason="Binary built with the debug configuration"
            )

        if self._query("simulator", self.platform.is_simulator, False):
            return DetectionResult(
                environment=RunEnvironment.DEBUG,
                method="simulator",
                reason="Running inside a device simulator"
            )

        modern_platform = self._query(
            "platform_version",
            lambda: self.platform.platform_version_at_least(MODERN_PLATFORM_VERSIONS),
            False
        )
        if not modern_platform:
            receipt = self._query("receipt", self.bundle.find_receipt_artifact, None)
            if receipt is None:
                return DetectionResult(
                    environment=RunEnvironment.DEBUG,
                    method="missing_receipt",
                    reason="No install receipt found"
                )
            receipt = Path(receipt)
            if SANDBOX_RECEIPT_MARKER in receipt.name.lower():
                return DetectionResult(
                    environment=RunEnvironment.TEST_FLIGHT,
                    method="sandbox_receipt",
                    reason=f"Sandbox receipt {receipt.name}",
                    metadata={"receipt": str(receipt)}
                )

        if self._query("provisioning", self.bundle.has_embedded_provisioning_artifact, False):
            return DetectionResult(
                environment=RunEnvironment.TEST_FLIGHT,
                method="embedded_provisioning",
                reason="Embedded provisioning profile present",
                metadata={"modern_platform": modern_platform}
            )

        return DetectionResult(
            environment=RunEnvironment.APP_STORE,
            method="default",
            reason="Release build without beta distribution markers",
            metadata={"modern_platform": modern_platform}
        )

    def _query(self, name: str, query: Callable[[], T], default: T) -> T:
        """Run a provider query, treating failures as absence"""
        try:
            return query()
        except Exception as e:
            self._logger.warning(
                "Detection query failed, treating as absent",
                query=name,
                error=str(e),
                error_type=type(e).__name__
            )
            return default
