"""Shared fixtures: fake platform collaborators and a clean process environment"""
from pathlib import Path
from typing import Optional, Tuple

import pytest

from run_environment import (
    BuildConfiguration,
    BundleMetadata,
    EnvironmentDetector,
    PlatformCapabilities,
    ProcessEnvironment,
    runtime_context,
)


class FakePlatform(PlatformCapabilities):
    """Platform with canned answers"""

    def __init__(self, system: str = "ios", version: Tuple[int, ...] = (17, 5), simulator: bool = False):
        self.system = system
        self.version = version
        self.simulator = simulator

    def system_name(self) -> str:
        return self.system

    def platform_version(self) -> Tuple[int, ...]:
        return self.version

    def is_simulator(self) -> bool:
        return self.simulator


class FakeBundle(BundleMetadata):
    """Bundle with canned artifacts that records receipt lookups"""

    def __init__(self, receipt: Optional[Path] = None, provisioning: bool = False):
        self.receipt = receipt
        self.provisioning = provisioning
        self.receipt_lookups = 0

    def find_receipt_artifact(self) -> Optional[Path]:
        self.receipt_lookups += 1
        return self.receipt

    def has_embedded_provisioning_artifact(self) -> bool:
        return self.provisioning


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove variables that influence detection and reset the global context"""
    for name in ("CFNETWORK_DIAGNOSTICS", "CFNETWORK_HAR_LOGGING",
                 "SIMULATOR_UDID", "SIMULATOR_DEVICE_NAME",
                 "RUN_ENVIRONMENT_DEBUG_BUILD", "RUN_ENVIRONMENT_BUNDLE_PATH",
                 "RUN_ENVIRONMENT_FORCE_ENVIRONMENT", "RUN_ENVIRONMENT_LOG_LEVEL",
                 "RUN_ENVIRONMENT_LOG_FORMAT", "RUN_ENVIRONMENT_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)

    runtime_context.reset()
    yield
    runtime_context.reset()


@pytest.fixture
def make_detector():
    """Factory for detectors wired to fake collaborators"""

    def _make(debug=False, system="ios", version=(17, 5), simulator=False,
              receipt=None, provisioning=False, environ=None, force=None, bundle=None):
        return EnvironmentDetector(
            build=BuildConfiguration(debug=debug),
            platform=FakePlatform(system=system, version=version, simulator=simulator),
            bundle=bundle if bundle is not None else FakeBundle(receipt=receipt, provisioning=provisioning),
            process_env=ProcessEnvironment(environ if environ is not None else {}),
            force_environment=force,
        )

    return _make


@pytest.fixture
def fake_bundle():
    return FakeBundle
