"""Read-only platform queries used by environment detection"""
import abc
import os
import platform
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

from .logging_config import get_logger

# Platform versions on which the App Store receipt is no longer exposed
MODERN_PLATFORM_VERSIONS: Dict[str, Tuple[int, ...]] = {
    "macos": (15, 0),
    "ios": (18, 0),
    "ipados": (18, 0),
    "tvos": (18, 0),
    "watchos": (11, 0),
}

# Apple platforms without an explicit threshold count as modern
APPLE_PLATFORMS = {"macos", "ios", "ipados", "tvos", "watchos", "visionos"}

MOBILE_SYS_PLATFORMS = {"ios", "tvos", "watchos", "visionos"}

SIMULATOR_ENV_MARKERS = ("SIMULATOR_UDID", "SIMULATOR_DEVICE_NAME")

RECEIPT_LOCATIONS = (
    "StoreKit/sandboxReceipt",
    "StoreKit/receipt",
    "Contents/_MASReceipt/receipt",
)

PROVISIONING_LOCATIONS = (
    "embedded.mobileprovision",
    "Contents/Resources/embedded.mobileprovision",
)


def parse_version(release: str) -> Tuple[int, ...]:
    """Parse a dotted release string, stopping at the first non-numeric part"""
    parts = []
    for piece in release.strip().split('.'):
        if not piece.isdigit():
            break
        parts.append(int(piece))
    return tuple(parts)


def discover_bundle_path(executable: Optional[str] = None) -> Optional[Path]:
    """Find the enclosing ``.app`` bundle of the running executable"""
    executable = executable if executable is not None else sys.executable
    if not executable:
        return None

    path = Path(executable)
    for candidate in (path, *path.parents):
        if candidate.suffix == ".app":
            get_logger(__name__).debug("App bundle discovered", bundle_path=str(candidate))
            return candidate
    return None


@dataclass(frozen=True)
class BuildConfiguration:
    """Build-time configuration injected by the build pipeline"""
    debug: bool = False


class PlatformCapabilities(abc.ABC):
    """Facts about the platform the process runs on"""

    @abc.abstractmethod
    def system_name(self) -> str:
        """Lower-case platform name such as ``ios`` or ``macos``"""
        pass

    @abc.abstractmethod
    def platform_version(self) -> Tuple[int, ...]:
        """OS version as a tuple of integers, empty if unknown"""
        pass

    @abc.abstractmethod
    def is_simulator(self) -> bool:
        """Check if the process runs inside a device simulator"""
        pass

    def platform_version_at_least(self, thresholds: Mapping[str, Sequence[int]]) -> bool:
        """Check the OS version against per-platform minimums.

        Apple platforms missing from ``thresholds`` satisfy the check, any
        other platform does not.
        """
        system = self.system_name()
        if system in thresholds:
            version = self.platform_version()
            return bool(version) and version >= tuple(thresholds[system])
        return system in APPLE_PLATFORMS


class BundleMetadata(abc.ABC):
    """Distribution artifacts installed with the application"""

    @abc.abstractmethod
    def find_receipt_artifact(self) -> Optional[Path]:
        """Path of the install receipt, if one exists"""
        pass

    @abc.abstractmethod
    def has_embedded_provisioning_artifact(self) -> bool:
        """Check for an embedded provisioning profile"""
        pass


class HostPlatform(PlatformCapabilities):
    """Platform facts for the running interpreter"""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ

    def system_name(self) -> str:
        mobile = self._mobile_version_info()
        if mobile is not None:
            return mobile.system.lower()
        if sys.platform == "darwin":
            return "macos"
        return sys.platform

    def platform_version(self) -> Tuple[int, ...]:
        mobile = self._mobile_version_info()
        if mobile is not None:
            return parse_version(mobile.release)
        if sys.platform == "darwin":
            return parse_version(platform.mac_ver()[0])
        return parse_version(platform.release())

    def is_simulator(self) -> bool:
        mobile = self._mobile_version_info()
        if mobile is not None and mobile.is_simulator:
            return True

        environ = os.environ if self._environ is None else self._environ
        return any(marker in environ for marker in SIMULATOR_ENV_MARKERS)

    def _mobile_version_info(self):
        """Version info from ``platform.ios_ver`` on iOS-family hosts"""
        if sys.platform not in MOBILE_SYS_PLATFORMS:
            return None
        ios_ver = getattr(platform, "ios_ver", None)
        if ios_ver is None:
            return None
        return ios_ver()


class AppBundle(BundleMetadata):
    """Distribution artifacts of an installed ``.app`` bundle"""

    def __init__(self, bundle_path: Optional[Path] = None):
        self.bundle_path = Path(bundle_path) if bundle_path is not None else None

    def find_receipt_artifact(self) -> Optional[Path]:
        return self._first_existing(RECEIPT_LOCATIONS)

    def has_embedded_provisioning_artifact(self) -> bool:
        return self._first_existing(PROVISIONING_LOCATIONS) is not None

    def _first_existing(self, locations: Sequence[str]) -> Optional[Path]:
        """Return the first of ``locations`` present in the bundle"""
        if self.bundle_path is None:
            return None

        for location in locations:
            candidate = self.bundle_path / location
            if candidate.is_file():
                return candidate
        return None


class ProcessEnvironment:
    """Lookup of process environment variables"""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        # Read os.environ on every access so later changes are seen
        return os.environ if self._environ is None else self._environ

    def get(self, name: str) -> Optional[str]:
        """Value of ``name``, or None when unset"""
        return self.environ.get(name)

    def contains(self, name: str) -> bool:
        """Check if ``name`` is set, whatever its value"""
        return name in self.environ
