"""Build settings and fully-resolved build configuration.

BuildSettings is what a user supplies: mostly unset paths which the
EnvironmentResolver fills in by searching the Android SDK and the Crosswalk
runtime tree. BuildConfiguration is the frozen result: every tool path the
build needs is set, so a partially-resolved configuration can never reach
the BuildCoordinator.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

from ..locate.pieces import ResolvedResourceBundle


class ConfigurationIncompleteError(Exception):
    """Raised when required configuration values are missing."""

    def __init__(self, missing: List[str], message: Optional[str] = None):
        self.missing = missing
        super().__init__(
            message or f"Build configuration incomplete; missing: {', '.join(missing)}"
        )


# resource bundle setting -> key in BuildConfiguration.resources
RESOURCE_BUNDLE_FIELDS = {
    "xwalk_core_resources": "xwalk_core",
    "chromium_ui_resources": "chromium_ui",
    "chromium_content_resources": "chromium_content",
}

SUPPORTED_ARCHES = ("x86", "arm")


@dataclass
class BuildSettings:
    """Sparse user configuration for an apk build.

    Unset paths are located by the EnvironmentResolver. If an apk is to be
    published, keystore, keystore_alias and keystore_password must point at
    a real signing key; by default the Crosswalk debug keystore is used.
    """

    android_sdk_dir: Optional[str] = None
    xwalk_android_dir: Optional[str] = None
    android_api_level: Optional[int] = None

    java: str = "java"
    javac: str = "javac"
    ant: str = "ant"
    jarsigner: str = "jarsigner"

    source_java_version: str = "1.5"
    target_java_version: str = "1.5"
    arch: str = "x86"
    embedded: bool = True

    # located in the Android SDK when unset
    aapt: Optional[str] = None
    dx: Optional[str] = None
    zipalign: Optional[str] = None
    anttasks_jar: Optional[str] = None
    android_jar: Optional[str] = None

    # located in the Crosswalk runtime tree when unset
    xwalk_runtime_client_jar: Optional[str] = None
    xwalk_apk_package_ant_file: Optional[str] = None
    xwalk_embedded_jar: Optional[str] = None
    xwalk_assets: Optional[str] = None
    native_libs: Optional[str] = None
    xwalk_core_resources: Optional[ResolvedResourceBundle] = None
    chromium_ui_resources: Optional[ResolvedResourceBundle] = None
    chromium_content_resources: Optional[ResolvedResourceBundle] = None

    keystore: Optional[str] = None
    keystore_alias: str = "xwalkdebugkey"
    keystore_password: str = "xwalkdebug"

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "BuildSettings":
        """Create settings from a mapping, rejecting unrecognised keys.

        Raises:
            ValueError: If values contains keys which are not settings
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(
                "Build configuration contains unrecognised keys:\n" + "\n".join(unknown)
            )
        settings = cls(**values)
        if settings.android_api_level is not None:
            settings.android_api_level = int(settings.android_api_level)
        return settings

    def unset_fields(self, names: List[str]) -> List[str]:
        """Get the names from a list whose values are not set."""
        return [name for name in names if not getattr(self, name)]


@dataclass(frozen=True)
class BuildConfiguration:
    """Fully-resolved tool paths, directories and signing credentials."""

    android_sdk_dir: str
    xwalk_android_dir: str
    android_api_level: int

    java: str
    javac: str
    ant: str
    jarsigner: str
    aapt: str
    dx: str
    zipalign: str
    anttasks_jar: str
    android_jar: str

    xwalk_runtime_client_jar: str
    xwalk_apk_package_ant_file: str

    keystore: str
    keystore_alias: str
    keystore_password: str

    source_java_version: str = "1.5"
    target_java_version: str = "1.5"
    arch: str = "x86"
    embedded: bool = True

    # embedded mode only
    xwalk_embedded_jar: Optional[str] = None
    xwalk_assets: Optional[str] = None
    native_libs: Optional[str] = None
    resources: Dict[str, ResolvedResourceBundle] = field(default_factory=dict)

    REQUIRED_FIELDS = (
        "android_sdk_dir",
        "xwalk_android_dir",
        "android_api_level",
        "java",
        "javac",
        "ant",
        "jarsigner",
        "aapt",
        "dx",
        "zipalign",
        "anttasks_jar",
        "android_jar",
        "xwalk_runtime_client_jar",
        "xwalk_apk_package_ant_file",
        "keystore",
        "keystore_alias",
        "keystore_password",
    )

    EMBEDDED_FIELDS = (
        "xwalk_embedded_jar",
        "xwalk_assets",
        "native_libs",
        "xwalk_core_resources",
        "chromium_ui_resources",
        "chromium_content_resources",
    )

    def __post_init__(self):
        if self.arch not in SUPPORTED_ARCHES:
            raise ValueError(
                f"Unsupported architecture '{self.arch}'; expected one of {', '.join(SUPPORTED_ARCHES)}"
            )

    @classmethod
    def from_settings(cls, settings: BuildSettings) -> "BuildConfiguration":
        """Freeze fully-populated settings into a configuration.

        Raises:
            ConfigurationIncompleteError: If any required value is unset
        """
        required = list(cls.REQUIRED_FIELDS)
        if settings.embedded:
            required.extend(cls.EMBEDDED_FIELDS)

        missing = settings.unset_fields(required)
        if missing:
            raise ConfigurationIncompleteError(missing)

        values = {
            f.name: getattr(settings, f.name)
            for f in fields(cls)
            if f.name != "resources" and hasattr(settings, f.name)
        }
        resources = {}
        if settings.embedded:
            for setting_name, key in RESOURCE_BUNDLE_FIELDS.items():
                resources[key] = getattr(settings, setting_name)
        return cls(resources=resources, **values)

    @property
    def build_jars(self) -> List[str]:
        """Jars on the compile classpath."""
        return [self.android_jar, self.xwalk_runtime_client_jar]

    @property
    def bundled_jars(self) -> List[str]:
        """Jars whose classes are dexed into the apk."""
        jars = [self.xwalk_runtime_client_jar]
        if self.embedded:
            jars.append(self.xwalk_embedded_jar)
        return jars

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary (e.g. for display)."""
        return asdict(self)
