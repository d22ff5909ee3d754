"""
Configuration for the precalculation pipeline.

This module holds the process-wide constants (exit codes, phase identifiers,
fixed algorithm names, the default trace-date set) and the PrecalcConfig value
that is built once at startup and passed explicitly to the pipeline.

Configuration sources, lowest priority first:
    1. Packaged defaults (dcprecalc/configs/precalc.yaml)
    2. User YAML file (--config-file or DCPRECALC_CONFIG)
    3. Environment variables (DCPRECALC_RESULTS_DIR, DATASET_DOWNLOAD_URL, ...)
    4. Explicit overrides (command line)
"""

import datetime
import enum
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from dcprecalc.errors import ConfigurationError, ErrorCode
from dcprecalc.utils import read_config_from_file, update_nested_dict


def check_env(setting: str, default_value: Any = None) -> Any:
    """Return the environment value for ``setting`` or ``default_value``.

    Strings "true"/"false" (any case) are converted to booleans.
    """
    value = os.environ.get(setting, default_value)
    if isinstance(value, str):
        if value.lower() == "true":
            return True
        if value.lower() == "false":
            return False
    return value


DCP_DEBUG = check_env("DCPRECALC_DEBUG", False)

CONFIGS_ROOT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "configs")
DEFAULT_CONFIG_FILE = os.path.join(CONFIGS_ROOT_DIR, "precalc.yaml")
CONFIG_FILE_ENV = "DCPRECALC_CONFIG"

DEFAULT_RESULTS_DIR = "results"
RESULT_FILE_TEMPLATE = "phase{phase_id}-results.json"

PHASE_IDS: Tuple[int, ...] = (1, 2, 3, 4)

PHASE3_ALGORITHM = "TVPLCVPSOLB"
PHASE4_ALGORITHM = "ACOPSOHybrid"

DEFAULT_TRACE_DATES: Tuple[str, ...] = (
    "20110303", "20110306", "20110309", "20110322", "20110325",
    "20110403", "20110409", "20110411", "20110412", "20110420",
)

DEFAULT_DOWNLOAD_TIMEOUT = 60
MAX_REDIRECTS = 10


class EXIT_CODE(enum.IntEnum):
    SUCCESS = 0
    FAILURE = 1
    CONFIG_ERROR = 2
    TRANSPORT_ERROR = 3
    VALIDATION_ERROR = 4
    COLLABORATOR_ERROR = 5
    INTERRUPTED = 130

    def __str__(self):
        return self.name


class GAP_POLICY(enum.Enum):
    """What the aggregator does with a date that has no metrics."""
    SKIP = "skip"
    STRICT = "strict"


@dataclass(frozen=True)
class DatasetSettings:
    url: str = ""
    dataset_dir: str = os.path.join("dataset", "planetlab")
    archive_path: str = os.path.join("dataset", "planetlab.zip")
    timeout: float = DEFAULT_DOWNLOAD_TIMEOUT


@dataclass(frozen=True)
class PrecalcConfig:
    """Everything one pipeline run needs, fixed before any phase starts.

    Attributes:
        dates: Ordered trace dates shared by all phases.
        results_dir: Directory receiving the phase{N}-results.json files.
        dataset: Dataset acquisition settings.
        gap_policy: Behavior for dates without metrics in phases 3 and 4.
        phases: Phase ids to run, in order.
        orchestrators: Import spec ("module:attribute") per phase id.
        options: Options dict handed to each phase's orchestrator.
        skip_dataset: Do not check or download the dataset before running.
    """
    dates: Tuple[str, ...] = DEFAULT_TRACE_DATES
    results_dir: str = DEFAULT_RESULTS_DIR
    dataset: DatasetSettings = field(default_factory=DatasetSettings)
    gap_policy: GAP_POLICY = GAP_POLICY.SKIP
    phases: Tuple[int, ...] = PHASE_IDS
    orchestrators: Dict[int, str] = field(default_factory=dict)
    options: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    skip_dataset: bool = False

    def result_file_path(self, phase_id: int) -> str:
        return os.path.join(self.results_dir, RESULT_FILE_TEMPLATE.format(phase_id=phase_id))

    def phase_options(self, phase_id: int) -> Dict[str, Any]:
        return dict(self.options.get(phase_id, {}))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "dates": list(self.dates),
            "results_dir": self.results_dir,
            "dataset": {
                "url": self.dataset.url,
                "dataset_dir": self.dataset.dataset_dir,
                "archive_path": self.dataset.archive_path,
                "timeout": self.dataset.timeout,
            },
            "gap_policy": self.gap_policy.value,
            "phases": list(self.phases),
            "orchestrators": dict(self.orchestrators),
            "options": {k: dict(v) for k, v in self.options.items()},
            "skip_dataset": self.skip_dataset,
        }


def validate_trace_dates(dates: List[Any]) -> Tuple[str, ...]:
    """Check that every date is an 8-digit calendar string and unique.

    Raises:
        ConfigurationError: On an empty list, a malformed date or a duplicate.
    """
    if not dates:
        raise ConfigurationError("No trace dates configured", parameter="dates",
                                 expected="non-empty list of YYYYMMDD strings", actual=dates,
                                 code=ErrorCode.CONFIG_MISSING_REQUIRED)
    seen = set()
    normalized = []
    for raw in dates:
        date = str(raw)
        if len(date) != 8 or not date.isdigit():
            raise ConfigurationError(f"Invalid trace date: {raw!r}", parameter="dates",
                                     expected="YYYYMMDD", actual=raw)
        try:
            datetime.datetime.strptime(date, "%Y%m%d")
        except ValueError:
            raise ConfigurationError(f"Trace date is not a calendar day: {date}", parameter="dates",
                                     expected="YYYYMMDD", actual=raw)
        if date in seen:
            raise ConfigurationError(f"Duplicate trace date: {date}", parameter="dates",
                                     expected="unique dates", actual=raw)
        seen.add(date)
        normalized.append(date)
    return tuple(normalized)


def _parse_phase_id(value: Any) -> int:
    try:
        phase_id = int(value)
    except (TypeError, ValueError):
        phase_id = None
    if phase_id not in PHASE_IDS:
        raise ConfigurationError(f"Unknown phase: {value!r}", parameter="phases",
                                 expected=list(PHASE_IDS), actual=value)
    return phase_id


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    results_dir = check_env("DCPRECALC_RESULTS_DIR")
    if results_dir:
        overrides["results_dir"] = results_dir
    url = check_env("DATASET_DOWNLOAD_URL")
    if url:
        overrides["dataset"] = {"url": url}
    gap_policy = check_env("DCPRECALC_GAP_POLICY")
    if gap_policy:
        overrides["gap_policy"] = gap_policy
    return overrides


def build_config(raw: Dict[str, Any]) -> PrecalcConfig:
    """Validate a merged settings dict and turn it into a PrecalcConfig."""
    dates = validate_trace_dates(list(raw.get("dates") or []))

    policy_value = str(raw.get("gap_policy", GAP_POLICY.SKIP.value)).lower()
    try:
        gap_policy = GAP_POLICY(policy_value)
    except ValueError:
        raise ConfigurationError(f"Invalid gap policy: {policy_value}", parameter="gap_policy",
                                 expected=[p.value for p in GAP_POLICY], actual=policy_value)

    phases = tuple(_parse_phase_id(p) for p in (raw.get("phases") or PHASE_IDS))
    if len(set(phases)) != len(phases):
        raise ConfigurationError("Phases listed more than once", parameter="phases",
                                 expected="unique phase ids", actual=list(phases))

    orchestrators = {}
    for key, spec in (raw.get("orchestrators") or {}).items():
        if spec:
            orchestrators[_parse_phase_id(key)] = str(spec)

    options = {}
    for key, value in (raw.get("options") or {}).items():
        if not isinstance(value, dict):
            raise ConfigurationError(f"Options for phase {key} must be a mapping", parameter="options",
                                     expected="mapping", actual=type(value).__name__)
        options[_parse_phase_id(key)] = dict(value)

    dataset_raw = raw.get("dataset") or {}
    dataset = DatasetSettings(
        url=dataset_raw.get("url") or "",
        dataset_dir=dataset_raw.get("dataset_dir") or DatasetSettings.dataset_dir,
        archive_path=dataset_raw.get("archive_path") or DatasetSettings.archive_path,
        timeout=float(dataset_raw.get("timeout") or DEFAULT_DOWNLOAD_TIMEOUT),
    )

    return PrecalcConfig(
        dates=dates,
        results_dir=str(raw.get("results_dir") or DEFAULT_RESULTS_DIR),
        dataset=dataset,
        gap_policy=gap_policy,
        phases=phases,
        orchestrators=orchestrators,
        options=options,
        skip_dataset=bool(raw.get("skip_dataset", False)),
    )


def load_config(config_file: Optional[str] = None,
                overrides: Optional[Dict[str, Any]] = None,
                use_env: bool = True) -> PrecalcConfig:
    """Load the pipeline configuration.

    Args:
        config_file: Optional user YAML file merged over the packaged defaults.
            Falls back to the DCPRECALC_CONFIG environment variable.
        overrides: Highest-priority settings (typically from the command line).
        use_env: Apply environment variable overrides.

    Returns:
        Validated PrecalcConfig.

    Raises:
        ConfigurationError: If a file is missing, unparsable or holds invalid values.
    """
    settings = read_config_from_file(DEFAULT_CONFIG_FILE)

    config_file = config_file or (check_env(CONFIG_FILE_ENV) if use_env else None)
    if config_file:
        if not os.path.isfile(config_file):
            raise ConfigurationError(f"Configuration file not found: {config_file}",
                                     parameter="config_file", code=ErrorCode.CONFIG_FILE_NOT_FOUND)
        settings = update_nested_dict(settings, read_config_from_file(config_file) or {})

    if use_env:
        settings = update_nested_dict(settings, _env_overrides())
    if overrides:
        settings = update_nested_dict(settings, overrides)

    return build_config(settings)
