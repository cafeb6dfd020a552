from typing import Dict, Any, Optional, Tuple, Sequence
from pathlib import Path

from src_phase_cloud.color_mapping import COLOR_MODES
from src_phase_cloud.errors import ConfigError
from src_phase_cloud.rendering import BACKENDS
from utils.file_operations import ConfigurationManager

REQUIRED_KEYS = ("unwrapped_path", "quality_path", "output_path")


class Config:
    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        self.config_data = self._load_config(config_path)
        # command-line values win over the file, unset ones are skipped
        for key, value in (overrides or {}).items():
            if value is not None:
                self.config_data[key] = value
        self._init_defaults()
        self._validate_paths()
        self._validate_view_config()
        self._validate_color_config()
        self._validate_fit_config()

    def _load_config(self, config_path: Optional[str]) -> Dict[str, Any]:
        if config_path is None:
            return {}
        try:
            return ConfigurationManager.load_config_file(Path(config_path))
        except (FileNotFoundError, ValueError) as e:
            raise ConfigError(str(e))

    def _init_defaults(self) -> None:
        """Fill in defaults for every option not given by the file or the command line."""
        defaults = {
            "dimensions": "640x480",
            "threshold": 0.0,
            "xlim": None,
            "ylim": None,
            "zlim": None,
            "mirror": False,
            "center": False,
            "color_mode": "clamped",
            "color_period": 1.0,
            "colormap": None,
            "fit_coefficients": None,
            "backend": "matplotlib",
            "elevation": 30.0,
            "azimuth": -60.0,
            "marker_size": 1.0,
            "show": False,
            "gnuplot_path": "gnuplot",
            "title": None,
        }
        for key, value in defaults.items():
            self.config_data.setdefault(key, value)

    def _validate_paths(self) -> None:
        missing = [key for key in REQUIRED_KEYS if not self.config_data.get(key)]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")
        for key in REQUIRED_KEYS:
            self.config_data[key] = Path(self.config_data[key])

    def _validate_view_config(self) -> None:
        self.config_data["dimensions"] = parse_dimensions(self.config_data["dimensions"])
        for key in ("xlim", "ylim", "zlim"):
            if self.config_data[key] is not None:
                self.config_data[key] = parse_range(self.config_data[key], key)

        self.config_data["threshold"] = _as_float(self.config_data["threshold"], "threshold")
        self.config_data["elevation"] = _as_float(self.config_data["elevation"], "elevation")
        self.config_data["azimuth"] = _as_float(self.config_data["azimuth"], "azimuth")
        self.config_data["marker_size"] = _as_float(self.config_data["marker_size"], "marker_size")
        if self.config_data["marker_size"] <= 0:
            raise ConfigError("marker_size must be positive")

        for key in ("mirror", "center", "show"):
            self.config_data[key] = _as_bool(self.config_data[key], key)

        if self.config_data["backend"] not in BACKENDS:
            raise ConfigError(f"Unknown backend '{self.config_data['backend']}', "
                              f"expected one of {', '.join(BACKENDS)}")

    def _validate_color_config(self) -> None:
        if self.config_data["color_mode"] not in COLOR_MODES:
            raise ConfigError(f"Unknown color_mode '{self.config_data['color_mode']}', "
                              f"expected one of {', '.join(COLOR_MODES)}")
        period = _as_float(self.config_data["color_period"], "color_period")
        if period <= 0:
            raise ConfigError(f"color_period must be positive, got {period}")
        self.config_data["color_period"] = period

    def _validate_fit_config(self) -> None:
        coefficients = self.config_data["fit_coefficients"]
        if coefficients is None:
            return
        if isinstance(coefficients, str):
            coefficients = [part for part in coefficients.replace(",", " ").split() if part]
        if not isinstance(coefficients, (list, tuple)) or len(coefficients) != 5:
            raise ConfigError("fit_coefficients must be exactly 5 values: a,b,c,d,e")
        self.config_data["fit_coefficients"] = tuple(
            _as_float(value, f"fit_coefficients[{i}]") for i, value in enumerate(coefficients))

    def get_summary(self) -> str:
        """One-line summary of the options that shape the output."""
        width, height = self.config_data["dimensions"]
        fit = "supplied" if self.config_data["fit_coefficients"] else "computed"
        return (f"{width}x{height} {self.config_data['backend']}, threshold={self.config_data['threshold']}, "
                f"color={self.config_data['color_mode']}, fit={fit}, "
                f"mirror={self.config_data['mirror']}, center={self.config_data['center']}")

    def __getattr__(self, name: str) -> Any:
        if name != "config_data" and name in self.config_data:
            return self.config_data[name]
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")


def parse_dimensions(value: Any) -> Tuple[int, int]:
    """Parse 'WIDTHxHEIGHT' or a [width, height] pair."""
    if isinstance(value, str):
        parts = value.lower().split("x")
        if len(parts) != 2:
            raise ConfigError(f"Dimensions must be of the form WIDTHxHEIGHT, got '{value}'")
    elif isinstance(value, Sequence) and len(value) == 2:
        parts = value
    else:
        raise ConfigError(f"Dimensions must be of the form WIDTHxHEIGHT, got {value!r}")

    try:
        width, height = int(parts[0]), int(parts[1])
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid integer in dimensions {value!r}")
    if width <= 0 or height <= 0:
        raise ConfigError(f"Dimensions must be positive, got {width}x{height}")
    return width, height


def parse_range(value: Any, name: str = "range") -> Tuple[float, float]:
    """Parse 'START..END' or a [start, end] pair; start > end reverses the axis."""
    if isinstance(value, str):
        parts = value.split("..")
        if len(parts) != 2:
            raise ConfigError(f"{name} must be of the form START..END, got '{value}'")
    elif isinstance(value, Sequence) and len(value) == 2:
        parts = value
    else:
        raise ConfigError(f"{name} must be of the form START..END, got {value!r}")

    start = _as_float(parts[0], f"{name} start")
    end = _as_float(parts[1], f"{name} end")
    return start, end


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid float for {name}: {value!r}")


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    # the JSON files store flags as "True"/"False" strings too
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ConfigError(f"{name} must be true or false, got {value!r}")
