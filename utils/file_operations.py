"""
File operation utilities for the phase cloud viewer.

This module provides array loading for the phase/quality inputs, output path
management, tabular point-data saving and JSON configuration loading.
"""

import json
import numpy as np
import pandas as pd
import cv2
from typing import Dict, Any, Sequence
from pathlib import Path

from utils.logger_config import get_logger

logger = get_logger(__name__)


class PathManager:
    """Manages paths and directory operations."""

    @staticmethod
    def ensure_directory_exists(path: Path) -> Path:
        """
        Ensure directory exists.

        Args:
            path: Directory path to create

        Returns:
            Path: The created/validated directory path
        """
        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Ensured directory exists: {path}")
        return path

    @staticmethod
    def ensure_parent_directory(file_path: Path) -> Path:
        """
        Ensure the folder that will hold file_path exists.

        Raises:
            OSError: If the folder cannot be created
        """
        file_path = Path(file_path)
        PathManager.ensure_directory_exists(file_path.parent)
        return file_path


class ArrayLoader:
    """
    Loads 2D real-valued arrays from disk.

    Supported formats:
    - .npy: numpy binary arrays
    - .csv / .txt: delimited text (comma for csv, whitespace for txt)
    - .png / .tif / .tiff / .exr / .pfm: single-channel images, read unchanged
      so 16-bit and float images keep their values
    """

    NUMPY_SUFFIXES = ('.npy',)
    TEXT_SUFFIXES = ('.csv', '.txt')
    IMAGE_SUFFIXES = ('.png', '.tif', '.tiff', '.exr', '.pfm')

    @staticmethod
    def supported_suffixes() -> Sequence[str]:
        return ArrayLoader.NUMPY_SUFFIXES + ArrayLoader.TEXT_SUFFIXES + ArrayLoader.IMAGE_SUFFIXES

    @staticmethod
    def load(path: Path) -> np.ndarray:
        """
        Load a 2D float64 array.

        Args:
            path: Array file path

        Returns:
            np.ndarray: 2D float64 array

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the format is unsupported or the content is not a 2D array
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Array file not found: {path}")

        suffix = path.suffix.lower()
        if suffix in ArrayLoader.NUMPY_SUFFIXES:
            array = ArrayLoader._load_numpy(path)
        elif suffix in ArrayLoader.TEXT_SUFFIXES:
            delimiter = ',' if suffix == '.csv' else None
            array = np.genfromtxt(path, delimiter=delimiter, dtype=np.float64)
        elif suffix in ArrayLoader.IMAGE_SUFFIXES:
            array = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
            if array is None:
                raise ValueError(f"OpenCV could not decode image: {path}")
            if array.ndim == 3:
                raise ValueError(f"Expected a single-channel image, got {array.shape[2]} channels: {path}")
        else:
            raise ValueError(f"Unsupported array format '{suffix}' for {path}, "
                             f"expected one of {', '.join(ArrayLoader.supported_suffixes())}")

        array = np.asarray(array)
        if array.ndim != 2:
            raise ValueError(f"Expected a 2D array in {path}, got shape {array.shape}")
        if not np.issubdtype(array.dtype, np.number):
            raise ValueError(f"Array in {path} is not numeric (dtype {array.dtype})")

        logger.info(f"Loaded {path.name}: shape={array.shape}, dtype={array.dtype}")
        return array.astype(np.float64)

    @staticmethod
    def _load_numpy(path: Path) -> np.ndarray:
        try:
            return np.load(path, allow_pickle=False)
        except (ValueError, OSError) as e:
            raise ValueError(f"Could not read numpy array from {path}: {e}")


class DataSaver:
    """Handles saving of tabular point data."""

    @staticmethod
    def save_point_table(columns: Dict[str, np.ndarray], full_path: Path,
                         float_format: str = '%.9g') -> Path:
        """
        Write columns as a headerless, space-separated text table.

        Args:
            columns: Ordered mapping of column name to 1D array
            full_path: Destination file
            float_format: printf-style format for float columns

        Returns:
            Path: The written file
        """
        frame = pd.DataFrame(columns)
        # missing values keep their column as NaN
        frame.to_csv(full_path, sep=' ', header=False, index=False,
                     float_format=float_format, na_rep='NaN')
        logger.debug(f"Saved {len(frame)} rows to {full_path}")
        return full_path


class ConfigurationManager:
    """Manages configuration files."""

    @staticmethod
    def load_config_file(config_path: Path) -> Dict[str, Any]:
        """
        Load configuration from JSON file.

        Args:
            config_path: Path to configuration file

        Returns:
            Dict[str, Any]: Configuration data

        Raises:
            FileNotFoundError: If config file not found
            ValueError: If config file is invalid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")

        if not isinstance(config, dict):
            raise ValueError(f"Config file {config_path} must contain a JSON object")
        return config
