import cv2
import numpy as np
import pytest

from utils.file_operations import ArrayLoader, DataSaver, PathManager


def test_loads_npy(tmp_path):
    path = tmp_path / "phase.npy"
    np.save(path, np.arange(12, dtype=np.float32).reshape(3, 4))

    array = ArrayLoader.load(path)

    assert array.dtype == np.float64
    np.testing.assert_array_equal(array, np.arange(12).reshape(3, 4))


def test_loads_csv_and_txt(tmp_path):
    data = np.array([[1.5, 2.0], [-3.0, 4.25]])
    np.savetxt(tmp_path / "a.csv", data, delimiter=",")
    np.savetxt(tmp_path / "a.txt", data)

    np.testing.assert_array_equal(ArrayLoader.load(tmp_path / "a.csv"), data)
    np.testing.assert_array_equal(ArrayLoader.load(tmp_path / "a.txt"), data)


def test_loads_16_bit_png(tmp_path):
    data = (np.arange(20, dtype=np.uint16) * 1000).reshape(4, 5)
    path = tmp_path / "quality.png"
    cv2.imwrite(str(path), data)

    np.testing.assert_array_equal(ArrayLoader.load(path), data.astype(np.float64))


def test_rejects_colour_image(tmp_path):
    path = tmp_path / "colour.png"
    cv2.imwrite(str(path), np.zeros((4, 5, 3), dtype=np.uint8))

    with pytest.raises(ValueError, match="single-channel"):
        ArrayLoader.load(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ArrayLoader.load(tmp_path / "absent.npy")


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "phase.bin"
    path.write_bytes(b"\x00\x01")

    with pytest.raises(ValueError, match="Unsupported"):
        ArrayLoader.load(path)


def test_rejects_non_2d(tmp_path):
    path = tmp_path / "line.npy"
    np.save(path, np.arange(5.0))

    with pytest.raises(ValueError, match="2D"):
        ArrayLoader.load(path)


def test_rejects_corrupt_npy(tmp_path):
    path = tmp_path / "corrupt.npy"
    path.write_bytes(b"not an array")

    with pytest.raises(ValueError):
        ArrayLoader.load(path)


def test_save_point_table(tmp_path):
    path = DataSaver.save_point_table({
        "x": np.array([0.0, 1.0]),
        "residual": np.array([-0.5, 0.25]),
        "y": np.array([3.0, 3.0]),
        "rgb": np.array([0xFF0000, 255]),
    }, tmp_path / "points.dat")

    lines = path.read_text().splitlines()
    assert lines == ["0 -0.5 3 16711680", "1 0.25 3 255"]


def test_ensure_parent_directory(tmp_path):
    target = tmp_path / "nested" / "deeper" / "out.png"

    PathManager.ensure_parent_directory(target)

    assert target.parent.is_dir()


def test_missing_values_keep_their_column(tmp_path):
    path = DataSaver.save_point_table({
        "x": np.array([0.0, 1.0]),
        "residual": np.array([0.5, np.nan]),
        "y": np.array([0.0, 0.0]),
        "rgb": np.array([255, 0]),
    }, tmp_path / "points.dat")

    lines = path.read_text().splitlines()
    assert lines == ["0 0.5 0 255", "1 NaN 0 0"]
