"""
Renderer interface shared by the in-process and external-tool backends.

The pipeline hands a renderer a RenderScene, i.e. points and colours
already in draw order plus the axis ranges, and never needs to know which
backend produces the image.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from utils.file_operations import PathManager
from utils.logger_config import get_logger
from ..color_mapping import ColoredCloud
from ..errors import RenderError
from ..render_range import RenderRange


@dataclass
class RenderScene:
    colored: ColoredCloud
    render_range: RenderRange
    dimensions: Tuple[int, int] = (640, 480)
    elevation: float = 30.0
    azimuth: float = -60.0
    marker_size: float = 1.0
    title: Optional[str] = None


class BaseRenderer(ABC):
    """
    Base class for output renderers.

    Subclasses implement _draw(); render() takes care of preparing the
    output location and logging.
    """

    name = "base"

    def __init__(self):
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    def render(self, scene: RenderScene, output_path: Path) -> Path:
        """
        Produce the image file for a scene.

        Args:
            scene: Coloured, ordered points and axis ranges
            output_path: Destination image path

        Returns:
            Path: The written image

        Raises:
            RenderError: If the output cannot be written. Any existing file at
                output_path is removed first, and a partial image is removed on
                failure.
        """
        output_path = Path(output_path)
        try:
            PathManager.ensure_parent_directory(output_path)
        except OSError as e:
            raise RenderError(f"Cannot create output folder for {output_path}: {e}")

        # a stale image must not pass for this run's output
        self._remove_output(output_path)

        width, height = scene.dimensions
        self.logger.info(f"Rendering {len(scene.colored)} points with {self.name} "
                         f"at {width}x{height} to {output_path}")
        try:
            self._draw(scene, output_path)
        except RenderError:
            try:
                output_path.unlink(missing_ok=True)
            except OSError as e:
                self.logger.warning(f"Failed to remove partial output {output_path}: {e}")
            raise

        if not output_path.exists():
            raise RenderError(f"{self.name} renderer finished but {output_path} was not written")
        self.logger.info(f"Saved image: {output_path}")
        return output_path

    def _remove_output(self, output_path: Path) -> None:
        try:
            output_path.unlink(missing_ok=True)
        except OSError as e:
            raise RenderError(f"Cannot remove existing output {output_path}: {e}")

    @abstractmethod
    def _draw(self, scene: RenderScene, output_path: Path) -> None:
        """Write the image for scene to output_path."""
        pass
