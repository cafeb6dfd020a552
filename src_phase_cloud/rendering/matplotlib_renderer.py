"""
In-process 3D chart rendering with matplotlib (mplot3d).
"""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from ..errors import RenderError
from .base import BaseRenderer, RenderScene


class Chart3DRenderer(BaseRenderer):
    """Draws the residual cloud as a 3D scatter chart."""

    name = "matplotlib"

    def __init__(self, show: bool = False, dpi: int = 100):
        super().__init__()
        self.show = show
        self.dpi = dpi

    def _draw(self, scene: RenderScene, output_path: Path) -> None:
        width, height = scene.dimensions
        fig = plt.figure(figsize=(width / self.dpi, height / self.dpi), dpi=self.dpi)
        try:
            ax = fig.add_subplot(projection='3d')
            self._setup_axes(ax, scene)

            cloud = scene.colored.cloud
            if len(cloud):
                # points arrive farthest first; depthshade would alter the colours
                ax.scatter(cloud.x, cloud.y, cloud.z, c=scene.colored.colors,
                           s=scene.marker_size, marker='o', linewidths=0, depthshade=False)

            try:
                fig.savefig(output_path, dpi=self.dpi)
            except (OSError, ValueError) as e:
                raise RenderError(f"Failed to save chart to {output_path}: {e}")

            if self.show:
                plt.show()
        finally:
            plt.close(fig)

    @staticmethod
    def _setup_axes(ax, scene: RenderScene) -> None:
        render_range = scene.render_range
        ax.view_init(elev=scene.elevation, azim=scene.azimuth)
        ax.set_xlim(*render_range.x.as_tuple())
        ax.set_ylim(*render_range.y.as_tuple())
        ax.set_zlim(*render_range.z.as_tuple())
        ax.set_xlabel('x (pixel)')
        ax.set_ylabel('y (pixel)')
        ax.set_zlabel('residual')
        if scene.title:
            ax.set_title(scene.title)
