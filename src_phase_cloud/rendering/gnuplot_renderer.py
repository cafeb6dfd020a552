"""
Rendering through an external gnuplot process.

A point-data file (columns: x, residual, y, packed RGB) and a generated
plotting script are written to a temporary folder, gnuplot is run on the
script, and both artifacts are removed afterwards whether or not the run
succeeded.
"""

import subprocess
import tempfile
from pathlib import Path
from typing import List

from utils.file_operations import DataSaver
from ..color_mapping import pack_rgb
from ..errors import RenderError
from .base import BaseRenderer, RenderScene

TERMINALS = {
    '.png': 'pngcairo',
    '.svg': 'svg',
    '.pdf': 'pdfcairo',
}
# pdfcairo sizes are given in inches
PDF_DPI = 100.0


def _quote(value) -> str:
    """Single-quoted gnuplot string literal."""
    return "'" + str(value).replace("'", "''") + "'"


class GnuplotRenderer(BaseRenderer):
    """Generates a gnuplot script and shells out to gnuplot."""

    name = "gnuplot"

    def __init__(self, gnuplot_path: str = "gnuplot"):
        super().__init__()
        self.gnuplot_path = gnuplot_path

    def _draw(self, scene: RenderScene, output_path: Path) -> None:
        terminal = self.terminal_for(output_path)
        work_dir = Path(tempfile.mkdtemp(prefix="phase_cloud_"))
        data_path = work_dir / "points.dat"
        script_path = work_dir / "plot.gp"
        try:
            self.write_point_data(scene, data_path)
            script_path.write_text(self.build_script(scene, data_path, output_path, terminal),
                                   encoding='utf-8')
            self._run(script_path)
        finally:
            self._cleanup([data_path, script_path], work_dir)

    @staticmethod
    def terminal_for(output_path: Path) -> str:
        suffix = Path(output_path).suffix.lower()
        if suffix not in TERMINALS:
            raise RenderError(f"gnuplot backend cannot write '{suffix}' files, "
                              f"expected one of {', '.join(TERMINALS)}")
        return TERMINALS[suffix]

    @staticmethod
    def write_point_data(scene: RenderScene, data_path: Path) -> Path:
        cloud = scene.colored.cloud
        return DataSaver.save_point_table({
            'x': cloud.x,
            'residual': cloud.z,
            'y': cloud.y,
            'rgb': pack_rgb(scene.colored.colors),
        }, data_path)

    @staticmethod
    def build_script(scene: RenderScene, data_path: Path, output_path: Path, terminal: str) -> str:
        """Build the gnuplot command script for a scene."""
        width, height = scene.dimensions
        if terminal == 'pdfcairo':
            size = f"{width / PDF_DPI:.3f}in,{height / PDF_DPI:.3f}in"
        else:
            size = f"{width},{height}"

        render_range = scene.render_range
        # gnuplot measures the view from the vertical and rotates z from the x axis
        rot_x = 90.0 - scene.elevation
        rot_z = (scene.azimuth + 90.0) % 360.0

        lines = [
            f"set terminal {terminal} size {size}",
            f"set output {_quote(output_path)}",
            f"set xrange [{render_range.x.start:.9g}:{render_range.x.end:.9g}]",
            f"set yrange [{render_range.y.start:.9g}:{render_range.y.end:.9g}]",
            f"set zrange [{render_range.z.start:.9g}:{render_range.z.end:.9g}]",
            f"set view {rot_x:.6g}, {rot_z:.6g}",
            "set xlabel 'x (pixel)'",
            "set ylabel 'y (pixel)'",
            "set zlabel 'residual'",
            "unset key",
        ]
        if scene.title:
            lines.append(f"set title {_quote(scene.title)}")
        point_size = 0.5 * scene.marker_size
        # data columns are x, residual, y, rgb
        lines.append(f"splot {_quote(data_path)} using 1:3:2:4 with points "
                     f"pointtype 7 pointsize {point_size:.6g} linecolor rgb variable")
        lines.append("unset output")
        return "\n".join(lines) + "\n"

    def _run(self, script_path: Path) -> None:
        try:
            result = subprocess.run([self.gnuplot_path, str(script_path)],
                                    capture_output=True, text=True, check=False)
        except FileNotFoundError:
            raise RenderError(f"gnuplot executable not found: {self.gnuplot_path}")
        except OSError as e:
            raise RenderError(f"Could not start gnuplot ({self.gnuplot_path}): {e}")

        if result.returncode != 0:
            raise RenderError(f"gnuplot exited with status {result.returncode}: "
                              f"{result.stderr.strip()}")
        if result.stderr.strip():
            self.logger.warning(f"gnuplot: {result.stderr.strip()}")

    def _cleanup(self, artifacts: List[Path], work_dir: Path) -> None:
        for path in artifacts:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                self.logger.warning(f"Failed to remove temporary file {path}: {e}")
        try:
            work_dir.rmdir()
        except OSError as e:
            self.logger.warning(f"Failed to remove temporary folder {work_dir}: {e}")
