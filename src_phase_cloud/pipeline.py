"""
End-to-end coordination of the phase cloud pipeline.

raw arrays -> PointCloudBuilder -> SurfaceFitter (or supplied coefficients)
-> ResidualCalculator -> DepthColorMapper -> renderer
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from utils.file_operations import ArrayLoader
from utils.logger_config import get_logger
from .color_mapping import ColorRamp, ColoredCloud, DepthColorMapper, ViewProjection, default_ramp, make_normalizer
from .errors import InputError
from .point_cloud import PointCloud, PointCloudBuilder
from .render_range import RenderRange
from .rendering import RenderScene, create_renderer
from .residual import ResidualCalculator
from .surface_fit import ComputedFit, FitCoefficients, SuppliedFit, SurfaceFitter, resolve_fit


@dataclass
class PipelineResult:
    cloud: PointCloud
    coefficients: FitCoefficients
    fit_computed: bool
    residual: PointCloud
    render_range: RenderRange
    colored: ColoredCloud
    output_path: Optional[Path] = None


class PhaseCloudPipeline:
    def __init__(self, config):
        self.config = config
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")
        self.builder = PointCloudBuilder(config.threshold)
        self.fitter = SurfaceFitter()
        self.residual_calculator = ResidualCalculator(center=config.center)

    def load_inputs(self) -> Tuple[np.ndarray, np.ndarray]:
        """Load the unwrapped phase and quality arrays."""
        arrays = []
        for label, path in (("unwrapped phase", self.config.unwrapped_path),
                            ("quality", self.config.quality_path)):
            try:
                arrays.append(ArrayLoader.load(path))
            except (FileNotFoundError, ValueError) as e:
                raise InputError(f"Cannot load {label} array '{path}': {e}")
        return arrays[0], arrays[1]

    def process(self, phase: np.ndarray, quality: np.ndarray) -> PipelineResult:
        """
        Run the numerical stages on in-memory arrays.

        Args:
            phase: Unwrapped phase field (H x W)
            quality: Quality field (H x W)

        Returns:
            PipelineResult: Every intermediate product, the coloured cloud in draw order
        """
        cloud = self.builder.build(phase, quality)

        if self.config.fit_coefficients is not None:
            source = SuppliedFit(FitCoefficients.from_sequence(self.config.fit_coefficients))
        else:
            source = ComputedFit(cloud)
        coefficients = resolve_fit(source, self.fitter)

        fit_computed = isinstance(source, ComputedFit)
        if fit_computed:
            for line in coefficients.report():
                print(line)

        residual = self.residual_calculator.apply(cloud, coefficients)

        render_range = RenderRange.derive(
            cloud.source_shape,
            residual.z_range(),
            xlim=self.config.xlim,
            ylim=self.config.ylim,
            zlim=self.config.zlim,
            mirror=self.config.mirror
        )

        mode = self.config.color_mode
        ramp = ColorRamp(self.config.colormap) if self.config.colormap else default_ramp(mode)
        normalizer = make_normalizer(mode, render_range.z.as_tuple(), self.config.color_period)
        projection = ViewProjection(render_range, self.config.elevation, self.config.azimuth)
        colored = DepthColorMapper(ramp, normalizer).apply(residual, projection)

        self.logger.info(f"Mapped {len(colored)} points with '{ramp.name}' ({mode})")
        return PipelineResult(cloud=cloud, coefficients=coefficients, fit_computed=fit_computed,
                              residual=residual, render_range=render_range, colored=colored)

    def build_scene(self, result: PipelineResult) -> RenderScene:
        return RenderScene(
            colored=result.colored,
            render_range=result.render_range,
            dimensions=self.config.dimensions,
            elevation=self.config.elevation,
            azimuth=self.config.azimuth,
            marker_size=self.config.marker_size,
            title=self.config.title
        )

    def run(self) -> PipelineResult:
        """Load, process and render; the image is written only if every stage succeeds."""
        self.logger.info(f"Configuration: {self.config.get_summary()}")
        # resolve the backend before reading any array
        renderer = create_renderer(self.config.backend, self.config)

        phase, quality = self.load_inputs()
        result = self.process(phase, quality)
        result.output_path = renderer.render(self.build_scene(result), self.config.output_path)
        return result
