"""
Render backends for coloured, depth-ordered point clouds.

- matplotlib: in-process 3D chart (Chart3DRenderer)
- gnuplot: generated script run by an external gnuplot (GnuplotRenderer)
"""

from .base import BaseRenderer, RenderScene
from .matplotlib_renderer import Chart3DRenderer
from .gnuplot_renderer import GnuplotRenderer
from ..errors import ConfigError

BACKENDS = ('matplotlib', 'gnuplot')


def create_renderer(backend: str, config=None) -> BaseRenderer:
    """
    Build the renderer selected by the backend option.

    Args:
        backend: 'matplotlib' or 'gnuplot'
        config: Optional configuration providing 'show' and 'gnuplot_path'
    """
    if backend == 'matplotlib':
        return Chart3DRenderer(show=bool(getattr(config, 'show', False)))
    if backend == 'gnuplot':
        return GnuplotRenderer(gnuplot_path=getattr(config, 'gnuplot_path', 'gnuplot'))
    raise ConfigError(f"Unknown backend '{backend}', expected one of {', '.join(BACKENDS)}")


__all__ = [
    'BaseRenderer',
    'RenderScene',
    'Chart3DRenderer',
    'GnuplotRenderer',
    'BACKENDS',
    'create_renderer'
]
