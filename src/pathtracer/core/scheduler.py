"""Scanline render scheduler.

The image is rendered one band of scanlines at a time. Each band is a single
kernel launch whose outermost loop runs over the band's rows, so Taichi's
CPU thread pool hands whole scanlines to its workers; the pixels of a row and
the supersampling grid of each pixel are computed sequentially by that
worker. The launch returns once every row of the band is finished, and only
then is the next band issued, so at most ``rows_in_flight`` rows are ever
being computed.

Finished bands are converted to 8-bit colors on the host and handed out top
row first, whatever order the workers finished in.

Sampling:
    Row r (0 = top) uses the camera coordinate j = height - 1 - r. Pixel
    (i, j) takes upscaling^2 samples on a regular grid,

        u = (i + (x // up) / (up - 1) - 0.5) / (width - 1)
        v = (j + (x % up) / (up - 1) - 0.5) / (height - 1)

    and sample x of pixel (r, i) draws its random numbers from
    seed_state(seed, r, i, x). The result does not depend on the number of
    workers.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, cpu_max_num_threads=8)
    >>> from src.pathtracer.core.scheduler import RenderSettings, ScanlineRenderer
    >>> from src.pathtracer.scene.random_scene import create_random_scene
    >>> scene, camera = create_random_scene()
    >>> settings = RenderSettings(width=300, height=200, upscaling=4, workers=8)
    >>> renderer = ScanlineRenderer(scene, camera, settings)
    >>> for row_index, row in renderer.render_rows():
    ...     pass
"""

import os
from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.thin_lens import ThinLensCamera, get_ray, setup_camera
from src.pathtracer.core.integrator import ray_color
from src.pathtracer.core.sampler import seed_state
from src.pathtracer.preview.display import to_display_rgb
from src.pathtracer.scene.manager import Scene

vec3 = tm.vec3

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Maximum supported image width (the row buffer is preallocated)
MAX_IMAGE_WIDTH = 2048

# Upper bound on rows computed by one kernel launch
MAX_ROWS_IN_FLIGHT = 64

# Seeds are reduced to 32 bits
_SEED_MASK = 0xFFFFFFFF

# Summed radiance of the rows in flight, indexed by (slot, column)
_row_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_ROWS_IN_FLIGHT, MAX_IMAGE_WIDTH))


class RenderError(RuntimeError):
    """A scanline could not be computed."""


@dataclass(frozen=True)
class RenderSettings:
    """Image and sampling configuration of a render.

    Attributes:
        width: Image width in pixels (2..MAX_IMAGE_WIDTH).
        height: Image height in pixels (>= 2).
        upscaling: Samples per pixel axis (>= 2); each pixel averages
            upscaling^2 samples.
        workers: Maximum number of scanlines computed concurrently (>= 1).
        seed: Seed of the sample streams, reduced to 32 bits.
    """

    width: int
    height: int
    upscaling: int = 2
    workers: int = 1
    seed: int = 0

    def __post_init__(self) -> None:
        if self.width < 2 or self.height < 2:
            raise ValueError(
                f"Image dimensions must be at least 2x2, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH:
            raise ValueError(
                f"Image width {self.width} exceeds maximum supported ({MAX_IMAGE_WIDTH})"
            )
        if self.upscaling < 2:
            raise ValueError(
                f"upscaling must be at least 2 (the sample grid divides by upscaling - 1), "
                f"got {self.upscaling}"
            )
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        object.__setattr__(self, "seed", self.seed & _SEED_MASK)

    @classmethod
    def from_aspect_ratio(cls, width: int, aspect_ratio: float, **kwargs) -> "RenderSettings":
        """Create settings whose height is ``int(width / aspect_ratio)``.

        Raises:
            ValueError: If the aspect ratio is not positive or the resulting
                settings are invalid.
        """
        if aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
        return cls(width=width, height=int(width / aspect_ratio), **kwargs)

    @property
    def samples_per_pixel(self) -> int:
        return self.upscaling * self.upscaling


@ti.kernel
def _render_band(
    first_row: ti.i32,
    count: ti.i32,
    width: ti.i32,
    height: ti.i32,
    upscaling: ti.i32,
    seed: ti.u32,
):
    """Compute the summed radiance of rows [first_row, first_row + count)."""
    grid_step = 1.0 / ti.cast(upscaling - 1, ti.f32)
    inv_width = 1.0 / ti.cast(width - 1, ti.f32)
    inv_height = 1.0 / ti.cast(height - 1, ti.f32)

    # One scanline per task
    ti.loop_config(block_dim=1)
    for slot in range(count):
        row = first_row + slot
        j = height - 1 - row
        for i in range(width):
            color = vec3(0.0, 0.0, 0.0)
            for x in range(upscaling * upscaling):
                du = ti.cast(x // upscaling, ti.f32) * grid_step
                dv = ti.cast(x % upscaling, ti.f32) * grid_step
                u = (ti.cast(i, ti.f32) + du - 0.5) * inv_width
                v = (ti.cast(j, ti.f32) + dv - 0.5) * inv_height
                state = seed_state(seed, row, i, x)
                origin, direction, state = get_ray(u, v, state)
                sample, state = ray_color(origin, direction, state)
                color += sample
            _row_buffer[slot, i] = color


class ScanlineRenderer:
    """Renders a scene snapshot scanline by scanline.

    The renderer keeps its own snapshot of the scene and camera and writes
    it into the Taichi fields before every band, so other renderers or
    later changes to the scene do not alter what it draws.

    Attributes:
        settings: The render settings.
    """

    def __init__(
        self,
        scene: Scene,
        camera: ThinLensCamera,
        settings: RenderSettings,
    ) -> None:
        self.settings = settings
        self._scene = scene.snapshot()
        self._camera = camera
        self._upload_snapshot()

    def _upload_snapshot(self) -> None:
        """Write this renderer's scene and camera into the Taichi fields."""
        self._scene.upload()
        setup_camera(self._camera)

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height

    @property
    def rows_in_flight(self) -> int:
        """Number of scanlines issued per kernel launch."""
        return min(
            self.settings.workers,
            os.cpu_count() or 1,
            MAX_ROWS_IN_FLIGHT,
            self.settings.height,
        )

    def _render_band_linear(self, first_row: int, count: int) -> npt.NDArray[np.float32]:
        """Compute a band and return its summed radiance, shape (count, W, 3).

        Raises:
            RenderError: If any pixel of the band is not finite.
        """
        s = self.settings
        self._upload_snapshot()
        _render_band(first_row, count, s.width, s.height, s.upscaling, s.seed)
        band = _row_buffer.to_numpy()[:count, : s.width]

        finite = np.isfinite(band).all(axis=(1, 2))
        if not finite.all():
            bad_row = first_row + int(np.argmin(finite))
            raise RenderError(f"Scanline {bad_row} produced non-finite radiance")
        return band

    def render_rows(
        self,
        callback: ProgressCallback | None = None,
    ) -> Generator[tuple[int, npt.NDArray[np.uint8]], None, None]:
        """Render the image, yielding display rows top to bottom.

        Args:
            callback: Optional callback called after each band with
                (rows_done, total_rows).

        Yields:
            Tuple of (row_index, row) where row is a uint8 array of shape
            (width, 3) and row 0 is the top of the image.

        Raises:
            RenderError: If a scanline produced non-finite radiance.
        """
        total = self.settings.height
        samples = self.settings.samples_per_pixel
        band_size = self.rows_in_flight

        done = 0
        while done < total:
            count = min(band_size, total - done)
            band = self._render_band_linear(done, count)
            rows = to_display_rgb(band, samples)

            if callback is not None:
                callback(done + count, total)

            for k in range(count):
                yield done + k, rows[k]
            done += count

    def render(self, callback: ProgressCallback | None = None) -> npt.NDArray[np.uint8]:
        """Render the whole image.

        Args:
            callback: Optional progress callback, see ``render_rows``.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8, row 0
            at the top.
        """
        image = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        for row_index, row in self.render_rows(callback):
            image[row_index] = row
        return image

    def __repr__(self) -> str:
        return (
            f"ScanlineRenderer(width={self.width}, height={self.height}, "
            f"upscaling={self.settings.upscaling}, workers={self.settings.workers})"
        )
