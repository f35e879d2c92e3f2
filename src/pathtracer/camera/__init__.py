"""Camera module for primary ray generation.

Components:
    thin_lens: Look-at camera with depth of field (aperture 0 is a pinhole)

Ray generation uses normalized image-plane coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image
"""

from .thin_lens import ThinLensCamera, get_camera_info, get_ray, setup_camera

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
