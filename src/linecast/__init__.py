"""Hidden-line rendering of 3D line art into visible 2D polylines.

This package turns a scene of line-based shapes into the polylines a camera
can actually see, for pen plotters and other vector output:
- Camera projection and unprojection (perspective and orthographic)
- Frustum clipping of 3D paths
- Occlusion testing against a bounding volume tree
- Resolution-adaptive sampling of every segment

Subpackages:
    core: Rays, path types, and the adaptive path renderer
    camera: Camera transforms, frustum clipping, camera configuration
    geometry: Bounding boxes and line-art shape primitives
    scene: Spatial index, occlusion queries, scene container
    preview: PNG export and Matplotlib preview of rendered polylines
"""

__version__ = "0.1.0"
