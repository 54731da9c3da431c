"""Scene module for shape storage, spatial indexing, and occlusion.

Components:
    bvh: Balanced bounding volume tree with depth-first and best-first
        traversal
    occlusion: Camera ray occlusion queries against the tree
    scene: Scene container, renderer, and builder
    config: Scene configuration with dict round-tripping

The tree serves both rendering passes:
    - Frustum culling of whole subtrees while collecting paths
    - Nearest-first ray casts when testing a sample for occlusion, or one
      batched walk per segment for all of its samples
"""

from .bvh import (
    BestFirstVisitStatus,
    BoundingVolumeTree,
    BVTNode,
    VisitStatus,
)
from .config import (
    SceneConfig,
    build_scene,
    scene_config_from_dict,
    scene_config_to_dict,
    scene_to_config,
)
from .occlusion import (
    OCCLUSION_EPSILON,
    OcclusionQuery,
    OcclusionTest,
    OcclusionVisitor,
    is_point_occluded,
    is_point_visible,
    occluded_mask,
)
from .scene import Scene, SceneBuilder

__all__ = [
    "BoundingVolumeTree",
    "BVTNode",
    "VisitStatus",
    "BestFirstVisitStatus",
    "OCCLUSION_EPSILON",
    "OcclusionQuery",
    "OcclusionTest",
    "OcclusionVisitor",
    "is_point_occluded",
    "is_point_visible",
    "occluded_mask",
    "Scene",
    "SceneBuilder",
    "SceneConfig",
    "build_scene",
    "scene_to_config",
    "scene_config_to_dict",
    "scene_config_from_dict",
]
