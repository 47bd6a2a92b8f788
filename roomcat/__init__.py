"""RoomPlan catalog tools.

Builds catalogs of 3D models keyed by object category and attributes,
and exports captured rooms with those models in place of bounding boxes.
"""

__version__ = "0.1.0"
