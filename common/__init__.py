from .geometry import Bounds, Point, Quadrilateral, order_corners, polygon_area

__all__ = ['Bounds', 'Point', 'Quadrilateral', 'order_corners', 'polygon_area']
