"""
Form Coach: exercise form analysis from pose keypoints.
"""

__version__ = "0.1.0"
