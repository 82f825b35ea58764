"""
FILE: laneboard/__init__.py
PURPOSE: Laneboard - Scrum/Kanban board with user-defined workflow lanes
"""

__version__ = "0.1.0"
