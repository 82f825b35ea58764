"""
FILE: laneboard/core/__init__.py
PURPOSE: Board engine: lane registry, status mapping, projection and moves
"""
