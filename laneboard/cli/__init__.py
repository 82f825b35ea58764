"""
FILE: laneboard/cli/__init__.py
PURPOSE: Typer command line interface
"""
