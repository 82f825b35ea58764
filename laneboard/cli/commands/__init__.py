"""
FILE: laneboard/cli/commands/__init__.py
PURPOSE: CLI command modules (imported by cli/main.py to register commands)
"""
