"""
Utility helpers for happymath.
"""
