"""
System components for happymath.

This module provides configuration for the happymath engine.
"""

from happymath.components.config import Config, ConfigManager
