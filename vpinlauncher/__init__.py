"""
vpinlauncher - Visual Pinball table launcher

A Python-based tool to list Visual Pinball tables, preview their snapshots,
show PinMAME high scores, and launch the emulator for a selected table.
"""

__version__ = "0.3.0"
__author__ = "jbruns"
