"""
Smart Blocks Modules
====================

Flask blueprint modules registered by the SmartBlocks extension.
"""

__all__ = ['blocks']
