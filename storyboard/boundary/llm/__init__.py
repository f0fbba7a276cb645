"""
Language model boundary.

Exports:
  - SceneAnalyzer: Turns chunk text into scene and symbol descriptions
"""

from storyboard.boundary.llm.scene_analyzer import SceneAnalyzer

__all__ = ["SceneAnalyzer"]
