"""
LogicFlow - behavior compiler and concurrent runtime for interactive scenes.

Scene objects carry declarative behavior graphs ("when the scene starts /
when clicked: move, rotate, scale, recolor, wait, show/hide"). The compiler
turns each graph into procedures; the runtime runs them as cooperative
instances on a shared step clock while the scene renders and takes input.
"""

__version__ = "0.1.0"

__all__ = ['__version__']
