# kestrel/__init__.py
"""CPU software rasterizer: meshes in, shaded frame buffers out."""

__version__ = "0.1.0"
