# kestrel/graphics/core/__init__.py
