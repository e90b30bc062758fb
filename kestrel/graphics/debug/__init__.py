# kestrel/graphics/debug/__init__.py
