# kestrel/graphics/__init__.py
