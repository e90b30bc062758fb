# kestrel/assets/importers/__init__.py
