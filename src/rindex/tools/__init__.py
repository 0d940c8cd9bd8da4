# tools/__init__.py - Listing tools for rindex
