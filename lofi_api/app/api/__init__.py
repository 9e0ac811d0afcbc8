"""
HTTP layer.

``router.py`` aggregates the domain routers from ``endpoints`` and is
mounted under ``/api`` by ``main.create_app``.  ``deps.py`` wires the
services to the ``Database`` handle stored on the application.
"""
