"""Infrastructure layer.

Configuration, logging, record stores, the image storage client and the
credential adapter.
"""
