"""
Phase Loop Curator Backend

A FastAPI backend for the Phase Loop Records news curator.
Provides scheduled feed ingestion, AI copywriting, and image previews.
"""

__version__ = "1.0.0"
