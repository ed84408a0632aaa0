"""
imgdrop: direct-to-storage image uploads with presigned URLs.
"""
__version__ = "0.1.0"
