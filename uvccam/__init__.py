"""UVC payload deframing, USB descriptor parsing, YUY2 colour conversion and helpers."""

__version__ = "0.1.0"
__all__ = ["colorspace", "config", "deframer", "descriptors", "utils"]