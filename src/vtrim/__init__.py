"""vtrim - batch video trimming service.

Accepts uploaded videos, trims a fixed amount from the start and end of
each one with ffmpeg, and hands the results back individually or as a
single zip archive.
"""

__version__ = "0.1.0"
