"""HDFS client library with an os-like interface: configuration, files, errors."""

__version__ = "0.1.0"