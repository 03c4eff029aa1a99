"""Challenge registry, dependency ordering, plugins, reports and Panoptic integration."""

__version__ = "0.1.0"