# Exporters module
from .interfaces import Exporter
from .buffer import ExporterBuffer
from .console import NoopExporter, ConsoleExporter
from .http import HttpJsonExporter

__all__ = [
    "Exporter",
    "ExporterBuffer",
    "NoopExporter",
    "ConsoleExporter",
    "HttpJsonExporter",
]
