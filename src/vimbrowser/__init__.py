"""vimbrowser - browse the web inside an editor's text buffers."""

__version__ = "0.2.0"
