"""DocAnswer - keyword search and answers over structured business documents."""

__version__ = "0.1.0"
