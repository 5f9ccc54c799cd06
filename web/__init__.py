"""HTTP shell over the PLM bridge facade."""

__version__ = "1.0.0"
