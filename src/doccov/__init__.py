"""doccov — documentation coverage scoring for parsed source projects."""

__version__ = "0.1.0"
