"""
SignFlow - digital document signature service.

Users upload PDF documents and A1 (PKCS#12) certificates, and signing
workflows are orchestrated through the Clicksign e-signature API.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
