"""Typed data-binding generator for Go text/template sources."""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
