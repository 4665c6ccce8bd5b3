""" The LDExpand module is used to expand JSON-LD. """
from . import jsonld
from .jsonld import JsonLdError, JsonLdProcessor, expand, preprocess_context

__all__ = [
    'jsonld', 'JsonLdError', 'JsonLdProcessor', 'expand', 'preprocess_context']
