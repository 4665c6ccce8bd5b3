"""
Active context data model.

An active context is a plain dict:

    {
      '@base': the base IRI (may be None),
      '_originalBase': the base IRI the context was created with,
      'processingMode': 'json-ld-1.0' or 'json-ld-1.1',
      'mappings': {term: term definition},
      '@vocab', '@language', '@direction': present only when set,
      'previousContext': the context in effect before a non-propagated
        local context was applied, present only when set
    }

Term definitions are dicts as well. Once a definition has been installed
in a context it is never mutated, so clones share definitions and only
copy the mappings dict itself.

.. module:: ldexpand.context
  :synopsis: Active context helpers and the remote context cache
"""

import json

__all__ = [
    'get_initial_context', 'clone_active_context', 'has_protected_terms',
    'term_definitions_equal', 'ContextCache'
]


def get_initial_context(base, processing_mode='json-ld-1.1'):
    """
    Creates a new, empty active context.

    :param base: the base IRI, also recorded as the original base.
    :param processing_mode: the processing mode of the new context.

    :return: the initial context.
    """
    return {
        '@base': base,
        '_originalBase': base,
        'processingMode': processing_mode,
        'mappings': {}
    }


def clone_active_context(active_ctx):
    """
    Clones an active context so the clone can be updated without affecting
    any other holder of the original.

    :param active_ctx: the active context to clone.

    :return: the clone.
    """
    child = dict(active_ctx)
    child['mappings'] = dict(active_ctx['mappings'])
    return child


def has_protected_terms(active_ctx):
    return any(
        mapping.get('protected')
        for mapping in active_ctx['mappings'].values())


def term_definitions_equal(a, b):
    """
    Compares two term definitions other than their protected flag. The base
    a definition was created against only matters when it carries a scoped
    context to be resolved later.

    :param a: the first term definition.
    :param b: the second term definition.

    :return: True if the definitions are equivalent.
    """
    ignored = {'protected'}
    if '@context' not in a and '@context' not in b:
        ignored.add('_baseUrl')
    a = {k: v for k, v in a.items() if k not in ignored}
    b = {k: v for k, v in b.items() if k not in ignored}
    return a == b


class ContextCache(object):
    """
    A ContextCache keeps dereferenced remote contexts, keyed by their
    resolved URL, for the lifetime of one processor. Entries are stored
    serialized so every hit returns an independent copy.

    The cache is not synchronized; do not share it between threads.
    """

    def __init__(self):
        self.cache = {}

    def __contains__(self, url):
        return url in self.cache

    def __len__(self):
        return len(self.cache)

    def get(self, url):
        cached = self.cache.get(url)
        if cached is None:
            return None
        return json.loads(cached)

    def set(self, url, ctx):
        self.cache.setdefault(url, json.dumps(ctx))
