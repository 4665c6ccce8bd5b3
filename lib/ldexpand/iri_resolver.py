"""
IRI reference resolution (RFC 3986 section 5.2) and the IRI shape checks
used during context processing and expansion.

.. module:: ldexpand.iri_resolver
  :synopsis: IRI resolution helpers
"""

import re
from collections import namedtuple

# characters that make a term usable as a compact IRI prefix
GEN_DELIMS = ':/?#[]@'

ParsedUrl = namedtuple(
    'ParsedUrl', ['scheme', 'authority', 'path', 'query', 'fragment'])

# regex from RFC 3986 appendix B
_URL_RE = re.compile(
    r'^(?:([^:/?#]+):)?(?://([^/?#]*))?([^?#]*)(?:\?([^#]*))?(?:#(.*))?')

_SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+\-.]*:')


def parse_url(url: str) -> ParsedUrl:
    """
    Splits an IRI reference into its five RFC 3986 components. Absent
    components are None, the path is always a string.
    """
    return ParsedUrl(*_URL_RE.match(url).groups())


def unparse_url(parsed: ParsedUrl) -> str:
    rval = ''
    if parsed.scheme:
        rval += parsed.scheme + ':'
    if parsed.authority is not None:
        rval += '//' + parsed.authority
    rval += parsed.path
    if parsed.query is not None:
        rval += '?' + parsed.query
    if parsed.fragment is not None:
        rval += '#' + parsed.fragment
    return rval


def remove_dot_segments(path: str) -> str:
    """
    Removes dot segments ('.' and '..') from a URL path,
    as described in https://www.ietf.org/rfc/rfc3986.txt (5.2.4).

    :param path: the IRI path to remove dot segments from.

    :return: the path with dot segments removed.
    """
    output = []
    while path:
        if path.startswith('../'):
            path = path[3:]
        elif path.startswith('./'):
            path = path[2:]
        elif path.startswith('/./'):
            path = path[2:]
        elif path == '/.':
            path = '/'
        elif path.startswith('/../'):
            path = path[3:]
            if output:
                output.pop()
        elif path == '/..':
            path = '/'
            if output:
                output.pop()
        elif path in ('.', '..'):
            path = ''
        else:
            # move the first segment, with its leading '/', to the output
            end = path.find('/', 1 if path.startswith('/') else 0)
            if end == -1:
                end = len(path)
            output.append(path[:end])
            path = path[end:]
    return ''.join(output)


def _merge_paths(base: ParsedUrl, path: str) -> str:
    if base.authority is not None and base.path == '':
        return '/' + path
    return base.path[:base.path.rfind('/') + 1] + path


def resolve(relative_iri: str, base_iri: str = None) -> str:
    """
    Resolves a given relative IRI to an absolute IRI.

    :param relative_iri: the relative IRI.
    :param base_iri: the base IRI.

    :return: the absolute IRI.
    """
    rel = parse_url(relative_iri)

    # already absolute, only normalize the path
    if rel.scheme:
        return unparse_url(rel._replace(path=remove_dot_segments(rel.path)))

    if not base_iri:
        raise ValueError(
            "Found invalid relative IRI '%s' for a missing baseIRI" %
            relative_iri)
    base = parse_url(base_iri)
    if not base.scheme:
        raise ValueError(
            "Found invalid baseIRI '%s' for value '%s'" %
            (base_iri, relative_iri))

    if rel.authority is not None:
        authority = rel.authority
        path = remove_dot_segments(rel.path)
        query = rel.query
    else:
        authority = base.authority
        if rel.path == '':
            path = base.path
            query = rel.query if rel.query is not None else base.query
        else:
            if rel.path.startswith('/'):
                path = remove_dot_segments(rel.path)
            else:
                path = remove_dot_segments(_merge_paths(base, rel.path))
            query = rel.query

    return unparse_url(
        ParsedUrl(base.scheme, authority, path, query, rel.fragment))


def is_absolute_iri(v) -> bool:
    """
    Returns True if the given value is an absolute IRI (has a scheme).

    :param v: the value to check.
    """
    return isinstance(v, str) and _SCHEME_RE.match(v) is not None


def is_blank_node_identifier(v) -> bool:
    return isinstance(v, str) and v.startswith('_:')


def ends_with_gen_delim(v) -> bool:
    """
    Returns True if the given IRI ends with one of the RFC 3986
    gen-delims characters.
    """
    return isinstance(v, str) and len(v) > 0 and v[-1] in GEN_DELIMS
