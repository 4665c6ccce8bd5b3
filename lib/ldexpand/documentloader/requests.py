"""
Remote document loader using Requests.

.. module:: ldexpand.documentloader.requests
  :synopsis: Remote document loader using Requests
"""
import json
import logging
import re
import string
import urllib.parse as urllib_parse

from ldexpand import iri_resolver
from ldexpand.jsonld import (JsonLdError, parse_link_header, LINK_HEADER_REL)

log = logging.getLogger(__name__)


def requests_document_loader(secure=False, max_link_follows=2, **kwargs):
    """
    Create a Requests document loader.

    Can be used to setup extra Requests args such as verify, cert, timeout,
    or others.

    :param secure: require all requests to use HTTPS (default: False).
    :param max_link_follows: Maximum number of alternate link follows allowed.
    :param **kwargs: extra keyword args for Requests get() call.

    :return: the RemoteDocument loader function.
    """
    import requests

    def loader(url, options=None, link_follow_count=0):
        """
        Retrieves JSON-LD at the given URL.

        :param url: the URL to retrieve.
        :param options: the request options.
          [headers] the request headers.

        :return: the RemoteDocument.
        """
        options = options or {}
        try:
            # validate URL
            pieces = urllib_parse.urlparse(url)
            if (not all([pieces.scheme, pieces.netloc]) or
                    pieces.scheme not in ['http', 'https'] or
                    set(pieces.netloc) > set(
                        string.ascii_letters + string.digits + '-.:')):
                raise JsonLdError(
                    'URL could not be dereferenced; only "http" and "https" '
                    'URLs are supported.',
                    'jsonld.InvalidUrl', {'url': url},
                    code='loading document failed')
            if secure and pieces.scheme != 'https':
                raise JsonLdError(
                    'URL could not be dereferenced; secure mode enabled and '
                    'the URL\'s scheme is not "https".',
                    'jsonld.InvalidUrl', {'url': url},
                    code='loading document failed')
            headers = options.get('headers')
            if headers is None:
                headers = {
                    'Accept': 'application/ld+json, application/json'
                }
            log.debug('GET %s', url)
            response = requests.get(url, headers=headers, **kwargs)

            content_type = response.headers.get('content-type')
            if not content_type:
                content_type = 'application/octet-stream'
            doc = {
                'contentType': content_type,
                'contextUrl': None,
                'documentUrl': response.url,
                'document': None
            }
            try:
                doc['document'] = response.json()
            except ValueError:
                # body is not JSON, a Link header may still point to it
                log.debug('Response from %s is not JSON', url)

            link_header = response.headers.get('link')
            if link_header:
                links = parse_link_header(link_header)
                linked_context = links.get(LINK_HEADER_REL)
                # only 1 related link header permitted
                if linked_context and content_type != 'application/ld+json':
                    if isinstance(linked_context, list):
                        raise JsonLdError(
                            'URL could not be dereferenced, '
                            'it has more than one '
                            'associated HTTP Link Header.',
                            'jsonld.LoadDocumentError',
                            {'url': url},
                            code='multiple context link headers')
                    doc['contextUrl'] = iri_resolver.resolve(
                        linked_context['target'], url)
                linked_alternate = links.get('alternate')
                # if not JSON-LD, alternate may point there
                if (isinstance(linked_alternate, dict) and
                        linked_alternate.get('type') ==
                        'application/ld+json' and
                        not re.match(
                            r'^application\/(\w*\+)?json$', content_type)):
                    if link_follow_count >= max_link_follows:
                        raise JsonLdError(
                            'URL could not be dereferenced; exceeded the '
                            'maximum of %d alternate link follows.' %
                            max_link_follows,
                            'jsonld.LoadDocumentError', {'url': url},
                            code='loading document failed')
                    return loader(
                        iri_resolver.resolve(
                            linked_alternate['target'], url),
                        options=options,
                        link_follow_count=link_follow_count + 1)
            return doc
        except JsonLdError:
            raise
        except Exception as cause:
            raise JsonLdError(
                'Could not retrieve a JSON-LD document from the URL.',
                'jsonld.LoadDocumentError', {'url': url},
                code='loading document failed', cause=cause)

    return loader
