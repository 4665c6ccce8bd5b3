"""
Python implementation of JSON-LD 1.1 context processing and expansion.

.. module:: jsonld
  :synopsis: JSON-LD context processing and expansion
"""

import copy
import json
import logging
import re
import sys
import traceback
from numbers import Integral, Real

from ldexpand.__about__ import (__copyright__, __license__, __version__)
from ldexpand import iri_resolver
from ldexpand.context import (
    ContextCache, clone_active_context, get_initial_context,
    has_protected_terms, term_definitions_equal)

__all__ = [
    '__copyright__', '__license__', '__version__',
    'expand', 'preprocess_context', 'process_context',
    'set_document_loader', 'get_document_loader', 'load_document',
    'parse_link_header', 'dummy_document_loader',
    'requests_document_loader', 'aiohttp_document_loader',
    'JsonLdProcessor', 'JsonLdError', 'JsonLdDatatypeError'
]

log = logging.getLogger(__name__)

# JSON-LD keywords
KEYWORDS = [
    '@base',
    '@container',
    '@context',
    '@default',
    '@direction',
    '@embed',
    '@explicit',
    '@graph',
    '@id',
    '@import',
    '@included',
    '@index',
    '@json',
    '@language',
    '@list',
    '@nest',
    '@none',
    '@omitDefault',
    '@prefix',
    '@preserve',
    '@propagate',
    '@protected',
    '@requireAll',
    '@reverse',
    '@set',
    '@type',
    '@value',
    '@version',
    '@vocab']

# keywords only meaningful when expanding a frame
FRAMING_KEYWORDS = [
    '@default', '@embed', '@explicit', '@omitDefault', '@preserve',
    '@requireAll']

CONTAINER_KEYWORDS = [
    '@graph', '@id', '@index', '@language', '@list', '@set', '@type']

# local context entries that are not term definitions
CONTEXT_KEYWORDS = [
    '@base', '@direction', '@import', '@language', '@propagate',
    '@protected', '@version', '@vocab']

# entries allowed in an expanded term definition
TERM_DEFINITION_KEYWORDS = [
    '@container', '@context', '@direction', '@id', '@index', '@language',
    '@nest', '@prefix', '@protected', '@reverse', '@type']

# entries allowed in a value object
VALUE_OBJECT_KEYWORDS = [
    '@direction', '@index', '@language', '@type', '@value']

DIRECTIONS = ['ltr', 'rtl']

JSON_LD_10 = 'json-ld-1.0'
JSON_LD_11 = 'json-ld-1.1'

# JSON-LD link header rel
LINK_HEADER_REL = 'http://www.w3.org/ns/json-ld#context'

# Restraints
MAX_CONTEXT_URLS = 10

# strings having the form of a keyword
_KEYWORD_FORM = re.compile(r'^@[a-zA-Z]+$')


def expand(input_, options=None, on_key_dropped=None):
    """
    Performs JSON-LD expansion.

    :param input_: the JSON-LD input to expand, or the URL to load it from.
    :param [options]: the options to use.
      [base] the base IRI to use.
      [expandContext] a context to expand with.
      [preprocessedContext] an active context from preprocess_context to
        start from.
      [processingMode] 'json-ld-1.0' or 'json-ld-1.1' (default).
      [documentLoader(url)] the document loader
        (default: _default_document_loader).
    :param [on_key_dropped]: called with each key dropped during expansion.

    :return: the expanded JSON-LD output.
    """
    return JsonLdProcessor().expand(
        input_, options, on_key_dropped=on_key_dropped)


def preprocess_context(ctx, options=None):
    """
    Processes a context on its own so the resulting active context can be
    reused for several expansions.

    :param ctx: the local context or the URL of a remote context.
    :param [options]: the options to use.
      [base] the base IRI to use.
      [processingMode] 'json-ld-1.0' or 'json-ld-1.1' (default).
      [documentLoader(url)] the document loader
        (default: _default_document_loader).

    :return: the active context.
    """
    return JsonLdProcessor().preprocess_context(ctx, options)


def process_context(active_ctx, local_ctx, options=None):
    """
    Processes a local context against an existing active context.

    :param active_ctx: the active context, which is left untouched.
    :param local_ctx: the local context to process.
    :param [options]: the options to use.
      [base] the base IRI to resolve context URLs against.
      [documentLoader(url)] the document loader
        (default: _default_document_loader).

    :return: the new active context.
    """
    return JsonLdProcessor().process_context(active_ctx, local_ctx, options)


def set_document_loader(load_document):
    """
    Sets the default JSON-LD document loader.

    :param load_document(url): the document loader to use.
    """
    global _default_document_loader
    _default_document_loader = load_document


def get_document_loader():
    """
    Gets the default JSON-LD document loader.

    :return: the default document loader.
    """
    return _default_document_loader


def load_document(url, options=None):
    """
    Retrieves a document with the given loader, or the default loader.

    :param url: the URL to retrieve.
    :param [options]: the options to use.
      [documentLoader(url)] the document loader
        (default: _default_document_loader).

    :return: the RemoteDocument.
    """
    options = options or {}
    loader = options.get('documentLoader', _default_document_loader)
    return loader(url)


def parse_link_header(header):
    """
    Parses a link header. The results will be key'd by the value of "rel".

    Link: <http://json-ld.org/contexts/person.jsonld>; \
      rel="http://www.w3.org/ns/json-ld#context"; type="application/ld+json"

    Parses as: {
      'http://www.w3.org/ns/json-ld#context': {
        target: http://json-ld.org/contexts/person.jsonld,
        type: 'application/ld+json'
      }
    }

    If there is more than one "rel" with the same IRI, then entries in the
    resulting map for that "rel" will be lists.

    :param header: the link header to parse.

    :return: the parsed result.
    """
    rval = {}
    # split on unbracketed/unquoted commas
    entries = re.findall(r'(?:<[^>]*?>|"[^"]*?"|[^,])+', header)
    for entry in entries:
        match = re.search(r'\s*<([^>]*?)>\s*(?:;\s*(.*))?', entry)
        if not match:
            continue
        target, params = match.groups()
        result = {'target': target}
        r_params = r'(.*?)=(?:(?:"([^"]*?)")|([^"]*?))\s*(?:(?:;\s*)|$)'
        for key, quoted, bare in re.findall(r_params, params or ''):
            result[key] = quoted if quoted else bare
        rel = result.get('rel', '')
        if isinstance(rval.get(rel), list):
            rval[rel].append(result)
        elif rel in rval:
            rval[rel] = [rval[rel], result]
        else:
            rval[rel] = result
    return rval


def dummy_document_loader(**kwargs):
    """
    Create a dummy document loader that will raise an exception on use.

    :param **kwargs: extra keyword args

    :return: the RemoteDocument loader function.
    """

    def loader(url, options=None):
        """
        Raises an exception on every call.

        :param url: the URL to retrieve.

        :return: the RemoteDocument.
        """
        raise JsonLdError(
            'No default document loader configured',
            'jsonld.LoadDocumentError', {'url': url},
            code='loading document failed')

    return loader


def requests_document_loader(**kwargs):
    import ldexpand.documentloader.requests

    return ldexpand.documentloader.requests.requests_document_loader(
        **kwargs)


def aiohttp_document_loader(**kwargs):
    import ldexpand.documentloader.aiohttp

    return ldexpand.documentloader.aiohttp.aiohttp_document_loader(**kwargs)


class JsonLdProcessor(object):
    """
    A JSON-LD processor.

    Each processor owns a cache of dereferenced remote contexts that lives
    as long as the processor does.
    """

    def __init__(
            self, processing_mode=JSON_LD_11,
            max_remote_contexts=MAX_CONTEXT_URLS, document_loader=None):
        """
        Initialize the JSON-LD processor.

        :param processing_mode: the default processing mode.
        :param max_remote_contexts: the maximum length of a chain of remote
          contexts.
        :param document_loader: the document loader to use instead of the
          module default.
        """
        self.processing_mode = processing_mode
        self.max_remote_contexts = max_remote_contexts
        self.document_loader = document_loader
        self.context_cache = ContextCache()

    def expand(self, input_, options=None, on_key_dropped=None):
        """
        Performs JSON-LD expansion.

        :param input_: the JSON-LD input to expand, or the URL to load it
          from.
        :param options: the options to use.
          [base] the base IRI to use.
          [expandContext] a context to expand with.
          [preprocessedContext] an active context to start from.
          [processingMode] 'json-ld-1.0' or 'json-ld-1.1'.
          [maxRemoteContexts] the maximum length of a remote context chain.
          [isFrame] True to allow framing keywords and interpretation,
            False not to (default: false).
          [ordered] True to process node object keys in sorted order.
          [documentLoader(url)] the document loader
            (default: _default_document_loader).
        :param on_key_dropped: called with each key that is dropped because
          it does not expand to an IRI or a keyword.

        :return: the expanded JSON-LD output.
        """
        options = self._prepare_options(options)
        if on_key_dropped is not None:
            options['onKeyDropped'] = on_key_dropped

        # if input is a string, attempt to dereference remote document
        if _is_string(input_):
            remote_doc = options['documentLoader'](input_)
        else:
            remote_doc = {
                'contextUrl': None,
                'documentUrl': None,
                'document': input_
            }

        try:
            if remote_doc['document'] is None:
                raise JsonLdError(
                    'No remote document found at the given URL.',
                    'jsonld.NullRemoteDocument')
            remote_doc['document'] = _parse_json(remote_doc['document'])
        except Exception as cause:
            raise JsonLdError(
                'Could not retrieve a JSON-LD document from the URL.',
                'jsonld.LoadDocumentError',
                {'remoteDoc': remote_doc}, code='loading document failed',
                cause=cause)

        # set default base
        if options.get('base') is None:
            options['base'] = remote_doc.get('documentUrl')

        document = copy.deepcopy(remote_doc['document'])

        active_ctx = options.get('preprocessedContext')
        if active_ctx is None:
            active_ctx = get_initial_context(
                options['base'], options['processingMode'])

        # process optional expandContext
        if options.get('expandContext') is not None:
            expand_context = copy.deepcopy(options['expandContext'])
            if _is_object(expand_context) and '@context' in expand_context:
                expand_context = expand_context['@context']
            active_ctx = self._process_context(
                active_ctx, expand_context, options)

        # process remote context from HTTP Link Header
        if remote_doc.get('contextUrl') is not None:
            active_ctx = self._process_context(
                active_ctx, remote_doc['contextUrl'], options)

        # do expansion
        expanded = self._expand(active_ctx, None, document, options)

        # optimize away @graph with no other properties
        if (_is_object(expanded) and '@graph' in expanded and
                len(expanded) == 1):
            expanded = expanded['@graph']
        elif expanded is None:
            expanded = []

        # normalize to an array
        return JsonLdProcessor.arrayify(expanded)

    def preprocess_context(self, ctx, options=None):
        """
        Processes a local context against a new, empty active context.

        :param ctx: the local context, a list of local contexts, or the URL
          of a remote context. A map with an @context entry is unwrapped.
        :param options: the options to use.
          [base] the base IRI to use.
          [processingMode] 'json-ld-1.0' or 'json-ld-1.1'.
          [documentLoader(url)] the document loader
            (default: _default_document_loader).

        :return: the new active context.
        """
        options = self._prepare_options(options)
        options.setdefault('base', None)
        active_ctx = get_initial_context(
            options['base'], options['processingMode'])
        return self.process_context(active_ctx, ctx, options)

    def process_context(self, active_ctx, local_ctx, options=None):
        """
        Processes a local context, retrieving any URLs as necessary, and
        returns a new active context. The given active context is left
        untouched.

        :param active_ctx: the current active context.
        :param local_ctx: the local context to process.
        :param options: the options to use.
          [base] the base IRI to resolve context URLs against.
          [documentLoader(url)] the document loader
            (default: _default_document_loader).

        :return: the new active context.
        """
        options = self._prepare_options(options)
        options.setdefault('base', active_ctx.get('_originalBase'))
        if _is_object(local_ctx) and '@context' in local_ctx:
            local_ctx = local_ctx['@context']
        return self._process_context(active_ctx, local_ctx, options)

    @staticmethod
    def arrayify(value):
        """
        If value is an array, returns value, otherwise returns an array
        containing value as the only element.

        :param value: the value.

        :return: an array.
        """
        return value if _is_array(value) else [value]

    @staticmethod
    def add_value(subject, property, value):
        """
        Adds a value to a subject. The property always holds an array and
        values accumulate in order; an array value is added item by item.

        :param subject: the subject to add the value to.
        :param property: the property that relates the value to the subject.
        :param value: the value to add.
        """
        values = subject.setdefault(property, [])
        if _is_array(value):
            values.extend(value)
        else:
            values.append(value)

    def _prepare_options(self, options):
        options = options.copy() if options else {}
        options.setdefault('processingMode', self.processing_mode)
        options.setdefault('maxRemoteContexts', self.max_remote_contexts)
        options.setdefault(
            'documentLoader',
            self.document_loader or _default_document_loader)
        options.setdefault('isFrame', False)
        options.setdefault('ordered', False)
        if options['processingMode'] not in [JSON_LD_10, JSON_LD_11]:
            raise JsonLdError(
                'Unknown processing mode: ' + str(options['processingMode']),
                'jsonld.OptionsError',
                {'processingMode': options['processingMode']})
        return options

    def _expand(
            self, active_ctx, active_property, element, options,
            from_map=False):
        """
        Recursively expands an element using the given context. Any context in
        the element will be removed.

        :param active_ctx: the context to use.
        :param active_property: the property for the element, None for none.
        :param element: the element to expand.
        :param options: the expansion options.
        :param from_map: True if element is a value of an index, id or type
          map, False if not.

        :return: the expanded value.
        """
        # nothing to expand
        if element is None:
            return None

        # disable framing if active_property is @default
        if active_property == '@default':
            options = options.copy()
            options['isFrame'] = False

        mapping = None
        if active_property is not None:
            mapping = active_ctx['mappings'].get(active_property)
        has_property_ctx = mapping is not None and '@context' in mapping

        if not (_is_scalar(element) or _is_object(element) or
                _is_array(element)):
            raise JsonLdDatatypeError(
                'Cannot expand a value that is not a JSON value.',
                {'value': element, 'activeProperty': active_property})

        # handle scalars
        if not _is_object(element) and not _is_array(element):
            # drop free-floating scalars
            if active_property is None or active_property == '@graph':
                return None
            if has_property_ctx:
                active_ctx = self._process_context(
                    active_ctx, mapping['@context'], options,
                    base_url=mapping['_baseUrl'])
            return self._expand_value(active_ctx, active_property, element)

        # recursively expand array
        if _is_array(element):
            rval = []
            container = mapping.get('@container', []) if mapping else []
            for item in element:
                item = self._expand(
                    active_ctx, active_property, item, options,
                    from_map=from_map)
                if '@list' in container and _is_array(item):
                    item = {'@list': item}
                # drop None values
                if _is_array(item):
                    rval.extend(item)
                elif item is not None:
                    rval.append(item)
            return rval

        # revert a non-propagated context unless element is a value object
        # or a lone node reference
        if 'previousContext' in active_ctx and not from_map:
            expanded_keys = [
                self._expand_iri(active_ctx, key, vocab=True)
                for key in element]
            if ('@value' not in expanded_keys and
                    not (len(expanded_keys) == 1 and
                         expanded_keys[0] == '@id')):
                active_ctx = active_ctx['previousContext']

        # property-scoped context
        if has_property_ctx:
            active_ctx = self._process_context(
                active_ctx, mapping['@context'], options,
                base_url=mapping['_baseUrl'], override_protected=True)

        # embedded context
        if '@context' in element:
            active_ctx = self._process_context(
                active_ctx, element['@context'], options)

        # type-scoped contexts are looked up in the context as it was
        # before any of them applied
        type_scoped_ctx = active_ctx
        input_type = None
        for key in sorted(element):
            if self._expand_iri(active_ctx, key, vocab=True) != '@type':
                continue
            types = [
                t for t in JsonLdProcessor.arrayify(element[key])
                if _is_string(t)]
            for type_ in sorted(types):
                type_mapping = type_scoped_ctx['mappings'].get(type_)
                if type_mapping is not None and '@context' in type_mapping:
                    active_ctx = self._process_context(
                        active_ctx, type_mapping['@context'], options,
                        base_url=type_mapping['_baseUrl'], propagate=False)
            # input type is the last value of the first @type entry
            if input_type is None and types:
                input_type = self._expand_iri(
                    active_ctx, JsonLdProcessor.arrayify(element[key])[-1],
                    vocab=True)

        rval = {}
        self._expand_object(
            active_ctx, type_scoped_ctx, active_property, element, rval,
            options, input_type)

        # get property count on expanded output
        count = len(rval)

        if '@value' in rval:
            if [k for k in rval if k not in VALUE_OBJECT_KEYWORDS]:
                raise JsonLdError(
                    'Invalid JSON-LD syntax; an element containing "@value" '
                    'may only have "@direction", "@index", "@language" or '
                    '"@type" entries.', 'jsonld.SyntaxError',
                    {'element': rval}, code='invalid value object')
            if '@type' in rval and ('@language' in rval or
                                    '@direction' in rval):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; an element containing "@value" '
                    'may not contain both "@type" and "@language" or '
                    '"@direction".', 'jsonld.SyntaxError',
                    {'element': rval}, code='invalid value object')

            value = rval['@value']
            if rval.get('@type') == '@json' and self._processing_mode(
                    active_ctx, 1.1):
                # any JSON value is allowed
                pass
            elif value is None or value == []:
                # drop null @values
                return None
            elif ('@language' in rval and not _is_string(value) and
                    not (options['isFrame'] and _is_empty_object(value))):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; only strings may be '
                    'language-tagged.', 'jsonld.SyntaxError',
                    {'element': rval}, code='invalid language-tagged value')
            elif '@type' in rval and not (
                    iri_resolver.is_absolute_iri(rval['@type']) or
                    (options['isFrame'] and
                     _is_empty_object(rval['@type']))):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; an element containing "@value" '
                    'and "@type" must have an absolute IRI for the value '
                    'of "@type".', 'jsonld.SyntaxError', {'element': rval},
                    code='invalid typed value')
        # convert @type to an array
        elif '@type' in rval and not _is_array(rval['@type']):
            rval['@type'] = [rval['@type']]
        # handle @set and @list
        elif '@set' in rval or '@list' in rval:
            if count > 1 and not (count == 2 and '@index' in rval):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; if an element has the '
                    'property "@set" or "@list", then it can have at most '
                    'one other property, which is "@index".',
                    'jsonld.SyntaxError', {'element': rval},
                    code='invalid set or list object')
            # optimize away @set
            if '@set' in rval:
                rval = rval['@set']

        # drop objects with only @language
        if _is_object(rval) and len(rval) == 1 and '@language' in rval:
            return None

        # drop certain top-level objects
        if (_is_object(rval) and
                (active_property is None or active_property == '@graph')):
            # drop empty object or top-level @value/@list,
            # or object with only @id
            if len(rval) == 0 or '@value' in rval or '@list' in rval:
                rval = None
            elif (len(rval) == 1 and '@id' in rval and
                    not options['isFrame']):
                rval = None

        return rval

    def _expand_object(
            self, active_ctx, type_scoped_ctx, active_property, element,
            expanded_parent, options, input_type):
        """
        Expand each key and value of element adding to result.

        :param active_ctx: the context to use.
        :param type_scoped_ctx: the context used to expand @type values.
        :param active_property: the property for the element, None for none.
        :param element: the element to expand.
        :param expanded_parent: the expanded result into which to add values.
        :param options: the expansion options.
        :param input_type: the expanded @type of element, if any.
        """
        is_frame = options['isFrame']
        keys = sorted(element) if options['ordered'] else list(element)

        nests = []
        for key in keys:
            value = element[key]
            if key == '@context':
                continue

            # expand key to IRI
            expanded_property = self._expand_iri(active_ctx, key, vocab=True)

            # drop non-IRI keys that aren't keywords
            if (expanded_property is None or
                not (':' in expanded_property or
                     _is_keyword(expanded_property))):
                self._drop_key(key, options)
                continue

            if _is_keyword(expanded_property):
                if expanded_property in FRAMING_KEYWORDS and not is_frame:
                    self._drop_key(key, options)
                    continue
                if active_property == '@reverse':
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; a keyword cannot be used as '
                        'a @reverse property.',
                        'jsonld.SyntaxError', {'value': value},
                        code='invalid reverse property map')
                if (expanded_property in expanded_parent and
                        expanded_property not in ['@included', '@type']):
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; colliding keywords detected.',
                        'jsonld.SyntaxError', {'keyword': expanded_property},
                        code='colliding keywords')

                if expanded_property == '@id':
                    expanded_value = self._expand_id_value(
                        active_ctx, value, is_frame)
                elif expanded_property == '@type':
                    expanded_value = self._expand_type_value(
                        type_scoped_ctx, value, is_frame)
                    if '@type' in expanded_parent:
                        expanded_value = (
                            JsonLdProcessor.arrayify(
                                expanded_parent['@type']) +
                            JsonLdProcessor.arrayify(expanded_value))
                elif expanded_property == '@graph':
                    expanded_value = self._expand(
                        active_ctx, '@graph', value, options)
                    expanded_value = (
                        [] if expanded_value is None else
                        JsonLdProcessor.arrayify(expanded_value))
                elif expanded_property == '@included':
                    if self._processing_mode(active_ctx, 1.0):
                        self._drop_key(key, options)
                        continue
                    expanded_value = JsonLdProcessor.arrayify(self._expand(
                        active_ctx, active_property, value, options))
                    for item in expanded_value:
                        if not _is_node_object(item):
                            raise JsonLdError(
                                'Invalid JSON-LD syntax; "@included" values '
                                'must be node objects.', 'jsonld.SyntaxError',
                                {'value': value},
                                code='invalid @included value')
                    if '@included' in expanded_parent:
                        expanded_value = (
                            expanded_parent['@included'] + expanded_value)
                elif expanded_property == '@value':
                    if input_type == '@json':
                        if self._processing_mode(active_ctx, 1.0):
                            raise JsonLdError(
                                'Invalid JSON-LD syntax; JSON literals are '
                                'not supported in JSON-LD 1.0.',
                                'jsonld.SyntaxError', {'value': value},
                                code='invalid value object value')
                    elif not (value is None or _is_scalar(value) or (
                            is_frame and (
                                _is_empty_object(value) or
                                _is_array(value) and
                                all(_is_scalar(v) for v in value)))):
                        raise JsonLdError(
                            'Invalid JSON-LD syntax; "@value" value must not '
                            'be an object or an array.', 'jsonld.SyntaxError',
                            {'value': value},
                            code='invalid value object value')
                    expanded_value = value
                    if expanded_value is None:
                        expanded_parent['@value'] = None
                        continue
                elif expanded_property == '@language':
                    if not (_is_string(value) or (
                            is_frame and (
                                _is_empty_object(value) or
                                _is_array(value) and
                                all(_is_string(v) for v in value)))):
                        raise JsonLdError(
                            'Invalid JSON-LD syntax; "@language" value must '
                            'be a string.', 'jsonld.SyntaxError',
                            {'value': value},
                            code='invalid language-tagged string')
                    expanded_value = value
                elif expanded_property == '@direction':
                    if self._processing_mode(active_ctx, 1.0):
                        self._drop_key(key, options)
                        continue
                    if not (value in DIRECTIONS or (
                            is_frame and (
                                _is_empty_object(value) or
                                _is_array(value) and
                                all(v in DIRECTIONS for v in value)))):
                        raise JsonLdError(
                            'Invalid JSON-LD syntax; "@direction" value must '
                            'be "ltr" or "rtl".', 'jsonld.SyntaxError',
                            {'value': value}, code='invalid base direction')
                    expanded_value = value
                elif expanded_property == '@index':
                    if not _is_string(value):
                        raise JsonLdError(
                            'Invalid JSON-LD syntax; "@index" value must be '
                            'a string.', 'jsonld.SyntaxError',
                            {'value': value}, code='invalid @index value')
                    expanded_value = value
                elif expanded_property == '@list':
                    # drop free-floating lists
                    if active_property is None or active_property == '@graph':
                        continue
                    # NOTE: arrays nested in an explicit @list are flattened
                    # into it rather than kept as lists of lists
                    expanded_value = self._expand(
                        active_ctx, active_property, value, options)
                    expanded_value = (
                        [] if expanded_value is None else
                        JsonLdProcessor.arrayify(expanded_value))
                elif expanded_property == '@set':
                    expanded_value = self._expand(
                        active_ctx, active_property, value, options)
                elif expanded_property == '@reverse':
                    self._expand_reverse_value(
                        active_ctx, value, expanded_parent, options)
                    continue
                elif expanded_property == '@nest':
                    # nested keys are expanded after all other keys
                    nests.append(key)
                    continue
                elif expanded_property in FRAMING_KEYWORDS:
                    expanded_value = JsonLdProcessor.arrayify(self._expand(
                        active_ctx, expanded_property, value, options))
                else:
                    # keywords with no meaning in a node or value object
                    self._drop_key(key, options)
                    continue

                expanded_parent[expanded_property] = expanded_value
                continue

            mapping = active_ctx['mappings'].get(key)
            container = mapping.get('@container', []) if mapping else []

            if mapping is not None and mapping.get('@type') == '@json':
                expanded_value = {'@value': value, '@type': '@json'}
            # handle language map container (skip if value is not an object)
            elif '@language' in container and _is_object(value):
                expanded_value = self._expand_language_map(
                    active_ctx, value, mapping)
            # handle index, id and type containers
            elif _is_object(value) and (
                    '@index' in container or '@type' in container or
                    '@id' in container):
                expanded_value = self._expand_index_map(
                    active_ctx, key, value, mapping, options)
            else:
                # recursively expand value w/key as new active property
                expanded_value = self._expand(active_ctx, key, value, options)

            # drop None values
            if expanded_value is None:
                continue

            # convert expanded value to @list if container specifies it
            if '@list' in container and not _is_list(expanded_value):
                expanded_value = {
                    '@list': JsonLdProcessor.arrayify(expanded_value)
                }

            # convert expanded value to @graph
            if ('@graph' in container and
                    '@id' not in container and
                    '@index' not in container):
                expanded_value = [
                    {'@graph': JsonLdProcessor.arrayify(v)}
                    for v in JsonLdProcessor.arrayify(expanded_value)]

            # merge in reverse properties
            if mapping is not None and mapping['reverse']:
                reverse_map = expanded_parent.setdefault('@reverse', {})
                for item in JsonLdProcessor.arrayify(expanded_value):
                    if _is_value(item) or _is_list(item):
                        raise JsonLdError(
                            'Invalid JSON-LD syntax; "@reverse" value must '
                            'not be an @value or an @list.',
                            'jsonld.SyntaxError', {'value': expanded_value},
                            code='invalid reverse property value')
                    JsonLdProcessor.add_value(
                        reverse_map, expanded_property, item)
                continue

            JsonLdProcessor.add_value(
                expanded_parent, expanded_property, expanded_value)

        # expand each nested key
        for key in sorted(nests):
            for nv in JsonLdProcessor.arrayify(element[key]):
                if (not _is_object(nv) or [
                        k for k in nv
                        if self._expand_iri(
                            active_ctx, k, vocab=True) == '@value']):
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; nested value must be a node '
                        'object.', 'jsonld.SyntaxError', {'value': nv},
                        code='invalid @nest value')
                self._expand_object(
                    active_ctx, type_scoped_ctx, active_property, nv,
                    expanded_parent, options, input_type)

    def _expand_id_value(self, active_ctx, value, is_frame):
        if _is_string(value):
            return self._expand_iri(active_ctx, value, base=True)
        if is_frame:
            if _is_empty_object(value):
                return value
            if _is_array(value) and all(_is_string(v) for v in value):
                return [
                    self._expand_iri(active_ctx, v, base=True)
                    for v in value]
        raise JsonLdError(
            'Invalid JSON-LD syntax; "@id" value must be a string.',
            'jsonld.SyntaxError', {'value': value}, code='invalid @id value')

    def _expand_type_value(self, type_scoped_ctx, value, is_frame):
        if _is_string(value):
            return self._expand_iri(
                type_scoped_ctx, value, vocab=True, base=True)
        if _is_array(value) and all(_is_string(v) for v in value):
            return [
                self._expand_iri(type_scoped_ctx, v, vocab=True, base=True)
                for v in value]
        if is_frame:
            if _is_empty_object(value):
                return value
            if _is_default_object(value) and _is_string(value['@default']):
                return {'@default': self._expand_iri(
                    type_scoped_ctx, value['@default'], vocab=True,
                    base=True)}
        raise JsonLdError(
            'Invalid JSON-LD syntax; "@type" value must be a string or an '
            'array of strings.', 'jsonld.SyntaxError', {'value': value},
            code='invalid type value')

    def _expand_reverse_value(self, active_ctx, value, expanded_parent,
                              options):
        """
        Expands the value of a @reverse entry, folding double-reversed
        properties back into the parent and collecting the rest in the
        parent's @reverse map.
        """
        if not _is_object(value):
            raise JsonLdError(
                'Invalid JSON-LD syntax; "@reverse" value must be '
                'an object.', 'jsonld.SyntaxError', {'value': value},
                code='invalid @reverse value')

        expanded_value = self._expand(
            active_ctx, '@reverse', value, options) or {}

        # properties double-reversed
        for rproperty, rvalue in expanded_value.get('@reverse', {}).items():
            JsonLdProcessor.add_value(expanded_parent, rproperty, rvalue)

        # merge in all reversed properties
        for property, items in expanded_value.items():
            if property == '@reverse':
                continue
            reverse_map = expanded_parent.setdefault('@reverse', {})
            for item in JsonLdProcessor.arrayify(items):
                if _is_value(item) or _is_list(item):
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; "@reverse" '
                        'value must not be an @value or an @list',
                        'jsonld.SyntaxError',
                        {'value': expanded_value},
                        code='invalid reverse property value')
                JsonLdProcessor.add_value(reverse_map, property, item)

    def _drop_key(self, key, options):
        log.debug('Dropping key %r during expansion', key)
        on_key_dropped = options.get('onKeyDropped')
        if on_key_dropped is not None:
            on_key_dropped(key)

    def _expand_language_map(self, active_ctx, language_map, mapping):
        """
        Expands a language map.

        :param active_ctx: the current active context.
        :param language_map: the language map to expand.
        :param mapping: the term definition of the language map property.

        :return: the expanded language map.
        """
        direction = active_ctx.get('@direction')
        if '@direction' in mapping:
            direction = mapping['@direction']

        rval = []
        for key, values in sorted(language_map.items()):
            expanded_key = self._expand_iri(active_ctx, key, vocab=True)
            for item in JsonLdProcessor.arrayify(values):
                if item is None:
                    continue
                if not _is_string(item):
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; language map values must be '
                        'strings.', 'jsonld.SyntaxError',
                        {'languageMap': language_map},
                        code='invalid language map value')
                val = {'@value': item}
                if key != '@none' and expanded_key != '@none':
                    val['@language'] = key
                if direction is not None:
                    val['@direction'] = direction
                rval.append(val)
        return rval

    def _expand_index_map(
            self, active_ctx, active_property, value, mapping, options):
        """
        Expands an index, id or type map.

        :param active_ctx: the current active context.
        :param active_property: the property for the element.
        :param value: the object containing indexed values.
        :param mapping: the term definition of active_property.
        :param options: the expansion options.

        :return: the expanded items.
        """
        container = mapping['@container']
        index_key = mapping.get('@index', '@index')
        as_graph = '@graph' in container

        rval = []
        for index, index_value in sorted(value.items()):
            map_ctx = active_ctx
            if '@id' in container or '@type' in container:
                map_ctx = active_ctx.get('previousContext', active_ctx)
            if '@type' in container:
                index_mapping = map_ctx['mappings'].get(index)
                if index_mapping is not None and '@context' in index_mapping:
                    map_ctx = self._process_context(
                        map_ctx, index_mapping['@context'], options,
                        base_url=index_mapping['_baseUrl'])

            expanded_index = self._expand_iri(active_ctx, index, vocab=True)

            items = self._expand(
                map_ctx, active_property,
                JsonLdProcessor.arrayify(index_value), options, from_map=True)
            for item in items:
                if as_graph and not _is_graph(item):
                    item = {'@graph': JsonLdProcessor.arrayify(item)}
                if expanded_index == '@none':
                    pass
                elif '@index' in container and index_key != '@index':
                    # property-valued index
                    if _is_value(item):
                        raise JsonLdError(
                            'Invalid JSON-LD syntax; a value object cannot '
                            'be indexed by a property.', 'jsonld.SyntaxError',
                            {'value': item}, code='invalid value object')
                    expanded_index_key = self._expand_iri(
                        active_ctx, index_key, vocab=True)
                    item[expanded_index_key] = (
                        [self._expand_value(active_ctx, index_key, index)] +
                        JsonLdProcessor.arrayify(
                            item.get(expanded_index_key, [])))
                elif '@index' in container:
                    item.setdefault('@index', index)
                elif '@id' in container:
                    if '@id' not in item:
                        item['@id'] = self._expand_iri(
                            active_ctx, index, base=True)
                elif '@type' in container:
                    item['@type'] = [expanded_index] + (
                        JsonLdProcessor.arrayify(item.get('@type', [])))
                rval.append(item)
        return rval

    def _expand_value(self, active_ctx, active_property, value):
        """
        Expands the given value by using the coercion and keyword rules in the
        given context.

        :param active_ctx: the active context to use.
        :param active_property: the property the value is associated with.
        :param value: the value to expand.

        :return: the expanded value.
        """
        mapping = active_ctx['mappings'].get(active_property)
        type_ = mapping.get('@type') if mapping else None

        # do @id expansion
        if type_ == '@id' and _is_string(value):
            return {'@id': self._expand_iri(active_ctx, value, base=True)}
        # do @id expansion w/vocab
        if type_ == '@vocab' and _is_string(value):
            return {'@id': self._expand_iri(
                active_ctx, value, vocab=True, base=True)}

        rval = {'@value': value}

        # other type
        if type_ not in [None, '@id', '@vocab', '@none']:
            rval['@type'] = type_
        # check for language tagging
        elif _is_string(value):
            if mapping is not None and '@language' in mapping:
                language = mapping['@language']
            else:
                language = active_ctx.get('@language')
            if mapping is not None and '@direction' in mapping:
                direction = mapping['@direction']
            else:
                direction = active_ctx.get('@direction')
            if language is not None:
                rval['@language'] = language
            if direction is not None:
                rval['@direction'] = direction

        return rval

    def _process_context(
            self, active_ctx, local_ctx, options, base_url=None,
            remote_contexts=None, override_protected=False, propagate=True,
            validate_scoped=True):
        """
        Processes a local context and returns a new active context.

        :param active_ctx: the current active context.
        :param local_ctx: the local context to process.
        :param options: the context processing options.
        :param base_url: the URL to resolve context references against
          (default: the base option).
        :param remote_contexts: the chain of remote context URLs currently
          being processed.
        :param override_protected: True to allow protected terms to be
          redefined.
        :param propagate: False if the new context only applies to the
          node object it appears in.
        :param validate_scoped: False to skip remote contexts already on the
          chain, as done when validating scoped contexts.

        :return: the new active context.
        """
        if base_url is None:
            base_url = options.get('base')
        if remote_contexts is None:
            remote_contexts = []

        rval = clone_active_context(active_ctx)

        # @propagate in the local context overrides the given flag
        if _is_object(local_ctx) and '@propagate' in local_ctx:
            propagate = local_ctx['@propagate']

        if not propagate and 'previousContext' not in rval:
            rval['previousContext'] = active_ctx

        for ctx in JsonLdProcessor.arrayify(local_ctx):
            # reset to initial context
            if ctx is None:
                if not override_protected and has_protected_terms(rval):
                    raise JsonLdError(
                        'Tried to nullify a context with protected terms '
                        'outside of a term definition.',
                        'jsonld.SyntaxError', {},
                        code='invalid context nullification')
                previous = rval
                rval = get_initial_context(
                    previous['_originalBase'], previous['processingMode'])
                if not propagate:
                    rval['previousContext'] = previous
                continue

            # dereference remote context
            if _is_string(ctx):
                try:
                    url = iri_resolver.resolve(ctx, base_url)
                except ValueError as cause:
                    raise JsonLdError(
                        'Could not resolve the remote context URL.',
                        'jsonld.ContextUrlError',
                        {'url': ctx, 'base': base_url},
                        code='loading remote context failed', cause=cause)
                if not validate_scoped and url in remote_contexts:
                    continue
                if len(remote_contexts) > options['maxRemoteContexts']:
                    raise JsonLdError(
                        'Maximum number of @context URLs exceeded.',
                        'jsonld.ContextUrlError',
                        {'max': options['maxRemoteContexts']},
                        code='context overflow')
                remote_contexts.append(url)
                rval = self._process_context(
                    rval, self._load_remote_context(url, options), options,
                    base_url=url, remote_contexts=list(remote_contexts),
                    validate_scoped=validate_scoped)
                continue

            # context must be an object now
            if not _is_object(ctx):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context must be an object.',
                    'jsonld.SyntaxError', {'context': ctx},
                    code='invalid local context')

            # handle @version
            if '@version' in ctx:
                if _is_bool(ctx['@version']) or ctx['@version'] != 1.1:
                    raise JsonLdError(
                        'Unsupported JSON-LD version: ' +
                        str(ctx['@version']),
                        'jsonld.UnsupportedVersion', {'context': ctx},
                        code='invalid @version value')
                if self._processing_mode(rval, 1.0):
                    raise JsonLdError(
                        '@version: ' + str(ctx['@version']) +
                        ' not compatible with ' + rval['processingMode'],
                        'jsonld.ProcessingModeConflict', {'context': ctx},
                        code='processing mode conflict')

            # handle @import
            if '@import' in ctx:
                ctx = self._import_context(rval, ctx, base_url, options)

            # handle @base, only for contexts that are not remote
            if '@base' in ctx and not remote_contexts:
                base = ctx['@base']
                if base is None:
                    rval['@base'] = None
                elif iri_resolver.is_absolute_iri(base):
                    rval['@base'] = base
                elif _is_string(base) and iri_resolver.is_absolute_iri(
                        rval['@base']):
                    rval['@base'] = iri_resolver.resolve(base, rval['@base'])
                else:
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; the value of "@base" in a '
                        '@context must be an IRI or null.',
                        'jsonld.SyntaxError', {'context': ctx},
                        code='invalid base IRI')

            # handle @vocab
            if '@vocab' in ctx:
                value = ctx['@vocab']
                if value is None:
                    rval.pop('@vocab', None)
                else:
                    vocab = None
                    if _is_string(value) and (
                            self._processing_mode(rval, 1.1) or
                            iri_resolver.is_absolute_iri(value) or
                            iri_resolver.is_blank_node_identifier(value)):
                        vocab = self._expand_iri(
                            rval, value, vocab=True, base=True)
                    if not (iri_resolver.is_absolute_iri(vocab) or
                            iri_resolver.is_blank_node_identifier(vocab)):
                        raise JsonLdError(
                            'Invalid JSON-LD syntax; the value of "@vocab" '
                            'in a @context must be an IRI, a blank node '
                            'identifier or null.',
                            'jsonld.SyntaxError', {'context': ctx},
                            code='invalid vocab mapping')
                    rval['@vocab'] = vocab

            # handle @language
            if '@language' in ctx:
                value = ctx['@language']
                if value is None:
                    rval.pop('@language', None)
                elif not _is_string(value):
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; the value of "@language" in '
                        'a @context must be a string or null.',
                        'jsonld.SyntaxError', {'context': ctx},
                        code='invalid default language')
                else:
                    rval['@language'] = value

            # handle @direction
            if '@direction' in ctx:
                self._check_json_ld_11(rval, ctx, '@direction')
                value = ctx['@direction']
                if value is None:
                    rval.pop('@direction', None)
                elif value in DIRECTIONS:
                    rval['@direction'] = value
                else:
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; the value of "@direction" '
                        'in a @context must be "ltr", "rtl" or null.',
                        'jsonld.SyntaxError', {'context': ctx},
                        code='invalid base direction')

            # handle @propagate
            if '@propagate' in ctx:
                self._check_json_ld_11(rval, ctx, '@propagate')
                if not _is_bool(ctx['@propagate']):
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; @propagate value must be '
                        'a boolean.', 'jsonld.SyntaxError', {'context': ctx},
                        code='invalid @propagate value')

            # handle @protected
            if '@protected' in ctx:
                self._check_json_ld_11(rval, ctx, '@protected')
                if not _is_bool(ctx['@protected']):
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; @protected value must be '
                        'a boolean.', 'jsonld.SyntaxError', {'context': ctx},
                        code='invalid @protected value')

            # process all other keys, in reverse order by term
            defined = {}
            term_options = options.copy()
            term_options.update({
                '_termBaseUrl': base_url,
                '_overrideProtected': override_protected,
                '_remoteContexts': remote_contexts
            })
            terms = [k for k in ctx if k not in CONTEXT_KEYWORDS]
            for term in sorted(terms, reverse=True):
                self._create_term_definition(
                    rval, ctx, term, defined, term_options)

        return rval

    def _import_context(self, active_ctx, ctx, base_url, options):
        """
        Merges the context referenced by @import into a local context.

        :param active_ctx: the active context being built.
        :param ctx: the local context containing @import.
        :param base_url: the URL to resolve the import against.
        :param options: the context processing options.

        :return: the merged local context.
        """
        self._check_json_ld_11(active_ctx, ctx, '@import')
        value = ctx['@import']
        if not _is_string(value):
            raise JsonLdError(
                'Invalid JSON-LD syntax; @import value must be a string.',
                'jsonld.SyntaxError', {'context': ctx},
                code='invalid @import value')
        try:
            url = iri_resolver.resolve(value, base_url)
        except ValueError as cause:
            raise JsonLdError(
                'Could not resolve the @import URL.',
                'jsonld.ContextUrlError', {'url': value, 'base': base_url},
                code='loading remote context failed', cause=cause)

        import_ctx = self._load_remote_context(url, options)
        if not _is_object(import_ctx):
            raise JsonLdError(
                'Invalid JSON-LD syntax; an imported context must be a '
                'single object.', 'jsonld.SyntaxError', {'url': url},
                code='invalid remote context')
        if '@import' in import_ctx:
            raise JsonLdError(
                'Invalid JSON-LD syntax; an imported context must not '
                'include @import.', 'jsonld.SyntaxError', {'url': url},
                code='invalid context entry')

        # NOTE: merge direction is ambiguous between implementations; here
        # local entries replace identically named imported entries, as in
        # the JSON-LD 1.1 context processing algorithm.
        merged = dict(import_ctx)
        merged.update(ctx)
        del merged['@import']
        return merged

    def _load_remote_context(self, url, options):
        """
        Retrieves the @context of the document at the given URL, from the
        processor's cache when it has been retrieved before.

        :param url: the absolute URL of the remote context.
        :param options: the options to use.
          [documentLoader(url)] the document loader.

        :return: the value of the document's @context entry.
        """
        if url in self.context_cache:
            return self.context_cache.get(url)

        log.debug('Loading remote context %s', url)
        try:
            remote_doc = options['documentLoader'](url)
            document = _parse_json(remote_doc['document'])
        except Exception as cause:
            raise JsonLdError(
                'Dereferencing a URL did not result in a valid JSON-LD '
                'context.', 'jsonld.ContextUrlError', {'url': url},
                code='loading remote context failed', cause=cause)

        if not _is_object(document) or '@context' not in document:
            raise JsonLdError(
                'Dereferencing a URL did not result in a JSON-LD document '
                'with an @context entry.', 'jsonld.ContextUrlError',
                {'url': url}, code='loading remote context failed')

        self.context_cache.set(url, document['@context'])
        return self.context_cache.get(url)

    def _processing_mode(self, active_ctx, version):
        """
        Processing Mode check.

        :param active_ctx: the current active context.
        :param version: the string or numeric version to check.

        :return: True if the check matches.
        """
        mode = active_ctx.get('processingMode', JSON_LD_11)
        if str(version) >= '1.1':
            return mode >= 'json-ld-' + str(version)
        else:
            return mode == JSON_LD_10

    def _check_json_ld_11(self, active_ctx, ctx, keyword):
        if self._processing_mode(active_ctx, 1.0):
            raise JsonLdError(
                'Invalid JSON-LD syntax; ' + keyword + ' is not supported in '
                'JSON-LD 1.0.', 'jsonld.SyntaxError', {'context': ctx},
                code='invalid context entry')

    def _create_term_definition(
            self, active_ctx, local_ctx, term, defined, options):
        """
        Creates a term definition during context processing.

        :param active_ctx: the current active context, updated in place.
        :param local_ctx: the local context being processed.
        :param term: the key in the local context to define the mapping for.
        :param defined: a map of defining/defined keys to detect cycles
          and prevent double definitions.
        :param options: the context processing options.
          [_termBaseUrl] the base URL of the local context.
          [_overrideProtected] True to allow redefining protected terms.
          [_remoteContexts] the current chain of remote context URLs.
        """
        if term in defined:
            # term already defined
            if defined[term]:
                return
            # cycle detected
            raise JsonLdError(
                'Cyclical context definition detected.',
                'jsonld.CyclicalContext', {
                    'context': local_ctx,
                    'term': term
                }, code='cyclic IRI mapping')

        if term == '':
            raise JsonLdError(
                'Invalid JSON-LD syntax; a term cannot be an empty string.',
                'jsonld.SyntaxError', {'context': local_ctx},
                code='invalid term definition')

        # now defining term
        defined[term] = False

        base_url = options.get('_termBaseUrl', options.get('base'))
        override_protected = options.get('_overrideProtected', False)
        value = local_ctx[term]

        if term == '@type' and self._processing_mode(active_ctx, 1.1):
            # @type may only be made a protected and/or @set container
            if (not _is_object(value) or
                    value.get('@container') != '@set' or
                    [k for k in value
                     if k not in ['@container', '@protected']]):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; keywords cannot be overridden.',
                    'jsonld.SyntaxError', {'context': local_ctx, 'term': term},
                    code='keyword redefinition')
        elif _is_keyword(term):
            raise JsonLdError(
                'Invalid JSON-LD syntax; keywords cannot be overridden.',
                'jsonld.SyntaxError', {'context': local_ctx, 'term': term},
                code='keyword redefinition')
        elif _KEYWORD_FORM.match(term):
            log.warning(
                'Ignoring term definition for "%s", terms with the form '
                'of a keyword are reserved.', term)
            defined[term] = True
            return

        # remove old mapping
        previous_mapping = active_ctx['mappings'].pop(term, None)

        # convert short-hand value to object w/@id
        simple_term = False
        if value is None:
            value = {'@id': None}
        elif _is_string(value):
            simple_term = True
            value = {'@id': value}
        elif not _is_object(value):
            raise JsonLdError(
                'Invalid JSON-LD syntax; @context property values must be '
                'strings or objects.', 'jsonld.SyntaxError',
                {'context': local_ctx}, code='invalid term definition')

        # create new mapping
        mapping = {
            'reverse': False,
            'protected': False,
            '_prefix': False,
            '_baseUrl': base_url
        }

        if '@protected' in value:
            if self._processing_mode(active_ctx, 1.0):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @protected is not supported in '
                    'JSON-LD 1.0.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid term definition')
            if not _is_bool(value['@protected']):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @protected value must be '
                    'a boolean.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid @protected value')
            mapping['protected'] = value['@protected']
        elif local_ctx.get('@protected') is True:
            mapping['protected'] = True

        if '@type' in value:
            type_ = value['@type']
            if not _is_string(type_):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context @type value must be '
                    'a string.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid type mapping')
            type_ = self._expand_iri(
                active_ctx, type_, vocab=True,
                local_ctx=local_ctx, defined=defined, options=options)
            if (type_ in ['@json', '@none'] and
                    self._processing_mode(active_ctx, 1.0)):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; an @context @type value of ' +
                    type_ + ' is not supported in JSON-LD 1.0.',
                    'jsonld.SyntaxError', {'context': local_ctx},
                    code='invalid type mapping')
            if (type_ not in ['@id', '@json', '@none', '@vocab'] and
                    not iri_resolver.is_absolute_iri(type_)):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; an @context @type value must '
                    'be an absolute IRI, @id, @json, @none or @vocab.',
                    'jsonld.SyntaxError', {'context': local_ctx},
                    code='invalid type mapping')
            mapping['@type'] = type_

        if '@reverse' in value:
            if '@id' in value or '@nest' in value:
                raise JsonLdError(
                    'Invalid JSON-LD syntax; an @reverse term definition must '
                    'not contain @id or @nest.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid reverse property')
            reverse = value['@reverse']
            if not _is_string(reverse):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context @reverse value must be '
                    'a string.', 'jsonld.SyntaxError', {'context': local_ctx},
                    code='invalid IRI mapping')
            if _KEYWORD_FORM.match(reverse):
                log.warning(
                    'Ignoring term definition for "%s", its @reverse value '
                    '"%s" has the form of a keyword.', term, reverse)
                self._define_term(
                    active_ctx, local_ctx, term, None, previous_mapping,
                    defined, override_protected)
                return

            # expand and add @id mapping
            id_ = self._expand_iri(
                active_ctx, reverse, vocab=True,
                local_ctx=local_ctx, defined=defined, options=options)
            if not (iri_resolver.is_absolute_iri(id_) or
                    iri_resolver.is_blank_node_identifier(id_)):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context @reverse value must be '
                    'an absolute IRI or a blank node identifier.',
                    'jsonld.SyntaxError', {'context': local_ctx},
                    code='invalid IRI mapping')
            mapping['@id'] = id_

            if '@container' in value:
                container = value['@container']
                if container not in [None, '@set', '@index']:
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; @context @container value '
                        'for an @reverse type definition must be @index or '
                        '@set.', 'jsonld.SyntaxError',
                        {'context': local_ctx},
                        code='invalid reverse property')
                if container is not None:
                    mapping['@container'] = [container]

            mapping['reverse'] = True
            self._define_term(
                active_ctx, local_ctx, term, mapping, previous_mapping,
                defined, override_protected)
            return

        colon = term.find(':', 1)
        if '@id' in value and value['@id'] != term:
            id_ = value['@id']
            if id_ is None:
                # term is explicitly not mapped to an IRI
                mapping['@id'] = None
            elif not _is_string(id_):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context @id value must be a '
                    'string.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid IRI mapping')
            elif not _is_keyword(id_) and _KEYWORD_FORM.match(id_):
                log.warning(
                    'Ignoring term definition for "%s", its @id value "%s" '
                    'has the form of a keyword.', term, id_)
                self._define_term(
                    active_ctx, local_ctx, term, None, previous_mapping,
                    defined, override_protected)
                return
            else:
                id_ = self._expand_iri(
                    active_ctx, id_, vocab=True,
                    local_ctx=local_ctx, defined=defined, options=options)
                if not (_is_keyword(id_) or
                        iri_resolver.is_absolute_iri(id_) or
                        iri_resolver.is_blank_node_identifier(id_)):
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; @context @id value must be '
                        'an absolute IRI, a blank node identifier, or a '
                        'keyword.', 'jsonld.SyntaxError',
                        {'context': local_ctx}, code='invalid IRI mapping')
                if id_ == '@context':
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; @context cannot be aliased.',
                        'jsonld.SyntaxError', {'context': local_ctx},
                        code='invalid keyword alias')
                mapping['@id'] = id_

                # a term that looks like an IRI must expand to its own mapping
                if (colon != -1 and colon != len(term) - 1) or '/' in term:
                    defined[term] = True
                    expanded_term = self._expand_iri(
                        active_ctx, term, vocab=True,
                        local_ctx=local_ctx, defined=defined, options=options)
                    if expanded_term != id_:
                        raise JsonLdError(
                            'Invalid JSON-LD syntax; term in form of IRI '
                            'must expand to definition.',
                            'jsonld.SyntaxError',
                            {'context': local_ctx, 'term': term},
                            code='invalid IRI mapping')

                if (':' not in term and '/' not in term and
                        (simple_term or
                         self._processing_mode(active_ctx, 1.0)) and
                        (iri_resolver.ends_with_gen_delim(id_) or
                         iri_resolver.is_blank_node_identifier(id_))):
                    mapping['_prefix'] = True
        elif colon != -1:
            # term is a compact IRI, an absolute IRI or a blank node
            prefix, suffix = term.split(':', 1)
            if prefix in local_ctx:
                # define parent prefix
                self._create_term_definition(
                    active_ctx, local_ctx, prefix, defined, options)
            prefix_mapping = active_ctx['mappings'].get(prefix)
            if prefix_mapping is not None and prefix_mapping['@id']:
                mapping['@id'] = prefix_mapping['@id'] + suffix
            else:
                mapping['@id'] = term
        elif '/' in term:
            # term is a relative IRI
            id_ = self._expand_iri(
                active_ctx, term, vocab=True, options=options)
            if not iri_resolver.is_absolute_iri(id_):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; a term containing "/" must '
                    'expand to an absolute IRI.', 'jsonld.SyntaxError',
                    {'context': local_ctx, 'term': term},
                    code='invalid IRI mapping')
            mapping['@id'] = id_
        elif term == '@type':
            mapping['@id'] = '@type'
        else:
            # non-IRIs MUST define @ids if @vocab not available
            if '@vocab' not in active_ctx:
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context terms must define '
                    'an @id.', 'jsonld.SyntaxError', {
                        'context': local_ctx,
                        'term': term
                    }, code='invalid IRI mapping')
            # prepend vocab to term
            mapping['@id'] = active_ctx['@vocab'] + term

        if '@container' in value:
            container = value['@container']
            if self._processing_mode(active_ctx, 1.0):
                is_valid = container in ['@index', '@language', '@list',
                                         '@set']
            else:
                is_valid = _is_valid_container_mapping(
                    JsonLdProcessor.arrayify(container))
            if not is_valid:
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context @container value '
                    'must be one of the following: ' +
                    ', '.join(CONTAINER_KEYWORDS) + ', or an allowed '
                    'combination of them.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid container mapping')
            mapping['@container'] = JsonLdProcessor.arrayify(container)

            # type maps coerce their values to node references
            if '@type' in mapping['@container']:
                mapping.setdefault('@type', '@id')
                if mapping['@type'] not in ['@id', '@vocab']:
                    raise JsonLdError(
                        'Invalid JSON-LD syntax; a type map must coerce its '
                        'values to @id or @vocab.', 'jsonld.SyntaxError',
                        {'context': local_ctx}, code='invalid type mapping')

        if '@index' in value:
            index = value['@index']
            if (self._processing_mode(active_ctx, 1.0) or
                    '@index' not in mapping.get('@container', [])):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @index without an @index '
                    'container.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid term definition')
            if not _is_string(index) or not iri_resolver.is_absolute_iri(
                    self._expand_iri(
                        active_ctx, index, vocab=True, options=options)):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @index must expand to an IRI.',
                    'jsonld.SyntaxError', {'context': local_ctx},
                    code='invalid term definition')
            mapping['@index'] = index

        # scoped contexts
        if '@context' in value:
            if self._processing_mode(active_ctx, 1.0):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; scoped contexts are not '
                    'supported in JSON-LD 1.0.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid term definition')
            scoped_ctx = value['@context']
            # validate now, apply whenever the term is used
            try:
                self._process_context(
                    active_ctx, scoped_ctx, options, base_url=base_url,
                    remote_contexts=list(options.get('_remoteContexts', [])),
                    override_protected=True, validate_scoped=False)
            except JsonLdError as cause:
                raise JsonLdError(
                    'Invalid JSON-LD syntax; invalid scoped context.',
                    'jsonld.SyntaxError',
                    {'context': scoped_ctx, 'term': term},
                    code='invalid scoped context', cause=cause)
            mapping['@context'] = scoped_ctx

        if '@language' in value and '@type' not in value:
            language = value['@language']
            if not (language is None or _is_string(language)):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context @language value must be '
                    'a string or null.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid language mapping')
            mapping['@language'] = language

        if '@direction' in value and '@type' not in value:
            direction = value['@direction']
            if not (direction is None or direction in DIRECTIONS):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context @direction value must '
                    'be "ltr", "rtl" or null.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid base direction')
            mapping['@direction'] = direction

        # nesting
        if '@nest' in value:
            if self._processing_mode(active_ctx, 1.0):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @nest is not supported in '
                    'JSON-LD 1.0.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid term definition')
            nest = value['@nest']
            if not _is_string(nest) or (
                    nest != '@nest' and nest.startswith('@')):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context @nest value must be ' +
                    'a string which is not a keyword other than @nest.',
                    'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid @nest value')
            mapping['@nest'] = nest

        # term may be used as prefix
        if '@prefix' in value:
            if (self._processing_mode(active_ctx, 1.0) or
                    ':' in term or '/' in term):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context @prefix used on a '
                    'compact IRI term.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid term definition')
            if not _is_bool(value['@prefix']):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; @context value for @prefix must '
                    'be boolean.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid @prefix value')
            mapping['_prefix'] = value['@prefix']
            if mapping['_prefix'] and _is_keyword(mapping['@id']):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; a keyword alias cannot be used '
                    'as a prefix.', 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid term definition')

        # make sure term definition only has expected keywords
        for kw in value:
            if kw not in TERM_DEFINITION_KEYWORDS:
                raise JsonLdError(
                    'Invalid JSON-LD syntax; a term definition must not '
                    'contain ' + kw, 'jsonld.SyntaxError',
                    {'context': local_ctx}, code='invalid term definition')

        self._define_term(
            active_ctx, local_ctx, term, mapping, previous_mapping, defined,
            override_protected)

    def _define_term(
            self, active_ctx, local_ctx, term, mapping, previous_mapping,
            defined, override_protected):
        """
        Stores a new term definition, or leaves the term undefined when
        mapping is None because its definition was ignored. A protected
        previous definition may only be replaced by an identical one.
        """
        if (not override_protected and previous_mapping is not None and
                previous_mapping['protected']):
            if (mapping is None or
                    not term_definitions_equal(mapping, previous_mapping)):
                raise JsonLdError(
                    'Invalid JSON-LD syntax; tried to redefine a protected '
                    'term.', 'jsonld.SyntaxError',
                    {'context': local_ctx, 'term': term},
                    code='protected term redefinition')
            mapping = previous_mapping

        if mapping is not None:
            active_ctx['mappings'][term] = mapping
        defined[term] = True

    def _expand_iri(
            self, active_ctx, value, base=False, vocab=False,
            local_ctx=None, defined=None, options=None):
        """
        Expands a string value to a full IRI. The string may be a term, a
        prefix, a relative IRI, or an absolute IRI. The associated absolute
        IRI will be returned.

        :param active_ctx: the current active context.
        :param value: the string value to expand.
        :param base: True to resolve IRIs against the base IRI, False not to.
        :param vocab: True to concatenate after @vocab, False not to.
        :param local_ctx: the local context being processed (only given if
          called during context processing).
        :param defined: a map for tracking cycles in context definitions (only
          given if called during context processing).
        :param options: the context processing options (only given if
          called during context processing).

        :return: the expanded value.
        """
        # already expanded
        if value is None or not _is_string(value) or _is_keyword(value):
            return value

        # reserved for future keywords
        if _KEYWORD_FORM.match(value):
            return None

        # define dependency not if defined
        if (local_ctx is not None and value in local_ctx and
                defined.get(value) is not True):
            self._create_term_definition(
                active_ctx, local_ctx, value, defined, options)

        mapping = active_ctx['mappings'].get(value)
        if mapping is not None:
            # keyword aliases expand even without vocab
            if _is_keyword(mapping['@id']):
                return mapping['@id']
            # value is a term
            if vocab:
                return mapping['@id']

        # split value into prefix:suffix
        if ':' in value[1:]:
            prefix, suffix = value.split(':', 1)

            # do not expand blank nodes (prefix of '_') or already-absolute
            # IRIs (suffix of '//')
            if prefix == '_' or suffix.startswith('//'):
                return value

            # prefix dependency not defined, define it
            if (local_ctx is not None and prefix in local_ctx and
                    defined.get(prefix) is not True):
                self._create_term_definition(
                    active_ctx, local_ctx, prefix, defined, options)

            # use mapping if prefix is defined
            prefix_mapping = active_ctx['mappings'].get(prefix)
            if (prefix_mapping is not None and prefix_mapping['@id'] and
                    prefix_mapping['_prefix']):
                return prefix_mapping['@id'] + suffix

            # already absolute IRI
            if iri_resolver.is_absolute_iri(value):
                return value

        # prepend vocab
        if vocab and '@vocab' in active_ctx:
            return active_ctx['@vocab'] + value

        # resolve against base
        if base and iri_resolver.is_absolute_iri(active_ctx.get('@base')):
            return iri_resolver.resolve(value, active_ctx['@base'])

        return value


class JsonLdError(Exception):
    """
    Base class for JSON-LD errors.
    """

    def __init__(self, message, type_, details=None, code=None, cause=None):
        Exception.__init__(self, message)
        self.type = type_
        self.details = details
        self.code = code
        self.cause = cause
        self.causeTrace = traceback.extract_tb(*sys.exc_info()[2:])

    def __str__(self):
        rval = str(self.args)
        rval += '\nType: ' + self.type
        if self.code:
            rval += '\nCode: ' + self.code
        if self.details:
            rval += '\nDetails: ' + repr(self.details)
        if self.cause:
            rval += '\nCause: ' + str(self.cause)
            rval += ''.join(traceback.format_list(self.causeTrace))
        return rval


class JsonLdDatatypeError(JsonLdError):
    """
    Raised when a value handed to the processor is not a JSON value, such as
    a tuple or a set, or otherwise does not have the shape the processor
    relies on.
    """

    def __init__(self, message, details=None):
        JsonLdError.__init__(
            self, message, 'jsonld.DatatypeError', details)


def _parse_json(document):
    """
    Parses a document returned by a loader, which may already be parsed.
    """
    if isinstance(document, bytes):
        document = document.decode('utf-8')
    if _is_string(document):
        document = json.loads(document)
    return document


def _is_valid_container_mapping(container):
    """
    Returns True if the given container keywords form a valid JSON-LD 1.1
    container mapping.

    :param container: the container mapping as an array.
    """
    if not container or not all(
            _is_string(c) and c in CONTAINER_KEYWORDS for c in container):
        return False
    keywords = set(container)
    if len(keywords) != len(container):
        return False
    if len(container) == 1:
        return True
    if '@list' in keywords:
        return False
    if '@graph' in keywords:
        return (keywords <= {'@graph', '@id', '@index', '@set'} and
                not {'@id', '@index'} <= keywords)
    return '@set' in keywords and len(keywords) == 2


def _is_keyword(v):
    """
    Returns whether or not the given value is a keyword.

    :param v: the value to check.

    :return: True if the value is a keyword, False if not.
    """
    if not _is_string(v):
        return False
    return v in KEYWORDS


def _is_object(v):
    """
    Returns True if the given value is an Object.

    :param v: the value to check.

    :return: True if the value is an Object, False if not.
    """
    return isinstance(v, dict)


def _is_empty_object(v):
    """
    Returns True if the given value is an empty Object.

    :param v: the value to check.

    :return: True if the value is an empty Object, False if not.
    """
    return _is_object(v) and len(v) == 0


def _is_array(v):
    """
    Returns True if the given value is an Array.

    :param v: the value to check.

    :return: True if the value is an Array, False if not.
    """
    return isinstance(v, list)


def _is_string(v):
    """
    Returns True if the given value is a String.

    :param v: the value to check.

    :return: True if the value is a String, False if not.
    """
    return isinstance(v, str)


def _is_bool(v):
    """
    Returns True if the given value is a Boolean.

    :param v: the value to check.

    :return: True if the value is a Boolean, False if not.
    """
    return isinstance(v, bool)


def _is_numeric(v):
    return isinstance(v, (Integral, Real)) and not _is_bool(v)


def _is_scalar(v):
    """
    Returns True if the given value is a string, number or boolean.
    """
    return _is_string(v) or _is_bool(v) or _is_numeric(v)


def _is_default_object(v):
    return _is_object(v) and '@default' in v


def _is_node_object(v):
    """
    Returns True if the given value is a node object, which includes node
    references.

    :param v: the value to check.
    """
    return (_is_object(v) and
            '@value' not in v and '@set' not in v and '@list' not in v)


def _is_value(v):
    """
    Returns True if the given value is a @value.

    :param v: the value to check.

    :return: True if the value is a @value, False if not.
    """
    # Note: A value is a @value if all of these hold True:
    # 1. It is an Object.
    # 2. It has the @value property.
    return _is_object(v) and '@value' in v


def _is_list(v):
    """
    Returns True if the given value is a @list.

    :param v: the value to check.

    :return: True if the value is a @list, False if not.
    """
    return _is_object(v) and '@list' in v


def _is_graph(v):
    """
    Note: A value is a graph if all of these hold true:
    1. It is an object.
    2. It has an `@graph` key.
    3. It may have '@id' or '@index'

    :param v: the value to check.

    :return: True if the value is a graph object
    """
    return (_is_object(v) and '@graph' in v and
            len([k for k in v if k not in ['@id', '@index']]) == 1)


# The default JSON-LD document loader.
try:
    _default_document_loader = requests_document_loader()
except ImportError:
    try:
        _default_document_loader = aiohttp_document_loader()
    except (ImportError, SyntaxError):
        _default_document_loader = dummy_document_loader()
