#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
ldexpand - CLI script for LDExpand
"""
import codecs
import json
import logging
import os
import sys

import ldexpand

log = logging.getLogger()


def _read_json(source):
    """
    Read JSON from a file path or standard input. Anything else is returned
    unchanged, to be dereferenced by the document loader.

    :param source: a file path, '-' for standard input, or a URL
    :returns: the parsed JSON, or the URL
    """
    if source == '-':
        return json.load(sys.stdin)
    if os.path.exists(source):
        with codecs.open(source, 'r', encoding='utf-8') as f:
            return json.load(f)
    return source


def expand_document(source, options):
    """
    Expand a JSON-LD document and serialize the result

    :param source: path, URL or '-' of the document to expand
    :param options: options dict
    :returns: JSON string
    :rtype: str
    """
    log.debug("expand_document: %r, %r" % (source, options))
    expand_options = dict(
        (k, v) for k, v in options.items()
        if k in ('base', 'expandContext', 'processingMode', 'ordered') and
        v is not None)
    if expand_options.get('expandContext') is not None:
        expand_options['expandContext'] = _read_json(
            expand_options['expandContext'])

    output = ldexpand.jsonld.expand(_read_json(source), expand_options)
    # expand always returns an array; a sanity check, not input validation
    assert isinstance(output, list)

    json_str = json.dumps(output, indent=options.get('indent', 1))
    log.debug("expand_document: len(output): %d" % len(json_str))
    return json_str


def main(*argv):
    import argparse

    prs = argparse.ArgumentParser(
        description='Expand a JSON-LD document')

    prs.add_argument('input',
                     help='File path, URL, or - for standard input')

    prs.add_argument('--base',
                     help='Base IRI to use',
                     dest='base',
                     action='store')
    prs.add_argument('--expand-context',
                     help='@context file or URI to expand with',
                     dest='expandContext',
                     action='store',
                     default=None)
    prs.add_argument('--processing-mode',
                     help='json-ld-1.0 or json-ld-1.1 [default: json-ld-1.1]',
                     dest='processingMode',
                     action='store',
                     choices=['json-ld-1.0', 'json-ld-1.1'],
                     default='json-ld-1.1')
    prs.add_argument('--ordered',
                     help='Process keys in sorted order',
                     dest='ordered',
                     action='store_true',
                     default=False)
    prs.add_argument('--indent',
                     help='Indent json with n spaces [default: 1]',
                     dest='indent',
                     action='store',
                     type=int,
                     default=1)

    prs.add_argument('-v', '--verbose',
                     dest='verbose',
                     action='store_true',)
    prs.add_argument('-q', '--quiet',
                     dest='quiet',
                     action='store_true',)

    if not argv:
        _argv = sys.argv[1:]
    else:
        _argv = list(argv)
    opts = prs.parse_args(args=_argv)

    if not opts.quiet:
        logging.basicConfig()

        if opts.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

    options = {
        'base': opts.base,
        'expandContext': opts.expandContext,
        'processingMode': opts.processingMode,
        'ordered': opts.ordered,
        # json.dumps
        'indent': opts.indent,
    }

    try:
        json_str = expand_document(opts.input, options)
    except ldexpand.jsonld.JsonLdError as e:
        log.error("expansion failed: %s", e)
        return 1

    print(json_str)
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:]))
