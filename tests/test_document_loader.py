"""
Tests for document loaders: Link header contexts, Link rel=alternate and
URL validation.

A JSON-LD document served as plain JSON may name its context with a Link
header of rel "http://www.w3.org/ns/json-ld#context". A response that is not
JSON at all may point at a JSON-LD representation with a Link header of rel
"alternate" and type "application/ld+json"; the loader follows it.

Responses are served from a dict of fakes so no test needs the network.
"""

import pytest
import requests

import ldexpand.jsonld as jsonld

CONTEXT_REL = 'http://www.w3.org/ns/json-ld#context'


class FakeResponse:
    def __init__(self, url, body=None, content_type='application/ld+json',
                 link=None):
        self.url = url
        self.body = body
        self.headers = {}
        if content_type:
            self.headers['content-type'] = content_type
        if link:
            self.headers['link'] = link

    def json(self):
        if self.body is None:
            raise ValueError('not JSON')
        return self.body


@pytest.fixture
def served(monkeypatch):
    """Serve FakeResponses by URL in place of requests.get."""
    responses = {}
    calls = []

    def get(url, headers=None, **kwargs):
        calls.append((url, headers))
        if url not in responses:
            raise requests.ConnectionError('no route to ' + url)
        return responses[url]

    monkeypatch.setattr(requests, 'get', get)
    responses['_calls'] = calls
    return responses


class TestRequestsDocumentLoader:
    def test_loads_json_ld(self, served):
        served['http://example.com/doc.jsonld'] = FakeResponse(
            'http://example.com/doc.jsonld', {'@id': 'http://example.com/a'})
        loader = jsonld.requests_document_loader()
        doc = loader('http://example.com/doc.jsonld')
        assert doc == {
            'contentType': 'application/ld+json',
            'contextUrl': None,
            'documentUrl': 'http://example.com/doc.jsonld',
            'document': {'@id': 'http://example.com/a'},
        }
        url, headers = served['_calls'][0]
        assert headers == {'Accept': 'application/ld+json, application/json'}

    def test_custom_headers(self, served):
        served['http://example.com/doc'] = FakeResponse(
            'http://example.com/doc', {})
        loader = jsonld.requests_document_loader()
        loader('http://example.com/doc',
               {'headers': {'Accept': 'application/activity+json'}})
        assert served['_calls'][0][1] == {
            'Accept': 'application/activity+json'}

    def test_redirect_sets_document_url(self, served):
        served['http://example.com/old'] = FakeResponse(
            'http://example.com/new', {})
        loader = jsonld.requests_document_loader()
        assert loader('http://example.com/old')['documentUrl'] == \
            'http://example.com/new'

    def test_context_link_header(self, served):
        served['http://example.com/data/doc.json'] = FakeResponse(
            'http://example.com/data/doc.json', {'name': 'x'},
            content_type='application/json',
            link='<ctx.jsonld>; rel="%s"; type="application/ld+json"' %
            CONTEXT_REL)
        loader = jsonld.requests_document_loader()
        doc = loader('http://example.com/data/doc.json')
        assert doc['contextUrl'] == 'http://example.com/data/ctx.jsonld'

    def test_context_link_header_ignored_for_json_ld(self, served):
        served['http://example.com/doc.jsonld'] = FakeResponse(
            'http://example.com/doc.jsonld', {'name': 'x'},
            link='<ctx.jsonld>; rel="%s"' % CONTEXT_REL)
        loader = jsonld.requests_document_loader()
        assert loader('http://example.com/doc.jsonld')['contextUrl'] is None

    def test_multiple_context_link_headers(self, served):
        served['http://example.com/doc.json'] = FakeResponse(
            'http://example.com/doc.json', {},
            content_type='application/json',
            link='<a.jsonld>; rel="%s", <b.jsonld>; rel="%s"' % (
                CONTEXT_REL, CONTEXT_REL))
        loader = jsonld.requests_document_loader()
        with pytest.raises(jsonld.JsonLdError) as cm:
            loader('http://example.com/doc.json')
        assert cm.value.code == 'multiple context link headers'

    def test_follows_alternate_link(self, served):
        served['http://example.com/page'] = FakeResponse(
            'http://example.com/page', content_type='text/html',
            link='</docs/page.jsonld>; rel="alternate"; '
                 'type="application/ld+json"')
        served['http://example.com/docs/page.jsonld'] = FakeResponse(
            'http://example.com/docs/page.jsonld', {'@context': {}})
        loader = jsonld.requests_document_loader()
        doc = loader('http://example.com/page')
        assert doc['documentUrl'] == 'http://example.com/docs/page.jsonld'
        assert doc['document'] == {'@context': {}}

    def test_alternate_link_follow_limit(self, served):
        served['http://example.com/page'] = FakeResponse(
            'http://example.com/page', content_type='text/html',
            link='<page>; rel="alternate"; type="application/ld+json"')
        loader = jsonld.requests_document_loader(max_link_follows=1)
        with pytest.raises(jsonld.JsonLdError) as cm:
            loader('http://example.com/page')
        assert cm.value.code == 'loading document failed'
        assert len(served['_calls']) == 2

    @pytest.mark.parametrize('url', [
        'ftp://example.com/doc.jsonld',
        'file:///etc/passwd',
        'example.com/doc.jsonld',
    ])
    def test_only_http_urls(self, served, url):
        loader = jsonld.requests_document_loader()
        with pytest.raises(jsonld.JsonLdError) as cm:
            loader(url)
        assert cm.value.code == 'loading document failed'
        assert served['_calls'] == []

    def test_secure_mode(self, served):
        loader = jsonld.requests_document_loader(secure=True)
        with pytest.raises(jsonld.JsonLdError) as cm:
            loader('http://example.com/doc.jsonld')
        assert cm.value.type == 'jsonld.InvalidUrl'
        assert served['_calls'] == []

    def test_request_failure(self, served):
        loader = jsonld.requests_document_loader()
        with pytest.raises(jsonld.JsonLdError) as cm:
            loader('http://example.com/missing')
        assert cm.value.code == 'loading document failed'
        assert isinstance(cm.value.cause, requests.ConnectionError)

    def test_expand_with_linked_context(self, served):
        served['http://example.com/doc.json'] = FakeResponse(
            'http://example.com/doc.json',
            {'@id': 'http://example.com/a', 'name': 'A'},
            content_type='application/json',
            link='</ctx.jsonld>; rel="%s"' % CONTEXT_REL)
        served['http://example.com/ctx.jsonld'] = FakeResponse(
            'http://example.com/ctx.jsonld',
            {'@context': {'name': 'http://schema.org/name'}})
        got = jsonld.expand(
            'http://example.com/doc.json',
            {'documentLoader': jsonld.requests_document_loader()})
        assert got == [{
            '@id': 'http://example.com/a',
            'http://schema.org/name': [{'@value': 'A'}],
        }]


class TestAiohttpDocumentLoader:
    def test_only_http_urls(self):
        pytest.importorskip('aiohttp')
        loader = jsonld.aiohttp_document_loader()
        with pytest.raises(jsonld.JsonLdError) as cm:
            loader('ftp://example.com/doc.jsonld')
        assert cm.value.code == 'loading document failed'

    def test_secure_mode(self):
        pytest.importorskip('aiohttp')
        loader = jsonld.aiohttp_document_loader(secure=True)
        with pytest.raises(jsonld.JsonLdError) as cm:
            loader('http://example.com/doc.jsonld')
        assert cm.value.type == 'jsonld.InvalidUrl'


class TestDefaultLoader:
    def test_dummy_loader_fails(self):
        loader = jsonld.dummy_document_loader()
        with pytest.raises(jsonld.JsonLdError) as cm:
            loader('http://example.com/doc.jsonld')
        assert cm.value.code == 'loading document failed'

    def test_set_document_loader(self):
        previous = jsonld.get_document_loader()

        def loader(url, options=None):
            return {'contextUrl': None, 'documentUrl': url,
                    'document': {'http://example.com/p': 'v'}}

        try:
            jsonld.set_document_loader(loader)
            assert jsonld.get_document_loader() is loader
            assert jsonld.load_document('http://example.com/doc')[
                'documentUrl'] == 'http://example.com/doc'
            got = jsonld.expand('http://example.com/doc')
            assert got == [{'http://example.com/p': [{'@value': 'v'}]}]
        finally:
            jsonld.set_document_loader(previous)

    def test_load_document_with_option(self):
        def loader(url, options=None):
            return {'contextUrl': None, 'documentUrl': url, 'document': {}}

        doc = jsonld.load_document(
            'http://example.com/doc', {'documentLoader': loader})
        assert doc['document'] == {}


class TestParseLinkHeader:
    def test_single_link(self):
        links = jsonld.parse_link_header(
            '<http://json-ld.org/contexts/person.jsonld>; '
            'rel="http://www.w3.org/ns/json-ld#context"; '
            'type="application/ld+json"')
        assert links == {
            CONTEXT_REL: {
                'target': 'http://json-ld.org/contexts/person.jsonld',
                'rel': CONTEXT_REL,
                'type': 'application/ld+json',
            }
        }

    def test_repeated_rel_becomes_list(self):
        links = jsonld.parse_link_header(
            '<a>; rel="alternate", <b>; rel="alternate", <c>; rel=next')
        assert [link['target'] for link in links['alternate']] == ['a', 'b']
        assert links['next']['target'] == 'c'

    def test_comma_inside_target(self):
        links = jsonld.parse_link_header('<http://example.com/a,b>; rel="x"')
        assert links['x']['target'] == 'http://example.com/a,b'
