import pytest

from ldexpand.iri_resolver import (
    ends_with_gen_delim, is_absolute_iri, is_blank_node_identifier,
    parse_url, remove_dot_segments, resolve, unparse_url)

# RFC 3986 section 5.4 reference resolution examples
RFC_BASE = 'http://a/b/c/d;p?q'

RFC_EXAMPLES = [
    # normal examples
    ('g:h', 'g:h'),
    ('g', 'http://a/b/c/g'),
    ('./g', 'http://a/b/c/g'),
    ('g/', 'http://a/b/c/g/'),
    ('/g', 'http://a/g'),
    ('//g', 'http://g'),
    ('?y', 'http://a/b/c/d;p?y'),
    ('g?y', 'http://a/b/c/g?y'),
    ('#s', 'http://a/b/c/d;p?q#s'),
    ('g#s', 'http://a/b/c/g#s'),
    ('g?y#s', 'http://a/b/c/g?y#s'),
    (';x', 'http://a/b/c/;x'),
    ('g;x', 'http://a/b/c/g;x'),
    ('g;x?y#s', 'http://a/b/c/g;x?y#s'),
    ('', 'http://a/b/c/d;p?q'),
    ('.', 'http://a/b/c/'),
    ('./', 'http://a/b/c/'),
    ('..', 'http://a/b/'),
    ('../', 'http://a/b/'),
    ('../g', 'http://a/b/g'),
    ('../..', 'http://a/'),
    ('../../', 'http://a/'),
    ('../../g', 'http://a/g'),
    # abnormal examples
    ('../../../g', 'http://a/g'),
    ('../../../../g', 'http://a/g'),
    ('/./g', 'http://a/g'),
    ('/../g', 'http://a/g'),
    ('g.', 'http://a/b/c/g.'),
    ('.g', 'http://a/b/c/.g'),
    ('g..', 'http://a/b/c/g..'),
    ('..g', 'http://a/b/c/..g'),
    ('./../g', 'http://a/b/g'),
    ('./g/.', 'http://a/b/c/g/'),
    ('g/./h', 'http://a/b/c/g/h'),
    ('g/../h', 'http://a/b/c/h'),
    ('g;x=1/./y', 'http://a/b/c/g;x=1/y'),
    ('g;x=1/../y', 'http://a/b/c/y'),
    ('g?y/./x', 'http://a/b/c/g?y/./x'),
    ('g?y/../x', 'http://a/b/c/g?y/../x'),
    ('g#s/./x', 'http://a/b/c/g#s/./x'),
    ('g#s/../x', 'http://a/b/c/g#s/../x'),
    ('http:g', 'http:g'),
]


class TestResolve:
    @pytest.mark.parametrize('relative, expected', RFC_EXAMPLES)
    def test_rfc_examples(self, relative, expected):
        assert resolve(relative, RFC_BASE) == expected

    @pytest.mark.parametrize('relative, base, expected', [
        ('http://example.org/', None, 'http://example.org/'),
        ('http://example.org/', '', 'http://example.org/'),
        ('http://example.org/', 'http://base.org/', 'http://example.org/'),
        ('ex:abc', None, 'ex:abc'),
        ('http://abc/../../', None, 'http://abc/'),
        ('http://abc/../../', 'http://base.org/', 'http://abc/'),
    ])
    def test_absolute_iri(self, relative, base, expected):
        assert resolve(relative, base) == expected

    @pytest.mark.parametrize('relative, base, expected', [
        ('', 'http://base.org/', 'http://base.org/'),
        ('abc', 'http://base.org/', 'http://base.org/abc'),
        ('abc', 'http://base.org/#frag', 'http://base.org/abc'),
        ('#abc', 'http://base.org/', 'http://base.org/#abc'),
        ('abc', 'http://base.org', 'http://base.org/abc'),
        ('abc/./', 'http://base.org', 'http://base.org/abc/'),
        ('/abc/def/', 'http://base.org/123/456/', 'http://base.org/abc/def/'),
        ('xyz', 'http://aa/a', 'http://aa/xyz'),
        ('xyz', 'http://aa/parent/parent/../../a', 'http://aa/xyz'),
        ('xyz', 'http://aa/././a', 'http://aa/xyz'),
        ('..', 'http://aa/b', 'http://aa/'),
        ('?a=b', 'http://abc/def/ghi', 'http://abc/def/ghi?a=b'),
        ('.?a=b', 'http://abc/def/ghi', 'http://abc/def/?a=b'),
        ('..?a=b', 'http://abc/def/ghi', 'http://abc/?a=b'),
        ('../xyz', 'http://abc/d:f/ghi', 'http://abc/xyz'),
        ('?y', 'http://a/bb/ccc/./d;p?q', 'http://a/bb/ccc/./d;p?y'),
        ('../.../../', 'http://example.org/a/b/c/', 'http://example.org/a/b/'),
        ('//example.org/.././useless/../../scheme-relative',
         'http://example.com/some/deep/directory/and/file#with-a-fragment',
         'http://example.org/scheme-relative'),
    ])
    def test_relative_iri(self, relative, base, expected):
        assert resolve(relative, base) == expected

    @pytest.mark.parametrize('relative, base, expected', [
        ('abc', 'http:a', 'http:abc'),
        ('abc/./', 'http:', 'http:abc/'),
        ('a', 'tag:example', 'tag:a'),
        ('a', 'tag:example/foo', 'tag:example/a'),
        ('a', 'tag:example/foo/', 'tag:example/foo/a'),
    ])
    def test_base_without_authority(self, relative, base, expected):
        assert resolve(relative, base) == expected

    def test_missing_base(self):
        with pytest.raises(ValueError, match=r"missing baseIRI"):
            resolve('abc')

    def test_relative_base(self):
        with pytest.raises(ValueError, match=r"invalid baseIRI 'def'"):
            resolve('', 'def')


class TestRemoveDotSegments:
    @pytest.mark.parametrize('path, expected', [
        ('', ''),
        ('abc', 'abc'),
        ('/abc/', '/abc/'),
        ('/.', '/'),
        ('/..', '/'),
        ('/abc/..', '/'),
        ('/abc/../../..', '/'),
        ('/abc/.', '/abc/'),
        ('/abc/../def/', '/def/'),
        ('mid/content=5/../6', 'mid/6'),
        ('/abc/./def/', '/abc/def/'),
        ('/abc/def/./ghi/../..', '/abc/'),
        ('/a/b/c/./../../g', '/a/g'),
        ('/abc//def/', '/abc//def/'),
        ('/abc//def//../', '/abc//def/'),
        ('/abc//def//./', '/abc//def//'),
        ('/invalid/.../..', '/invalid/'),
        ('/invalid/../..../../../.../.htaccess', '/.../.htaccess'),
        ('../g', 'g'),
        ('./g', 'g'),
    ])
    def test_remove_dot_segments(self, path, expected):
        assert remove_dot_segments(path) == expected


class TestParseUrl:
    def test_components(self):
        parsed = parse_url('http://user@example.com:80/a/b?x=1#frag')
        assert parsed.scheme == 'http'
        assert parsed.authority == 'user@example.com:80'
        assert parsed.path == '/a/b'
        assert parsed.query == 'x=1'
        assert parsed.fragment == 'frag'

    def test_absent_components(self):
        parsed = parse_url('a/b')
        assert parsed.scheme is None
        assert parsed.authority is None
        assert parsed.path == 'a/b'
        assert parsed.query is None
        assert parsed.fragment is None

    @pytest.mark.parametrize('url', [
        'http://example.com/a?b#c',
        'http://example.com',
        'urn:isbn:0451450523',
        'http://example.com/?#',
        'file:///etc/hosts',
    ])
    def test_unparse_restores_url(self, url):
        assert unparse_url(parse_url(url)) == url


class TestIriShapes:
    @pytest.mark.parametrize('value, expected', [
        ('http://example.com/', True),
        ('urn:x', True),
        ('_:b0', False),
        ('relative/path', False),
        ('#frag', False),
        ('1http://example.com/', False),
        (None, False),
        (5, False),
    ])
    def test_is_absolute_iri(self, value, expected):
        assert is_absolute_iri(value) is expected

    @pytest.mark.parametrize('value, expected', [
        ('_:b0', True),
        ('_b0', False),
        ('http://example.com/', False),
        (None, False),
    ])
    def test_is_blank_node_identifier(self, value, expected):
        assert is_blank_node_identifier(value) is expected

    @pytest.mark.parametrize('value, expected', [
        ('http://example.com/', True),
        ('http://example.com/vocab#', True),
        ('http://example.com/x?', True),
        ('urn:x:', True),
        ('http://example.com/x', False),
        ('', False),
        (None, False),
    ])
    def test_ends_with_gen_delim(self, value, expected):
        assert ends_with_gen_delim(value) is expected
