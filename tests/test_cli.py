import io
import json

from ldexpand import cli


def write_json(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return str(path)


def test_expand_file(tmp_path, capsys):
    source = write_json(tmp_path / 'doc.jsonld', {
        '@context': {'@vocab': 'http://example.com/'},
        '@id': 'http://example.com/a',
        'name': 'A',
    })
    assert cli.main(source, '-q') == 0
    out = json.loads(capsys.readouterr().out)
    assert out == [{
        '@id': 'http://example.com/a',
        'http://example.com/name': [{'@value': 'A'}],
    }]


def test_expand_context_and_base(tmp_path, capsys):
    source = write_json(tmp_path / 'doc.json', {'@id': 'a', 'name': 'A'})
    context = write_json(
        tmp_path / 'ctx.jsonld',
        {'@context': {'name': 'http://schema.org/name'}})
    assert cli.main(
        source, '--expand-context', context,
        '--base', 'http://example.org/docs/', '-q') == 0
    out = json.loads(capsys.readouterr().out)
    assert out == [{
        '@id': 'http://example.org/docs/a',
        'http://schema.org/name': [{'@value': 'A'}],
    }]


def test_standard_input(monkeypatch, capsys):
    monkeypatch.setattr('sys.stdin', io.StringIO(json.dumps(
        {'http://example.com/p': 'v'})))
    assert cli.main('-', '--indent', '0', '-q') == 0
    out = json.loads(capsys.readouterr().out)
    assert out == [{'http://example.com/p': [{'@value': 'v'}]}]


def test_processing_mode(tmp_path, capsys):
    source = write_json(tmp_path / 'doc.jsonld', {
        '@context': {'@version': 1.1, 'p': 'http://example.com/p'},
        'p': 'v',
    })
    assert cli.main(source, '--processing-mode', 'json-ld-1.0', '-q') == 1
    assert capsys.readouterr().out == ''


def test_expansion_error(tmp_path, capsys, caplog):
    source = write_json(tmp_path / 'doc.jsonld', {
        '@context': {'@vocab': 5},
        'p': 'v',
    })
    assert cli.main(source) == 1
    assert capsys.readouterr().out == ''
    assert 'invalid vocab mapping' in caplog.text


def test_expand_document_serializes_with_indent(tmp_path):
    source = write_json(tmp_path / 'doc.jsonld', {'http://example.com/p': 1})
    text = cli.expand_document(source, {'indent': 2, 'ordered': True})
    assert text == json.dumps(
        [{'http://example.com/p': [{'@value': 1}]}], indent=2)
