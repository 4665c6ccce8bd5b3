import os
import unittest

import pytest

# manifest entries are built by the standalone runner
from . import runtests


def pytest_addoption(parser):
    # long options only; pytest owns the lowercase short options
    parser.addoption(
        '--tests', nargs='*', default=[],
        help='A manifest or directory to test')
    parser.addoption(
        '--loader',
        dest='loader',
        default=None,
        help='The remote URL document loader: requests, aiohttp')
    parser.addoption(
        '--number',
        dest='number',
        help='Limit tests to those containing the specified test identifier')


def pytest_configure(config):
    loader = config.getoption('loader')
    if loader == 'requests':
        runtests.jsonld.set_document_loader(
            runtests.jsonld.requests_document_loader())
    elif loader == 'aiohttp':
        runtests.jsonld.set_document_loader(
            runtests.jsonld.aiohttp_document_loader())

    number = config.getoption('number')
    if number:
        runtests.ONLY_IDENTIFIER = number


def _flatten_suite(suite):
    """Yield TestCase instances from a unittest TestSuite (recursively)."""
    if isinstance(suite, unittest.TestSuite):
        for s in suite:
            yield from _flatten_suite(s)
    elif isinstance(suite, unittest.TestCase):
        yield suite


def pytest_generate_tests(metafunc):
    if 'manifest_test' not in metafunc.fixturenames:
        return

    test_targets = metafunc.config.getoption('tests') or []
    if not test_targets:
        # manifest directories are relative to this file
        base_path = os.path.abspath(os.path.dirname(__file__))
        for d in runtests.SPEC_DIRS:
            d_path = os.path.abspath(os.path.join(base_path, d))
            if os.path.exists(os.path.join(d_path, 'manifest.jsonld')):
                test_targets.append(d_path)

    if not test_targets:
        pytest.skip('No test manifest or directory specified (use --tests)')

    root_manifest = runtests.root_manifest(test_targets)
    suite = runtests.Manifest(root_manifest, root_manifest['filename']).load()
    tests = list(_flatten_suite(suite))
    metafunc.parametrize('manifest_test', tests, ids=[str(t) for t in tests])
