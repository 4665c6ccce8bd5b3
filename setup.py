# -*- coding: utf-8 -*-
"""
LDExpand
========

LDExpand_ is a Python library for JSON-LD_ 1.1 context processing and
expansion.

.. _LDExpand: http://github.com/ldexpand/ldexpand
.. _JSON-LD: http://json-ld.org/
"""

from setuptools import setup
import os

# get meta data
about = {}
with open(os.path.join(
        os.path.dirname(__file__), 'lib', 'ldexpand', '__about__.py')) as fp:
    exec(fp.read(), about)

with open(os.path.join(os.path.dirname(__file__), 'README.rst')) as fp:
    long_description = fp.read()

setup(
    name='LDExpand',
    version=about['__version__'],
    description='Python implementation of JSON-LD context processing and '
                'expansion',
    long_description=long_description,
    author='LDExpand contributors',
    url='http://github.com/ldexpand/ldexpand',
    packages=['ldexpand', 'ldexpand.documentloader'],
    package_dir={'': 'lib'},
    license='BSD 3-Clause license',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Internet',
        'Topic :: Software Development :: Libraries',
    ],
    python_requires='>=3.8',
    install_requires=[],
    extras_require={
        'requests': ['requests'],
        'aiohttp': ['aiohttp'],
        'tests': ['pytest', 'requests', 'aiohttp'],
    },
    entry_points={
        'console_scripts': [
            'ldexpand=ldexpand.cli:main',
        ],
    },
)
