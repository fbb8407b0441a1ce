#!/usr/bin/env python
"""
Kestrel
=======

Kestrel is a Python client for `Sentry <http://getsentry.com/>`_ compatible
store APIs. It turns messages and exceptions, including ones described by
other runtimes as plain frame lists, into events and delivers them either
inline or from a background worker, honouring the server's rate limits.
"""

from setuptools import setup, find_packages
import re
import ast


_version_re = re.compile(r'VERSION\s+=\s+(.*)')

with open('kestrel/__init__.py', 'rb') as f:
    version = str(ast.literal_eval(_version_re.search(
        f.read().decode('utf-8')).group(1)))


install_requires = [
    'requests>=2.20',
]

tests_require = [
    'flake8',
    'mock',
    'pytest>=6.0',
    'pytz',
    'responses>=0.17',
]


setup(
    name='kestrel',
    version=version,
    author='Sentry',
    author_email='hello@getsentry.com',
    description='Kestrel is a client for Sentry compatible store APIs',
    long_description=__doc__,
    packages=find_packages(exclude=("tests", "tests.*",)),
    zip_safe=False,
    python_requires='>=3.7',
    extras_require={
        'tests': tests_require,
    },
    license='BSD',
    install_requires=install_requires,
    include_package_data=True,
    classifiers=[
        'Intended Audience :: Developers',
        'Intended Audience :: System Administrators',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python',
        'Topic :: Software Development',
    ],
)
