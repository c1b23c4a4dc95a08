import os
import re

from setuptools import find_packages, setup


def get_version():
    with open(os.path.join(os.path.dirname(__file__), 'readctx', '__init__.py')) as fh:
        return re.search(r"^__version__ = '([^']+)'", fh.read(), re.M).group(1)


def parse_md_readme():
    try:
        with open('README.md') as fh:
            return fh.read()
    except OSError:
        return ''


VERSION = get_version()

# HSTLIB is a dependency for pysam.
# The cram file libraries fail for some OS versions and readctx does not use cram files so we disable these options
os.environ['HTSLIB_CONFIGURE_OPTIONS'] = '--disable-lzma --disable-bz2 --disable-libcurl'


TEST_REQS = [
    'coverage>=4.2',
    'pytest',
    'pytest-cov',
]


INSTALL_REQS = [
    'biopython>=1.70',
    'braceexpand==0.1.2',
    'pandas>=1.1',
    'pysam>=0.9',
    'shortuuid>=0.5.0',
]

DEPLOY_REQS = ['twine', 'wheel']


setup(
    name='readctx',
    version='{}'.format(VERSION),
    packages=find_packages(exclude=['tests', 'tests.*']),
    description='Sharded overlap join of sequencing reads against reference bases and variants',
    long_description=parse_md_readme(),
    long_description_content_type='text/markdown',
    install_requires=INSTALL_REQS,
    extras_require={
        'test': TEST_REQS,
        'dev': ['black', 'flake8'] + TEST_REQS + DEPLOY_REQS,
        'deploy': DEPLOY_REQS,
    },
    python_requires='>=3.6',
    test_suite='tests',
    entry_points={
        'console_scripts': [
            'readctx = readctx.main:main',
        ]
    },
)
