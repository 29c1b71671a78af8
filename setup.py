import ast
import re
from setuptools import setup


def ensure_one_level_of_quotes(text):
    # Converts '"foo"' to 'foo'
    return str(ast.literal_eval(text))


def get_version():
    """ Based on the functionality in pallets/click's setup.py
    (https://github.com/pallets/click/blob/master/setup.py) """
    _version_re = re.compile(r'__version__\s+=\s+(.*)')
    with open('feedsheets/__init__.py', 'rb') as f:
        lines = f.read().decode('utf-8')
        version = ensure_one_level_of_quotes(_version_re.search(lines).group(1))
        return version


required = [
    'pandas',
    'numpy',
    'oauth2client>=4.1.0',
    'httplib2>=0.19.0',
    'PyOpenSSL',  # used by oauth2client to sign service account JWTs
]

test_required = [
    'pytest',
    'pytest-mock',
]

setup(
    name='feedsheets',
    description='Read and write Google Sheets worksheets, rows and cells through the spreadsheets feeds',
    version=get_version(),
    author='Squarespace Data Engineering',
    url='https://github.com/Squarespace/feedsheets',
    download_url='https://github.com/Squarespace/feedsheets/tarball/{}'.format(get_version()),
    packages=['feedsheets'],
    install_requires=required,
    extras_require={'test': test_required},
    license='Apache License 2.0',
    classifiers=[
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ],
)
