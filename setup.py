from setuptools import setup
from textwrap import dedent
import findmods

description, long_description = findmods.__doc__.split('\n', 1)

setup(
    name='findmods',
    version=findmods.__version__,
    description=description,
    long_description=long_description.lstrip(),
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Version Control',
        'Topic :: Utilities',
        ],
    packages=['findmods'],
    python_requires='>=3.6',
    extras_require={
        'test': ['pytest'],
        },
    entry_points=dedent("""
        [console_scripts]
        findmods = findmods.command:main
        """),
    )
