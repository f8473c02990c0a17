#!/usr/bin/env python
from setuptools import setup
import os


def get_version():
    curdir = os.path.dirname(__file__)
    filename = os.path.join(curdir, 'src', 'custom_fonts_in_emails', 'version.py')
    with open(filename, 'rb') as fp:
        return fp.read().decode('utf8').split('=')[1].strip(" \n'\"")


def readme():
    with open('README.rst') as f:
        return f.read()


setup(
    name='custom-fonts-in-emails',
    version=get_version(),
    description='Render text in custom fonts as SVG or image tags for emails',
    long_description=readme(),
    classifiers=[
        'Development Status :: 4 - Beta',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Communications :: Email',
        'Topic :: Multimedia :: Graphics :: Graphics Conversion',
        'Topic :: Text Processing :: Fonts',
    ],
    keywords='fonts email svg png',
    license='MIT License',
    package_dir={'': 'src'},
    packages=[
        'custom_fonts_in_emails',
        'custom_fonts_in_emails.core',
        'custom_fonts_in_emails.rasterizer',
    ],
    python_requires='>=3.10',
    install_requires=[
        'pillow',
        'numpy',
        'fonttools',
        'resvg-py',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    package_data={
        'custom_fonts_in_emails': ['fonts/*'],
    },
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'custom-fonts-in-emails=custom_fonts_in_emails.__main__:main',
        ],
    },
    )
