#!/usr/bin/env python3
"""
SettleGuard Setup Configuration
"""

from setuptools import setup, find_packages
import os

# Read README for long description
def read_readme():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return "SettleGuard - Asynchronous-completion instrumentation harness for Python tests"

# Read requirements
def read_requirements():
    req_path = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    if os.path.exists(req_path):
        with open(req_path, 'r', encoding='utf-8') as f:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]
    return []

# Read version from settleguard/__init__.py
def get_version():
    version_path = os.path.join(os.path.dirname(__file__), 'settleguard', '__init__.py')
    if os.path.exists(version_path):
        with open(version_path, 'r', encoding='utf-8') as f:
            for line in f:
                if line.startswith('__version__'):
                    return line.split('=')[1].strip().strip('"\'')
    return '1.0.0'

setup(
    name='settleguard',
    version=get_version(),
    author='Kyle Clouthier',
    author_email='kyle@example.com',
    description='Wait for every asynchronous side effect of a call to settle, in tests',
    long_description=read_readme(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests*', 'docs*', 'examples*']),
    classifiers=[
        # Development Status
        'Development Status :: 5 - Production/Stable',

        # Intended Audience
        'Intended Audience :: Developers',

        # Topic
        'Topic :: Software Development :: Testing',
        'Topic :: Software Development :: Quality Assurance',

        # Framework
        'Framework :: AsyncIO',
        'Framework :: Pytest',

        # License
        'License :: OSI Approved :: MIT License',

        # Python Versions
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',

        # Operating Systems
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
    install_requires=read_requirements(),
    extras_require={
        'test': [
            'pytest>=7.0.0',
            'psutil>=5.9.0',
        ],
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
            'psutil>=5.9.0',
            'black>=22.0.0',
            'flake8>=5.0.0',
            'mypy>=1.0.0',
        ],
    },
    entry_points={
        'pytest11': [
            'settleguard = settleguard.pytest_plugin',
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords=[
        'asyncio',
        'testing',
        'callbacks',
        'promises',
        'instrumentation',
        'monkey patching',
        'timeouts',
    ],
)
