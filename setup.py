"""Setup script for the Local User Manager."""

from setuptools import setup, find_namespace_packages

setup(
    name='local-user-manager',
    version='0.1.0',
    description='Local User Manager - user records and activity logs over key-value storage',
    author='Final Year Project Team',
    packages=find_namespace_packages(include=['src', 'src.*']),
    py_modules=['app', 'manage'],
    python_requires='>=3.8',
    install_requires=[
        'pandas>=1.3.0',
        'Flask>=2.2.0',
        'PyYAML>=5.4.0',
    ],
    extras_require={
        'dev': [
            'pytest>=6.2.0',
            'pytest-cov>=2.12.0',
            'hypothesis>=6.0.0',
        ],
    },
)
